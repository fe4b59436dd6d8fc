"""Unit tests for row selection."""

import re

import numpy as np
import pandas as pd
import pytest

from phenoselect.core.selection import (
    WILDCARD,
    MissingEncoding,
    PerPhenotypeColumnEncoding,
    SelectionConfig,
    SelectorError,
    SelectorShapeError,
    SingleColumnEncoding,
    count_selected,
    detect_encoding,
    evaluate,
    list_phenotypes,
    select_rows,
    validate_selectors,
)

T, F = True, False


class TestDetectEncoding:
    """Tests for phenotype encoding detection."""

    def test_single_column(self, single_table):
        assert isinstance(detect_encoding(single_table), SingleColumnEncoding)

    def test_per_phenotype_columns(self, per_column_table):
        encoding = detect_encoding(per_column_table)
        assert isinstance(encoding, PerPhenotypeColumnEncoding)
        assert encoding.columns == {"tumor": "Phenotype tumor", "cd8": "Phenotype cd8"}

    def test_no_phenotype_columns(self):
        frame = pd.DataFrame({"E2": [1, 2]})
        assert isinstance(detect_encoding(frame), MissingEncoding)

    def test_single_column_takes_precedence(self):
        frame = pd.DataFrame({"Phenotype": ["a"], "Phenotype a": ["a+"]})
        assert isinstance(detect_encoding(frame), SingleColumnEncoding)

    def test_split_sign(self, per_column_table):
        encoding = detect_encoding(per_column_table)
        assert encoding.split_sign("cd8+") == ("cd8", "+")
        assert encoding.split_sign("cd8-") == ("cd8", "-")
        assert encoding.split_sign("cd8") == ("cd8", "+")


class TestWildcard:
    """Tests for selecting every row."""

    @pytest.mark.parametrize("selector", [None, np.nan, WILDCARD])
    def test_selects_all(self, single_table, per_column_table, selector):
        assert select_rows(single_table, selector).tolist() == [T] * 6
        assert select_rows(per_column_table, selector).tolist() == [T] * 6

    def test_works_without_phenotype_columns(self):
        frame = pd.DataFrame({"E2": [1, 2, 3]})
        assert select_rows(frame, None).tolist() == [T, T, T]


class TestSelectPhenotype:
    """Tests for single phenotype names."""

    def test_single_column(self, single_table):
        assert select_rows(single_table, "tumor").tolist() == [T, T, T, F, F, F]
        assert select_rows(single_table, "cd8").tolist() == [F, F, F, T, T, F]

    def test_single_column_is_case_sensitive(self, single_table):
        assert select_rows(single_table, "Tumor").tolist() == [F] * 6

    def test_single_column_unknown_name_selects_nothing(self, single_table):
        assert select_rows(single_table, "cd4").tolist() == [F] * 6

    def test_per_phenotype_columns(self, per_column_table):
        assert select_rows(per_column_table, "tumor+").tolist() == [T, T, T, F, F, F]
        assert select_rows(per_column_table, "cd8+").tolist() == [F, F, F, T, T, F]

    def test_per_phenotype_negative(self, per_column_table):
        assert select_rows(per_column_table, "tumor-").tolist() == [F, F, F, T, T, F]

    def test_per_phenotype_signless_is_positive(self, per_column_table):
        assert select_rows(per_column_table, "tumor").tolist() == [T, T, T, F, F, F]

    def test_per_phenotype_compound_name(self, per_column_table):
        assert select_rows(per_column_table, "tumor+ cd8-").tolist() == [T, T, T, F, F, F]
        assert select_rows(per_column_table, "tumor+ cd8+").tolist() == [F] * 6

    def test_per_phenotype_unknown_raises(self, per_column_table):
        with pytest.raises(SelectorError, match="Unknown phenotype cd4\\+"):
            select_rows(per_column_table, "cd4+")

    def test_per_phenotype_compound_unknown_raises(self, per_column_table):
        with pytest.raises(SelectorError, match="Phenotype pdl1"):
            select_rows(per_column_table, "tumor+ pdl1+")

    def test_no_phenotype_columns_raises(self):
        frame = pd.DataFrame({"E2": [1, 2]})
        with pytest.raises(SelectorError, match="Cannot select phenotype tumor"):
            select_rows(frame, "tumor")

    def test_categorical_column(self, single_table):
        single_table["Phenotype"] = single_table["Phenotype"].astype("category")
        assert select_rows(single_table, "cd8").tolist() == [F, F, F, T, T, F]

    def test_custom_column_names(self):
        frame = pd.DataFrame({"Class": ["B", "T", None]})
        config = SelectionConfig(phenotype_column="Class")
        assert select_rows(frame, "T", config).tolist() == [F, T, F]


class TestPhenotypeAndExpression:
    """Tests for phenotypes combined with expressions."""

    @pytest.mark.parametrize(
        "selector, expected",
        [
            (["tumor", "~Expr==1"], [T, F, T, F, F, F]),
            (["~Expr==1", "tumor"], [T, F, T, F, F, F]),
            (["cd8", "~E2==1"], [F, F, F, F, T, F]),
            (["~E2==1", "cd8"], [F, F, F, F, T, F]),
        ],
    )
    def test_single_column(self, single_table, selector, expected):
        assert select_rows(single_table, selector).tolist() == expected

    @pytest.mark.parametrize(
        "selector, expected",
        [
            (["tumor+", "~Expr==1"], [T, F, T, F, F, F]),
            (["~Expr==1", "tumor+"], [T, F, T, F, F, F]),
            (["cd8+", "~E2==1"], [F, F, F, F, T, F]),
            (["~E2==1", "cd8+"], [F, F, F, F, T, F]),
        ],
    )
    def test_per_phenotype_columns(self, per_column_table, selector, expected):
        assert select_rows(per_column_table, selector).tolist() == expected


class TestMultiplePhenotypes:
    """Tests for name sets (OR) and composites (AND)."""

    def test_name_set_is_or(self, single_table):
        assert select_rows(single_table, ("tumor", "cd8")).tolist() == [T, T, T, T, T, F]
        assert select_rows(single_table, [("tumor", "cd8")]).tolist() == [T, T, T, T, T, F]

    def test_name_set_with_expression(self, single_table):
        result = select_rows(single_table, ["~E3==1", ("tumor", "cd8")])
        assert result.tolist() == [T, F, T, F, T, F]

    def test_name_set_per_phenotype_columns(self, per_column_table):
        assert select_rows(per_column_table, ("tumor+", "cd8+")).tolist() == [T, T, T, T, T, F]
        result = select_rows(per_column_table, ["~E3==1", ("tumor+", "cd8+")])
        assert result.tolist() == [T, F, T, F, T, F]

    def test_list_of_phenotypes_is_and(self, single_table, per_column_table):
        assert select_rows(single_table, ["tumor", "cd8"]).tolist() == [F] * 6
        assert select_rows(per_column_table, ["tumor+", "cd8+"]).tolist() == [F] * 6

    def test_multiple_expressions(self, single_table):
        assert select_rows(single_table, ["~Expr==1", "~E2==2"]).tolist() == [F, F, T, F, F, F]
        assert select_rows(single_table, ["~E2==1", "~Expr==2"]).tolist() == [F, T, F, F, F, F]

    def test_all_together(self, single_table):
        assert select_rows(single_table, ["tumor", "~E2==1", "~E3==1"]).tolist() == [
            T, F, F, F, F, F
        ]
        assert select_rows(single_table, ["~E2==1", "tumor", "~E3==1"]).tolist() == [
            T, F, F, F, F, F
        ]


class TestSelectionProperties:
    """Tests for algebraic properties on a larger random table."""

    def test_name_set_equals_or_of_names(self, mock_table):
        expected = select_rows(mock_table, "tumor") | select_rows(mock_table, "CD8")
        np.testing.assert_array_equal(select_rows(mock_table, ("tumor", "CD8")), expected)

    def test_composite_equals_and(self, mock_table):
        expr = "~`Membrane Expression` > 3"
        expected = select_rows(mock_table, "CD68") & select_rows(mock_table, expr)
        np.testing.assert_array_equal(select_rows(mock_table, ["CD68", expr]), expected)
        np.testing.assert_array_equal(select_rows(mock_table, [expr, "CD68"]), expected)

    def test_disjoint_phenotypes(self, mock_table):
        assert not select_rows(mock_table, ["tumor", "CD8"]).any()

    def test_missing_values_never_selected(self, mock_table):
        result = select_rows(mock_table, "~`Nucleus Area` != 20")
        assert not result[mock_table["Nucleus Area"].isna().to_numpy()].any()

    @pytest.mark.parametrize("text", ["~E2 not in (1,)", "~not (E2 in (1,))", "~E2 != 1"])
    def test_missing_operand_not_selected_by_negation(self, text):
        table = pd.DataFrame({"E2": [1, None, 3]})
        assert select_rows(table, text).tolist() == [False, False, True]

    def test_length_matches_table(self, mock_table):
        assert len(select_rows(mock_table, "~`Nucleus Area` > 40")) == len(mock_table)


class TestSelectRowsErrors:
    """Tests for structural errors."""

    def test_invalid_expression(self, single_table):
        with pytest.raises(SelectorError, match=re.escape("Invalid selector expression ~D")):
            select_rows(single_table, "~D")

    def test_invalid_double_marker_expression(self, single_table):
        with pytest.raises(SelectorError, match=re.escape("Invalid selector expression ~~D")):
            select_rows(single_table, "~~D")

    def test_invalid_expression_in_composite(self, single_table):
        with pytest.raises(SelectorError, match=re.escape("~D == 1")):
            select_rows(single_table, ["tumor", "~D == 1"])

    def test_empty_composite(self, single_table):
        with pytest.raises(SelectorShapeError):
            select_rows(single_table, [])

    def test_bad_table(self):
        with pytest.raises(SelectorShapeError, match="Table must be"):
            select_rows("cells.csv", "tumor")


class TestEndToEnd:
    """Tests for row sequences and helper functions."""

    def test_row_sequence_table(self):
        rows = [
            {"Phenotype": "tumor", "E2": 1},
            {"Phenotype": "tumor", "E2": 1},
            {"Phenotype": "tumor", "E2": 2},
            {"Phenotype": "cd8", "E2": 2},
            {"Phenotype": "cd8", "E2": 1},
            {"Phenotype": None, "E2": None},
        ]
        assert evaluate(rows, ["cd8", "~E2==1"]).tolist() == [F, F, F, F, T, F]

    def test_filters_dataframe(self, single_table):
        subset = single_table[select_rows(single_table, "cd8")]
        assert subset["Expr"].tolist() == [2, 3]

    def test_list_phenotypes(self, single_table, per_column_table):
        assert list_phenotypes(single_table) == ["cd8", "tumor"]
        assert list_phenotypes(per_column_table) == ["tumor", "cd8"]

    def test_count_selected(self, single_table):
        counts = count_selected(single_table, ["tumor", "cd8", ("tumor", "cd8"), None])
        assert counts.to_dict() == {"tumor": 3, "cd8": 2, "tumor|cd8": 5, "All": 6}

    def test_count_selected_named(self, single_table):
        counts = count_selected(single_table, {"CD8 E2 low": ["cd8", "~E2 == 1"]})
        assert counts["CD8 E2 low"] == 1

    def test_validate_selectors(self, single_table):
        errors = validate_selectors(single_table, ["tumor", "~D == 1"])
        assert len(errors) == 1
        assert "Selector 'D == 1'" in errors[0]
        assert "unknown column 'D'" in errors[0]

    def test_validate_selectors_valid(self, single_table):
        assert validate_selectors(single_table, ["tumor", "~E2 == 1"]) == []

    def test_validate_selectors_bad_shape(self, single_table):
        errors = validate_selectors(single_table, "tumor")
        assert len(errors) == 1
        assert "wrap a single selector" in errors[0]
