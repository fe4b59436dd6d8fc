"""Phenotype-Select: phenotype and threshold row selection for cell tables.

This package provides tools for:
- Selecting cells by phenotype name, sets of names (OR), combinations (AND)
  and threshold expressions over measurement columns
- Labelling selector collections for report tables and legends
- Building a project's phenotype rule set from a phenotype list and overrides

Cell tables are pandas DataFrames using either a single ``Phenotype`` column
or one ``Phenotype <name>`` column per phenotype.

Example usage:
    >>> from phenoselect import make_phenotype_rules, select_rows
    >>>
    >>> rules = make_phenotype_rules(
    ...     ["CD8", "CD68", "tumor"],
    ...     {"tumor": ("tumor PDL1+", "tumor PDL1-")},
    ... )
    >>> for phenotype, selector in rules.items():
    ...     cells = table[select_rows(table, selector)]
"""

__version__ = "0.1.0"

from .core.selection import (
    Composite,
    Expression,
    Name,
    NameSet,
    PhenotypeRulesConfig,
    RuleValidationError,
    SelectionConfig,
    SelectionError,
    Selector,
    SelectorError,
    SelectorShapeError,
    WILDCARD,
    Wildcard,
    as_selector,
    build_rules,
    count_selected,
    evaluate,
    list_phenotypes,
    make_phenotype_rules,
    normalize,
    normalize_selector,
    parse_phenotypes,
    select_rows,
    validate_phenotype_rules,
    validate_selectors,
)
