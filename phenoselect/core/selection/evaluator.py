"""Row selection by phenotype and threshold selectors.

``select_rows`` turns a selector into a boolean row mask:

>>> import pandas as pd
>>> cells = pd.DataFrame({
...     "Phenotype": ["tumor", "tumor", "cd8", None],
...     "E2": [1, 2, 1, None],
... })
>>> select_rows(cells, "tumor").tolist()
[True, True, False, False]
>>> select_rows(cells, ["cd8", "~E2 == 1"]).tolist()
[False, False, True, False]
>>> select_rows(cells, ("tumor", "cd8")).tolist()
[True, True, True, False]
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, Union

import numpy as np
import pandas as pd

from .config import SelectionConfig
from .encoding import PhenotypeEncoding, detect_encoding
from .expression import evaluate_expression
from .normalizer import normalize_selector
from .selectors import (
    Composite,
    Expression,
    Name,
    NameSet,
    Selector,
    Wildcard,
    as_selector,
)
from .validator import SelectionError, SelectorShapeError

logger = logging.getLogger(__name__)

TableLike = Union[pd.DataFrame, Sequence[Mapping[str, Any]]]


def as_frame(table: TableLike) -> pd.DataFrame:
    """Return ``table`` as a DataFrame; row sequences are converted."""
    if isinstance(table, pd.DataFrame):
        return table
    if isinstance(table, (str, bytes)) or not isinstance(table, Sequence):
        raise SelectorShapeError(
            f"Table must be a DataFrame or a sequence of rows, got {type(table).__name__}"
        )
    return pd.DataFrame(list(table))


def _evaluate(
    frame: pd.DataFrame, selector: Selector, encoding: PhenotypeEncoding
) -> np.ndarray:
    if isinstance(selector, Wildcard):
        return np.ones(len(frame), dtype=bool)

    if isinstance(selector, Name):
        return encoding.match(frame, selector.name)

    if isinstance(selector, NameSet):
        mask = np.zeros(len(frame), dtype=bool)
        for name in selector.names:
            mask |= encoding.match(frame, name)
        return mask

    if isinstance(selector, Composite):
        mask = np.ones(len(frame), dtype=bool)
        for element in selector.elements:
            mask &= _evaluate(frame, element, encoding)
        return mask

    if isinstance(selector, Expression):
        return evaluate_expression(selector.parsed, frame)

    raise SelectorShapeError(f"Unsupported selector {selector!r}")


def select_rows(
    table: TableLike,
    selector: Any,
    config: Optional[SelectionConfig] = None,
) -> np.ndarray:
    """Select rows of a cell table.

    Parameters
    ----------
    table : pd.DataFrame or sequence of row mappings
        Cell table with either a ``Phenotype`` column or ``Phenotype <name>``
        columns, plus any measurement columns used by expressions
    selector : Any
        A ``Selector`` or selector literal (see ``as_selector``). ``None``
        or NaN selects every row; a list is the AND of its elements; a
        tuple or set of names is their OR.
    config : SelectionConfig, optional
        Column naming conventions. Defaults to ``SelectionConfig()``.

    Returns
    -------
    np.ndarray
        Boolean mask with one entry per row. Missing values never select.

    Raises
    ------
    SelectorError
        On an unknown column, unknown phenotype or malformed expression
    SelectorShapeError
        On an unsupported selector literal
    """
    frame = as_frame(table)
    selector = as_selector(selector)
    encoding = detect_encoding(frame, config)

    mask = _evaluate(frame, selector, encoding)
    logger.debug(
        "Selector %s selected %d of %d rows", selector.label, int(mask.sum()), len(frame)
    )
    return mask


evaluate = select_rows


def list_phenotypes(
    table: TableLike, config: Optional[SelectionConfig] = None
) -> List[str]:
    """Phenotype names available in ``table`` under its encoding."""
    frame = as_frame(table)
    return detect_encoding(frame, config).phenotypes(frame)


def count_selected(
    table: TableLike,
    selectors: Any,
    config: Optional[SelectionConfig] = None,
) -> pd.Series:
    """Count rows selected by each selector.

    Parameters
    ----------
    table : pd.DataFrame or sequence of row mappings
        Cell table
    selectors : list or mapping
        Selector terms, named or not; normalized with ``normalize_selector``
    config : SelectionConfig, optional
        Column naming conventions

    Returns
    -------
    pd.Series
        Row counts indexed by selector label, in selector order
    """
    frame = as_frame(table)
    named = normalize_selector(selectors)
    encoding = detect_encoding(frame, config)
    counts = {
        label: int(_evaluate(frame, selector, encoding).sum())
        for label, selector in named.items()
    }
    return pd.Series(counts, dtype=int, name="count")


def validate_selectors(
    table: TableLike,
    selectors: Any,
    config: Optional[SelectionConfig] = None,
) -> List[str]:
    """
    Dry-run selectors against a table.

    Returns list of error messages (empty if every selector evaluates).
    """
    frame = as_frame(table)
    encoding = detect_encoding(frame, config)
    errors = []

    try:
        named: Dict[str, Selector] = normalize_selector(selectors)
    except SelectionError as e:
        return [str(e)]

    for label, selector in named.items():
        try:
            _evaluate(frame, selector, encoding)
        except SelectionError as e:
            errors.append(f"Selector '{label}': {e}")

    return errors
