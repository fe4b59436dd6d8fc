"""Display names for selector collections.

Reports and plot legends need a readable label for every selector. Labels
mirror the logic of the selector: ``|`` joins OR-ed names and ``&`` joins
AND-ed terms.

>>> list(normalize_selector(["cd8", ("a", "b"), ["cd8", "~Expr==1"]]))
['cd8', 'a|b', 'cd8&Expr == 1']
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Dict

from .expression import EXPRESSION_MARKER
from .selectors import WILDCARD, Name, NameSet, Selector, as_selector
from .validator import SelectorShapeError

# Spellings of "every cell" in compact phenotype strings
WILDCARD_NAMES = ("All", "Total")


def _add(result: Dict[str, Selector], name: Any, selector: Selector) -> None:
    if not isinstance(name, str) or not name:
        raise SelectorShapeError(f"Selector names must be non-empty strings, got {name!r}")
    if name in result:
        raise SelectorShapeError(f"Duplicate selector name: {name}")
    result[name] = selector


def _check_terms(terms: Any) -> None:
    if terms is None:
        raise SelectorShapeError("Selectors are missing")
    if isinstance(terms, str):
        raise SelectorShapeError(
            f"Selectors must be a list or mapping, got the string {terms!r}; "
            f"wrap a single selector in a list, e.g. [{terms!r}]"
        )
    if not isinstance(terms, (list, tuple, Mapping)):
        raise SelectorShapeError(
            f"Selectors must be a list or mapping, got {type(terms).__name__}"
        )
    if len(terms) == 0:
        raise SelectorShapeError("Selectors are empty")


def normalize_selector(terms: Any) -> Dict[str, Selector]:
    """Give every selector term a display name.

    Parameters
    ----------
    terms : list, tuple or mapping
        Selector terms. A mapping supplies the names itself; its keys are
        kept and its values coerced. For a list, each term is named by its label:
        a name by itself, an expression by its normalized text, a name set
        by its members joined with ``|`` and a composite by its elements'
        labels joined with ``&``.

    Returns
    -------
    Dict[str, Selector]
        Ordered mapping of display name -> selector

    Raises
    ------
    SelectorShapeError
        If ``terms`` is missing, empty or not a collection, or two terms
        end up with the same name

    Examples
    --------
    >>> normalize_selector(["cd8"])
    {'cd8': Name(name='cd8')}
    >>> normalize_selector([("a", "b", "c")])
    {'a|b|c': NameSet(names=('a', 'b', 'c'))}
    """
    _check_terms(terms)
    result: Dict[str, Selector] = {}

    if isinstance(terms, Mapping):
        for name, value in terms.items():
            _add(result, name, as_selector(value))
        return result

    for term in terms:
        selector = as_selector(term)
        _add(result, selector.label, selector)
    return result


normalize = normalize_selector


def parse_phenotype(text: str) -> Selector:
    """Parse one compact phenotype string.

    ``"CD8+/CD68+"`` is the OR of ``CD8+`` and ``CD68+``; ``"All"`` and
    ``"Total"`` select every cell; ``"~..."`` is an expression. Anything
    else, including space-separated signed tokens such as ``"CD8+ PD1+"``,
    is a single name.
    """
    if not isinstance(text, str) or not text.strip():
        raise SelectorShapeError(f"Phenotype must be a non-empty string, got {text!r}")
    text = text.strip()
    if text.startswith(EXPRESSION_MARKER):
        return as_selector(text)
    if text in WILDCARD_NAMES:
        return WILDCARD
    if "/" in text:
        parts = [part.strip() for part in text.split("/")]
        if not all(parts):
            raise SelectorShapeError(f"Empty phenotype in {text!r}")
        return NameSet(tuple(parts))
    return Name(text)


def parse_phenotypes(*texts: Any) -> Dict[str, Selector]:
    """Parse compact phenotype strings into a named selector mapping.

    Positional strings are named by themselves; a single mapping argument
    keeps its names and parses its string values.

    >>> list(parse_phenotypes("CD8+", "CD68+/Tumor+", "Total"))
    ['CD8+', 'CD68+/Tumor+', 'Total']
    """
    if len(texts) == 1 and isinstance(texts[0], Mapping):
        items = list(texts[0].items())
    else:
        items = [(text, text) for text in texts]
    if not items:
        raise SelectorShapeError("No phenotypes given")

    result: Dict[str, Selector] = {}
    for name, value in items:
        selector = parse_phenotype(value) if isinstance(value, str) else as_selector(value)
        _add(result, name, selector)
    return result

