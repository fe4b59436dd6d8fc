"""Selector types for row selection.

A selector is one of five closed variants:

- ``Wildcard``: every row
- ``Name``: a single phenotype name
- ``NameSet``: phenotype names combined with OR
- ``Composite``: sub-selectors combined with AND
- ``Expression``: a boolean expression over table columns

Callers usually write selectors as plain Python literals; ``as_selector``
converts them:

    >>> as_selector("cd8")
    Name(name='cd8')
    >>> as_selector(("tumor", "cd8"))          # tuple -> OR
    NameSet(names=('tumor', 'cd8'))
    >>> as_selector(["cd8", "~E2 == 1"])       # list -> AND
    Composite(elements=(Name(name='cd8'), Expression(text='~E2 == 1')))
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Iterable, Tuple, Union

import pandas as pd

from .expression import EXPRESSION_MARKER, ParsedExpression, parse_expression
from .validator import SelectorShapeError

WILDCARD_LABEL = "All"


@dataclass(frozen=True)
class Wildcard:
    """Selects every row."""

    @property
    def label(self) -> str:
        return WILDCARD_LABEL


@dataclass(frozen=True)
class Name:
    """A single phenotype name, e.g. ``"CD8"`` or ``"CD8+"``."""

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name:
            raise SelectorShapeError(
                f"Phenotype name must be a non-empty string, got {self.name!r}"
            )

    @property
    def label(self) -> str:
        return self.name


@dataclass(frozen=True)
class NameSet:
    """Phenotype names combined with OR.

    Attributes
    ----------
    names : Tuple[str, ...]
        Member names in the order given by the caller. At least one.
    """

    names: Tuple[str, ...]

    def __post_init__(self) -> None:
        names = tuple(self.names)
        if not names:
            raise SelectorShapeError("A phenotype name set must contain at least one name")
        for name in names:
            if not isinstance(name, str) or not name:
                raise SelectorShapeError(
                    f"Phenotype name set members must be non-empty strings, got {name!r}"
                )
        object.__setattr__(self, "names", names)

    @property
    def label(self) -> str:
        return "|".join(self.names)


@dataclass(frozen=True)
class Composite:
    """Sub-selectors combined with AND.

    Attributes
    ----------
    elements : Tuple[Selector, ...]
        Sub-selectors in caller order. At least one.
    """

    elements: Tuple["Selector", ...]

    def __post_init__(self) -> None:
        elements = tuple(as_selector(element) for element in self.elements)
        if not elements:
            raise SelectorShapeError("A composite selector must contain at least one element")
        object.__setattr__(self, "elements", elements)

    @property
    def label(self) -> str:
        return "&".join(element.label for element in self.elements)


@dataclass(frozen=True)
class Expression:
    """A boolean expression over table columns, e.g. ``"~E2 == 1"``.

    The original text is kept verbatim for error messages; the parsed form
    is built once at construction so malformed syntax fails immediately.
    """

    text: str
    parsed: ParsedExpression = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not isinstance(self.text, str):
            raise SelectorShapeError(f"Expression text must be a string, got {self.text!r}")
        object.__setattr__(self, "parsed", parse_expression(self.text))

    @property
    def label(self) -> str:
        return self.parsed.canonical

    @property
    def columns(self) -> Tuple[str, ...]:
        """Column names referenced by the expression."""
        return self.parsed.columns


Selector = Union[Wildcard, Name, NameSet, Composite, Expression]

WILDCARD = Wildcard()

_SELECTOR_TYPES = (Wildcard, Name, NameSet, Composite, Expression)


def is_missing(value: Any) -> bool:
    """True for ``None``, ``pandas.NA`` and float NaN."""
    if value is None or value is pd.NA:
        return True
    return isinstance(value, float) and math.isnan(value)


def _name_set_from(values: Iterable[Any], ordered: bool) -> NameSet:
    names = list(values)
    for name in names:
        if not isinstance(name, str):
            raise SelectorShapeError(
                f"A phenotype name set may only contain names, got {name!r}; "
                "use a list to combine selectors with AND"
            )
    if not ordered:
        names = sorted(names)
    return NameSet(tuple(names))


def as_selector(value: Any) -> Selector:
    """Convert a selector literal to a ``Selector``.

    Parameters
    ----------
    value : Any
        One of: a ``Selector``; ``None``/NaN (wildcard); a string (a name,
        or an expression when it starts with ``~``); a tuple, set or
        frozenset of names (OR); a list of selector literals (AND).

    Returns
    -------
    Selector
        The tagged selector. ``Selector`` instances are returned unchanged.

    Raises
    ------
    SelectorShapeError
        If the literal has an unsupported type or an empty collection.
    SelectorError
        If an expression string is malformed.
    """
    if isinstance(value, _SELECTOR_TYPES):
        return value
    if is_missing(value):
        return WILDCARD
    if isinstance(value, str):
        if value.startswith(EXPRESSION_MARKER):
            return Expression(value)
        return Name(value)
    if isinstance(value, tuple):
        return _name_set_from(value, ordered=True)
    if isinstance(value, (set, frozenset)):
        # Sets have no stable iteration order for strings
        return _name_set_from(value, ordered=False)
    if isinstance(value, list):
        return Composite(tuple(value))
    raise SelectorShapeError(
        f"Unsupported selector {value!r} of type {type(value).__name__}"
    )
