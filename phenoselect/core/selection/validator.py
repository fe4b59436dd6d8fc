"""Error types and validation logic for selectors and phenotype rules."""

from collections.abc import Mapping
from typing import Any, Sequence


class SelectionError(ValueError):
    """Base class for selection errors."""

    pass


class SelectorError(SelectionError):
    """Raised when a selector cannot be evaluated against a table.

    Covers unknown columns, unknown phenotypes and malformed expressions.
    The message quotes the offending selector's original text.
    """

    pass


class SelectorShapeError(SelectionError):
    """Raised when a selector or selector collection has the wrong shape."""

    pass


class RuleValidationError(SelectionError):
    """Raised when phenotype rule overrides fail validation."""

    pass


NOT_NAMED_MESSAGE = (
    "Phenotype rules must be a named list (a mapping of phenotype name to selector)"
)


def validate_phenotype_rules(phenotypes: Sequence[str], rules: Any) -> list[str]:
    """
    Validate phenotype rule overrides against the baseline phenotype list.

    Returns list of error messages (empty if valid).
    """
    errors = []

    if rules is None:
        return errors

    if not isinstance(rules, Mapping):
        errors.append(f"{NOT_NAMED_MESSAGE}, got {type(rules).__name__}")
        return errors

    for key in rules:
        if not isinstance(key, str) or not key:
            errors.append(f"{NOT_NAMED_MESSAGE}; invalid phenotype name {key!r}")
    if errors:
        return errors

    known = set(phenotypes)
    unused = [key for key in rules if key not in known]
    if unused:
        errors.append(
            "Phenotype rules contain unused phenotype names: " + ", ".join(unused)
        )

    return errors
