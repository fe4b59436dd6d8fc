"""Selector serialization and rule-set summaries."""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

import yaml

from ...io.logging import log_yaml
from .selectors import (
    Composite,
    Expression,
    Name,
    NameSet,
    Selector,
    Wildcard,
    as_selector,
)
from .validator import SelectorShapeError


def selector_to_config(selector: Selector) -> Any:
    """Convert a selector to its YAML-friendly form.

    Names and expressions become strings, a wildcard ``None``, a name set
    ``{"any": [...]}`` and a composite a list.
    """
    selector = as_selector(selector)
    if isinstance(selector, Wildcard):
        return None
    if isinstance(selector, Name):
        return selector.name
    if isinstance(selector, Expression):
        return selector.text
    if isinstance(selector, NameSet):
        return {"any": list(selector.names)}
    if isinstance(selector, Composite):
        return [selector_to_config(element) for element in selector.elements]
    raise SelectorShapeError(f"Unsupported selector {selector!r}")


def selector_from_config(value: Any) -> Selector:
    """Inverse of ``selector_to_config``; also accepts ``{"all": [...]}``."""
    if isinstance(value, dict):
        if len(value) != 1 or next(iter(value)) not in ("any", "all"):
            raise SelectorShapeError(
                f"Selector mapping must have a single 'any' or 'all' key, got {value!r}"
            )
        (key, members), = value.items()
        if not isinstance(members, list):
            raise SelectorShapeError(f"'{key}' must hold a list, got {members!r}")
        if key == "any":
            return NameSet(tuple(members))
        return Composite(tuple(selector_from_config(m) for m in members))
    if isinstance(value, list):
        return Composite(tuple(selector_from_config(m) for m in value))
    return as_selector(value)


def rules_to_dict(rules: Mapping[str, Selector]) -> Dict[str, Any]:
    """Convert a rule set to a YAML-friendly dictionary."""
    return {name: selector_to_config(selector) for name, selector in rules.items()}


def export_rules(rules: Mapping[str, Selector], output_path: Path) -> None:
    """Export a rule set to YAML, keeping rule order."""
    with open(output_path, "w") as f:
        yaml.safe_dump(
            {"rules": rules_to_dict(rules)}, f, sort_keys=False, allow_unicode=True
        )


def format_rule_summary(rules: Mapping[str, Selector]) -> str:
    """Format a human-readable summary of a rule set."""
    lines = ["Phenotype Rule Summary", "=" * 50, ""]

    for name, selector in rules.items():
        selector = as_selector(selector)
        kind = type(selector).__name__
        marker = "" if selector == Name(name) else "  (custom)"
        lines.append(f"  {name}: {selector.label} [{kind}]{marker}")

    lines.append("")
    lines.append(f"Total: {len(rules)} phenotypes")
    return "\n".join(lines)


def log_rule_set(
    rules: Mapping[str, Selector],
    logger: Optional[logging.Logger] = None,
    log_path: Optional[Path] = None,
) -> None:
    """Record a rule set as a YAML document in a logger or log file.

    Raises
    ------
    ValueError
        If neither ``logger`` nor ``log_path`` is given
    """
    if logger is None and log_path is None:
        raise ValueError("log_rule_set needs a logger or a log_path")
    record = {
        "n_rules": len(rules),
        "rules": {name: as_selector(s).label for name, s in rules.items()},
    }
    log_yaml(record, logger=logger, log_path=log_path)
