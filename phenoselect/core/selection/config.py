"""Configuration classes for row selection and phenotype rules.

Phenotype rule sets can be kept in YAML next to the rest of an analysis
configuration::

    phenotype_rules:
      phenotypes: [CD8, CD68, tumor]
      rules:
        CD8: "~`Membrane Expression` > 3"
        CD68: [CD68, "~Expression2 > 1"]
        tumor: {any: [tumor PDL1+, tumor PDL1-]}
      selectors:
        - [cd8, "~E2 == 1"]
        - {any: [a, b, c]}
      selection:
        phenotype_column: Phenotype
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .export import selector_from_config, selector_to_config
from .rules import make_phenotype_rules
from .selectors import Selector


@dataclass
class SelectionConfig:
    """Column naming conventions for phenotype encodings.

    Attributes
    ----------
    phenotype_column : str
        Column holding one phenotype name per row (single-column form)
    phenotype_prefix : str
        Prefix of per-phenotype columns, e.g. ``"Phenotype "`` in
        ``"Phenotype CD8"`` (per-phenotype-column form)
    positive_sign : str
        Suffix marking a positive call, e.g. ``"CD8+"``
    negative_sign : str
        Suffix marking a negative call, e.g. ``"CD8-"``
    """

    phenotype_column: str = "Phenotype"
    phenotype_prefix: str = "Phenotype "
    positive_sign: str = "+"
    negative_sign: str = "-"

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SelectionConfig":
        """Create configuration from a dictionary, ignoring unknown keys."""
        data = data or {}
        known = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**known)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "phenotype_column": self.phenotype_column,
            "phenotype_prefix": self.phenotype_prefix,
            "positive_sign": self.positive_sign,
            "negative_sign": self.negative_sign,
        }


@dataclass
class PhenotypeRulesConfig:
    """Phenotype list, rule overrides and report selectors for an analysis.

    Attributes
    ----------
    phenotypes : List[str]
        Baseline phenotype names in display order
    rules : Dict[str, Selector]
        Overrides keyed by phenotype name
    selectors : List[Selector]
        Extra selectors to label with ``normalize_selector``
    selection : SelectionConfig
        Phenotype column conventions
    """

    phenotypes: List[str] = field(default_factory=list)
    rules: Dict[str, Selector] = field(default_factory=dict)
    selectors: List[Selector] = field(default_factory=list)
    selection: SelectionConfig = field(default_factory=SelectionConfig)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "PhenotypeRulesConfig":
        """Create configuration from a parsed YAML mapping."""
        data = data or {}

        # Handle nested phenotype_rules section
        if "phenotype_rules" in data:
            data = data["phenotype_rules"] or {}

        rules = data.get("rules")
        if rules is None:
            parsed_rules: Any = {}
        elif not isinstance(rules, dict):
            # Rejected by make_phenotype_rules
            parsed_rules = rules
        else:
            parsed_rules = {
                name: selector_from_config(value) for name, value in rules.items()
            }

        return cls(
            phenotypes=[str(p) for p in data.get("phenotypes") or []],
            rules=parsed_rules,
            selectors=[selector_from_config(v) for v in data.get("selectors") or []],
            selection=SelectionConfig.from_dict(data.get("selection")),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "PhenotypeRulesConfig":
        """Load configuration from YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f) or {}
        return cls.from_dict(data)

    def build(self, logger: Optional[logging.Logger] = None) -> Dict[str, Selector]:
        """Build the rule set for the configured phenotypes."""
        return make_phenotype_rules(self.phenotypes, self.rules, logger=logger)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        rules: Any = self.rules
        if isinstance(rules, dict):
            rules = {name: selector_to_config(value) for name, value in rules.items()}
        return {
            "phenotypes": list(self.phenotypes),
            "rules": rules,
            "selectors": [selector_to_config(s) for s in self.selectors],
            "selection": self.selection.to_dict(),
        }
