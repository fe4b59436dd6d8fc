"""
Row selection module for phenotype and threshold criteria.

This module provides:
- Selector types (name, name set, composite, expression, wildcard)
- select_rows for turning a selector into a boolean row mask
- normalize_selector for labelling selector collections
- make_phenotype_rules for building a project's phenotype rule set
"""

from .config import PhenotypeRulesConfig, SelectionConfig
from .encoding import (
    MissingEncoding,
    PerPhenotypeColumnEncoding,
    PhenotypeEncoding,
    SingleColumnEncoding,
    detect_encoding,
)
from .evaluator import (
    as_frame,
    count_selected,
    evaluate,
    list_phenotypes,
    select_rows,
    validate_selectors,
)
from .export import (
    export_rules,
    format_rule_summary,
    log_rule_set,
    rules_to_dict,
    selector_from_config,
    selector_to_config,
)
from .expression import EXPRESSION_MARKER, ParsedExpression, parse_expression
from .normalizer import normalize, normalize_selector, parse_phenotype, parse_phenotypes
from .rules import build_rules, make_phenotype_rules
from .selectors import (
    WILDCARD,
    Composite,
    Expression,
    Name,
    NameSet,
    Selector,
    Wildcard,
    as_selector,
)
from .validator import (
    RuleValidationError,
    SelectionError,
    SelectorError,
    SelectorShapeError,
    validate_phenotype_rules,
)

__all__ = [
    # Selectors
    "Selector",
    "Wildcard",
    "WILDCARD",
    "Name",
    "NameSet",
    "Composite",
    "Expression",
    "as_selector",
    "EXPRESSION_MARKER",
    "ParsedExpression",
    "parse_expression",
    # Evaluation
    "select_rows",
    "evaluate",
    "as_frame",
    "count_selected",
    "list_phenotypes",
    "validate_selectors",
    "PhenotypeEncoding",
    "SingleColumnEncoding",
    "PerPhenotypeColumnEncoding",
    "MissingEncoding",
    "detect_encoding",
    # Normalization
    "normalize_selector",
    "normalize",
    "parse_phenotype",
    "parse_phenotypes",
    # Rules
    "make_phenotype_rules",
    "build_rules",
    "validate_phenotype_rules",
    # Config and export
    "SelectionConfig",
    "PhenotypeRulesConfig",
    "selector_to_config",
    "selector_from_config",
    "rules_to_dict",
    "export_rules",
    "format_rule_summary",
    "log_rule_set",
    # Errors
    "SelectionError",
    "SelectorError",
    "SelectorShapeError",
    "RuleValidationError",
]
