"""Phenotype rule sets.

A rule set maps every phenotype of a project to the selector that picks its
cells. Phenotypes without an explicit rule select themselves by name;
customized phenotypes come first so reports list them at the top.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Sequence

from .selectors import Name, Selector, as_selector
from .validator import RuleValidationError, validate_phenotype_rules


def make_phenotype_rules(
    phenotypes: Sequence[str],
    rules: Any = None,
    logger: Optional[logging.Logger] = None,
) -> Dict[str, Selector]:
    """Build the rule set for a list of phenotypes.

    Parameters
    ----------
    phenotypes : Sequence[str]
        Baseline phenotype names, assumed unique
    rules : Mapping[str, Any], optional
        Overrides keyed by phenotype name. Values are selectors or selector
        literals of any shape. ``None`` or an empty mapping means no
        overrides.
    logger : logging.Logger, optional
        Logger instance

    Returns
    -------
    Dict[str, Selector]
        Phenotype -> selector. Overridden phenotypes first, in override
        order, then the remaining phenotypes in baseline order, each
        selecting itself by name.

    Raises
    ------
    RuleValidationError
        If ``rules`` is not a named mapping or names phenotypes that are not
        in ``phenotypes``

    Examples
    --------
    >>> make_phenotype_rules(["CD8", "tumor"], {"tumor": ("tumor PDL1+", "tumor PDL1-")})
    {'tumor': NameSet(names=('tumor PDL1+', 'tumor PDL1-')), 'CD8': Name(name='CD8')}
    """
    if logger is None:
        logger = logging.getLogger(__name__)

    errors = validate_phenotype_rules(phenotypes, rules)
    if errors:
        raise RuleValidationError("\n".join(errors))

    overrides = dict(rules or {})
    result: Dict[str, Selector] = {
        name: as_selector(value) for name, value in overrides.items()
    }
    for phenotype in phenotypes:
        if phenotype not in result:
            result[phenotype] = Name(phenotype)

    logger.info(
        "Built %d phenotype rules (%d customized)", len(result), len(overrides)
    )
    return result


build_rules = make_phenotype_rules
