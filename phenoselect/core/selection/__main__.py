"""
Phenotype Rules CLI

Resolves and checks phenotype rule configuration files.

Usage:
    python -m phenoselect.core.selection show -c RULES.yaml [--log LOG]
    python -m phenoselect.core.selection validate -c RULES.yaml
    python -m phenoselect.core.selection normalize -c RULES.yaml
"""

import argparse
import sys
from pathlib import Path

import yaml

from ...io.logging import close_run_log, open_run_log
from .config import PhenotypeRulesConfig
from .export import format_rule_summary, log_rule_set
from .normalizer import normalize_selector
from .validator import SelectionError, validate_phenotype_rules


def _load(path: str) -> PhenotypeRulesConfig:
    return PhenotypeRulesConfig.from_yaml(Path(path))


def cmd_show(args):
    """Show the resolved rule set."""
    try:
        config = _load(args.config)
        if args.log:
            logger, log_path = open_run_log(args.log)
            try:
                rules = config.build(logger=logger)
                log_rule_set(rules, logger=logger)
            finally:
                close_run_log(logger)
            print(f"Logged rule set to {log_path}")
        else:
            rules = config.build()
        print(format_rule_summary(rules))
        return 0
    except (SelectionError, OSError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def cmd_validate(args):
    """Validate rule overrides without building."""
    try:
        config = _load(args.config)
    except (SelectionError, OSError, yaml.YAMLError) as e:
        print(f"Validation FAILED:\n  - {e}")
        return 1

    errors = validate_phenotype_rules(config.phenotypes, config.rules)

    if errors:
        print("Validation FAILED:")
        for error in errors:
            print(f"  - {error}")
        return 1
    else:
        print(f"Validation PASSED: {len(config.phenotypes)} phenotypes, "
              f"{len(config.rules)} rules")
        return 0


def cmd_normalize(args):
    """Print display names of the configured selectors."""
    try:
        config = _load(args.config)
        named = normalize_selector(config.selectors)
    except (SelectionError, OSError, yaml.YAMLError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    for label in named:
        print(label)
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Resolve and validate phenotype rule configurations"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # show command
    show_parser = subparsers.add_parser("show", help="Show the resolved rule set")
    show_parser.add_argument(
        "-c", "--config", required=True, help="Phenotype rules YAML"
    )
    show_parser.add_argument(
        "--log", default=None, help="Also record the rule set in this log file"
    )
    show_parser.set_defaults(func=cmd_show)

    # validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Validate rule overrides against the phenotype list"
    )
    validate_parser.add_argument(
        "-c", "--config", required=True, help="Phenotype rules YAML"
    )
    validate_parser.set_defaults(func=cmd_validate)

    # normalize command
    normalize_parser = subparsers.add_parser(
        "normalize", help="Print display names of the configured selectors"
    )
    normalize_parser.add_argument(
        "-c", "--config", required=True, help="Phenotype rules YAML"
    )
    normalize_parser.set_defaults(func=cmd_normalize)

    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
