"""Pytest configuration and shared fixtures for Phenotype-Select tests."""

import sys
from pathlib import Path

import pytest
import pandas as pd

# Add package to path
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from tests.fixtures import (
    create_single_column_table,
    create_per_phenotype_table,
    create_mock_cell_table,
)


# ============================================================================
# Cell Table Fixtures
# ============================================================================


@pytest.fixture
def single_table() -> pd.DataFrame:
    """Six cells, phenotypes in one ``Phenotype`` column."""
    return create_single_column_table()


@pytest.fixture
def per_column_table() -> pd.DataFrame:
    """Six cells, one ``Phenotype <name>`` column per phenotype."""
    return create_per_phenotype_table()


@pytest.fixture
def mock_table() -> pd.DataFrame:
    """Random 300-cell table with missing values."""
    return create_mock_cell_table()


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def phenotypes() -> list:
    """Baseline phenotype list."""
    return ["CD8", "CD68", "tumor"]


@pytest.fixture
def sample_rules_config(tmp_path) -> Path:
    """Create sample phenotype rules configuration file."""
    content = """
phenotype_rules:
  phenotypes: [CD8, CD68, tumor]
  rules:
    CD8: "~`Membrane Expression` > 3"
    CD68: [CD68, "~Expression2 > 1"]
    tumor: {any: [tumor PDL1+, tumor PDL1-]}
  selectors:
    - [cd8, "~E2 == 1"]
    - {any: [a, b, c]}
    - tumor
  selection:
    phenotype_column: Class
"""
    path = tmp_path / "rules.yaml"
    path.write_text(content)
    return path


@pytest.fixture
def invalid_rules_config(tmp_path) -> Path:
    """Create rules configuration with an override for an unknown phenotype."""
    content = """
phenotypes: [CD8, CD68, tumor]
rules:
  CD4: CD4
"""
    path = tmp_path / "invalid_rules.yaml"
    path.write_text(content)
    return path
