"""Test fixtures for Phenotype-Select.

Provides mock cell table generators.
"""

from .mock_tables import (
    create_single_column_table,
    create_per_phenotype_table,
    create_mock_cell_table,
)

__all__ = [
    "create_single_column_table",
    "create_per_phenotype_table",
    "create_mock_cell_table",
]
