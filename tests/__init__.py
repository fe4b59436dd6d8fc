"""Test suite for Phenotype-Select.

Test organization:
- fixtures/: Mock cell tables and test utilities
- unit/: Unit tests for individual modules

Run tests with:
    pytest tests/
    pytest tests/unit/
    pytest tests/ -v --tb=short
"""
