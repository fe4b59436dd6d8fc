"""Core computational modules for Phenotype-Select.

This package contains:
- selection: Phenotype/threshold selectors, row selection and phenotype rules
"""
