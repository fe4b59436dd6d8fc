"""I/O utilities for Phenotype-Select.

Provides run log files and structured YAML log records.
"""

from .logging import close_run_log, log_yaml, open_run_log, stamp_log_path

__all__ = [
    "close_run_log",
    "log_yaml",
    "open_run_log",
    "stamp_log_path",
]
