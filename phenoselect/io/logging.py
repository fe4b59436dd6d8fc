"""Run logs for phenotype rule sets.

A run log is a plain text file with one line per log record. Rule sets are
written into it as YAML documents terminated by ``---``.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Tuple, Union

import yaml

PathLike = Union[str, Path]

RUN_LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
RUN_LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def stamp_log_path(log_path: PathLike, now: Optional[datetime] = None) -> Path:
    """Insert a run timestamp before the suffix.

    ``rules.log`` becomes ``rules_20251209_080530.log``; a path without a
    suffix gets ``.log``.
    """
    log_path = Path(log_path)
    now = now or datetime.now()
    suffix = log_path.suffix or ".log"
    return log_path.with_name(f"{log_path.stem}_{now:%Y%m%d_%H%M%S}{suffix}")


def open_run_log(
    log_path: PathLike,
    name: str = "phenoselect.rules",
    level: int = logging.INFO,
    timestamped: bool = True,
) -> Tuple[logging.Logger, Path]:
    """Point the named logger at a fresh run log file.

    Parameters
    ----------
    log_path : PathLike
        Base path of the run log.
    name : str
        Logger name.
    level : int
        Logging level (default: INFO).
    timestamped : bool
        Stamp the file name with the run time. Otherwise ``log_path`` is
        truncated and reused.

    Returns
    -------
    Tuple[logging.Logger, Path]
        The logger and the file it writes to. Release the file with
        ``close_run_log``.
    """
    path = stamp_log_path(log_path) if timestamped else Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)
    logger.propagate = False
    close_run_log(logger)

    handler = logging.FileHandler(path, mode="w", encoding="utf-8")
    handler.setFormatter(logging.Formatter(RUN_LOG_FORMAT, datefmt=RUN_LOG_DATEFMT))
    logger.addHandler(handler)
    return logger, path


def close_run_log(logger: logging.Logger) -> None:
    """Detach and close the file handlers of ``logger``."""
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()


def format_yaml_record(record: dict[str, Any]) -> str:
    """Render ``record`` as one ``---`` terminated YAML document."""
    return yaml.safe_dump(record, sort_keys=False).rstrip("\n") + "\n---"


def log_yaml(
    record: dict[str, Any],
    *,
    logger: logging.Logger | None = None,
    log_path: PathLike | None = None,
) -> None:
    """Write a YAML record to ``logger`` at INFO, or append it to ``log_path``.

    Raises
    ------
    ValueError
        If neither ``logger`` nor ``log_path`` is given
    """
    message = format_yaml_record(record)
    if logger is not None:
        logger.info("%s", message)
        return
    if log_path is None:
        raise ValueError("log_yaml needs a logger or a log_path")

    path = Path(log_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("a", encoding="utf-8") as handle:
        handle.write(message + "\n")
