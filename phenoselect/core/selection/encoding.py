"""Phenotype encodings of a cell table.

A table records phenotypes in one of two ways:

- one ``Phenotype`` column holding a name per cell (``"tumor"``, ``"CD8"``)
- one ``Phenotype <name>`` column per phenotype holding ``"<name>+"`` or
  ``"<name>-"``

``detect_encoding`` classifies a table once and returns the strategy used
to match phenotype names against it.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

import numpy as np
import pandas as pd

from .config import SelectionConfig
from .validator import SelectorError

logger = logging.getLogger(__name__)


def _to_mask(matches: pd.Series) -> np.ndarray:
    """Convert a comparison result to a plain boolean mask, missing -> False."""
    return matches.fillna(False).to_numpy(dtype=bool)


class PhenotypeEncoding(ABC):
    """Strategy for matching phenotype names against a table."""

    kind: str = "base"

    def __init__(self, config: SelectionConfig):
        self.config = config

    @abstractmethod
    def match(self, frame: pd.DataFrame, name: str) -> np.ndarray:
        """Return the boolean mask of rows with phenotype ``name``."""

    @abstractmethod
    def phenotypes(self, frame: pd.DataFrame) -> List[str]:
        """Return the phenotype names present in ``frame``."""


class SingleColumnEncoding(PhenotypeEncoding):
    """All phenotypes in one column; names match exactly."""

    kind = "single_column"

    def match(self, frame: pd.DataFrame, name: str) -> np.ndarray:
        column = frame[self.config.phenotype_column].astype(object)
        return _to_mask(column == name)

    def phenotypes(self, frame: pd.DataFrame) -> List[str]:
        values = frame[self.config.phenotype_column].dropna().astype(str)
        return sorted(values.unique().tolist())


class PerPhenotypeColumnEncoding(PhenotypeEncoding):
    """One sign-valued column per phenotype.

    Parameters
    ----------
    config : SelectionConfig
        Column naming conventions
    columns : Dict[str, str]
        Phenotype base name -> column name, e.g. ``{"CD8": "Phenotype CD8"}``
    """

    kind = "per_phenotype_column"

    def __init__(self, config: SelectionConfig, columns: Dict[str, str]):
        super().__init__(config)
        self.columns = columns

    def split_sign(self, name: str) -> tuple[str, str]:
        """Split ``"CD8+"`` into ``("CD8", "+")``; sign-less names are positive."""
        for sign in (self.config.positive_sign, self.config.negative_sign):
            if sign and name.endswith(sign) and len(name) > len(sign):
                return name[: -len(sign)], sign
        return name, self.config.positive_sign

    def _match_single(self, frame: pd.DataFrame, name: str) -> Optional[np.ndarray]:
        base, sign = self.split_sign(name)
        column = self.columns.get(base)
        if column is None:
            return None
        values = frame[column].astype(object)
        return _to_mask(values == f"{base}{sign}")

    def match(self, frame: pd.DataFrame, name: str) -> np.ndarray:
        mask = self._match_single(frame, name)
        if mask is not None:
            return mask

        # "CD8+ PDL1-" is the AND of its signed tokens
        tokens = name.split()
        signs = (self.config.positive_sign, self.config.negative_sign)
        if len(tokens) > 1 and all(t.endswith(signs) for t in tokens):
            mask = np.ones(len(frame), dtype=bool)
            for token in tokens:
                token_mask = self._match_single(frame, token)
                if token_mask is None:
                    raise self._unknown(token)
                mask &= token_mask
            return mask

        raise self._unknown(name)

    def _unknown(self, name: str) -> SelectorError:
        base, _ = self.split_sign(name)
        return SelectorError(
            f"Unknown phenotype {name}: no column "
            f"'{self.config.phenotype_prefix}{base}' in table"
        )

    def phenotypes(self, frame: pd.DataFrame) -> List[str]:
        return list(self.columns)


class MissingEncoding(PhenotypeEncoding):
    """Table without phenotype columns; any phenotype name is an error."""

    kind = "none"

    def match(self, frame: pd.DataFrame, name: str) -> np.ndarray:
        raise SelectorError(
            f"Cannot select phenotype {name}: table has no "
            f"'{self.config.phenotype_column}' or "
            f"'{self.config.phenotype_prefix}<name>' columns"
        )

    def phenotypes(self, frame: pd.DataFrame) -> List[str]:
        return []


def detect_encoding(
    frame: pd.DataFrame, config: Optional[SelectionConfig] = None
) -> PhenotypeEncoding:
    """Classify how ``frame`` encodes phenotypes.

    A ``Phenotype`` column takes precedence over per-phenotype columns.
    """
    config = config or SelectionConfig()
    column_names = [str(c) for c in frame.columns]

    if config.phenotype_column in column_names:
        encoding: PhenotypeEncoding = SingleColumnEncoding(config)
    else:
        prefix = config.phenotype_prefix
        columns = {
            c[len(prefix):]: c
            for c in column_names
            if c.startswith(prefix) and len(c) > len(prefix)
        }
        if columns:
            encoding = PerPhenotypeColumnEncoding(config, columns)
        else:
            encoding = MissingEncoding(config)

    logger.debug("Detected phenotype encoding: %s", encoding.kind)
    return encoding
