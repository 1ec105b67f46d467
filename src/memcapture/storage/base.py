"""
Abstract base class for report storage backends.

A backend writes the two kinds of artefact a capture produces: the report
document and, in parquet mode, one table per dataset.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict

import polars as pl


class DataStorage(ABC):
    """Interface used by ReportStorageManager to persist a capture."""

    @abstractmethod
    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        """
        Write a dataset table to ``path``, creating parent directories.

        Args:
            df: Flattened dataset, one row per report row
            path: Destination file
        """
        pass

    @abstractmethod
    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        """Write the report document to ``path``."""
        pass
