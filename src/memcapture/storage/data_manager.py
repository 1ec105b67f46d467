"""
Report storage manager.

This module provides a high-level interface for persisting a capture
report using the configured storage format.
"""

import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Optional
import polars as pl

from ..config.storage_config import StorageConfig
from ..validation import ErrorSeverity, handle_file_error
from .factory import create_storage

logger = logging.getLogger(__name__)


def _flatten_row(row: Dict[str, Any]) -> Dict[str, Any]:
    """Expand statistic dicts into ``"<column> (Min|Max|Average)"`` columns."""
    flat = {}
    for column, value in row.items():
        if isinstance(value, dict):
            # processes use lowercase statistic keys, datasets capitalised ones
            for key, stat in value.items():
                flat[f"{column} ({key.capitalize()})"] = stat
        else:
            flat[column] = value
    return flat


def table_filename(dataset_name: str) -> str:
    """File name of a dataset table, e.g. ``"CMA Regions"`` -> ``cma_regions.parquet``."""
    slug = re.sub(r"[^0-9a-zA-Z]+", "_", dataset_name).strip("_").lower()
    return f"{slug or 'dataset'}.parquet"


class ReportStorageManager:
    """
    Writes a capture report to an output directory.

    ``report.json`` is always written. In ``parquet`` mode every dataset and
    the process table are additionally written as Parquet files, with
    statistic columns flattened to ``"<column> (Min|Max|Average)"``.
    """

    REPORT_FILENAME = "report.json"
    PROCESSES_TABLE = "processes.parquet"

    def __init__(self, output_dir: Path, storage_config: Optional[StorageConfig] = None):
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

        self.storage_config = storage_config or StorageConfig()
        self.storage = create_storage(
            self.storage_config.format, self.storage_config.compression
        )
        logger.debug(
            f"Initialized ReportStorageManager with format: {self.storage_config.format}"
        )

    @property
    def report_path(self) -> Path:
        return self.output_dir / self.REPORT_FILENAME

    def save_report(self, report: Dict[str, Any]) -> List[Path]:
        """
        Persist a report produced by ReportGenerator.get_json().

        Returns:
            Paths of all files written

        Raises:
            OSError: If a file cannot be written
        """
        written = []
        try:
            self.storage.save_dict(report, str(self.report_path))
            written.append(self.report_path)

            if self.storage_config.format == "parquet":
                written.extend(self._save_tables(report))

            logger.info(f"Saved report to: {self.output_dir}")
            return written

        except OSError as e:
            handle_file_error(
                error=e,
                context=f"saving report to {self.output_dir}",
                severity=ErrorSeverity.ERROR,
                reraise=True,
                logger=logger,
            )

    def _save_tables(self, report: Dict[str, Any]) -> List[Path]:
        written = []

        processes_df = self.processes_to_dataframe(report.get("processes", []))
        if len(processes_df) > 0:
            path = self.output_dir / self.PROCESSES_TABLE
            self.storage.save_dataframe(processes_df, str(path))
            written.append(path)

        for dataset in report.get("data", []):
            df = self.dataset_to_dataframe(dataset)
            if len(df) == 0:
                continue
            path = self.output_dir / table_filename(dataset["name"])
            self.storage.save_dataframe(df, str(path))
            written.append(path)

        return written

    @staticmethod
    def dataset_to_dataframe(dataset: Dict[str, Any]) -> pl.DataFrame:
        rows = [_flatten_row(row) for row in dataset.get("data", [])]
        if not rows:
            return pl.DataFrame()
        df = pl.DataFrame(rows)
        ordered = [c for c in dataset.get("_columnOrder", []) if c in df.columns]
        return df.select(ordered) if ordered else df

    @staticmethod
    def processes_to_dataframe(processes: List[Dict[str, Any]]) -> pl.DataFrame:
        rows = [_flatten_row(process) for process in processes]
        if not rows:
            return pl.DataFrame()
        return pl.DataFrame(rows)
