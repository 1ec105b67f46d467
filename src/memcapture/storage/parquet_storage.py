"""
Parquet storage implementation using Polars, with JSON for report documents.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Literal

import polars as pl

from .base import DataStorage

logger = logging.getLogger(__name__)


class ParquetStorage(DataStorage):
    """
    Storage backend writing tables as compressed Parquet and documents as
    indented JSON.

    Write failures are logged with the destination and re-raised.
    """

    def __init__(self, compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"):
        self.compression = compression
        logger.debug(f"Initialized ParquetStorage with compression: {compression}")

    def save_dataframe(self, df: pl.DataFrame, path: str) -> None:
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            df.write_parquet(target, compression=self.compression)
        except Exception as e:
            logger.error(f"Failed to write table {target.name} ({df.height} rows): {e}")
            raise
        logger.debug(f"Wrote {df.height} rows x {df.width} columns to {target}")

    def save_dict(self, data: Dict[str, Any], path: str) -> None:
        target = Path(path)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with open(target, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except Exception as e:
            logger.error(f"Failed to write report document {target}: {e}")
            raise
        logger.debug(f"Wrote report document with sections {sorted(data)} to {target}")
