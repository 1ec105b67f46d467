"""
Storage module for capture reports.

This module provides report persistence with:
- A JSON report document for every capture
- Optional Parquet tables (one per dataset) for offline analysis with Polars
- Storage backends sharing a common interface
"""

from .base import DataStorage
from .data_manager import ReportStorageManager, table_filename
from .factory import create_storage
from .parquet_storage import ParquetStorage

__all__ = [
    "DataStorage",
    "ParquetStorage",
    "ReportStorageManager",
    "create_storage",
    "table_filename",
]
