"""
Factory for creating storage instances.
"""

import logging
from typing import Literal

from .base import DataStorage
from .parquet_storage import ParquetStorage

logger = logging.getLogger(__name__)


def create_storage(
    format_type: Literal["parquet", "json"] = "json",
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy",
) -> DataStorage:
    """
    Create a storage instance based on the specified format type.

    Args:
        format_type: Storage format type ('parquet' or 'json')
        compression: Compression algorithm (for Parquet only)

    Returns:
        DataStorage instance

    Raises:
        ValueError: If an unsupported format type is specified
    """
    if format_type in ("parquet", "json"):
        # ParquetStorage handles both; JSON mode only ever calls save_dict
        logger.debug(f"Creating ParquetStorage for {format_type} mode with compression: {compression}")
        return ParquetStorage(compression=compression)
    raise ValueError(f"Unsupported storage format: {format_type}")
