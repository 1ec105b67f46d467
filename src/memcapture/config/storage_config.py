"""
Storage configuration model and validation.

This module defines the StorageConfig dataclass which selects how a
capture report is persisted: always as ``report.json``, and in
``parquet`` mode additionally as one compressed Parquet table per
dataset for offline analysis.
"""

from typing import Literal, Dict, Any
from dataclasses import dataclass

SUPPORTED_FORMATS = ("parquet", "json")
SUPPORTED_COMPRESSION = ("snappy", "gzip", "brotli", "lz4", "zstd")


@dataclass
class StorageConfig:
    """
    Configuration model for report storage settings.

    Attributes:
        format: Storage format type
            - 'json': only ``report.json`` is written
            - 'parquet': ``report.json`` plus one Parquet file per dataset
        compression: Compression algorithm for Parquet tables
            - 'snappy': Fast compression/decompression (default)
            - 'gzip', 'brotli', 'lz4', 'zstd'

    Note:
        Compression setting only applies to Parquet format.
    """

    format: Literal["parquet", "json"] = "json"
    compression: Literal["snappy", "gzip", "brotli", "lz4", "zstd"] = "snappy"

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "StorageConfig":
        """
        Create a StorageConfig instance from a dictionary.

        Raises:
            ValueError: If invalid configuration values are provided
        """
        format_type = config_dict.get("format", "json")
        compression = config_dict.get("compression", "snappy")

        if format_type not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported storage format: {format_type}")

        if format_type == "parquet" and compression not in SUPPORTED_COMPRESSION:
            raise ValueError(f"Unsupported compression algorithm: {compression}")

        return cls(format=format_type, compression=compression)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "format": self.format,
            "compression": self.compression,
        }
