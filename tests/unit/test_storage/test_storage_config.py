"""
Unit tests for storage configuration.
"""

import pytest

from memcapture.config.storage_config import StorageConfig


class TestStorageConfig:
    """Test cases for StorageConfig class."""

    def test_default_values(self):
        """Test default values."""
        config = StorageConfig()
        assert config.format == "json"
        assert config.compression == "snappy"

    def test_from_dict(self):
        """Test creating from dictionary."""
        config = StorageConfig.from_dict({"format": "parquet", "compression": "gzip"})

        assert config.format == "parquet"
        assert config.compression == "gzip"

    def test_from_dict_defaults(self):
        """Test creating from dictionary with defaults."""
        config = StorageConfig.from_dict({})

        assert config.format == "json"
        assert config.compression == "snappy"

    def test_invalid_format(self):
        """Test validation of invalid format."""
        with pytest.raises(ValueError, match="Unsupported storage format"):
            StorageConfig.from_dict({"format": "csv"})

    def test_invalid_compression(self):
        """Compression is only checked for Parquet output."""
        with pytest.raises(ValueError, match="Unsupported compression"):
            StorageConfig.from_dict({"format": "parquet", "compression": "rar"})

        assert StorageConfig.from_dict({"format": "json", "compression": "rar"}).format == "json"

    def test_to_dict(self):
        """Test converting to dictionary."""
        config = StorageConfig(format="parquet", compression="lz4")
        assert config.to_dict() == {"format": "parquet", "compression": "lz4"}
