"""
Unit tests for configuration loading and the configuration singleton.
"""

import pytest

from memcapture.config import (
    clear_config_cache,
    get_config,
    get_config_info,
    is_config_loaded,
    set_config_path,
)
from memcapture.validation import ValidationError


@pytest.mark.unit
class TestConfigManager:
    """Test cases for get_config and friends."""

    def test_load_config(self, config_files):
        set_config_path(config_files["config"])

        config = get_config()

        assert config.config_path == config_files["config"]
        assert config.monitor.platform == "REALTEK"
        assert config.monitor.storage.format == "parquet"

    def test_config_is_cached(self, config_files):
        set_config_path(config_files["config"])

        assert get_config() is get_config()
        assert is_config_loaded()

        clear_config_cache()
        assert not is_config_loaded()

    def test_config_info(self, config_files):
        set_config_path(config_files["config"])
        get_config()

        info = get_config_info()
        assert info["config_loaded"] is True
        assert info["config_path"] == str(config_files["config"])
        assert info["platform"] == "REALTEK"

    def test_missing_file(self, temp_dir):
        set_config_path(temp_dir / "absent.toml")

        with pytest.raises(FileNotFoundError):
            get_config()

    def test_malformed_file(self, temp_dir):
        import tomllib

        config_file = temp_dir / "config.toml"
        config_file.write_text("[monitor.collection\nplatform = ")
        set_config_path(config_file)

        with pytest.raises(tomllib.TOMLDecodeError):
            get_config()

    def test_invalid_values(self, temp_dir):
        config_file = temp_dir / "config.toml"
        config_file.write_text("[monitor.collection]\nduration_seconds = -5\n")
        set_config_path(config_file)

        with pytest.raises(ValidationError):
            get_config()

    def test_shipped_config_is_valid(self):
        """The default conf/config.toml loads with its documented defaults."""
        config = get_config()

        assert config.monitor.platform == "AMLOGIC"
        assert config.monitor.duration_seconds == 30
