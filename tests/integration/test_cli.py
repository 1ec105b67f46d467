"""
Integration tests for the command-line interface.
"""

from unittest.mock import patch

import pytest

from memcapture.cli.main import main_cli
from memcapture.models.platform import Platform


@pytest.fixture
def mock_runner():
    """Replace the capture runner so no real /proc capture happens."""
    with (
        patch("memcapture.cli.main.CaptureRunner") as runner_class,
        patch("memcapture.cli.main._lower_priority") as lower_priority,
    ):
        runner_class.return_value.early_termination = False
        yield runner_class, lower_priority


@pytest.mark.integration
class TestMainCli:
    """Test cases for main_cli."""

    def test_config_values_are_used(self, config_files, mock_runner):
        runner_class, lower_priority = mock_runner
        output_dir = config_files["dir"] / "out"

        exit_code = main_cli(["-c", str(config_files["config"]), "-o", str(output_dir)])

        assert exit_code == 0
        lower_priority.assert_called_once()
        kwargs = runner_class.call_args.kwargs
        assert kwargs["profile"].platform is Platform.REALTEK
        assert kwargs["duration"] == 60
        assert kwargs["interval"] == 0.5
        assert kwargs["output_dir"] == output_dir
        assert kwargs["storage_config"].format == "parquet"
        assert kwargs["stop_timeout"] == 5.0
        assert output_dir.is_dir()
        runner_class.return_value.run.assert_called_once()

    def test_arguments_override_config(self, config_files, mock_runner):
        runner_class, _ = mock_runner

        main_cli([
            "-c", str(config_files["config"]),
            "-d", "5",
            "-i", "0.25",
            "-p", "broadcom",
            "--format", "json",
            "-o", str(config_files["dir"] / "out"),
        ])

        kwargs = runner_class.call_args.kwargs
        assert kwargs["duration"] == 5
        assert kwargs["interval"] == 0.25
        assert kwargs["profile"].platform is Platform.BROADCOM
        assert kwargs["storage_config"].format == "json"
        assert kwargs["storage_config"].compression == "zstd"

    @pytest.mark.parametrize(
        "args",
        [["-d", "0"], ["-d", "ten"], ["-i", "-1"], ["-p", "nvidia"]],
    )
    def test_invalid_arguments_exit(self, config_files, mock_runner, args):
        runner_class, _ = mock_runner

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["-c", str(config_files["config"])] + args)

        assert exc_info.value.code == 1
        runner_class.assert_not_called()

    def test_missing_explicit_config_exits(self, temp_dir, mock_runner):
        with pytest.raises(SystemExit) as exc_info:
            main_cli(["-c", str(temp_dir / "absent.toml")])
        assert exc_info.value.code == 1

    def test_output_dir_that_is_a_file_exits(self, config_files, mock_runner):
        blocker = config_files["dir"] / "blocker"
        blocker.write_text("")

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["-c", str(config_files["config"]), "-o", str(blocker)])
        assert exc_info.value.code == 1

    def test_save_failure_exits(self, config_files, mock_runner):
        runner_class, _ = mock_runner
        runner_class.return_value.run.side_effect = OSError("disk full")

        with pytest.raises(SystemExit) as exc_info:
            main_cli(["-c", str(config_files["config"]), "-o", str(config_files["dir"] / "out")])
        assert exc_info.value.code == 1
