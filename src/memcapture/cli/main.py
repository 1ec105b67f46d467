"""
Command-line interface for the MemCapture memory telemetry collector.

This module provides the main CLI entry point: it loads configuration,
applies command-line overrides, validates them, and runs one capture
whose report is written to the output directory.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import psutil

from ..config import get_config, set_config_path, validate_monitor_config
from ..config.storage_config import SUPPORTED_FORMATS, StorageConfig
from ..models.platform import Platform, get_platform_profile
from ..orchestration import CaptureRunner, SignalHandler
from ..validation import (
    ValidationError,
    handle_cli_error,
    validate_enum_choice,
    validate_output_directory,
    validate_positive_float,
    validate_positive_integer,
)

# --- Logging Setup ---
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)-5.5s] %(name)s:%(filename)s:%(lineno)d\t %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
    stream=sys.stdout,
)
logger = logging.getLogger(__name__)

# nice(2) increment applied before collection starts
CAPTURE_NICENESS = 10


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="memcapture",
        description="Capture memory usage of a set-top box over a time window.",
    )
    parser.add_argument(
        "-d",
        "--duration",
        type=str,
        help="Length of the capture in seconds. Defaults to the config value (30).",
    )
    parser.add_argument(
        "-p",
        "--platform",
        type=str,
        help=f"Device platform. Available: {[p.value for p in Platform]}",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        type=str,
        help="Directory to write the report to. Defaults to 'MemCaptureReport'.",
    )
    parser.add_argument(
        "-i",
        "--interval",
        type=str,
        help="Seconds between collection passes. Defaults to the config value (3).",
    )
    parser.add_argument(
        "-c",
        "--config",
        type=str,
        help="Path to a config.toml file.",
    )
    parser.add_argument(
        "--format",
        type=str,
        choices=sorted(SUPPORTED_FORMATS),
        help="Report storage format. 'parquet' also writes one table per dataset.",
    )
    return parser


def _lower_priority() -> None:
    try:
        psutil.Process().nice(CAPTURE_NICENESS)
    except (psutil.Error, OSError) as e:
        logger.warning(f"Failed to lower process priority: {e}")


def main_cli(argv: Optional[List[str]] = None) -> int:
    """
    Main command-line interface for MemCapture.

    Returns:
        Process exit code (0 on success)

    Raises:
        SystemExit: On configuration errors or invalid arguments.
    """
    args = build_parser().parse_args(argv)

    if args.config:
        set_config_path(Path(args.config))

    # Load application configuration; without an explicit --config a
    # missing default file means built-in defaults.
    try:
        monitor_config = get_config().monitor
    except FileNotFoundError as e:
        if args.config:
            handle_cli_error(
                error=e,
                context="configuration loading",
                exit_code=1,
                logger=logger,
            )
        logger.info("No configuration file found, using built-in defaults")
        monitor_config = validate_monitor_config({})
    except Exception as e:
        handle_cli_error(
            error=e,
            context="configuration loading",
            exit_code=1,
            logger=logger,
        )

    logging.getLogger().setLevel(monitor_config.log_level)

    try:
        duration = monitor_config.duration_seconds
        if args.duration is not None:
            duration = validate_positive_integer(
                args.duration,
                min_value=1,
                max_value=7 * 24 * 3600,
                field_name="--duration argument",
            )

        interval = monitor_config.interval_seconds
        if args.interval is not None:
            interval = validate_positive_float(
                args.interval,
                min_value=0.1,
                max_value=3600.0,
                field_name="--interval argument",
            )

        platform_name = monitor_config.platform
        if args.platform is not None:
            platform_name = validate_enum_choice(
                args.platform,
                choices=[p.value for p in Platform],
                field_name="--platform argument",
                case_sensitive=False,
            )

        storage_config = monitor_config.storage
        if args.format is not None:
            storage_config = StorageConfig(
                format=args.format, compression=storage_config.compression
            )
    except ValidationError as e:
        handle_cli_error(
            error=e,
            context="argument validation",
            exit_code=1,
            logger=logger,
        )

    profile = get_platform_profile(platform_name)

    _lower_priority()

    try:
        output_dir = validate_output_directory(
            args.output_dir or monitor_config.output_dir,
            field_name="--output-dir",
        )
    except ValidationError as e:
        handle_cli_error(
            error=e,
            context="output directory creation",
            exit_code=1,
            logger=logger,
        )

    runner = CaptureRunner(
        profile=profile,
        duration=duration,
        interval=interval,
        output_dir=output_dir,
        storage_config=storage_config,
        stop_timeout=monitor_config.stop_timeout,
    )

    try:
        with SignalHandler(runner.cancel_token):
            runner.run()
    except OSError as e:
        handle_cli_error(
            error=e,
            context="saving report",
            exit_code=1,
            logger=logger,
        )

    if runner.early_termination:
        logger.info("Capture was terminated early by a signal; partial report saved.")
    else:
        logger.info("Capture completed.")
    return 0


if __name__ == "__main__":
    sys.exit(main_cli())
