"""
Command-line interface for the memcapture package.

This module provides the main CLI entry point for the capture application.
"""

from .main import main_cli

__all__ = [
    "main_cli",
]
