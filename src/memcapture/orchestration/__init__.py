"""
Capture orchestration.

This module coordinates metrics over a capture window and handles
signals that end a capture early.
"""

from .capture_runner import CaptureRunner
from .signal_handler import SignalHandler

__all__ = ["CaptureRunner", "SignalHandler"]
