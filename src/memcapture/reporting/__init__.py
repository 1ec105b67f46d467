"""
Report assembly for captured memory statistics.
"""

from .report_generator import ReportGenerator

__all__ = ["ReportGenerator"]
