"""Terminal output."""

from .report import build_allocation_table, build_report_panel

__all__ = ["build_allocation_table", "build_report_panel"]
