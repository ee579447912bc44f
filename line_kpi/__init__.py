"""Line KPI - plan vs actual production tracking backed by Google Sheets.

This package reads hourly KPI blocks for a manufacturing line out of a Google
Sheets spreadsheet, compares them against plan and serves the result as JSON.
"""

__version__ = "0.1.0"

from .kpi.checker import KpiChecker
from .sheets.client import GoogleSheetsClient


__all__ = [
    "GoogleSheetsClient",
    "KpiChecker",
]
