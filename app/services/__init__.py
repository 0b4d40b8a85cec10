"""
app/services package marker.
"""

from app.services.metrics_service import (
    EmptyVisitSheetError,
    VisitMetricsService,
    get_visit_metrics_service,
)
from app.services.spreadsheet_service import SpreadsheetDecodeError, SpreadsheetDecoder

__all__ = [
    "EmptyVisitSheetError",
    "SpreadsheetDecodeError",
    "SpreadsheetDecoder",
    "VisitMetricsService",
    "get_visit_metrics_service",
]
