"""Report workflows, status projection and the service surface."""

from .base import (
    AccusationOutcome,
    OperationResult,
    ResultStatus,
    SelfReportOutcome,
    StatusChangeOutcome,
)
from .orchestrator import ReportOrchestrator, coerce_report_index
from .projector import ProjectedReport, ReportListing, StatusProjector
from .service import ReportService

__all__ = [
    "AccusationOutcome",
    "OperationResult",
    "ProjectedReport",
    "ReportListing",
    "ReportOrchestrator",
    "ReportService",
    "ResultStatus",
    "SelfReportOutcome",
    "StatusChangeOutcome",
    "StatusProjector",
    "coerce_report_index",
]
