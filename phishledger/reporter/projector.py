"""Read-side projection of ledger reports into display records."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, AsyncIterator, List, Optional

from ..constants import ReportStatus
from ..errors import InvalidInputError

if TYPE_CHECKING:
    from ..ledger.gateway import LedgerGateway
    from ..ledger.models import Report

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProjectedReport:
    """A report as shown to API clients: status as a label, hash as hex."""

    id: int
    domain: str
    accused_wallet: str
    reporter: str
    evidence_hash: str
    timestamp: int
    status: ReportStatus

    @classmethod
    def from_report(cls, report: "Report") -> "ProjectedReport":
        return cls(
            id=report.index,
            domain=report.domain,
            accused_wallet=report.accused_wallet,
            reporter=report.reporter,
            evidence_hash="0x" + report.evidence_hash.hex(),
            timestamp=report.timestamp,
            # Unknown ordinals raise CorruptDataError here
            status=report.status,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "domain": self.domain,
            "accusedWallet": self.accused_wallet,
            "reporter": self.reporter,
            "evidenceHash": self.evidence_hash,
            "timestamp": self.timestamp,
            "status": self.status.label,
        }


@dataclass
class ReportListing:
    total_reports: int
    reports: List[ProjectedReport] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "totalReports": self.total_reports,
            "reports": [report.to_dict() for report in self.reports],
        }


class StatusProjector:
    """
    Enumerates ledger reports in index order.

    The report count is read once per enumeration, so reports appended while
    a listing is in progress are picked up by the next listing, not this one.
    """

    def __init__(self, ledger: "LedgerGateway"):
        self.ledger = ledger

    async def get_report(self, index: int) -> ProjectedReport:
        report = await self.ledger.get_report(index)
        return ProjectedReport.from_report(report)

    async def iter_reports(
        self, start: int = 0, *, total: Optional[int] = None
    ) -> AsyncIterator[ProjectedReport]:
        """
        Lazily yield reports from ``start`` up to the count at call time.

        Stopping early is safe; resume by passing the next index as ``start``.
        """
        if isinstance(start, bool) or not isinstance(start, int) or start < 0:
            raise InvalidInputError(f"start must be a non-negative integer, got {start!r}")
        if total is None:
            total = await self.ledger.get_total_reports()
        for index in range(start, total):
            report = await self.ledger.get_report(index, total=total)
            yield ProjectedReport.from_report(report)

    async def list_reports(self) -> ReportListing:
        total = await self.ledger.get_total_reports()
        logger.debug("Projecting %s reports", total)
        reports = [report async for report in self.iter_reports(total=total)]
        return ReportListing(total_reports=total, reports=reports)
