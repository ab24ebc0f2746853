"""Service surface that turns workflow outcomes into result values."""

from __future__ import annotations

import logging
from typing import Any, Awaitable

from ..errors import PartialFailureError, PhishLedgerError
from .base import OperationResult, ResultStatus
from .orchestrator import ReportOrchestrator
from .projector import StatusProjector

logger = logging.getLogger(__name__)

# Errors the caller caused; anything else is logged at error level.
_CLIENT_ERROR_KINDS = {"invalid_input", "not_found", "unauthorized"}


class ReportService:
    """
    Entry point used by the HTTP layer.

    Every method returns an OperationResult and never raises for a failure
    the taxonomy knows about; unexpected exceptions become ``internal_error``.
    """

    def __init__(self, orchestrator: ReportOrchestrator, projector: StatusProjector):
        self.orchestrator = orchestrator
        self.projector = projector

    async def submit_accusation_report(self, url: Any, accused_wallet: Any) -> OperationResult:
        return await self._run(
            "submit_accusation_report",
            self.orchestrator.submit_accusation_report(url, accused_wallet),
        )

    async def submit_self_report(self, url: Any, reporter_wallet: Any) -> OperationResult:
        return await self._run(
            "submit_self_report",
            self.orchestrator.submit_self_report(url, reporter_wallet),
        )

    async def verify_report(self, index: Any) -> OperationResult:
        return await self._run("verify_report", self.orchestrator.verify_report(index))

    async def reject_report(self, index: Any) -> OperationResult:
        return await self._run("reject_report", self.orchestrator.reject_report(index))

    async def list_reports(self) -> OperationResult:
        return await self._run("list_reports", self.projector.list_reports())

    async def _run(self, operation: str, work: Awaitable[Any]) -> OperationResult:
        try:
            outcome = await work
        except PartialFailureError as exc:
            logger.warning("%s partially committed: %s", operation, exc.message)
            return OperationResult(
                operation=operation,
                status=ResultStatus.PARTIAL,
                message=exc.message,
                data={"blockchainSubmission": True, **exc.ledger_receipt.to_dict()},
                error=exc.to_dict(),
            )
        except PhishLedgerError as exc:
            if exc.kind in _CLIENT_ERROR_KINDS:
                logger.info("%s refused (%s): %s", operation, exc.kind, exc.message)
            else:
                logger.error("%s failed (%s): %s", operation, exc.kind, exc.message)
            return OperationResult(
                operation=operation,
                status=ResultStatus.FAILED,
                message=exc.message,
                error=exc.to_dict(),
            )
        except Exception as exc:
            logger.exception("Unexpected error in %s", operation)
            return OperationResult(
                operation=operation,
                status=ResultStatus.FAILED,
                message=f"Unexpected error: {exc}",
                error={"kind": "internal_error", "message": str(exc)},
            )

        data = outcome.to_dict()
        message = data.pop("message", None)
        return OperationResult(
            operation=operation,
            status=ResultStatus.SUCCESS,
            message=message,
            data=data,
        )
