"""Tests for the service surface result values."""

from __future__ import annotations

import pytest

from phishledger.constants import ReportStatus
from phishledger.errors import (
    InvalidInputError,
    LedgerRejectedError,
    LedgerTimeoutError,
    PartialFailureError,
)
from phishledger.ledger.models import TransactionReceipt
from phishledger.reporter import OperationResult, ReportService, ResultStatus, StatusChangeOutcome

RECEIPT = TransactionReceipt(tx_hash="0x" + "aa" * 32, block_number=12, gas_used=30_000)


class _FakeOrchestrator:
    def __init__(self, *, error: BaseException | None = None):
        self.error = error
        self.calls: list[tuple] = []

    async def _outcome(self, name, *args):
        self.calls.append((name, *args))
        if self.error:
            raise self.error
        return StatusChangeOutcome(index=1, status=ReportStatus.VERIFIED, receipt=RECEIPT)

    async def submit_accusation_report(self, url, accused_wallet):
        return await self._outcome("accuse", url, accused_wallet)

    async def submit_self_report(self, url, reporter_wallet):
        return await self._outcome("self", url, reporter_wallet)

    async def verify_report(self, index):
        return await self._outcome("verify", index)

    async def reject_report(self, index):
        return await self._outcome("reject", index)


class _FakeProjector:
    async def list_reports(self):
        raise RuntimeError("boom")


def _service(**kwargs) -> ReportService:
    return ReportService(_FakeOrchestrator(**kwargs), _FakeProjector())


@pytest.mark.asyncio
async def test_success_result_carries_outcome_data():
    result = await _service().verify_report(1)

    assert isinstance(result, OperationResult)
    assert result.ok
    assert result.message == "Report 1 marked as Verified"
    assert result.to_dict() == {
        "status": "success",
        "message": "Report 1 marked as Verified",
        "reportId": 1,
        "reportStatus": "Verified",
        "txHash": RECEIPT.tx_hash,
        "blockNumber": "12",
        "gasUsed": "30000",
    }


@pytest.mark.asyncio
async def test_typed_error_becomes_failed_result():
    result = await _service(error=InvalidInputError("url is required")).submit_accusation_report("", "")

    assert result.status == ResultStatus.FAILED
    assert result.error_kind == "invalid_input"
    assert result.to_dict()["error"] == {"kind": "invalid_input", "message": "url is required"}


@pytest.mark.asyncio
async def test_timeout_result_keeps_tx_hash():
    result = await _service(error=LedgerTimeoutError("no receipt", tx_hash="0xbeef")).reject_report(0)

    assert result.error_kind == "ledger_timeout"
    assert result.error["txHash"] == "0xbeef"


@pytest.mark.asyncio
async def test_partial_failure_becomes_partial_result():
    error = PartialFailureError(RECEIPT, LedgerRejectedError("reward reverted"), idempotency_key="padded_ascii:0x01")
    result = await _service(error=error).submit_self_report("http://bad.io", "0x0")

    assert result.status == ResultStatus.PARTIAL
    assert not result.ok
    payload = result.to_dict()
    assert payload["status"] == "partial"
    assert payload["txHash"] == RECEIPT.tx_hash
    assert payload["error"]["ledger"]["committed"] is True
    assert payload["error"]["reward"]["error"]["kind"] == "ledger_rejected"


@pytest.mark.asyncio
async def test_unexpected_exception_is_internal_error():
    result = await _service().list_reports()

    assert result.status == ResultStatus.FAILED
    assert result.error_kind == "internal_error"
    assert "boom" in result.message
