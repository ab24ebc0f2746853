"""Result types for PhishLedger report workflows."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from ..classifier.client import ClassificationVerdict
from ..constants import ReportStatus
from ..evidence.codec import EvidenceFingerprint
from ..ledger.models import TransactionReceipt


class ResultStatus(str, Enum):
    """Outcome of a service operation."""

    SUCCESS = "success"  # Everything the workflow attempted was committed
    PARTIAL = "partial"  # Some side effects committed, the chain did not finish
    FAILED = "failed"  # Nothing committed (or outcome unknown, see error kind)


@dataclass
class OperationResult:
    """Discriminated success/failure value returned by the service surface."""

    operation: str
    status: ResultStatus
    message: Optional[str] = None
    data: dict = field(default_factory=dict)
    error: Optional[dict] = None
    completed_at: Optional[datetime] = None

    def __post_init__(self):
        if not self.completed_at:
            self.completed_at = datetime.now(timezone.utc)

    @property
    def ok(self) -> bool:
        return self.status == ResultStatus.SUCCESS

    @property
    def error_kind(self) -> Optional[str]:
        return (self.error or {}).get("kind")

    def to_dict(self) -> dict:
        payload: dict = {"status": self.status.value}
        if self.message:
            payload["message"] = self.message
        payload.update(self.data)
        if self.error:
            payload["error"] = self.error
        return payload


@dataclass
class AccusationOutcome:
    """Result of the accusation workflow."""

    url: str
    accused_wallet: str
    verdict: ClassificationVerdict
    blockchain_submission: bool
    fingerprint: Optional[EvidenceFingerprint] = None
    receipt: Optional[TransactionReceipt] = None
    # Informational only; None when the lookup itself failed.
    wallet_banned: Optional[bool] = None
    domain_banned: Optional[bool] = None

    @property
    def message(self) -> str:
        if not self.blockchain_submission:
            return "Report classified as benign - no blockchain submission required"
        return "Report submitted successfully"

    def to_dict(self) -> dict:
        data: dict = {
            "message": self.message,
            "prediction": self.verdict.prediction,
            "blockchainSubmission": self.blockchain_submission,
        }
        if self.verdict.metadata:
            data["classification"] = dict(self.verdict.metadata)
        if self.receipt:
            data.update(self.receipt.to_dict())
        if self.fingerprint:
            data["evidenceHash"] = self.fingerprint.hex
            data["evidenceScheme"] = self.fingerprint.scheme.value
            data["idempotencyKey"] = self.fingerprint.idempotency_key
        if self.blockchain_submission:
            data["accusedWalletBanned"] = self.wallet_banned
            data["domainBanned"] = self.domain_banned
        return data


@dataclass
class SelfReportOutcome:
    """Result of a fully committed self-report (ledger + reward)."""

    url: str
    reporter_wallet: str
    fingerprint: EvidenceFingerprint
    ledger_receipt: TransactionReceipt
    reward_receipt: TransactionReceipt

    def to_dict(self) -> dict:
        return {
            "message": "Report submitted successfully",
            **self.ledger_receipt.to_dict(),
            "blockchainSubmission": True,
            "reward": self.reward_receipt.to_dict(),
            "evidenceHash": self.fingerprint.hex,
            "evidenceScheme": self.fingerprint.scheme.value,
            "idempotencyKey": self.fingerprint.idempotency_key,
        }


@dataclass
class StatusChangeOutcome:
    """Result of a verification/rejection."""

    index: int
    status: ReportStatus
    receipt: TransactionReceipt

    def to_dict(self) -> dict:
        return {
            "message": f"Report {self.index} marked as {self.status.label}",
            "reportId": self.index,
            "reportStatus": self.status.label,
            **self.receipt.to_dict(),
        }
