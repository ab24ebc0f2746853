"""Error taxonomy for PhishLedger.

Every error carries a stable ``kind`` so callers can tell "nothing happened"
(input, classifier, unavailable ledger) from "something happened but the
chain did not complete" (partial failure, timeout after dispatch).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

if TYPE_CHECKING:
    from .ledger.models import TransactionReceipt


class PhishLedgerError(Exception):
    """Base exception for PhishLedger errors."""

    kind: str = "error"

    def __init__(self, message: str = ""):
        self.message = message or self.__class__.__doc__ or self.kind
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        return {"kind": self.kind, "message": self.message}


class ConfigurationError(PhishLedgerError):
    """Service not properly configured."""

    kind = "configuration_error"


class InvalidInputError(PhishLedgerError):
    """Request input is missing or malformed."""

    kind = "invalid_input"


class ClassificationUnavailableError(PhishLedgerError):
    """Classification oracle unreachable or returned an unusable response."""

    kind = "classification_unavailable"


class LedgerRejectedError(PhishLedgerError):
    """Ledger refused the call."""

    kind = "ledger_rejected"

    def __init__(self, message: str = "", tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        if self.tx_hash:
            data["txHash"] = self.tx_hash
        return data


class UnauthorizedError(PhishLedgerError):
    """Signing account lacks the ledger permission for this call."""

    kind = "unauthorized"


class NotFoundError(PhishLedgerError):
    """Report index out of range."""

    kind = "not_found"


class CorruptDataError(PhishLedgerError):
    """Ledger returned data that does not fit the report model."""

    kind = "corrupt_data"


class LedgerUnavailableError(PhishLedgerError):
    """Ledger RPC unreachable; no transaction was dispatched."""

    kind = "ledger_unavailable"


class LedgerTimeoutError(PhishLedgerError):
    """Transaction dispatched but its outcome is unknown."""

    kind = "ledger_timeout"

    def __init__(self, message: str = "", tx_hash: Optional[str] = None):
        self.tx_hash = tx_hash
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["txHash"] = self.tx_hash
        return data


class PartialFailureError(PhishLedgerError):
    """Self-report committed on the ledger but reward registration failed."""

    kind = "partial_failure"

    def __init__(
        self,
        ledger_receipt: "TransactionReceipt",
        reward_error: PhishLedgerError,
        message: str = "",
        *,
        idempotency_key: str = "",
    ):
        self.ledger_receipt = ledger_receipt
        self.reward_error = reward_error
        self.idempotency_key = idempotency_key
        super().__init__(
            message
            or f"Report recorded on ledger (tx {ledger_receipt.tx_hash}) "
            f"but reward registration failed: {reward_error.message}"
        )

    def to_dict(self) -> dict[str, Any]:
        data = super().to_dict()
        data["ledger"] = {"committed": True, **self.ledger_receipt.to_dict()}
        data["reward"] = {"committed": False, "error": self.reward_error.to_dict()}
        if self.idempotency_key:
            data["idempotencyKey"] = self.idempotency_key
        return data
