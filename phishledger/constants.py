"""Centralized constants for PhishLedger.

Enums and fixed values shared by the ledger gateways, the orchestrator and
the status projector.
"""

from enum import IntEnum

from .errors import CorruptDataError

# Accused-wallet sentinel for self-reports ("no specific accused party").
ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

EVIDENCE_HASH_BYTES = 32

DEFAULT_CLASSIFIER_URL = "http://localhost:5000/predict"
DEFAULT_BENIGN_LABELS = frozenset({"benign"})

# Gas budgets used by the original service.
DEFAULT_SUBMIT_GAS = 300_000
DEFAULT_REWARD_GAS = 300_000
DEFAULT_STATUS_GAS = 100_000


class ReportStatus(IntEnum):
    """On-ledger report status. Ordinals match the contract enum."""

    REPORTED = 0
    VERIFIED = 1
    REJECTED = 2

    @classmethod
    def from_ordinal(cls, value: object) -> "ReportStatus":
        """Map a raw ledger ordinal to its status; unknown ordinals are corrupt data."""
        if isinstance(value, bool):
            raise CorruptDataError(f"Unrecognized report status ordinal: {value!r}")
        try:
            ordinal = int(value)  # type: ignore[arg-type]
        except (TypeError, ValueError):
            raise CorruptDataError(f"Unrecognized report status ordinal: {value!r}") from None
        label = STATUS_LABELS.get(ordinal)
        if label is None:
            raise CorruptDataError(f"Unrecognized report status ordinal: {ordinal}")
        return cls(ordinal)

    @property
    def label(self) -> str:
        return STATUS_LABELS[self.value]

    def __str__(self) -> str:
        return self.label


# Fixed projection table; labels are part of the public wire format.
STATUS_LABELS = {
    0: "Reported",
    1: "Verified",
    2: "Rejected",
}
