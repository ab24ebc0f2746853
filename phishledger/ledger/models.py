"""Typed models for records and receipts coming back from the contracts."""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from ..constants import EVIDENCE_HASH_BYTES, ReportStatus
from ..errors import CorruptDataError

REPORT_FIELDS = ("domain", "accusedWallet", "reporter", "evidenceHash", "timestamp", "status")


def _to_hex(value: Any) -> str:
    if isinstance(value, str):
        return value if value.startswith("0x") else "0x" + value
    if isinstance(value, (bytes, bytearray)):
        return "0x" + bytes(value).hex()
    raise CorruptDataError(f"Unexpected transaction hash type: {type(value).__name__}")


def _require_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise CorruptDataError(f"Report field '{name}' must be an integer, got {value!r}")
    return value


def _require_str(name: str, value: Any) -> str:
    if not isinstance(value, str):
        raise CorruptDataError(f"Report field '{name}' must be a string, got {type(value).__name__}")
    return value


def _require_hash(value: Any) -> bytes:
    if isinstance(value, str):
        text = value[2:] if value.startswith("0x") else value
        try:
            value = bytes.fromhex(text)
        except ValueError:
            raise CorruptDataError(f"Report evidenceHash is not hex: {value!r}") from None
    if not isinstance(value, (bytes, bytearray)) or len(value) != EVIDENCE_HASH_BYTES:
        raise CorruptDataError(f"Report evidenceHash must be {EVIDENCE_HASH_BYTES} bytes")
    return bytes(value)


@dataclass(frozen=True)
class TransactionReceipt:
    """Proof that a mutating contract call was mined."""

    tx_hash: str
    block_number: int
    gas_used: int

    @classmethod
    def from_web3(cls, receipt: Mapping[str, Any]) -> "TransactionReceipt":
        try:
            return cls(
                tx_hash=_to_hex(receipt["transactionHash"]),
                block_number=int(receipt["blockNumber"]),
                gas_used=int(receipt["gasUsed"]),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise CorruptDataError(f"Malformed transaction receipt: {exc}") from None

    def to_dict(self) -> dict:
        # Stringified like the original API so large values survive JSON clients.
        return {
            "txHash": self.tx_hash,
            "blockNumber": str(self.block_number),
            "gasUsed": str(self.gas_used),
        }


@dataclass(frozen=True)
class Report:
    """A report record as stored on the ledger."""

    index: int
    domain: str
    accused_wallet: str
    reporter: str
    evidence_hash: bytes
    timestamp: int
    status_code: int

    @property
    def status(self) -> ReportStatus:
        """Status enum; raises CorruptDataError for an unknown ordinal."""
        return ReportStatus.from_ordinal(self.status_code)

    @classmethod
    def from_ledger(cls, index: int, raw: Any) -> "Report":
        """
        Validate a raw ``getReport`` result.

        Accepts the flat 6-value output, a single struct tuple wrapping those
        values, or a mapping keyed by the contract's field names.
        """
        if isinstance(raw, Mapping):
            try:
                values = [raw[name] for name in REPORT_FIELDS]
            except KeyError as exc:
                raise CorruptDataError(f"Report {index} is missing field {exc}") from None
        elif isinstance(raw, Sequence) and not isinstance(raw, (str, bytes)):
            values = list(raw)
            if len(values) == 1 and isinstance(values[0], Sequence) and not isinstance(values[0], (str, bytes)):
                values = list(values[0])
            if len(values) != len(REPORT_FIELDS):
                raise CorruptDataError(
                    f"Report {index} has {len(values)} fields, expected {len(REPORT_FIELDS)}"
                )
        else:
            raise CorruptDataError(f"Report {index} has unexpected shape: {type(raw).__name__}")

        domain, accused, reporter, evidence, timestamp, status = values
        return cls(
            index=index,
            domain=_require_str("domain", domain),
            accused_wallet=_require_str("accusedWallet", accused),
            reporter=_require_str("reporter", reporter),
            evidence_hash=_require_hash(evidence),
            timestamp=_require_int("timestamp", timestamp),
            status_code=_require_int("status", status),
        )
