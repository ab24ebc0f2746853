"""Evidence fingerprints recorded on the ledger.

Two schemes are published to verifiers:

- ``keccak``: Keccak-256 of the URL's UTF-8 bytes (accusation reports).
- ``padded_ascii``: the URL's ASCII bytes right-padded with zeros to 32
  bytes (self-reports). URLs longer than 32 bytes cannot be represented.

Anyone holding the URL and the scheme name can recompute the fingerprint
off-ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from web3 import Web3

from ..constants import EVIDENCE_HASH_BYTES
from ..errors import InvalidInputError
from ..utils.domains import normalize_report_url


class EvidenceScheme(str, Enum):
    """Named fingerprint schemes."""

    KECCAK = "keccak"
    PADDED_ASCII = "padded_ascii"


@dataclass(frozen=True)
class EvidenceFingerprint:
    """A fixed-width fingerprint plus the scheme that produced it."""

    scheme: EvidenceScheme
    value: bytes

    def __post_init__(self):
        if len(self.value) != EVIDENCE_HASH_BYTES:
            raise ValueError(
                f"Evidence fingerprint must be {EVIDENCE_HASH_BYTES} bytes, got {len(self.value)}"
            )

    @property
    def hex(self) -> str:
        return "0x" + self.value.hex()

    @property
    def idempotency_key(self) -> str:
        """Key callers use to guard retries against double-reporting."""
        return f"{self.scheme.value}:{self.hex}"

    def to_dict(self) -> dict:
        return {"scheme": self.scheme.value, "evidenceHash": self.hex}


class EvidenceCodec:
    """Deterministic URL -> fingerprint encoding."""

    def encode(self, url: str, scheme: EvidenceScheme = EvidenceScheme.KECCAK) -> EvidenceFingerprint:
        """
        Encode a URL under the given scheme.

        Raises:
            InvalidInputError: empty/malformed URL, or a URL the scheme cannot hold.
        """
        normalized = normalize_report_url(url)
        scheme = EvidenceScheme(scheme)

        if scheme == EvidenceScheme.KECCAK:
            return EvidenceFingerprint(scheme, bytes(Web3.keccak(text=normalized)))

        try:
            raw = normalized.encode("ascii")
        except UnicodeEncodeError:
            raise InvalidInputError(
                f"URL must be ASCII for the {scheme.value} scheme: {normalized!r}"
            ) from None
        if len(raw) > EVIDENCE_HASH_BYTES:
            raise InvalidInputError(
                f"URL is {len(raw)} bytes; the {scheme.value} scheme holds at most "
                f"{EVIDENCE_HASH_BYTES}"
            )
        return EvidenceFingerprint(scheme, raw.ljust(EVIDENCE_HASH_BYTES, b"\x00"))

    def encode_accusation(self, url: str) -> EvidenceFingerprint:
        return self.encode(url, EvidenceScheme.KECCAK)

    def encode_self_report(self, url: str) -> EvidenceFingerprint:
        return self.encode(url, EvidenceScheme.PADDED_ASCII)
