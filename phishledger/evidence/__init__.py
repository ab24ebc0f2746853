"""Evidence fingerprinting for PhishLedger."""

from .codec import EvidenceCodec, EvidenceFingerprint, EvidenceScheme

__all__ = ["EvidenceCodec", "EvidenceFingerprint", "EvidenceScheme"]
