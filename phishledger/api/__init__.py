"""HTTP surface for PhishLedger."""

from .server import ApiServer, http_status_for

__all__ = ["ApiServer", "http_status_for"]
