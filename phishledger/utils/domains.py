"""URL normalization utilities."""

from __future__ import annotations

from urllib.parse import urlparse

from web3 import Web3

from ..errors import InvalidInputError

ALLOWED_SCHEMES = ("http", "https")
MAX_URL_LENGTH = 2048


def normalize_report_url(value: object) -> str:
    """
    Validate a submitted URL and return it stripped of surrounding whitespace.

    The returned string is what gets fingerprinted and recorded, so the same
    input always maps to the same evidence.
    """
    if not isinstance(value, str):
        raise InvalidInputError("url is required")
    url = value.strip()
    if not url:
        raise InvalidInputError("url is required")
    if len(url) > MAX_URL_LENGTH:
        raise InvalidInputError(f"url exceeds {MAX_URL_LENGTH} characters")
    if any(ch.isspace() for ch in url):
        raise InvalidInputError(f"Malformed URL: {url!r}")

    try:
        parsed = urlparse(url)
        parsed.port  # raises ValueError on a non-numeric port
    except ValueError as exc:
        raise InvalidInputError(f"Malformed URL: {url!r} ({exc})") from None

    if parsed.scheme.lower() not in ALLOWED_SCHEMES:
        raise InvalidInputError(f"Malformed URL (expected http/https): {url!r}")
    if not parsed.hostname:
        raise InvalidInputError(f"Malformed URL (missing host): {url!r}")
    return url


def normalize_wallet(value: object, *, field_name: str = "wallet") -> str:
    """Validate an EVM address and return its checksummed form."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{field_name} is required")
    address = value.strip()
    if not Web3.is_address(address):
        raise InvalidInputError(f"{field_name} is not a valid address: {address!r}")
    return Web3.to_checksum_address(address)
