"""Report submission and verification workflows."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Awaitable, Optional, TypeVar

from ..constants import ZERO_ADDRESS, ReportStatus
from ..errors import (
    ConfigurationError,
    InvalidInputError,
    LedgerTimeoutError,
    PartialFailureError,
    PhishLedgerError,
)
from ..evidence.codec import EvidenceCodec
from ..utils.domains import normalize_report_url, normalize_wallet
from .base import AccusationOutcome, SelfReportOutcome, StatusChangeOutcome

if TYPE_CHECKING:
    from ..classifier.client import ClassificationClient
    from ..ledger.gateway import LedgerGateway
    from ..ledger.rewards import RewardGateway

logger = logging.getLogger(__name__)

T = TypeVar("T")


def coerce_report_index(value: object) -> int:
    """Accept an int or a decimal string (JSON clients send either)."""
    if isinstance(value, bool) or value is None:
        raise InvalidInputError("reportId is required")
    if isinstance(value, str):
        text = value.strip()
        if not text.isdecimal() or not text.isascii():
            raise InvalidInputError(f"reportId must be a non-negative integer, got {value!r}")
        return int(text)
    if isinstance(value, int):
        if value < 0:
            raise InvalidInputError(f"reportId must be a non-negative integer, got {value}")
        return value
    raise InvalidInputError(f"reportId must be a non-negative integer, got {value!r}")


class ReportOrchestrator:
    """
    Composes the classifier, ledger and reward gateways into workflows.

    Accusation:  classify -> (benign: stop) -> encode -> submit -> ban lookups
    Self-report: encode -> submit -> register reward (failure here is partial)
    Status:      set Verified/Rejected on an existing index

    Nothing is retried. Ledger submissions are not idempotent, so callers that
    want to retry must key on the returned idempotency key.
    """

    def __init__(
        self,
        classifier: "ClassificationClient",
        ledger: "LedgerGateway",
        rewards: Optional["RewardGateway"] = None,
        codec: Optional[EvidenceCodec] = None,
    ):
        self.classifier = classifier
        self.ledger = ledger
        self.rewards = rewards
        self.codec = codec or EvidenceCodec()

    async def submit_accusation_report(self, url: str, accused_wallet: str) -> AccusationOutcome:
        """Classify a URL and record an accusation unless the verdict is benign."""
        url = normalize_report_url(url)
        accused = normalize_wallet(accused_wallet, field_name="accusedWallet")
        logger.info("Received report request for %s (accused wallet %s)", url, accused)

        verdict = await self.classifier.classify(url)
        if verdict.is_benign:
            logger.info("Report for %s classified as benign - skipping blockchain submission", url)
            return AccusationOutcome(
                url=url,
                accused_wallet=accused,
                verdict=verdict,
                blockchain_submission=False,
            )

        fingerprint = self.codec.encode_accusation(url)
        logger.info("Evidence hash for %s: %s", url, fingerprint.hex)

        receipt = await self._dispatch(
            "submitReport",
            self.ledger.submit_report(url, accused, fingerprint.value, True),
        )

        wallet_banned = await self._ban_lookup("wallet", accused, self.ledger.is_wallet_banned(accused))
        domain_banned = await self._ban_lookup("url", url, self.ledger.is_domain_banned(url))

        return AccusationOutcome(
            url=url,
            accused_wallet=accused,
            verdict=verdict,
            blockchain_submission=True,
            fingerprint=fingerprint,
            receipt=receipt,
            wallet_banned=wallet_banned,
            domain_banned=domain_banned,
        )

    async def submit_self_report(self, url: str, reporter_wallet: str) -> SelfReportOutcome:
        """Record a self-report and register the reporter for a reward."""
        if self.rewards is None:
            raise ConfigurationError("Rewards contract is not configured; self-reports are disabled")

        url = normalize_report_url(url)
        reporter = normalize_wallet(reporter_wallet, field_name="userWallet")
        fingerprint = self.codec.encode_self_report(url)
        logger.info("Self-report from %s for %s (evidence %s)", reporter, url, fingerprint.hex)

        ledger_receipt = await self._dispatch(
            "submitReport",
            self.ledger.submit_report(url, ZERO_ADDRESS, fingerprint.value, False),
        )

        try:
            reward_receipt = await self._dispatch(
                "registerReport",
                self.rewards.register_report(reporter, fingerprint.value),
            )
        except Exception as exc:
            reward_error = exc
            if not isinstance(reward_error, PhishLedgerError):
                reward_error = LedgerTimeoutError(f"Reward registration outcome unknown: {exc}")
            logger.error(
                "Self-report %s committed in %s but reward registration failed: %s",
                fingerprint.hex,
                ledger_receipt.tx_hash,
                reward_error,
            )
            raise PartialFailureError(
                ledger_receipt,
                reward_error,
                idempotency_key=fingerprint.idempotency_key,
            ) from exc

        return SelfReportOutcome(
            url=url,
            reporter_wallet=reporter,
            fingerprint=fingerprint,
            ledger_receipt=ledger_receipt,
            reward_receipt=reward_receipt,
        )

    async def verify_report(self, index: object) -> StatusChangeOutcome:
        return await self._change_status(index, ReportStatus.VERIFIED)

    async def reject_report(self, index: object) -> StatusChangeOutcome:
        return await self._change_status(index, ReportStatus.REJECTED)

    async def _change_status(self, index: object, status: ReportStatus) -> StatusChangeOutcome:
        report_index = coerce_report_index(index)
        receipt = await self._dispatch(
            "setReportStatus",
            self.ledger.set_status(report_index, status),
        )
        logger.info("Report %s marked as %s (tx %s)", report_index, status.label, receipt.tx_hash)
        return StatusChangeOutcome(index=report_index, status=status, receipt=receipt)

    async def _ban_lookup(self, subject: str, value: str, lookup: Awaitable[bool]) -> Optional[bool]:
        """Informational ban lookup; a failure is logged and reported as unknown."""
        try:
            banned = await lookup
        except PhishLedgerError as exc:
            logger.warning("Ban lookup for %s %s failed: %s", subject, value, exc)
            return None
        logger.info("Is accused %s banned? %s: %s", subject, value, banned)
        return banned

    async def _dispatch(self, label: str, call: Awaitable[T]) -> T:
        """
        Await a mutating ledger call without letting caller cancellation
        abandon it mid-flight.

        If the caller is cancelled, the call runs to completion, its outcome
        is logged, and only then is the cancellation re-raised.
        """
        task = asyncio.ensure_future(call)
        try:
            return await asyncio.shield(task)
        except asyncio.CancelledError:
            if task.done():
                raise
            logger.warning("Cancellation requested during %s; waiting for the ledger outcome", label)
            while not task.done():
                try:
                    await asyncio.wait({task})
                except asyncio.CancelledError:
                    continue
            if task.cancelled():
                logger.warning("%s was cancelled before completion", label)
            elif task.exception() is not None:
                logger.error("%s failed after cancellation: %s", label, task.exception())
            else:
                logger.warning("%s committed after cancellation: %s", label, task.result())
            raise
