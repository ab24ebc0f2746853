"""Gateway to the on-chain report ledger."""

from __future__ import annotations

import logging
from typing import Any, Optional

from web3 import Web3

from ..constants import DEFAULT_STATUS_GAS, DEFAULT_SUBMIT_GAS, ReportStatus
from ..errors import CorruptDataError, LedgerRejectedError, NotFoundError, UnauthorizedError
from .base import ContractGateway, TransactionSigner
from .models import Report, TransactionReceipt

logger = logging.getLogger(__name__)


class LedgerGateway(ContractGateway):
    """
    Append-only report ledger.

    Reports are created with status Reported and only ever change through
    ``set_status``; nothing here deletes or rewrites a record.
    """

    name = "ledger"

    def __init__(
        self,
        web3: Any,
        contract: Any,
        signer: Optional[TransactionSigner] = None,
        *,
        submit_gas: int = DEFAULT_SUBMIT_GAS,
        status_gas: int = DEFAULT_STATUS_GAS,
        receipt_timeout: float = 120.0,
    ):
        super().__init__(web3, contract, signer, receipt_timeout=receipt_timeout)
        self.submit_gas = submit_gas
        self.status_gas = status_gas
        self._authority: Optional[str] = None

    async def submit_report(
        self,
        domain: str,
        accused_wallet: str,
        evidence_hash: bytes,
        is_accusation: bool,
    ) -> TransactionReceipt:
        """Append a new report; never retried (a resubmission would double-report)."""
        return await self._transact(
            "submitReport",
            domain,
            Web3.to_checksum_address(accused_wallet),
            bytes(evidence_hash),
            bool(is_accusation),
            gas=self.submit_gas,
        )

    async def get_total_reports(self) -> int:
        total = await self._call("totalReports")
        if isinstance(total, bool) or not isinstance(total, int) or total < 0:
            raise CorruptDataError(f"Ledger returned an invalid report count: {total!r}")
        return total

    async def get_report(self, index: int, *, total: Optional[int] = None) -> Report:
        """
        Fetch one report.

        ``total`` lets callers that already read the count skip a round trip.
        """
        if total is None:
            total = await self.get_total_reports()
        if index < 0 or index >= total:
            raise NotFoundError(f"Report {index} does not exist (total reports: {total})")
        raw = await self._call("getReport", index)
        return Report.from_ledger(index, raw)

    async def get_authority(self) -> Optional[str]:
        """Return the contract owner, or None when the contract exposes no owner()."""
        if self._authority is None:
            try:
                owner = await self._call("owner")
            except LedgerRejectedError as exc:
                logger.debug("Ledger has no owner() accessor; relying on revert checks: %s", exc)
                return None
            self._authority = Web3.to_checksum_address(owner)
        return self._authority

    async def set_status(self, index: int, status: ReportStatus) -> TransactionReceipt:
        """Move a report to a new status (authority only)."""
        status = ReportStatus(status)
        total = await self.get_total_reports()
        if index < 0 or index >= total:
            raise NotFoundError(f"Report {index} does not exist (total reports: {total})")

        authority = await self.get_authority()
        if authority and self.signer and authority != self.signer.address:
            raise UnauthorizedError(
                f"Signing account {self.signer.address} is not the ledger authority ({authority})"
            )

        return await self._transact("setReportStatus", index, int(status), gas=self.status_gas)

    async def is_wallet_banned(self, wallet: str) -> bool:
        return bool(await self._call("isWalletBanned", Web3.to_checksum_address(wallet)))

    async def is_domain_banned(self, domain: str) -> bool:
        return bool(await self._call("isUrlBanned", domain))
