"""Base classes for contract gateways in PhishLedger."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

import aiohttp
from eth_account import Account
from web3.exceptions import ContractLogicError, TimeExhausted, Web3Exception

from ..errors import (
    ConfigurationError,
    LedgerRejectedError,
    LedgerTimeoutError,
    LedgerUnavailableError,
    NotFoundError,
    PhishLedgerError,
    UnauthorizedError,
)
from .models import TransactionReceipt

logger = logging.getLogger(__name__)

_TRANSPORT_ERRORS = (aiohttp.ClientError, asyncio.TimeoutError, OSError)

# Revert reasons are matched case-insensitively. 0x118cdaa7 is the selector of
# OpenZeppelin's OwnableUnauthorizedAccount custom error.
_UNAUTHORIZED_MARKERS = (
    "not the owner",
    "onlyowner",
    "only owner",
    "unauthorized",
    "not authorized",
    "caller is not",
    "accesscontrol",
    "0x118cdaa7",
)
_NOT_FOUND_MARKERS = (
    "not found",
    "does not exist",
    "invalid report",
    "out of range",
    "out of bounds",
    "panic error 0x32",
)


def classify_revert(reason: str, *, tx_hash: Optional[str] = None) -> PhishLedgerError:
    """Map a contract revert reason onto the error taxonomy."""
    lower = (reason or "").lower()
    if any(marker in lower for marker in _UNAUTHORIZED_MARKERS):
        return UnauthorizedError(f"Ledger refused the signing account: {reason}")
    if any(marker in lower for marker in _NOT_FOUND_MARKERS):
        return NotFoundError(f"Ledger reported a missing record: {reason}")
    return LedgerRejectedError(f"Ledger rejected the call: {reason}", tx_hash=tx_hash)


class TransactionSigner:
    """
    Local account that signs every mutating call.

    Shared by the ledger and reward gateways so nonce allocation and dispatch
    are serialized for the one account.
    """

    def __init__(self, private_key: str, chain_id: Optional[int] = None):
        if not private_key:
            raise ConfigurationError("PRIVATE_KEY is required to sign ledger transactions")
        try:
            self.account = Account.from_key(private_key)
        except (ValueError, TypeError) as exc:
            raise ConfigurationError(f"PRIVATE_KEY is not a valid key: {exc}") from None
        self.chain_id = chain_id
        self.lock = asyncio.Lock()

    @property
    def address(self) -> str:
        return self.account.address


class ContractGateway:
    """
    Base class for gateways backed by one web3 contract.

    Provides:
    - Read calls with transport/revert errors mapped to the taxonomy
    - Signed transactions with an explicit gas budget and a preflight call
    - Receipt waiting with a bounded timeout

    Nothing is retried. Once a signed transaction may have reached the node,
    a lost answer surfaces as LedgerTimeoutError carrying the tx hash.
    """

    name: str = "contract"

    def __init__(
        self,
        web3: Any,
        contract: Any,
        signer: Optional[TransactionSigner] = None,
        *,
        receipt_timeout: float = 120.0,
    ):
        self.web3 = web3
        self.contract = contract
        self.signer = signer
        self.receipt_timeout = receipt_timeout

    async def _call(self, fn_name: str, *args: Any) -> Any:
        """Run a read-only contract call."""
        try:
            return await getattr(self.contract.functions, fn_name)(*args).call()
        except ContractLogicError as exc:
            raise classify_revert(str(exc)) from exc
        except Web3Exception as exc:
            raise LedgerRejectedError(f"{self.name}.{fn_name} failed: {exc}") from exc
        except _TRANSPORT_ERRORS as exc:
            raise LedgerUnavailableError(f"{self.name} RPC unreachable during {fn_name}: {exc}") from exc

    async def _transact(self, fn_name: str, *args: Any, gas: int) -> TransactionReceipt:
        """Sign, send and await a mutating contract call."""
        if self.signer is None:
            raise ConfigurationError(f"{self.name} gateway has no signing account")

        sender = self.signer.address

        async with self.signer.lock:
            try:
                fn = getattr(self.contract.functions, fn_name)(*args)
                # Preflight surfaces revert reasons before anything is dispatched.
                await fn.call({"from": sender})
                nonce = await self.web3.eth.get_transaction_count(sender, "pending")
                params: dict[str, Any] = {"from": sender, "gas": gas, "nonce": nonce}
                if self.signer.chain_id:
                    params["chainId"] = self.signer.chain_id
                tx = await fn.build_transaction(params)
                signed = self.signer.account.sign_transaction(tx)
            except ContractLogicError as exc:
                raise classify_revert(str(exc)) from exc
            except Web3Exception as exc:
                raise LedgerRejectedError(f"{self.name}.{fn_name} rejected: {exc}") from exc
            except _TRANSPORT_ERRORS as exc:
                raise LedgerUnavailableError(
                    f"{self.name} RPC unreachable before dispatching {fn_name}: {exc}"
                ) from exc
            except (TypeError, ValueError) as exc:
                raise LedgerRejectedError(f"{self.name}.{fn_name} could not be signed: {exc}") from exc

            tx_hash = "0x" + bytes(signed.hash).hex()
            try:
                await self.web3.eth.send_raw_transaction(signed.raw_transaction)
            except ContractLogicError as exc:
                raise classify_revert(str(exc), tx_hash=tx_hash) from exc
            except Web3Exception as exc:
                raise LedgerRejectedError(
                    f"{self.name}.{fn_name} rejected by node: {exc}", tx_hash=tx_hash
                ) from exc
            except _TRANSPORT_ERRORS as exc:
                raise LedgerTimeoutError(
                    f"Lost connection while sending {fn_name}; transaction {tx_hash} may be pending: {exc}",
                    tx_hash=tx_hash,
                ) from exc

        logger.info("%s.%s dispatched: %s (gas budget %s)", self.name, fn_name, tx_hash, gas)

        try:
            receipt = await self.web3.eth.wait_for_transaction_receipt(
                tx_hash, timeout=self.receipt_timeout
            )
        except TimeExhausted as exc:
            raise LedgerTimeoutError(
                f"No receipt for {fn_name} after {self.receipt_timeout}s; transaction {tx_hash} may be pending",
                tx_hash=tx_hash,
            ) from exc
        except _TRANSPORT_ERRORS as exc:
            raise LedgerTimeoutError(
                f"Lost connection waiting for {fn_name} receipt; transaction {tx_hash} may be pending: {exc}",
                tx_hash=tx_hash,
            ) from exc
        except Web3Exception as exc:
            raise LedgerTimeoutError(
                f"Receipt lookup for {fn_name} failed; transaction {tx_hash} may be pending: {exc}",
                tx_hash=tx_hash,
            ) from exc

        if int(receipt.get("status", 1)) == 0:
            raise LedgerRejectedError(
                f"{self.name}.{fn_name} reverted on-chain (gas used {receipt.get('gasUsed')} of {gas})",
                tx_hash=tx_hash,
            )

        result = TransactionReceipt.from_web3(receipt)
        logger.info(
            "%s.%s confirmed: tx=%s block=%s gas_used=%s",
            self.name,
            fn_name,
            result.tx_hash,
            result.block_number,
            result.gas_used,
        )
        return result
