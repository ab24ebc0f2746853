"""Gateway to the reporter rewards contract."""

from __future__ import annotations

from typing import Any, Optional

from web3 import Web3

from ..constants import DEFAULT_REWARD_GAS
from .base import ContractGateway, TransactionSigner
from .models import TransactionReceipt


class RewardGateway(ContractGateway):
    """Registers self-reports for a reporter reward."""

    name = "rewards"

    def __init__(
        self,
        web3: Any,
        contract: Any,
        signer: Optional[TransactionSigner] = None,
        *,
        reward_gas: int = DEFAULT_REWARD_GAS,
        receipt_timeout: float = 120.0,
    ):
        super().__init__(web3, contract, signer, receipt_timeout=receipt_timeout)
        self.reward_gas = reward_gas

    async def register_report(self, reporter_wallet: str, evidence_hash: bytes) -> TransactionReceipt:
        return await self._transact(
            "registerReport",
            Web3.to_checksum_address(reporter_wallet),
            bytes(evidence_hash),
            gas=self.reward_gas,
        )
