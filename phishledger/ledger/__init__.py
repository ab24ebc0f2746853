"""Ledger and reward contract gateways."""

from .base import ContractGateway, TransactionSigner, classify_revert
from .gateway import LedgerGateway
from .models import Report, TransactionReceipt
from .rewards import RewardGateway

__all__ = [
    "ContractGateway",
    "LedgerGateway",
    "Report",
    "RewardGateway",
    "TransactionReceipt",
    "TransactionSigner",
    "classify_revert",
]
