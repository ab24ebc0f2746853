"""Contract ABI fragments used by the gateways.

Only the functions PhishLedger calls are listed. A full ABI exported from the
contract build can be loaded instead via ``load_abi``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

from ..errors import ConfigurationError


def _fn(name: str, inputs: list[tuple[str, str]], outputs: list[tuple[str, str]], mutability: str) -> dict:
    return {
        "type": "function",
        "name": name,
        "inputs": [{"name": n, "type": t} for n, t in inputs],
        "outputs": [{"name": n, "type": t} for n, t in outputs],
        "stateMutability": mutability,
    }


REPORT_LEDGER_ABI: list[dict] = [
    _fn(
        "submitReport",
        [("domain", "string"), ("accusedWallet", "address"), ("evidenceHash", "bytes32"), ("isAccusation", "bool")],
        [],
        "nonpayable",
    ),
    _fn(
        "getReport",
        [("reportId", "uint256")],
        [
            ("domain", "string"),
            ("accusedWallet", "address"),
            ("reporter", "address"),
            ("evidenceHash", "bytes32"),
            ("timestamp", "uint256"),
            ("status", "uint8"),
        ],
        "view",
    ),
    _fn("totalReports", [], [("", "uint256")], "view"),
    _fn("setReportStatus", [("reportId", "uint256"), ("status", "uint8")], [], "nonpayable"),
    _fn("isWalletBanned", [("wallet", "address")], [("", "bool")], "view"),
    _fn("isUrlBanned", [("url", "string")], [("", "bool")], "view"),
    _fn("owner", [], [("", "address")], "view"),
]

REWARDS_ABI: list[dict] = [
    _fn("registerReport", [("reporter", "address"), ("evidenceHash", "bytes32")], [], "nonpayable"),
]


def load_abi(path: Optional[Path], default: list[dict]) -> list[dict]:
    """Load an ABI JSON file (plain list or a build artifact with an "abi" key)."""
    if path is None:
        return default
    path = Path(path)
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise ConfigurationError(f"Could not load ABI from {path}: {exc}") from exc
    if isinstance(data, dict):
        data = data.get("abi")
    if not isinstance(data, list):
        raise ConfigurationError(f"ABI file {path} does not contain a function list")
    return data
