"""Configuration management for PhishLedger."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional

import yaml
from dotenv import load_dotenv
from web3 import Web3

from .constants import (
    DEFAULT_BENIGN_LABELS,
    DEFAULT_CLASSIFIER_URL,
    DEFAULT_REWARD_GAS,
    DEFAULT_STATUS_GAS,
    DEFAULT_SUBMIT_GAS,
)

logger = logging.getLogger(__name__)

OVERRIDES_FILE = "phishledger.yaml"


@dataclass
class Config:
    """PhishLedger configuration."""

    # Ledger
    rpc_url: str
    contract_address: str
    private_key: str
    rewards_contract_address: str = ""
    chain_id: Optional[int] = None
    ledger_timeout: float = 30.0
    receipt_timeout: float = 120.0
    ledger_abi_path: Optional[Path] = None
    rewards_abi_path: Optional[Path] = None

    # Gas budgets (override via config/phishledger.yaml or env)
    submit_gas: int = DEFAULT_SUBMIT_GAS
    status_gas: int = DEFAULT_STATUS_GAS
    reward_gas: int = DEFAULT_REWARD_GAS

    # Classifier
    classifier_url: str = DEFAULT_CLASSIFIER_URL
    classifier_timeout: float = 10.0
    benign_labels: FrozenSet[str] = field(default_factory=lambda: DEFAULT_BENIGN_LABELS)

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = 3000
    cors_origin: str = "http://localhost:5173"

    config_dir: Path = Path("./config")

    def __post_init__(self):
        self.config_dir = Path(self.config_dir)
        if self.ledger_abi_path:
            self.ledger_abi_path = Path(self.ledger_abi_path)
        if self.rewards_abi_path:
            self.rewards_abi_path = Path(self.rewards_abi_path)
        self.benign_labels = frozenset(label.strip().lower() for label in self.benign_labels if label.strip())

    @property
    def rewards_enabled(self) -> bool:
        return bool(self.rewards_contract_address)


def _load_overrides(config_dir: Path) -> dict:
    """Load overrides from config/phishledger.yaml (optional)."""
    path = Path(config_dir or ".") / OVERRIDES_FILE
    if not path.exists():
        return {}

    try:
        data = yaml.safe_load(path.read_text()) or {}
    except (OSError, yaml.YAMLError) as exc:
        logger.warning("Failed to parse %s: %s", OVERRIDES_FILE, exc)
        return {}
    if not isinstance(data, dict):
        logger.warning("Ignoring %s: expected a mapping at top level", OVERRIDES_FILE)
        return {}

    overrides: dict = {}
    labels = data.get("benign_labels")
    if isinstance(labels, (list, tuple, set)):
        cleaned = {str(label) for label in labels if str(label).strip()}
        if cleaned:
            overrides["benign_labels"] = frozenset(cleaned)

    gas = data.get("gas") or {}
    if isinstance(gas, dict):
        for key in ("submit", "status", "reward"):
            if key not in gas:
                continue
            try:
                overrides[f"{key}_gas"] = int(gas[key])
            except (TypeError, ValueError):
                logger.warning("Ignoring non-integer gas.%s in %s", key, OVERRIDES_FILE)
    return overrides


def _optional_path(name: str) -> Optional[Path]:
    value = os.getenv(name, "").strip()
    return Path(value) if value else None


def _int_env(name: str, default: int) -> int:
    return int(os.getenv(name, "") or default)


def load_config() -> Config:
    """Load configuration from environment variables."""
    load_dotenv()

    config_dir = Path(os.getenv("CONFIG_DIR", "./config"))
    overrides = _load_overrides(config_dir)

    chain_id_raw = os.getenv("CHAIN_ID", "").strip()
    labels_raw = os.getenv("BENIGN_LABELS", "")
    benign_labels = overrides.get("benign_labels", DEFAULT_BENIGN_LABELS)
    if labels_raw.strip():
        benign_labels = frozenset(label for label in labels_raw.split(",") if label.strip())

    return Config(
        rpc_url=os.getenv("ALCHEMY_URL", ""),
        contract_address=os.getenv("CONTRACT_ADDRESS", ""),
        private_key=os.getenv("PRIVATE_KEY", ""),
        rewards_contract_address=os.getenv("REWARDS_CONTRACT_ADDRESS", ""),
        chain_id=int(chain_id_raw) if chain_id_raw else None,
        ledger_timeout=float(os.getenv("LEDGER_TIMEOUT", "30")),
        receipt_timeout=float(os.getenv("RECEIPT_TIMEOUT", "120")),
        ledger_abi_path=_optional_path("LEDGER_ABI_PATH"),
        rewards_abi_path=_optional_path("REWARDS_ABI_PATH"),
        submit_gas=_int_env("SUBMIT_GAS", overrides.get("submit_gas", DEFAULT_SUBMIT_GAS)),
        status_gas=_int_env("STATUS_GAS", overrides.get("status_gas", DEFAULT_STATUS_GAS)),
        reward_gas=_int_env("REWARD_GAS", overrides.get("reward_gas", DEFAULT_REWARD_GAS)),
        classifier_url=os.getenv("CLASSIFIER_URL", DEFAULT_CLASSIFIER_URL),
        classifier_timeout=float(os.getenv("CLASSIFIER_TIMEOUT", "10")),
        benign_labels=benign_labels,
        api_host=os.getenv("API_HOST", "0.0.0.0"),
        api_port=int(os.getenv("API_PORT", "3000")),
        cors_origin=os.getenv("CORS_ORIGIN", "http://localhost:5173"),
        config_dir=config_dir,
    )


def validate_config(config: Config) -> list[str]:
    """Validate required configuration and return list of error messages."""
    errors: list[str] = []
    if not (config.rpc_url or "").strip():
        errors.append("ALCHEMY_URL is required")
    if not (config.private_key or "").strip():
        errors.append("PRIVATE_KEY is required")

    if not (config.contract_address or "").strip():
        errors.append("CONTRACT_ADDRESS is required")
    elif not Web3.is_address(config.contract_address):
        errors.append(f"CONTRACT_ADDRESS is not a valid address: {config.contract_address}")

    if config.rewards_contract_address and not Web3.is_address(config.rewards_contract_address):
        errors.append(f"REWARDS_CONTRACT_ADDRESS is not a valid address: {config.rewards_contract_address}")
    if not config.rewards_enabled:
        # Accusations still work; self-reports fail with a configuration error.
        logger.info("No REWARDS_CONTRACT_ADDRESS configured; self-reports will be disabled")

    for name in ("submit_gas", "status_gas", "reward_gas"):
        if getattr(config, name) <= 0:
            errors.append(f"{name.upper()} must be positive")
    for name in ("classifier_timeout", "ledger_timeout", "receipt_timeout"):
        if getattr(config, name) <= 0:
            errors.append(f"{name.upper()} must be positive")

    for path in (config.ledger_abi_path, config.rewards_abi_path):
        if path and not path.exists():
            errors.append(f"ABI file not found: {path}")

    if not config.benign_labels:
        errors.append("At least one benign label is required")

    return errors
