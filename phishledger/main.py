"""Main entry point for the PhishLedger report service."""

import asyncio
import logging
import signal
import sys

from web3 import AsyncWeb3

from .api import ApiServer
from .classifier import ClassificationClient
from .config import Config, load_config, validate_config
from .errors import ConfigurationError
from .ledger import LedgerGateway, RewardGateway, TransactionSigner
from .ledger.abi import REPORT_LEDGER_ABI, REWARDS_ABI, load_abi
from .reporter import ReportOrchestrator, ReportService, StatusProjector

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)
logger = logging.getLogger(__name__)


def build_web3(config: Config) -> AsyncWeb3:
    return AsyncWeb3(
        AsyncWeb3.AsyncHTTPProvider(
            config.rpc_url,
            request_kwargs={"timeout": config.ledger_timeout},
        )
    )


def build_service(config: Config, web3=None) -> ReportService:
    """Wire the gateways, orchestrator and projector from configuration."""
    web3 = web3 or build_web3(config)
    signer = TransactionSigner(config.private_key, chain_id=config.chain_id)

    ledger_contract = web3.eth.contract(
        address=AsyncWeb3.to_checksum_address(config.contract_address),
        abi=load_abi(config.ledger_abi_path, REPORT_LEDGER_ABI),
    )
    ledger = LedgerGateway(
        web3,
        ledger_contract,
        signer,
        submit_gas=config.submit_gas,
        status_gas=config.status_gas,
        receipt_timeout=config.receipt_timeout,
    )

    rewards = None
    if config.rewards_enabled:
        rewards_contract = web3.eth.contract(
            address=AsyncWeb3.to_checksum_address(config.rewards_contract_address),
            abi=load_abi(config.rewards_abi_path, REWARDS_ABI),
        )
        rewards = RewardGateway(
            web3,
            rewards_contract,
            signer,
            reward_gas=config.reward_gas,
            receipt_timeout=config.receipt_timeout,
        )

    classifier = ClassificationClient(
        endpoint=config.classifier_url,
        timeout_seconds=config.classifier_timeout,
        benign_labels=config.benign_labels,
    )

    logger.info("Using signer address: %s", signer.address)
    logger.info("Using ledger contract at: %s", ledger_contract.address)
    if rewards:
        logger.info("Using rewards contract at: %s", rewards.contract.address)

    orchestrator = ReportOrchestrator(classifier, ledger, rewards)
    return ReportService(orchestrator, StatusProjector(ledger))


class PhishLedgerApp:
    """Owns the long-lived clients and the HTTP server."""

    def __init__(self, config: Config):
        self.config = config
        self.web3 = build_web3(config)
        self.service = build_service(config, self.web3)
        self.server = ApiServer(
            self.service,
            host=config.api_host,
            port=config.api_port,
            cors_origin=config.cors_origin,
        )
        self._stopped = asyncio.Event()
        self._stop_lock = asyncio.Lock()
        self._stop_task: asyncio.Task | None = None

    async def start(self):
        """Start serving and block until stop() is called."""
        logger.info("Starting PhishLedger...")
        await self.server.start()
        await self._stopped.wait()

    async def stop(self):
        async with self._stop_lock:
            if self._stop_task is None:
                self._stop_task = asyncio.create_task(self._stop_impl())
            stop_task = self._stop_task
        await stop_task

    async def _stop_impl(self):
        logger.info("Stopping PhishLedger...")
        await self.server.stop()
        await self.service.orchestrator.classifier.close()
        await self.web3.provider.disconnect()
        self._stopped.set()
        logger.info("PhishLedger stopped")


async def run_service():
    """Run the PhishLedger service."""
    config = load_config()

    validation_errors = validate_config(config)
    if validation_errors:
        for err in validation_errors:
            logger.error(err)
        sys.exit(1)

    try:
        app = PhishLedgerApp(config)
    except ConfigurationError as exc:
        logger.error(exc.message)
        sys.exit(1)

    # Handle shutdown signals
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, lambda: asyncio.create_task(app.stop()))

    try:
        await app.start()
    except KeyboardInterrupt:
        pass
    finally:
        await app.stop()


def main():
    """Entry point."""
    asyncio.run(run_service())


if __name__ == "__main__":
    main()
