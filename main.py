"""
USDC Whale Detector - Main Entry Point
Real-time monitoring of large USDC transfers across EVM chains.
"""
import asyncio
import logging
import sys
from typing import List, Optional

from config import Settings, get_settings
from core.aggregator import Aggregator
from core.chain_poller import ChainPoller
from core.chains import get_all_chains
from core.notifier import ConsoleNotifier
from core.transfer_queue import TransferQueue
from utils.formatting import format_banner
from utils.labels import LabelStore
from utils.logging_config import setup_logging

logger = logging.getLogger(__name__)


class WhaleDetector:
    """Main application wiring chain pollers to the aggregator."""

    def __init__(self, settings: Optional[Settings] = None):
        """Initialize application components."""
        self.settings = settings or get_settings()

        self.labels: LabelStore = None
        self.queue: TransferQueue = None
        self.pollers: List[ChainPoller] = []
        self.aggregator: Aggregator = None

    def setup(self):
        """Setup all components. Labels are loaded before any poller exists."""
        logger.info("Setting up USDC Whale Detector...")

        self.labels = LabelStore.load_with_defaults(self.settings.labels_path)
        chains = get_all_chains(self.settings)

        self.queue = TransferQueue()

        # One producer handle per chain; the stream ends when all are released
        self.pollers = [
            ChainPoller(config, self.labels, self.queue.producer())
            for config in chains
        ]

        self.aggregator = Aggregator(self.queue, ConsoleNotifier())

        print(format_banner(chains, len(self.labels)))
        logger.info("Setup complete!")

    async def start(self):
        """Run all pollers and the aggregator until they finish."""
        logger.info(f"Starting {len(self.pollers)} chain monitors...")

        tasks = [poller.start() for poller in self.pollers]
        tasks.append(self.aggregator.start())

        try:
            await asyncio.gather(*tasks)
        finally:
            self.shutdown()

    def shutdown(self):
        """Ask every poller to stop."""
        logger.info("Shutting down USDC Whale Detector...")
        for poller in self.pollers:
            poller.stop()


async def main():
    """Main entry point."""
    settings = get_settings()
    setup_logging(log_level=settings.log_level, log_dir=settings.log_dir)

    detector = WhaleDetector(settings)

    try:
        detector.setup()
        await detector.start()
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


def cli():
    """Console script entry point."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Detector stopped by user")


if __name__ == "__main__":
    cli()
