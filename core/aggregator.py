"""
Single consumer that drains the transfer queue into the presentation sink.
"""
import logging
from typing import Protocol

from core.models import WhaleTransfer
from core.transfer_queue import TransferQueue

logger = logging.getLogger(__name__)


class TransferSink(Protocol):
    """Anything that can present a whale transfer."""

    def emit(self, transfer: WhaleTransfer):
        ...


class Aggregator:
    """
    Serializes delivery of transfers from every chain poller to one sink.

    No ordering is imposed across chains; each transfer is delivered in the
    order it was dequeued. Runs until all producers have been released and
    the queue is drained.
    """

    def __init__(self, queue: TransferQueue, sink: TransferSink):
        """Initialize aggregator for a queue and sink."""
        self.queue = queue
        self.sink = sink

        # Statistics
        self.delivered = 0
        self.failed = 0

    async def start(self):
        """Consume transfers until the stream ends."""
        logger.info("Aggregator started")

        try:
            while True:
                transfer = await self.queue.get()
                if transfer is None:
                    break
                self._deliver(transfer)
        finally:
            self.queue.close()
            logger.info(f"Aggregator stopped ({self.delivered} delivered, {self.failed} failed)")

    def _deliver(self, transfer: WhaleTransfer):
        """Hand one transfer to the sink. Sink errors are logged, not raised."""
        try:
            self.sink.emit(transfer)
            self.delivered += 1
        except Exception as e:
            self.failed += 1
            logger.error(f"Error presenting whale transfer {transfer.tx_hash}: {e}", exc_info=True)
