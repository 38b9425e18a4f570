"""
Bounded multi-producer / single-consumer queue for whale transfers.

Every chain poller sends through its own producer handle. Once all handles
are released, an end-of-stream marker is queued behind any pending transfers
so the consumer drains everything before it sees the end.
"""
import asyncio
import logging
from typing import Optional

from config import QUEUE_CAPACITY
from core.models import WhaleTransfer

logger = logging.getLogger(__name__)


# Queued after the last transfer once every producer is gone
_END_OF_STREAM = object()


class QueueClosedError(Exception):
    """Raised when sending to a queue whose consumer has stopped."""


class TransferQueue:
    """Bounded queue shared by all pollers and read by the aggregator."""

    def __init__(self, capacity: int = QUEUE_CAPACITY):
        """Initialize queue with a fixed capacity."""
        self.capacity = capacity
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=capacity)
        self._producers = 0
        self._ended = False
        self._closed = False

    def producer(self) -> "TransferProducer":
        """Register and return a new producer handle."""
        if self._ended:
            raise QueueClosedError("All producers were already released")
        self._producers += 1
        return TransferProducer(self)

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def producer_count(self) -> int:
        return self._producers

    def qsize(self) -> int:
        return self._queue.qsize()

    def full(self) -> bool:
        return self._queue.full()

    async def put(self, transfer: WhaleTransfer):
        """
        Enqueue a transfer, waiting while the queue is full.

        Raises:
            QueueClosedError: if the consumer has stopped
        """
        if self._closed:
            raise QueueClosedError("Transfer queue is closed")
        await self._queue.put(transfer)

        # Woken by close() while waiting for a slot; nobody will read it
        if self._closed:
            raise QueueClosedError("Transfer queue closed while waiting for space")

    async def get(self) -> Optional[WhaleTransfer]:
        """Wait for the next transfer. Returns None once the stream has ended or the queue is closed."""
        if self._closed:
            return None

        item = await self._queue.get()
        if item is _END_OF_STREAM:
            self._closed = True
            return None
        return item

    def close(self):
        """Mark the consumer as gone. Later sends raise QueueClosedError."""
        self._closed = True

        # Nobody will read these; free the slots so blocked senders wake up
        dropped = 0
        while not self._queue.empty():
            if self._queue.get_nowait() is not _END_OF_STREAM:
                dropped += 1
        if dropped:
            logger.warning(f"Transfer queue closed with {dropped} undelivered transfers")

    async def _release_producer(self):
        self._producers -= 1
        if self._producers == 0:
            self._ended = True
            logger.info("All transfer producers released, closing stream")
            if not self._closed:
                await self._queue.put(_END_OF_STREAM)


class TransferProducer:
    """Send handle held by a single poller."""

    def __init__(self, queue: TransferQueue):
        self._queue = queue
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    async def send(self, transfer: WhaleTransfer):
        """
        Send a transfer, suspending while the queue is full.

        Raises:
            QueueClosedError: if this handle was released or the consumer has stopped
        """
        if self._released:
            raise QueueClosedError("Producer handle was released")
        await self._queue.put(transfer)

    async def release(self):
        """Give up this handle. Safe to call more than once."""
        if self._released:
            return
        self._released = True
        await self._queue._release_producer()
