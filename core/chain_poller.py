"""
Per-chain poller that watches the USDC contract for whale transfers.

Each monitored chain gets one ChainPoller running as its own asyncio task.
The poller owns its cursor (last fully processed block) and walks the chain
in half-open ranges (last_block, latest_block]:

    Connecting -> Polling -> (on error) Backoff -> Connecting

A failed log query leaves the cursor where it was so the same range is
retried on the next iteration. A failed connection or head read resumes from
the then-current head after the backoff; that gap is not backfilled.
"""
import asyncio
import logging
from enum import Enum
from typing import Optional

import aiohttp

from config import BACKOFF_SECONDS, POLL_INTERVAL_SECONDS, TRANSFER_EVENT_SIGNATURE
from core.decoder import LabelLookup, decode_transfer
from core.models import ChainConfig, WhaleTransfer
from core.rpc_client import EvmRpcClient, RpcError
from core.transfer_queue import QueueClosedError, TransferProducer

logger = logging.getLogger(__name__)


class PollerState(str, Enum):
    """Lifecycle state of a chain poller."""
    CONNECTING = "connecting"
    POLLING = "polling"
    BACKOFF = "backoff"
    STOPPED = "stopped"


class ChainPoller:
    """
    Polls one chain for USDC Transfer logs and forwards whale transfers.
    Failures are contained here and never reach other chains.
    """

    def __init__(
        self,
        config: ChainConfig,
        labels: Optional[LabelLookup],
        producer: TransferProducer,
        client: Optional[EvmRpcClient] = None,
        poll_interval: float = POLL_INTERVAL_SECONDS,
        backoff: float = BACKOFF_SECONDS
    ):
        """Initialize poller for a chain."""
        self.config = config
        self.labels = labels
        self.producer = producer
        self.client = client or EvmRpcClient(config.rpc_url)
        self.poll_interval = poll_interval
        self.backoff = backoff

        self.state = PollerState.STOPPED
        self.running = False
        self.last_block: Optional[int] = None

        # Statistics
        self.blocks_scanned = 0
        self.transfers_found = 0
        self.fetch_failures = 0
        self.reconnects = 0

    @property
    def chain(self):
        return self.config.chain

    async def start(self):
        """Run the poller until stop() is called."""
        self.running = True

        logger.info(
            f"[{self.chain}] Starting monitor (rpc: {self.config.rpc_url}, "
            f"usdc: {self.config.token_address})"
        )

        try:
            while self.running:
                try:
                    await self._connect()
                    await self._poll_loop()
                except Exception as e:
                    self.state = PollerState.BACKOFF
                    self.reconnects += 1
                    logger.error(f"[{self.chain}] Monitor error: {e}. Restarting in {self.backoff} seconds...")
                    await self.client.close()
                    if self.running:
                        await asyncio.sleep(self.backoff)
        finally:
            self.state = PollerState.STOPPED
            await self.client.close()
            await self.producer.release()
            logger.info(f"[{self.chain}] Monitor stopped")

    def stop(self):
        """Ask the poller to exit at its next check."""
        self.running = False

    async def _connect(self):
        """Open the RPC session and set the cursor to the current head."""
        self.state = PollerState.CONNECTING
        await self.client.connect()
        self.last_block = await self.client.get_block_number()
        logger.info(f"[{self.chain}] Connected, starting from block {self.last_block}")

    async def _poll_loop(self):
        """Steady-state loop. Head read errors propagate to trigger a reconnect."""
        self.state = PollerState.POLLING

        while self.running:
            latest_block = await self.client.get_block_number()

            if latest_block > self.last_block:
                await self._scan_range(self.last_block, latest_block)

            await asyncio.sleep(self.poll_interval)

    async def _scan_range(self, last_block: int, latest_block: int) -> bool:
        """
        Fetch and process logs for blocks (last_block, latest_block].

        Returns:
            True if the range was processed and the cursor advanced
        """
        from_block = last_block + 1

        try:
            events = await self.client.get_logs(
                self.config.token_address,
                TRANSFER_EVENT_SIGNATURE,
                from_block,
                latest_block
            )
        except (RpcError, aiohttp.ClientError, asyncio.TimeoutError, ValueError) as e:
            self.fetch_failures += 1
            logger.warning(
                f"[{self.chain}] Failed to get logs for blocks {from_block}-{latest_block}, will retry: {e}"
            )
            return False

        for event in events:
            transfer = decode_transfer(event, self.config, self.labels)
            if transfer is None:
                continue

            if not last_block < transfer.block_number <= latest_block:
                logger.debug(
                    f"[{self.chain}] Ignoring log from block {transfer.block_number} "
                    f"outside requested range {from_block}-{latest_block}"
                )
                continue

            self.transfers_found += 1
            await self._forward(transfer)

        self.blocks_scanned += latest_block - last_block
        self.last_block = latest_block
        return True

    async def _forward(self, transfer: WhaleTransfer):
        """Send a transfer to the aggregator, waiting while the queue is full."""
        logger.debug(f"[{self.chain}] Whale transfer ${transfer.amount_usd:,.2f} in block {transfer.block_number}")
        try:
            await self.producer.send(transfer)
        except QueueClosedError as e:
            logger.error(f"[{self.chain}] Failed to send whale transfer {transfer.tx_hash}: {e}")
