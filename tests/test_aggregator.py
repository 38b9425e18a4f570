"""Tests for the aggregator and the end-to-end pipeline."""
import asyncio
import io
from datetime import datetime

import pytest

from core.aggregator import Aggregator
from core.chain_poller import ChainPoller
from core.models import Chain
from core.notifier import ConsoleNotifier
from core.transfer_queue import QueueClosedError, TransferQueue

from conftest import BINANCE, FakeRpcClient, make_event, make_transfer


class RecordingSink:
    """Sink that records transfers and can be told to fail on some."""

    def __init__(self, fail_on=()):
        self.fail_on = set(fail_on)
        self.received = []

    def emit(self, transfer):
        if transfer.block_number in self.fail_on:
            raise RuntimeError("display broke")
        self.received.append(transfer)


class TestAggregator:

    @pytest.mark.asyncio
    async def test_delivers_in_queue_order_and_exits(self):
        queue = TransferQueue()
        producer = queue.producer()
        sink = RecordingSink()
        aggregator = Aggregator(queue, sink)

        for block in (3, 1, 2):
            await producer.send(make_transfer(block_number=block))
        await producer.release()

        await asyncio.wait_for(aggregator.start(), timeout=1)

        assert [t.block_number for t in sink.received] == [3, 1, 2]
        assert aggregator.delivered == 3
        assert aggregator.failed == 0

    @pytest.mark.asyncio
    async def test_sink_failure_does_not_stop_aggregator(self, caplog):
        queue = TransferQueue()
        producer = queue.producer()
        sink = RecordingSink(fail_on={2})
        aggregator = Aggregator(queue, sink)

        for block in (1, 2, 3):
            await producer.send(make_transfer(block_number=block))
        await producer.release()

        with caplog.at_level("ERROR"):
            await asyncio.wait_for(aggregator.start(), timeout=1)

        assert [t.block_number for t in sink.received] == [1, 3]
        assert aggregator.delivered == 2
        assert aggregator.failed == 1
        assert any("Error presenting whale transfer" in r.getMessage() for r in caplog.records)

    @pytest.mark.asyncio
    async def test_waits_for_every_producer(self):
        queue = TransferQueue()
        first = queue.producer()
        second = queue.producer()
        sink = RecordingSink()
        aggregator = Aggregator(queue, sink)

        task = asyncio.create_task(aggregator.start())
        await first.send(make_transfer(block_number=1))
        await first.release()
        await asyncio.sleep(0.01)
        assert not task.done()

        await second.send(make_transfer(block_number=2, chain=Chain.BASE))
        await second.release()
        await asyncio.wait_for(task, timeout=1)

        assert {t.chain for t in sink.received} == {Chain.ETHEREUM, Chain.BASE}

    @pytest.mark.asyncio
    async def test_closes_queue_on_exit(self):
        queue = TransferQueue()
        producer = queue.producer()
        queue.producer()
        aggregator = Aggregator(queue, RecordingSink())

        task = asyncio.create_task(aggregator.start())
        await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

        with pytest.raises(QueueClosedError):
            await producer.send(make_transfer())


class TestPipeline:

    @pytest.mark.asyncio
    async def test_two_million_usdc_end_to_end(self, eth_config, labels):
        """Raw log -> poller -> queue -> aggregator -> console output."""
        queue = TransferQueue()
        client = FakeRpcClient(
            heads=[19_000_000, 19_000_002],
            logs=[[make_event(amount=2_000_000_000000, sender=BINANCE, block_number=19_000_001)]],
        )
        poller = ChainPoller(eth_config, labels, queue.producer(), client=client, poll_interval=0, backoff=0)
        client.on_exhausted = poller.stop

        output = io.StringIO()
        notifier = ConsoleNotifier(stream=output, clock=lambda: datetime(2025, 1, 2, 3, 4, 5))
        aggregator = Aggregator(queue, notifier)

        await asyncio.wait_for(asyncio.gather(poller.start(), aggregator.start()), timeout=1)

        assert aggregator.delivered == 1
        assert notifier.sent == 1

        text = output.getvalue()
        assert "[2025-01-02 03:04:05]" in text
        assert "[ETHEREUM]" in text
        assert "$2,000,000.00 USDC" in text
        assert "(Binance 14)" in text
        assert "(Unknown)" in text
        assert "Block:  19000001" in text
        assert "https://etherscan.io/tx/0x" in text
