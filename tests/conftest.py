"""Test configuration for pytest.

Shared fixtures and a scripted RPC client used to drive chain pollers
without network access.
"""
import json
from typing import List, Optional

import pytest

from config import TRANSFER_EVENT_SIGNATURE, WHALE_THRESHOLD_RAW
from core.models import Chain, ChainConfig, RawEvent, WhaleTransfer, hex_to_bytes
from core.rpc_client import RpcError
from utils.labels import LabelStore


BINANCE = "0x28c6c06298d514db089934071355e5743bf21d60"
SENDER = "0x1111111111111111111111111111111111111111"
RECIPIENT = "0x2222222222222222222222222222222222222222"
TX_HASH = "0x" + "ab" * 32


def topic_for(address: str, padding: bytes = b"\x00" * 12) -> bytes:
    """Build a 32-byte topic word holding an address in its low 20 bytes."""
    return padding + hex_to_bytes(address)


def make_event(
    amount: int = WHALE_THRESHOLD_RAW,
    sender: str = SENDER,
    recipient: str = RECIPIENT,
    tx_hash: Optional[str] = TX_HASH,
    block_number: Optional[int] = 101,
) -> RawEvent:
    """Build a well-formed Transfer event."""
    return RawEvent(
        topics=[hex_to_bytes(TRANSFER_EVENT_SIGNATURE), topic_for(sender), topic_for(recipient)],
        data=amount.to_bytes(32, "big"),
        transaction_hash=tx_hash,
        block_number=block_number,
    )


def make_transfer(block_number: int = 101, amount: int = WHALE_THRESHOLD_RAW, chain: Chain = Chain.ETHEREUM) -> WhaleTransfer:
    return WhaleTransfer.create(
        chain=chain,
        tx_hash=TX_HASH,
        block_number=block_number,
        from_address=SENDER,
        to_address=RECIPIENT,
        amount_raw=amount,
    )


class FakeResponse:
    """Stand-in for an aiohttp response. A str payload is parsed as a JSON body."""

    def __init__(self, payload, status=200):
        self.payload = payload
        self.status = status

    async def json(self, content_type=None):
        if isinstance(self.payload, str):
            return json.loads(self.payload)
        return self.payload

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        return False


class FakeSession:
    """Stand-in for aiohttp.ClientSession returning canned responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []
        self.closed = False

    def post(self, url, json=None):
        self.requests.append(json)
        return self.responses.pop(0)

    async def close(self):
        self.closed = True


class FakeRpcClient:
    """
    Scripted stand-in for EvmRpcClient.

    Each entry in heads / logs is returned in turn, or raised if it is an
    exception. When the head script runs out, on_exhausted is called (the
    tests point it at poller.stop) and the last head is repeated.
    """

    def __init__(self, heads: list, logs: Optional[list] = None):
        self.heads = list(heads)
        self.logs = list(logs or [])
        self.last_head = None
        self.on_exhausted = None

        self.connects = 0
        self.closes = 0
        self.head_calls = 0
        self.log_calls: List[tuple] = []

    async def connect(self):
        self.connects += 1

    async def close(self):
        self.closes += 1

    async def get_block_number(self) -> int:
        self.head_calls += 1
        if not self.heads:
            if self.on_exhausted:
                self.on_exhausted()
            if self.last_head is None:
                raise RpcError("no head scripted")
            return self.last_head

        head = self.heads.pop(0)
        if isinstance(head, Exception):
            raise head
        self.last_head = head
        return head

    async def get_logs(self, address: str, topic: str, from_block: int, to_block: int) -> List[RawEvent]:
        self.log_calls.append((from_block, to_block))
        result = self.logs.pop(0) if self.logs else []
        if isinstance(result, Exception):
            raise result
        return result


@pytest.fixture
def eth_config():
    """Ethereum chain config with the real USDC contract."""
    return ChainConfig(
        chain=Chain.ETHEREUM,
        rpc_url="http://localhost:8545",
        token_address="0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    )


@pytest.fixture
def labels():
    """Label store with a single known exchange."""
    return LabelStore({BINANCE: "Binance 14"})
