"""
Pydantic models for USDC Whale Detector data structures.
"""
import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from config import USDC_DECIMALS


ADDRESS_PATTERN = re.compile(r"^0x[0-9a-fA-F]{40}$")

# Size of an indexed event topic in bytes
TOPIC_SIZE = 32


def normalize_address(address: str) -> str:
    """Validate a 20-byte hex address and return it lowercased."""
    if not isinstance(address, str) or not ADDRESS_PATTERN.match(address):
        raise ValueError(f"Invalid address: {address!r}")
    return address.lower()


def hex_to_bytes(value: str) -> bytes:
    """Convert a 0x-prefixed hex string from the RPC node into bytes."""
    if value.startswith(("0x", "0X")):
        value = value[2:]
    return bytes.fromhex(value)


class Chain(str, Enum):
    """Supported blockchain networks."""
    ETHEREUM = "ethereum"
    ARBITRUM = "arbitrum"
    BASE = "base"

    @property
    def display_name(self) -> str:
        """Upper-case name shown in alerts (e.g., "ETHEREUM")."""
        return _DISPLAY_NAMES[self]

    def explorer_tx_url(self, tx_hash: str) -> str:
        """Block explorer URL for a transaction."""
        return f"{_EXPLORERS[self]}/tx/{tx_hash}"

    def explorer_address_url(self, address: str) -> str:
        """Block explorer URL for an address."""
        return f"{_EXPLORERS[self]}/address/{address}"

    def __str__(self) -> str:
        return self.display_name

    def __format__(self, format_spec: str) -> str:
        return format(self.display_name, format_spec)


_DISPLAY_NAMES = {
    Chain.ETHEREUM: "ETHEREUM",
    Chain.ARBITRUM: "ARBITRUM",
    Chain.BASE: "BASE",
}

_EXPLORERS = {
    Chain.ETHEREUM: "https://etherscan.io",
    Chain.ARBITRUM: "https://arbiscan.io",
    Chain.BASE: "https://basescan.org",
}


class ChainConfig(BaseModel):
    """Configuration for one monitored chain."""
    model_config = ConfigDict(frozen=True)

    chain: Chain
    rpc_url: str
    token_address: str  # USDC contract, stored lowercase

    @field_validator("token_address")
    @classmethod
    def _check_token_address(cls, value: str) -> str:
        return normalize_address(value)


class RawEvent(BaseModel):
    """A single event log as returned by eth_getLogs."""
    model_config = ConfigDict(frozen=True)

    topics: List[bytes] = Field(default_factory=list)
    data: bytes = b""
    transaction_hash: Optional[str] = None
    block_number: Optional[int] = None

    @field_validator("topics")
    @classmethod
    def _check_topics(cls, value: List[bytes]) -> List[bytes]:
        for topic in value:
            if len(topic) != TOPIC_SIZE:
                raise ValueError(f"Topic must be {TOPIC_SIZE} bytes, got {len(topic)}")
        return value

    @classmethod
    def from_rpc_log(cls, log: dict) -> "RawEvent":
        """
        Build a RawEvent from a JSON-RPC log object.

        Raises:
            ValueError: if a hex field is malformed
        """
        block_number = log.get("blockNumber")
        return cls(
            topics=[hex_to_bytes(topic) for topic in log.get("topics") or []],
            data=hex_to_bytes(log.get("data") or "0x"),
            transaction_hash=log.get("transactionHash"),
            block_number=int(block_number, 16) if block_number is not None else None,
        )


class WhaleTransfer(BaseModel):
    """A USDC transfer at or above the whale threshold."""
    model_config = ConfigDict(frozen=True)

    chain: Chain
    tx_hash: str
    block_number: int
    from_address: str
    from_label: Optional[str] = None  # Known entity name, if any
    to_address: str
    to_label: Optional[str] = None
    amount_raw: int = Field(ge=0, lt=2 ** 256)  # uint256 as emitted by the contract
    amount_usd: float  # amount_raw / 10^6

    @classmethod
    def create(
        cls,
        chain: Chain,
        tx_hash: str,
        block_number: int,
        from_address: str,
        to_address: str,
        amount_raw: int,
    ) -> "WhaleTransfer":
        """Create a transfer, deriving the display amount from the raw amount."""
        return cls(
            chain=chain,
            tx_hash=tx_hash,
            block_number=block_number,
            from_address=from_address,
            to_address=to_address,
            amount_raw=amount_raw,
            amount_usd=amount_raw / 10 ** USDC_DECIMALS,
        )

    def with_labels(self, from_label: Optional[str], to_label: Optional[str]) -> "WhaleTransfer":
        """Return a copy carrying the given sender and recipient labels."""
        return self.model_copy(update={"from_label": from_label, "to_label": to_label})
