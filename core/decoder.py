"""
Decoder for ERC-20 Transfer event logs.

Turns a RawEvent into a WhaleTransfer when the transfer meets the whale
threshold. Anything that is not a well-formed, large enough transfer is
rejected with None. Rejections are expected for most logs and are not errors.
"""
from typing import Optional, Protocol

from config import WHALE_THRESHOLD_RAW
from core.models import ChainConfig, RawEvent, WhaleTransfer

# Transfer(address indexed from, address indexed to, uint256 value):
# topic 0 = signature, topic 1 = from, topic 2 = to
MIN_TOPICS = 3

# uint256 amount is the first ABI word of the data payload
AMOUNT_SIZE = 32


class LabelLookup(Protocol):
    """Read-only address -> label lookup."""

    def get(self, address: str) -> Optional[str]:
        ...


def address_from_topic(topic: bytes) -> str:
    """Extract an address from a 32-byte topic word (low 20 bytes)."""
    return "0x" + topic[-20:].hex()


def amount_from_data(data: bytes) -> Optional[int]:
    """Read the big-endian uint256 amount, or None if the payload is too short."""
    if len(data) < AMOUNT_SIZE:
        return None
    return int.from_bytes(data[:AMOUNT_SIZE], "big")


def decode_transfer(
    event: RawEvent,
    config: ChainConfig,
    labels: Optional[LabelLookup] = None,
) -> Optional[WhaleTransfer]:
    """
    Decode a Transfer event and return a WhaleTransfer if it meets the threshold.

    Args:
        event: Log returned by the node for the USDC contract
        config: Chain the log was fetched from
        labels: Optional address label lookup

    Returns:
        WhaleTransfer, or None if the log is malformed or below the threshold
    """
    if len(event.topics) < MIN_TOPICS:
        return None

    from_address = address_from_topic(event.topics[1])
    to_address = address_from_topic(event.topics[2])

    amount_raw = amount_from_data(event.data)
    if amount_raw is None:
        return None

    if amount_raw < WHALE_THRESHOLD_RAW:
        return None

    if event.transaction_hash is None or event.block_number is None:
        return None

    transfer = WhaleTransfer.create(
        chain=config.chain,
        tx_hash=event.transaction_hash,
        block_number=event.block_number,
        from_address=from_address,
        to_address=to_address,
        amount_raw=amount_raw,
    )

    if labels is None:
        return transfer

    return transfer.with_labels(labels.get(from_address), labels.get(to_address))
