"""
Console formatting for whale transfer alerts.
"""
from datetime import datetime
from typing import Iterable, Optional

from config import WHALE_THRESHOLD_USD
from core.models import ChainConfig, WhaleTransfer


CHAIN_EMOJIS = {
    "ETHEREUM": "🔷",
    "ARBITRUM": "🔵",
    "BASE": "🟦",
}


def format_with_commas(value: float) -> str:
    """Format a number with thousands separators and two decimals: 2,000,000.00"""
    return f"{value:,.2f}"


def format_amount(transfer: WhaleTransfer) -> str:
    """Format the transfer amount: $2,000,000.00 USDC"""
    return f"${format_with_commas(transfer.amount_usd)} USDC"


def shorten(value: str) -> str:
    """Shorten an address or hash to format: 0x12345678...9abcdef0"""
    if len(value) <= 18:
        return value
    return f"{value[:10]}...{value[-8:]}"


def format_address(address: str, label: Optional[str]) -> str:
    """Short address followed by its label, or (Unknown)."""
    return f"{shorten(address)} ({label or 'Unknown'})"


def format_whale_transfer(transfer: WhaleTransfer, now: Optional[datetime] = None) -> str:
    """
    Format a whale transfer into a console alert.

    Example output:
    [2025-12-13 15:30:45] 🔷 [ETHEREUM] 🐋 WHALE TRANSFER DETECTED
      Amount: $2,000,000.00 USDC
      From:   0x28c6c062...3bf21d60 (Binance 14)
      To:     0x12345678...9abcdef0 (Unknown)
      Tx:     0xabcdef01...23456789
      Block:  19000000
      Link:   https://etherscan.io/tx/0xabcdef...

    Args:
        transfer: The transfer to format
        now: Timestamp to show, defaults to the current local time
    """
    timestamp = (now or datetime.now()).strftime('%Y-%m-%d %H:%M:%S')
    chain_name = transfer.chain.display_name
    emoji = CHAIN_EMOJIS.get(chain_name, "⛓️")

    return (
        f"[{timestamp}] {emoji} [{chain_name}] 🐋 WHALE TRANSFER DETECTED\n"
        f"  Amount: {format_amount(transfer)}\n"
        f"  From:   {format_address(transfer.from_address, transfer.from_label)}\n"
        f"  To:     {format_address(transfer.to_address, transfer.to_label)}\n"
        f"  Tx:     {shorten(transfer.tx_hash)}\n"
        f"  Block:  {transfer.block_number}\n"
        f"  Link:   {transfer.chain.explorer_tx_url(transfer.tx_hash)}"
    )


def format_banner(chains: Iterable[ChainConfig], label_count: int) -> str:
    """Startup banner listing the monitored chains."""
    chain_names = ", ".join(config.chain.display_name for config in chains)
    return "\n".join([
        "=" * 65,
        "🐋  USDC WHALE DETECTOR  🐋",
        "Monitoring large USDC transfers across chains",
        "=" * 65,
        f"✓ Loaded {label_count} address labels",
        f"✓ Whale threshold: ${WHALE_THRESHOLD_USD:,} USDC",
        f"✓ Monitoring chains: {chain_names}",
        "-" * 65,
    ])
