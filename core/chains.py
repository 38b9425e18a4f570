"""
Static registry of monitored chains and their USDC contracts.
"""
from typing import List, Optional

from config import Settings, get_settings
from core.models import Chain, ChainConfig


# Native USDC contract per chain
USDC_ADDRESSES = {
    Chain.ETHEREUM: "0xA0b86991c6218b36c1d19D4a2e9Eb0cE3606eB48",
    Chain.ARBITRUM: "0xaf88d065e77c8cC2239327C5EDb3A432268e5831",
    Chain.BASE: "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
}


def get_all_chains(settings: Optional[Settings] = None) -> List[ChainConfig]:
    """Build the configuration for every supported chain."""
    if settings is None:
        settings = get_settings()

    rpc_urls = {
        Chain.ETHEREUM: settings.ethereum_rpc_url,
        Chain.ARBITRUM: settings.arbitrum_rpc_url,
        Chain.BASE: settings.base_rpc_url,
    }

    return [
        ChainConfig(chain=chain, rpc_url=rpc_urls[chain], token_address=USDC_ADDRESSES[chain])
        for chain in Chain
    ]
