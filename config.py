"""
Configuration module for USDC Whale Detector.
Holds the fixed detection constants and loads start-time settings from the environment.
"""
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


# USDC has 6 decimal places
USDC_DECIMALS = 6

# Whale threshold: 1,000,000 USDC
WHALE_THRESHOLD_USD = 1_000_000

# Whale threshold in raw units (1,000,000 * 10^6)
WHALE_THRESHOLD_RAW = WHALE_THRESHOLD_USD * 10 ** USDC_DECIMALS

# Seconds between head checks on each chain
POLL_INTERVAL_SECONDS = 3

# Seconds to wait after a connection failure before reconnecting
BACKOFF_SECONDS = 10

# Capacity of the shared transfer queue
QUEUE_CAPACITY = 100

# keccak256("Transfer(address,address,uint256)")
TRANSFER_EVENT_SIGNATURE = "0xddf252ad1be2c89b69c2b068fc378daa952ba7f163c4a11628f55a4df523b3ef"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # RPC endpoints (public defaults, override with a private node if rate limited)
    ethereum_rpc_url: str = "https://eth.llamarpc.com"
    arbitrum_rpc_url: str = "https://arb1.arbitrum.io/rpc"
    base_rpc_url: str = "https://mainnet.base.org"

    # Optional JSON file mapping address -> label
    labels_path: Optional[str] = None

    # Logging
    log_level: str = "INFO"
    log_dir: str = "logs"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )


def get_settings() -> Settings:
    """Get application settings."""
    return Settings()
