"""
Address label store for mapping addresses to human-readable names.
Loaded once at startup and only read afterwards.
"""
import json
import logging
from pathlib import Path
from typing import Dict, Optional, Union

from core.models import normalize_address

logger = logging.getLogger(__name__)


PROJECT_ROOT = Path(__file__).resolve().parent.parent

# Searched in order when no explicit path is configured
DATA_PATHS = [
    Path("data/labels.json"),
    PROJECT_ROOT / "data" / "labels.json",
]

# Built-in labels used when no label file can be read
DEFAULT_LABELS = {
    # Exchanges
    '0x28c6c06298d514db089934071355e5743bf21d60': 'Binance 14',
    '0x21a31ee1afc51d94c2efccaa2092ad1028285549': 'Binance 15',
    '0xdfd5293d8e347dfe59e90efd55b2956a1343963d': 'Binance 16',
    '0xf977814e90da44bfa03b6295a0616a897441acec': 'Binance 8',
    '0x3f5ce5fbfe3e9af3971dd833d26ba9b5c936f0be': 'Binance',
    '0x71660c4005ba85c37ccec55d0c4493e66fe775d3': 'Coinbase 1',
    '0x503828976d22510aad0201ac7ec88293211d23da': 'Coinbase 2',
    '0xa9d1e08c7793af67e9d92fe308d5697fb81d3e43': 'Coinbase 10',
    '0x1151314c646ce4e0efd76d1af4760ae66a9fe30f': 'Kraken 4',
    '0x2910543af39aba0cd09dbb2d50200b3e800a63d2': 'Kraken 1',
    '0x6cc5f688a315f3dc28a7781717a9a798a59fda7b': 'OKX',
    '0x0d0707963952f2fba59dd06f2b425ace40b492fe': 'Gate.io',
    # Issuer / bridges
    '0x55fe002aeff02f77364de339a1292923a15844b8': 'Circle',
    '0x0000000000000000000000000000000000000000': 'Null Address (Mint/Burn)',
    '0xcee284f754e854890e311e3280b767f80797180d': 'Arbitrum: L1 Custom Gateway',
    '0x3154cf16ccdb4c6d922629664174b904d80f2c35': 'Base: L1 Standard Bridge',
    # DeFi
    '0x7a250d5630b4cf539739df2c5dacb4c659f2488d': 'Uniswap V2 Router',
    '0xe592427a0aece92de3edee1f18e0157c05861564': 'Uniswap V3 Router',
    '0x1111111254eeb25477b68fb85ed929f73a960582': '1inch Router',
    '0x87870bca3f3fd6335c3f4ce8392d69350b4fa4e2': 'Aave V3 Pool',
}


class LabelStore:
    """
    Read-only lookup from address to display name.

    Keys are normalized to lowercase so checksummed and plain
    addresses resolve to the same label.
    """

    def __init__(self, labels: Optional[Dict[str, str]] = None):
        """Initialize store from an address -> label mapping."""
        self._labels: Dict[str, str] = {}
        for address, label in (labels or {}).items():
            self.insert(address, label)

    @classmethod
    def load_from_json(cls, text: str) -> "LabelStore":
        """
        Load labels from a JSON object string.

        Entries with an invalid address or a non-string label are skipped.

        Raises:
            ValueError: if the text is not valid JSON
        """
        value = json.loads(text)
        store = cls()

        if not isinstance(value, dict):
            logger.warning(f"Label data is a JSON {type(value).__name__}, expected an object")
            return store

        skipped = 0
        for address, label in value.items():
            if not isinstance(label, str):
                skipped += 1
                continue
            try:
                store.insert(address, label)
            except ValueError:
                skipped += 1

        if skipped:
            logger.debug(f"Skipped {skipped} invalid label entries")

        return store

    @classmethod
    def load_from_file(cls, path: Union[str, Path]) -> "LabelStore":
        """Load labels from a JSON file."""
        with open(path, "r", encoding="utf-8") as f:
            return cls.load_from_json(f.read())

    @classmethod
    def load_with_defaults(cls, path: Optional[Union[str, Path]] = None) -> "LabelStore":
        """
        Load labels from the first readable file, falling back to built-in defaults.

        Args:
            path: Explicit label file, tried before the standard data paths

        Returns:
            LabelStore: never raises, an unreadable file is logged and skipped
        """
        candidates = ([Path(path)] if path else []) + DATA_PATHS

        for candidate in candidates:
            if not candidate.is_file():
                continue
            try:
                store = cls.load_from_file(candidate)
            except (OSError, ValueError) as e:
                logger.warning(f"Failed to load labels from {candidate}: {e}")
                continue
            logger.info(f"Loaded {len(store)} address labels from {candidate}")
            return store

        store = cls(DEFAULT_LABELS)
        logger.info(f"Loaded {len(store)} address labels from built-in defaults")
        return store

    def get(self, address: str) -> Optional[str]:
        """Get the label for an address, or None if unknown."""
        return self._labels.get(address.lower())

    def has_label(self, address: str) -> bool:
        """Check if an address has a label."""
        return address.lower() in self._labels

    def insert(self, address: str, label: str):
        """Add a label. Only used while building the store."""
        self._labels[normalize_address(address)] = label

    def __len__(self) -> int:
        return len(self._labels)
