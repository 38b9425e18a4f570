"""
Console notifier for whale transfers.
Prints formatted alerts and records each transfer in the whales log.
"""
import sys
from datetime import datetime
from typing import Callable, Optional, TextIO

from core.models import WhaleTransfer
from utils.formatting import format_whale_transfer
from utils.logging_config import log_whale


class ConsoleNotifier:
    """Presentation sink used by the aggregator."""

    def __init__(
        self,
        stream: Optional[TextIO] = None,
        clock: Callable[[], datetime] = datetime.now
    ):
        """Initialize notifier writing to stream (stdout by default)."""
        self.stream = stream
        self.clock = clock
        self.sent = 0

    def emit(self, transfer: WhaleTransfer):
        """Print and log one transfer. Errors propagate to the caller."""
        message = format_whale_transfer(transfer, now=self.clock())
        stream = self.stream or sys.stdout
        stream.write(f"\n{message}\n")
        stream.flush()

        log_whale(transfer)
        self.sent += 1
