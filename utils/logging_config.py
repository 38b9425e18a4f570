"""
Logging configuration for USDC Whale Detector.

Features:
- Separate log file for detected whale transfers
- Rotating file handlers (max 50MB per file, keep 5 backups)
- Automatic cleanup of old logs (keeps last 7 days)
- Console output for real-time monitoring
"""
import logging
import logging.handlers
from datetime import datetime, timedelta
from pathlib import Path
from typing import Union

from core.models import WhaleTransfer

logger = logging.getLogger(__name__)


# Rotation settings
MAX_BYTES = 50 * 1024 * 1024  # 50 MB per file
BACKUP_COUNT = 5

# Cleanup settings
LOG_RETENTION_DAYS = 7

WHALES_LOGGER = "whales"


def setup_logging(log_level: str = "INFO", log_dir: Union[str, Path] = "logs") -> dict:
    """
    Configure logging with rotation and cleanup.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_dir: Directory for log files, created if missing

    Returns:
        dict: Dictionary of specialized loggers
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    log_dir = Path(log_dir)
    log_dir.mkdir(parents=True, exist_ok=True)

    # Clean up before handlers reopen the current files
    deleted_count = cleanup_old_logs(log_dir)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Console handler (for real-time monitoring)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(formatter)

    # ===== SYSTEM LOG =====
    system_handler = _rotating_handler(log_dir / "system.log", level, formatter)

    # ===== WHALES LOG =====
    # One line per detected transfer
    whales_handler = _rotating_handler(log_dir / "whales.log", logging.INFO, formatter)

    # ===== ERRORS LOG =====
    errors_handler = _rotating_handler(log_dir / "errors.log", logging.ERROR, formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()
    root_logger.addHandler(console_handler)
    root_logger.addHandler(system_handler)
    root_logger.addHandler(errors_handler)

    # aiohttp is noisy at DEBUG
    logging.getLogger("aiohttp").setLevel(logging.WARNING)

    whales_logger = logging.getLogger(WHALES_LOGGER)
    whales_logger.handlers.clear()
    whales_logger.addHandler(whales_handler)
    whales_logger.propagate = True  # Also log to root (console + system)

    root_logger.info(
        f"Logging to {log_dir.absolute()} at {logging.getLevelName(level)} "
        f"({MAX_BYTES // (1024 * 1024)} MB x {BACKUP_COUNT} rotation, {LOG_RETENTION_DAYS} day retention)"
    )
    if deleted_count:
        root_logger.info(f"Removed {deleted_count} expired log files from {log_dir}")

    return {
        'system': root_logger,
        'whales': whales_logger,
    }


def _rotating_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding='utf-8'
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def cleanup_old_logs(log_dir: Union[str, Path] = "logs") -> int:
    """Remove current and rotated log files untouched for LOG_RETENTION_DAYS. Returns how many were removed."""
    log_dir = Path(log_dir)
    cutoff = (datetime.now() - timedelta(days=LOG_RETENTION_DAYS)).timestamp()
    removed = 0
    freed_bytes = 0

    # system.log, whales.log, ... plus their .log.1 .. .log.N backups
    for log_path in sorted(set(log_dir.glob("*.log")) | set(log_dir.glob("*.log.*"))):
        try:
            stat = log_path.stat()
            if stat.st_mtime >= cutoff:
                continue
            log_path.unlink()
        except OSError as e:
            logger.error(f"Could not remove expired log {log_path}: {e}")
            continue
        removed += 1
        freed_bytes += stat.st_size

    if removed:
        logger.info(f"Removed {removed} expired log files ({freed_bytes / (1024 * 1024):.2f} MB)")

    return removed


def log_whale(transfer: WhaleTransfer):
    """Log a whale transfer to the dedicated whales log."""
    logging.getLogger(WHALES_LOGGER).info(
        f"{transfer.chain.display_name} ${transfer.amount_usd:,.2f} "
        f"{transfer.from_address} -> {transfer.to_address} "
        f"block={transfer.block_number} tx={transfer.tx_hash}"
    )
