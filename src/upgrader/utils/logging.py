"""Session logger setup for the upgrade orchestrator."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

SUCCESS = 25

logging.addLevelName(SUCCESS, "SUCCESS")
logging.addLevelName(logging.WARNING, "WARN")


def log_success(logger: logging.Logger, message: str, *args) -> None:
    """Log a message at SUCCESS level."""
    logger.log(SUCCESS, message, *args)


def setup_logger(
    name: str = "upgrader",
    log_file: str = "./logs/upgrader.log",
    max_bytes: int = 0,
    backup_count: int = 0,
    level: int = logging.INFO,
) -> logging.Logger:
    """Setup append-only file logger with second-precision timestamps.

    Args:
        name: Logger name
        log_file: Path to log file (created if doesn't exist)
        max_bytes: Max size before rotation (default 0, never rotate so the
            session log stays an append-only audit trail)
        backup_count: Number of rotated files to keep
        level: Logging level (DEBUG/INFO/WARN/ERROR)

    Returns:
        Configured logger instance
    """
    # Create log directory if it doesn't exist
    log_path = Path(log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Avoid duplicate handlers if already configured
    if logger.handlers:
        return logger

    file_handler = RotatingFileHandler(
        log_file,
        mode="a",
        maxBytes=max_bytes,
        backupCount=backup_count,
        encoding="utf-8",
    )
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    file_handler.setFormatter(formatter)
    console_handler.setFormatter(formatter)

    logger.addHandler(file_handler)
    logger.addHandler(console_handler)

    return logger
