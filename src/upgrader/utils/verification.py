"""Size verification utilities for staged media integrity checking."""

from pathlib import Path
from typing import Optional
import logging


def file_size(file_path: Path) -> Optional[int]:
    """Return the size of a file in bytes.

    Args:
        file_path: Path to the file

    Returns:
        Size in bytes, or None if the file doesn't exist
    """
    try:
        return file_path.stat().st_size
    except FileNotFoundError:
        return None


def verify_size(file_path: Path, expected_size: int) -> bool:
    """Verify a file's size matches the expected value.

    Args:
        file_path: Path to file to verify
        expected_size: Expected size in bytes

    Returns:
        True if sizes match, False otherwise (including a missing file)

    Raises:
        ValueError: If expected_size is negative
    """
    logger = logging.getLogger("upgrader.verification")

    if expected_size < 0:
        raise ValueError(f"Invalid expected size: {expected_size}")

    actual_size = file_size(file_path)
    match = actual_size == expected_size
    if match:
        logger.info(f"Size verification passed for {file_path.name}: {actual_size} bytes")
    else:
        logger.error(
            f"Size mismatch for {file_path.name}: "
            f"expected {expected_size}, got {actual_size}"
        )

    return match
