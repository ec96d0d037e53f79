"""Utility functions for media sorting."""

import hashlib
import os
import psutil
from pathlib import Path
import logging

logger = logging.getLogger(__name__)


def calculate_md5(file_path: Path, chunk_size: int = 65536) -> str:
    """
    Calculate MD5 hash of a file.

    Args:
        file_path: Path to file
        chunk_size: Size of chunks to read at a time

    Returns:
        MD5 hash as hexadecimal string

    Raises:
        OSError: If the file cannot be read
    """
    hasher = hashlib.md5()
    with open(file_path, 'rb') as f:
        while chunk := f.read(chunk_size):
            hasher.update(chunk)
    return hasher.hexdigest()


def files_are_equal(first: Path, second: Path) -> bool:
    """
    Check whether two files have byte-identical content.

    Sizes are compared first; only same-sized files are hashed. Any I/O
    error counts as "not equal" so that callers fall back to a renamed
    copy instead of skipping.

    Args:
        first: Path to first file
        second: Path to second file

    Returns:
        True if both files have the same content
    """
    try:
        if Path(first).stat().st_size != Path(second).stat().st_size:
            return False
        return calculate_md5(first) == calculate_md5(second)
    except OSError as e:
        logger.error(f"Failed to compare files: {first} <-> {second}: {e}")
        return False


def get_file_size(file_path: Path) -> int:
    """
    Get file size in bytes.

    Args:
        file_path: Path to file

    Returns:
        File size in bytes, 0 if error
    """
    try:
        return file_path.stat().st_size
    except OSError as e:
        logger.error(f"Failed to get size for {file_path}: {e}")
        return 0


def format_bytes(bytes_value: int) -> str:
    """
    Format bytes as human-readable string.

    Args:
        bytes_value: Size in bytes

    Returns:
        Formatted string like "1.2GB"
    """
    if bytes_value == 0:
        return "0B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(bytes_value)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.1f}{units[unit_index]}"


def format_duration(seconds: float) -> str:
    """Format elapsed seconds as e.g. "1m 05.3s"."""
    minutes, seconds = divmod(seconds, 60)
    if minutes:
        return f"{int(minutes)}m {seconds:04.1f}s"
    return f"{seconds:.1f}s"


def get_available_space(path: Path) -> int:
    """
    Get available disk space for a path in bytes.

    Args:
        path: Path to check

    Returns:
        Available space in bytes
    """
    try:
        usage = psutil.disk_usage(str(path))
        return usage.free
    except OSError as e:
        logger.error(f"Failed to get disk space for {path}: {e}")
        return 0


def get_cpu_count() -> int:
    """Number of logical processing units, at least 1."""
    return psutil.cpu_count(logical=True) or 1


def is_directory_empty(path: Path) -> bool:
    """Check if a directory has no entries. Raises OSError if unreadable."""
    with os.scandir(path) as entries:
        return next(entries, None) is None
