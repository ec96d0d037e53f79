"""File transfer with optional move semantics."""

import logging
import os
import shutil
from pathlib import Path

logger = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 1024 * 1024


class TransferError(Exception):
    """A copy, directory creation or source removal failed."""

    def __init__(self, path: Path, cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"{self.path}: {cause}")


def _remove_partial(destination: Path):
    try:
        destination.unlink()
    except FileNotFoundError:
        pass
    except OSError as e:
        logger.warning(f"Could not remove partial file {destination}: {e}")


def transfer_file(source: Path, destination: Path, move: bool = False) -> Path:
    """
    Copy a file, creating parent directories, and optionally delete the source.

    Args:
        source: Source file path
        destination: Destination file path (created or overwritten)
        move: Delete the source once the copy has fully succeeded

    Returns:
        The destination path

    Raises:
        TransferError: On any directory, copy or removal failure
    """
    source = Path(source)
    destination = Path(destination)

    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise TransferError(destination.parent, e) from e

    try:
        src_file = open(source, 'rb')
    except OSError as e:
        raise TransferError(source, e) from e

    with src_file:
        try:
            dst_file = open(destination, 'wb')
        except OSError as e:
            raise TransferError(destination, e) from e

        try:
            with dst_file:
                shutil.copyfileobj(src_file, dst_file, COPY_BUFFER_SIZE)
        except OSError as e:
            _remove_partial(destination)
            raise TransferError(destination, e) from e

    try:
        shutil.copystat(source, destination)
    except OSError as e:
        logger.debug(f"Could not copy timestamps to {destination}: {e}")

    logger.debug(f"Copied: {source} -> {destination}")

    if move:
        try:
            os.remove(source)
        except OSError as e:
            raise TransferError(source, e) from e
        logger.debug(f"Removed source after copy: {source}")

    return destination
