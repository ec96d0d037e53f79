"""Media classification and source tree enumeration."""

import logging
import os
from enum import Enum
from pathlib import Path
from typing import Generator

logger = logging.getLogger(__name__)


class MediaKind(Enum):
    """Kind of media a file holds, derived from its extension."""
    IMAGE = 'image'
    VIDEO = 'video'
    UNKNOWN = 'unknown'


EXTENSION_KINDS = {
    '.jpg': MediaKind.IMAGE,
    '.jpeg': MediaKind.IMAGE,
    '.png': MediaKind.IMAGE,
    '.heic': MediaKind.IMAGE,
    '.mp4': MediaKind.VIDEO,
    '.avi': MediaKind.VIDEO,
    '.mov': MediaKind.VIDEO,
    '.mkv': MediaKind.VIDEO,
    '.mts': MediaKind.VIDEO,
    '.3gp': MediaKind.VIDEO,
}


def classify(file_path) -> MediaKind:
    """Map a path to its media kind by case-insensitive extension."""
    return EXTENSION_KINDS.get(Path(file_path).suffix.lower(), MediaKind.UNKNOWN)


def is_media_file(file_path: Path) -> bool:
    """
    Check if file is a supported media file.

    Args:
        file_path: Path to file

    Returns:
        True if file is a regular file of a known media kind
    """
    return classify(file_path) is not MediaKind.UNKNOWN and file_path.is_file()


def _raise_walk_error(error: OSError):
    raise error


def find_media_files(directory: Path) -> Generator[Path, None, None]:
    """
    Recursively find all media files in a directory.

    Files of unknown kind are dropped here and never reach the workers.
    Directories are visited in sorted order so runs are reproducible.

    Args:
        directory: Directory to search

    Yields:
        Path objects for media files found

    Raises:
        OSError: If any part of the tree cannot be listed
    """
    for dirpath, dirnames, filenames in os.walk(directory, onerror=_raise_walk_error):
        dirnames.sort()
        for filename in sorted(filenames):
            file_path = Path(dirpath) / filename
            if is_media_file(file_path):
                yield file_path
            else:
                logger.debug(f"Ignoring non-media file: {file_path}")
