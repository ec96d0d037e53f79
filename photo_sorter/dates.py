"""Capture date resolution for media files.

Each media kind has an ordered list of strategies. A strategy returns a
``datetime`` (local, naive) or ``None``; metadata results are validated
before being accepted. The filesystem modification time closes every chain.
"""

import json
import os
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Dict, List, Optional
import logging

import exifread
from hachoir.core import config as hachoir_config
from hachoir.metadata import extractMetadata
from hachoir.parser import createParser

from .media import MediaKind

logger = logging.getLogger(__name__)

# hachoir reports parse problems on its own stderr channel
hachoir_config.quiet = True

# Seconds between the ISO base media epoch (1904-01-01) and the Unix epoch
MP4_EPOCH_OFFSET = 2082844800
FUTURE_THRESHOLD = timedelta(hours=24)
EXIF_DATE_TAGS = ('EXIF DateTimeOriginal', 'EXIF DateTimeDigitized', 'Image DateTime')
EXIF_DATE_FORMAT = '%Y:%m:%d %H:%M:%S'

Strategy = Callable[[Path], Optional[datetime]]


def container_epoch_to_unix(raw_value: int, epoch_offset_seconds: int) -> int:
    """Translate a container timestamp to Unix seconds.

    ``epoch_offset_seconds`` is the distance from the container epoch to
    1970-01-01; it is positive for epochs before the Unix epoch.
    """
    return int(raw_value) - epoch_offset_seconds


def is_valid_capture_time(value: datetime, now: Optional[datetime] = None) -> bool:
    """Reject dates before the Unix epoch or more than 24h in the future."""
    if now is None:
        now = datetime.now(value.tzinfo)
    try:
        if value.timestamp() < 0:
            return False
    except (OverflowError, OSError, ValueError):
        return False
    return value <= now + FUTURE_THRESHOLD


def exif_capture_time(file_path: Path) -> Optional[datetime]:
    """Extract date from EXIF tags using exifread."""
    try:
        with open(file_path, 'rb') as f:
            tags = exifread.process_file(f, stop_tag='DateTimeDigitized', details=False)
    except Exception as e:
        # exifread raises a variety of errors on damaged headers
        logger.debug(f"Could not read EXIF from {file_path}: {e}")
        return None

    for tag_name in EXIF_DATE_TAGS:
        tag = tags.get(tag_name)
        if not tag:
            continue
        # Format: "2020:07:28 11:49:03"
        date_str = str(tag).strip().rstrip('\x00')
        try:
            return datetime.strptime(date_str[:19], EXIF_DATE_FORMAT)
        except ValueError:
            logger.debug(f"Unparseable {tag_name} '{date_str}' in {file_path}")
    return None


def utc_to_local(value: datetime) -> datetime:
    """Naive UTC datetime to naive local time."""
    return value.replace(tzinfo=timezone.utc).astimezone().replace(tzinfo=None)


def container_capture_time(file_path: Path) -> Optional[datetime]:
    """
    Creation time from the container header (MP4/MOV/3GP movie header).

    Args:
        file_path: Path to video file

    Returns:
        Creation time as naive local datetime, or None if the container
        carries none
    """
    try:
        parser = createParser(str(file_path))
    except Exception as e:
        logger.warning(f"Video: failed to open {file_path}: {e}")
        return None
    if not parser:
        logger.debug(f"Video: unrecognized container {file_path}")
        return None

    try:
        with parser:
            metadata = extractMetadata(parser)
    except Exception as e:
        # hachoir surfaces truncated or malformed atoms as assorted errors
        logger.warning(f"Video: extract metadata failed for {file_path}: {e}")
        return None

    if not metadata or not metadata.has('creation_date'):
        return None
    created = metadata.get('creation_date')
    if not isinstance(created, datetime):
        return None
    try:
        # Movie headers store UTC
        return utc_to_local(created)
    except (OverflowError, OSError, ValueError):
        logger.warning(f"Video: creation time {created} out of range in {file_path}")
        return None


def ffprobe_capture_time(file_path: Path) -> Optional[datetime]:
    """Extract creation date from video using ffprobe."""
    try:
        result = subprocess.run(
            ['ffprobe', '-v', 'quiet', '-print_format', 'json',
             '-show_entries', 'format_tags=creation_time', str(file_path)],
            capture_output=True, text=True, timeout=10
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug(f"ffprobe unavailable for {file_path}: {e}")
        return None

    if result.returncode != 0:
        return None
    try:
        data = json.loads(result.stdout or '{}')
        creation_time = data.get('format', {}).get('tags', {}).get('creation_time', '')
        if not creation_time:
            return None
        # Format: "2020-07-28T11:49:03.000000Z"
        parsed = datetime.fromisoformat(creation_time[:19])
    except ValueError as e:
        logger.debug(f"Could not read video date from {file_path}: {e}")
        return None
    return utc_to_local(parsed)


def modification_time(file_path: Path) -> datetime:
    """Filesystem modification time; raises OSError if the path is gone."""
    return datetime.fromtimestamp(os.stat(file_path).st_mtime)


DEFAULT_STRATEGIES: Dict[MediaKind, List[Strategy]] = {
    MediaKind.IMAGE: [exif_capture_time],
    MediaKind.VIDEO: [container_capture_time, ffprobe_capture_time],
    MediaKind.UNKNOWN: [],
}


class DateResolver:
    """Resolves the capture instant of a media file."""

    def __init__(self, strategies: Optional[Dict[MediaKind, List[Strategy]]] = None):
        self.strategies = strategies if strategies is not None else DEFAULT_STRATEGIES

    def resolve(self, file_path: Path, kind: MediaKind) -> datetime:
        """
        Resolve the capture time of a file.

        Metadata strategies for the file's kind are tried in order; the
        first valid result wins. Otherwise the modification time is used.

        Args:
            file_path: Path to media file
            kind: Classified media kind

        Returns:
            Capture time as a naive local datetime

        Raises:
            OSError: If even the modification time cannot be read
        """
        for strategy in self.strategies.get(kind, []):
            value = strategy(file_path)
            if value is None:
                continue
            if is_valid_capture_time(value):
                logger.debug(f"{strategy.__name__} -> {value} for {file_path}")
                return value
            logger.warning(f"Got unrealistic date {value} from {strategy.__name__} in {file_path}")

        return modification_time(file_path)
