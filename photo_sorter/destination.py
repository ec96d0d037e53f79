"""Destination layout and collision handling."""

import logging
import threading
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict

from .config import DEFAULT_VIDEO_CATEGORY
from .media import MediaKind
from .utils import files_are_equal

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """What happens to a source file at its destination."""
    COPY = 'copy'
    SKIP_IDENTICAL = 'skip-identical'
    RENAME_AND_COPY = 'rename-and-copy'


@dataclass(frozen=True)
class MediaFile:
    """A source file with its resolved placement attributes."""
    source: Path
    kind: MediaKind
    captured: datetime
    video_category: str = DEFAULT_VIDEO_CATEGORY

    @property
    def relative_dir(self) -> Path:
        """``YYYY/YYYYMMDD`` plus the video category for videos."""
        relative = Path(self.captured.strftime('%Y')) / self.captured.strftime('%Y%m%d')
        if self.kind is MediaKind.VIDEO:
            relative = relative / self.video_category
        return relative

    @property
    def filename(self) -> str:
        return self.source.name


@dataclass(frozen=True)
class DestinationDecision:
    """Where a file goes and whether it is written."""
    final_path: Path
    outcome: Outcome


def destination_path(dest_root: Path, media_file: MediaFile) -> Path:
    """Candidate destination of a media file under the destination root."""
    return Path(dest_root) / media_file.relative_dir / media_file.filename


def numbered_name(path: Path, number: int) -> Path:
    """``dir/name.ext`` -> ``dir/name_<number>.ext``."""
    return path.with_name(f"{path.stem}_{number}{path.suffix}")


class DestinationResolver:
    """Decides between copy, skip and renamed copy for a destination."""

    def __init__(self):
        self._locks: Dict[Path, threading.Lock] = defaultdict(threading.Lock)
        self._locks_guard = threading.Lock()

    def lock_for(self, directory: Path) -> threading.Lock:
        """
        Lock serializing name allocation inside one destination directory.

        Holding it from ``resolve`` until the file is written keeps two
        workers from claiming the same free name.
        """
        with self._locks_guard:
            return self._locks[Path(directory)]

    def resolve(self, source: Path, candidate: Path) -> DestinationDecision:
        """
        Decide the final destination of ``source``.

        Args:
            source: Source file path
            candidate: Computed destination path

        Returns:
            Decision with final path and outcome
        """
        if not candidate.exists():
            return DestinationDecision(candidate, Outcome.COPY)

        if files_are_equal(source, candidate):
            logger.debug(f"Identical file already at {candidate}, skipping {source}")
            return DestinationDecision(candidate, Outcome.SKIP_IDENTICAL)

        number = 1
        while True:
            renamed = numbered_name(candidate, number)
            if not renamed.exists():
                logger.info(f"Renamed {candidate.name} -> {renamed.name}")
                return DestinationDecision(renamed, Outcome.RENAME_AND_COPY)
            number += 1
