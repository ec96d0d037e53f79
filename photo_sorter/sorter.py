"""Sorting of a media tree into dated destination folders."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from .config import RunConfig
from .dates import DateResolver
from .destination import (
    DestinationResolver,
    MediaFile,
    Outcome,
    destination_path,
)
from .media import classify, find_media_files
from .pool import WorkerPool, effective_workers
from .reporter import FileResult, RunReport
from .transfer import TransferError, transfer_file
from .utils import (
    format_bytes,
    get_available_space,
    get_cpu_count,
    get_file_size,
    is_directory_empty,
)

logger = logging.getLogger(__name__)


class SetupError(Exception):
    """The run cannot start: source or destination is unusable."""


class MediaSorter:
    """Copies (or moves) media files into ``YYYY/YYYYMMDD[/VIDEO]`` folders."""

    def __init__(
        self,
        run_config: RunConfig,
        date_resolver: Optional[DateResolver] = None,
        destination_resolver: Optional[DestinationResolver] = None,
        show_progress: bool = False,
    ):
        """
        Initialize sorter.

        Args:
            run_config: Frozen settings for this run
            date_resolver: Capture date resolver (default strategies if None)
            destination_resolver: Collision resolver shared by all workers
            show_progress: Display a progress bar while processing
        """
        self.run_config = run_config
        self.date_resolver = date_resolver or DateResolver()
        self.destination_resolver = destination_resolver or DestinationResolver()
        self.show_progress = show_progress

    def prepare_destination(self) -> bool:
        """
        Create the destination root if needed.

        Returns:
            True if the destination already holds entries

        Raises:
            SetupError: If the source is missing or the destination cannot
                be created or read
        """
        dest_root = self.run_config.dest_root
        source_root = self.run_config.source_root
        if not source_root.is_dir():
            raise SetupError(f"Source directory not found: {source_root}")
        if dest_root == source_root or source_root in dest_root.parents:
            raise SetupError(f"Target directory cannot be inside source directory: {dest_root}")

        if not dest_root.exists():
            try:
                dest_root.mkdir(parents=True)
            except OSError as e:
                raise SetupError(f"Failed to create target directory {dest_root}: {e}") from e
            logger.info(f"Created target directory: {dest_root}")
            return False

        if not dest_root.is_dir():
            raise SetupError(f"Target is not a directory: {dest_root}")
        try:
            return not is_directory_empty(dest_root)
        except OSError as e:
            raise SetupError(f"Failed to read target directory {dest_root}: {e}") from e

    def collect_files(self) -> List[Path]:
        """
        Enumerate media files under the source root.

        Raises:
            SetupError: If the source tree cannot be walked
        """
        source_root = self.run_config.source_root
        if not source_root.is_dir():
            raise SetupError(f"Source directory not found: {source_root}")
        try:
            files = list(find_media_files(source_root))
        except OSError as e:
            raise SetupError(f"Error walking directory {source_root}: {e}") from e
        logger.info(f"Found {len(files):,} media files in {source_root}")
        return files

    def check_free_space(self, files: List[Path]) -> bool:
        """Warn when the destination looks too small for the run."""
        needed = sum(get_file_size(f) for f in files)
        needed += self.run_config.min_free_space_mb * 1024 * 1024
        available = get_available_space(self.run_config.dest_root)
        if needed > available:
            logger.warning(
                f"Destination may run out of space: need {format_bytes(needed)}, "
                f"have {format_bytes(available)}"
            )
            return False
        logger.debug(f"Space check OK: need {format_bytes(needed)}, have {format_bytes(available)}")
        return True

    def resolve_capture_time(self, source: Path, kind) -> datetime:
        try:
            return self.date_resolver.resolve(source, kind)
        except OSError as e:
            logger.warning(f"Failed to get date for {source}: {e}")
            return datetime.now()

    def process_file(self, source: Path) -> FileResult:
        """
        Run the full pipeline for one file.

        Resolves the capture date, computes the dated destination, decides
        skip/copy/rename and transfers. Name allocation and the write happen
        under the destination directory's lock.

        Args:
            source: Source media file

        Returns:
            Result of this file; failures are returned, not raised
        """
        kind = classify(source)
        media_file = MediaFile(
            source=source,
            kind=kind,
            captured=self.resolve_capture_time(source, kind),
            video_category=self.run_config.video_category,
        )
        candidate = destination_path(self.run_config.dest_root, media_file)

        with self.destination_resolver.lock_for(candidate.parent):
            decision = self.destination_resolver.resolve(source, candidate)
            if decision.outcome is Outcome.SKIP_IDENTICAL:
                return FileResult(source, decision.outcome, decision.final_path)

            size = get_file_size(source)
            logger.debug(f"Copying: {source} -> {decision.final_path}")
            try:
                transfer_file(source, decision.final_path, move=self.run_config.move_after_copy)
            except TransferError as e:
                logger.error(f"Copy failed: {source} -> {decision.final_path}: {e}")
                return FileResult.failure(source, e)

        return FileResult(source, decision.outcome, decision.final_path, size=size)

    def run(self, files: Optional[List[Path]] = None) -> RunReport:
        """
        Sort all media files of the source tree.

        Args:
            files: Files to process; walks the source root if None

        Returns:
            Report of skipped, renamed and failed files

        Raises:
            SetupError: If the source tree cannot be walked
        """
        report = RunReport()
        if files is None:
            files = self.collect_files()

        workers = effective_workers(self.run_config.workers, len(files), get_cpu_count())
        action = 'Moving' if self.run_config.move_after_copy else 'Copying'
        logger.info(f"{action} {len(files):,} files with {workers} workers")

        pool = WorkerPool(workers, show_progress=self.show_progress)
        for result in pool.run(files, self.process_file, FileResult.failure):
            report.add(result)

        report.finish()
        logger.info(
            f"Sort complete: {report.copied:,} copied, {len(report.skipped):,} skipped, "
            f"{len(report.renamed):,} renamed, {len(report.errors):,} failed"
        )
        return report
