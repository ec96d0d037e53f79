"""Run results and end-of-run summary."""

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from .destination import Outcome
from .utils import format_bytes, format_duration

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileResult:
    """Result of one per-file job; ``outcome`` is None when it failed."""
    source: Path
    outcome: Optional[Outcome] = None
    final_path: Optional[Path] = None
    error: Optional[str] = None
    size: int = 0

    @property
    def failed(self) -> bool:
        return self.outcome is None

    @classmethod
    def failure(cls, source: Path, cause) -> 'FileResult':
        return cls(source=source, error=str(cause))


@dataclass
class RunReport:
    """Aggregated outcomes of a run.

    Only the aggregation loop calls ``add``; workers hand their results
    over through the pool and never touch the report.
    """
    skipped: List[Path] = field(default_factory=list)
    renamed: List[Tuple[Path, Path]] = field(default_factory=list)
    errors: List[Tuple[Path, str]] = field(default_factory=list)
    copied: int = 0
    copied_size: int = 0
    processed: int = 0
    started: float = field(default_factory=time.monotonic)
    elapsed: float = 0.0

    def add(self, result: FileResult):
        """Record one file result in arrival order."""
        self.processed += 1
        if result.failed:
            self.errors.append((result.source, result.error or 'unknown error'))
        elif result.outcome is Outcome.SKIP_IDENTICAL:
            self.skipped.append(result.source)
        else:
            self.copied += 1
            self.copied_size += result.size
            if result.outcome is Outcome.RENAME_AND_COPY:
                self.renamed.append((result.source, result.final_path))

    def finish(self):
        self.elapsed = time.monotonic() - self.started

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def generate_summary_report(self) -> str:
        """
        Generate human-readable summary report.

        Returns:
            Formatted summary with skipped files, renames and errors
        """
        report = []
        report.append("=" * 50)
        report.append("MEDIA SORT SUMMARY")
        report.append("=" * 50)

        if self.skipped:
            report.append(f"Skipped identical files ({len(self.skipped):,}):")
            for source in self.skipped:
                report.append(f"  {source}")
            report.append("")

        if self.renamed:
            report.append(f"Renamed files ({len(self.renamed):,}):")
            for source, final_path in self.renamed:
                report.append(f"  {source} -> {final_path}")
            report.append("")

        if self.errors:
            report.append(f"Failed files ({len(self.errors):,}):")
            for path, cause in self.errors:
                report.append(f"  {path}: {cause}")
            report.append("")

        report.append(f"Copied: {self.copied:,} files ({format_bytes(self.copied_size)})")
        report.append(f"Processed {self.processed:,} files in {format_duration(self.elapsed)}")
        return "\n".join(report)

    def log_summary(self):
        """Write the summary to the log, one record per entry."""
        for source in self.skipped:
            logger.info(f"Skipped: {source}")
        for source, final_path in self.renamed:
            logger.info(f"Renamed: {source} -> {final_path}")
        for path, cause in self.errors:
            logger.error(f"Failed: {path}: {cause}")
        logger.info(f"Done. Processed {self.processed} files in {format_duration(self.elapsed)}")
