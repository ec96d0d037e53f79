"""Configuration management for media sorting."""

import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Any, Optional
import logging

from .utils import get_cpu_count

logger = logging.getLogger(__name__)

DEFAULT_VIDEO_CATEGORY = "VIDEO"
DEFAULT_LOG_FILE = "sort_media.log"


class Config:
    """Manages optional YAML settings for media sorting."""

    def __init__(self, config_path: Optional[str] = None):
        """
        Initialize configuration.

        Args:
            config_path: Path to config file. If None, searches the current
                directory; with no file found every setting uses its default.
        """
        self.config_path = config_path or self._find_config_file()
        self.config: Dict[str, Any] = {}
        if self.config_path:
            self._load_config()

    def _find_config_file(self) -> Optional[str]:
        """Find configuration file in standard locations."""
        # Look for config files in order of preference
        possible_paths = [
            "sort_media.local.yml",
            "sort_media.yml",
        ]

        for path in possible_paths:
            config_file = Path.cwd() / path
            if config_file.exists():
                logger.info(f"Found config file: {config_file}")
                return str(config_file.resolve())

        logger.debug("No configuration file found, using defaults")
        return None

    def _load_config(self) -> None:
        """Load configuration from YAML file."""
        try:
            with open(self.config_path, 'r') as f:
                self.config = yaml.safe_load(f) or {}
            logger.info(f"Loaded configuration from {self.config_path}")
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Failed to load config from {self.config_path}: {e}")
            raise

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path like 'sorting.workers'
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        try:
            for key in keys:
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def get_workers(self) -> int:
        """Get requested number of workers (defaults to CPU count)."""
        return self.get('sorting.workers', get_cpu_count())

    def should_move(self) -> bool:
        """Check if sources are deleted after a successful copy."""
        return self.get('sorting.move', False)

    def get_video_category(self) -> str:
        """Get name of the per-date subdirectory holding videos."""
        return self.get('sorting.video_category', DEFAULT_VIDEO_CATEGORY)

    def get_min_free_space_mb(self) -> int:
        """Get free space to keep in reserve on the destination, in MB."""
        return self.get('safety.min_free_space_mb', 0)

    def get_log_level(self) -> str:
        """Get logging level."""
        return self.get('logging.level', 'INFO')

    def get_log_file(self) -> str:
        """Get log file path used when file logging is enabled."""
        return self.get('logging.file', DEFAULT_LOG_FILE)

    def validate_config(self) -> List[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of validation error messages
        """
        errors = []

        workers = self.get_workers()
        if not isinstance(workers, int) or isinstance(workers, bool) or workers < 1:
            errors.append(f"Invalid sorting.workers value: {workers} (must be a positive integer)")

        if not isinstance(self.should_move(), bool):
            errors.append(f"Invalid sorting.move value: {self.should_move()} (must be true or false)")

        category = self.get_video_category()
        if not isinstance(category, str) or not category.strip() or '/' in category:
            errors.append(f"Invalid sorting.video_category value: {category!r}")

        min_free = self.get_min_free_space_mb()
        if not isinstance(min_free, int) or min_free < 0:
            errors.append(f"Invalid safety.min_free_space_mb value: {min_free}")

        return errors


@dataclass(frozen=True)
class RunConfig:
    """Read-only settings shared by every worker of one run."""
    source_root: Path
    dest_root: Path
    move_after_copy: bool = False
    workers: int = 1
    logging_enabled: bool = False
    video_category: str = DEFAULT_VIDEO_CATEGORY
    min_free_space_mb: int = 0

    @classmethod
    def from_config(
        cls,
        config: Config,
        source_root: Path,
        dest_root: Path,
        move: Optional[bool] = None,
        workers: Optional[int] = None,
        logging_enabled: bool = False,
    ) -> 'RunConfig':
        """Freeze file settings, with explicit arguments taking precedence."""
        return cls(
            source_root=Path(source_root).resolve(),
            dest_root=Path(dest_root).resolve(),
            move_after_copy=config.should_move() if move is None else move,
            workers=config.get_workers() if workers is None else workers,
            logging_enabled=logging_enabled,
            video_category=config.get_video_category(),
            min_free_space_mb=config.get_min_free_space_mb(),
        )
