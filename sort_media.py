#!/usr/bin/env python3
"""
Media Sort CLI

Copies or moves photos and videos from a source tree into
DEST/YYYY/YYYYMMDD[/VIDEO] folders by capture date.
"""

import sys
import logging
import click
from datetime import datetime
from pathlib import Path
from colorama import init, Fore, Style

from photo_sorter import (
    Config,
    MediaSorter,
    RunConfig,
    SetupError,
    __version__,
)

# Initialize colorama for cross-platform colored output
init()

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'

# Handlers installed by setup_logging, replaced on each call
_handlers = []


def setup_logging(level: str = 'INFO', log_file: Path = None):
    """Set up logging configuration."""
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)

    # Root logger
    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    while _handlers:
        handler = _handlers.pop()
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.append(console_handler)

    # File handler if requested
    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(formatter)
        _handlers.append(file_handler)

    for handler in _handlers:
        root_logger.addHandler(handler)

    # Reduce noise from libraries
    logging.getLogger('exifread').setLevel(logging.WARNING)


def log_run_start(source: Path, target: Path):
    """Write the start-of-run banner to the log."""
    logger = logging.getLogger('sort_media')
    logger.info(f"sort_media version: {__version__}")
    logger.info(f"Start time: {datetime.now().isoformat(timespec='seconds')}")
    logger.info(f"Command: {' '.join(sys.argv)}")
    logger.info(f"Source: {source}")
    logger.info(f"Target: {target}")


def print_header(title: str):
    """Print a formatted header."""
    click.echo(f"\n{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}{title.center(60)}{Style.RESET_ALL}")
    click.echo(f"{Fore.CYAN}{'=' * 60}{Style.RESET_ALL}\n")
    sys.stdout.flush()

def print_success(message: str):
    """Print success message."""
    click.echo(f"{Fore.GREEN}OK: {message}{Style.RESET_ALL}")
    sys.stdout.flush()

def print_warning(message: str):
    """Print warning message."""
    click.echo(f"{Fore.YELLOW}WARN: {message}{Style.RESET_ALL}")
    sys.stdout.flush()

def print_error(message: str):
    """Print error message."""
    click.echo(f"{Fore.RED}ERROR: {message}{Style.RESET_ALL}", err=True)
    sys.stderr.flush()

def print_info(message: str):
    """Print info message."""
    click.echo(f"{Fore.BLUE}INFO: {message}{Style.RESET_ALL}")
    sys.stdout.flush()


@click.command()
@click.argument('source', type=click.Path(file_okay=False, path_type=Path))
@click.argument('destination', type=click.Path(file_okay=False, path_type=Path))
@click.option('--log', 'use_log', is_flag=True, help='Also write log records to a file')
@click.option('--move/--copy', 'move', default=None,
              help='Delete source files after a successful copy (default: copy)')
@click.option('--workers', '-w', type=click.IntRange(min=1), default=None,
              help='Number of parallel workers (default: number of CPUs)')
@click.option('--config', '-c', help='Path to configuration file')
@click.option('--log-level', '-l', default=None,
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              help='Logging level')
@click.option('--yes', '-y', is_flag=True, help='Do not ask before writing into a non-empty destination')
@click.option('--progress/--no-progress', default=True, help='Show a progress bar')
@click.version_option(__version__)
def cli(source, destination, use_log, move, workers, config, log_level, yes, progress):
    """Media Sort - organize photos and videos into dated folders."""

    try:
        config_obj = Config(config)
    except Exception as e:
        print_error(f"Failed to load configuration: {e}")
        sys.exit(1)

    errors = config_obj.validate_config()
    if errors:
        print_error("Configuration validation failed:")
        for error in errors:
            click.echo(f"  - {error}", err=True)
        sys.exit(1)

    log_file = Path(config_obj.get_log_file()) if use_log else None
    setup_logging(log_level or config_obj.get_log_level(), log_file)

    run_config = RunConfig.from_config(
        config_obj, source, destination,
        move=move, workers=workers, logging_enabled=use_log,
    )
    if run_config.logging_enabled:
        log_run_start(run_config.source_root, run_config.dest_root)

    sorter = MediaSorter(run_config, show_progress=progress)

    try:
        files = sorter.collect_files()

        not_empty = sorter.prepare_destination()
        if not_empty and not yes:
            if not click.confirm("Target directory is not empty. Continue?", default=False):
                click.echo("Operation cancelled.")
                sys.exit(1)
    except SetupError as e:
        print_error(str(e))
        sys.exit(1)

    print_header("SORTING MEDIA")
    print_info(f"{len(files):,} media files in {run_config.source_root}")
    sorter.check_free_space(files)

    report = sorter.run(files)

    if run_config.logging_enabled:
        report.log_summary()

    click.echo(report.generate_summary_report())

    if report.has_errors:
        print_warning(f"Completed with {len(report.errors):,} failed files")
    else:
        print_success(f"Sorted into {run_config.dest_root}")
    sys.stdout.flush()


if __name__ == '__main__':
    cli()
