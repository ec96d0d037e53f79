"""
Media Date Sorter

Copies or moves photos and videos from a source tree into a destination
tree organized by capture date, skipping byte-identical files and
renaming files that collide on name.
"""

__version__ = "0.1.0"
__author__ = "Homelab Team"

from .config import Config, RunConfig
from .dates import DateResolver
from .destination import DestinationResolver, Outcome
from .media import MediaKind, classify
from .pool import WorkerPool, effective_workers
from .reporter import FileResult, RunReport
from .sorter import MediaSorter, SetupError
from .transfer import TransferError, transfer_file

__all__ = [
    'Config',
    'RunConfig',
    'DateResolver',
    'DestinationResolver',
    'Outcome',
    'MediaKind',
    'classify',
    'WorkerPool',
    'effective_workers',
    'FileResult',
    'RunReport',
    'MediaSorter',
    'SetupError',
    'TransferError',
    'transfer_file',
]
