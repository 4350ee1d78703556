"""
Frame Mover

Moves image files whose names end in selected frame numbers from one
directory tree to another, preserving structure and skipping content
that already exists at the destination.
"""

__version__ = "1.0.0"
__author__ = "Homelab Team"

from .config import Config
from .exceptions import (
    FrameMoverError,
    InvalidConfiguration,
    IoError,
    CrossDeviceFallbackFailure,
    RunAlreadyActive,
)
from .models import CancellationToken, Phase, ProgressSnapshot, RunResult
from .suffixes import SuffixSet
from .engine import MoveEngine
from .runner import MoveRunner
from .progress import ProgressChannel
from .reporter import RunReporter

__all__ = [
    'Config',
    'FrameMoverError',
    'InvalidConfiguration',
    'IoError',
    'CrossDeviceFallbackFailure',
    'RunAlreadyActive',
    'CancellationToken',
    'Phase',
    'ProgressSnapshot',
    'RunResult',
    'SuffixSet',
    'MoveEngine',
    'MoveRunner',
    'ProgressChannel',
    'RunReporter',
]
