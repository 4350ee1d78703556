"""Exception types for frame mover runs."""

from pathlib import Path
from typing import Optional


class FrameMoverError(Exception):
    """Base class for all frame mover errors."""
    pass


class InvalidConfiguration(FrameMoverError):
    """Run parameters are unusable; the run never starts."""
    pass


class RunAlreadyActive(FrameMoverError):
    """A background run is already in progress."""
    pass


class IoError(FrameMoverError):
    """A single file could not be read, written or moved."""

    def __init__(self, message: str, path: Optional[Path] = None):
        super().__init__(message)
        self.path = path


class CrossDeviceFallbackFailure(IoError):
    """The copy+delete fallback only partially completed."""

    def __init__(self, message: str, path: Optional[Path] = None,
                 temp_path: Optional[Path] = None):
        super().__init__(message, path)
        self.temp_path = temp_path
