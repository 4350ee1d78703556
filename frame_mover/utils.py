"""Utility functions for frame mover."""

import hashlib
import os
import psutil
from pathlib import Path
from typing import Optional
import logging

from .exceptions import IoError

logger = logging.getLogger(__name__)

TEMP_PREFIX = '.framemove-'
TEMP_SUFFIX = '.partial'


def calculate_sha256(file_path: Path, chunk_size: int = 64 * 1024) -> str:
    """
    Calculate SHA256 hash of a file's full contents.

    Args:
        file_path: Path to file
        chunk_size: Size of chunks to read at a time

    Returns:
        SHA256 hash as hexadecimal string

    Raises:
        IoError: If the file cannot be fully read
    """
    hasher = hashlib.sha256()
    try:
        with open(file_path, 'rb') as f:
            while chunk := f.read(chunk_size):
                hasher.update(chunk)
    except OSError as e:
        raise IoError(f"Failed to hash {file_path}: {e}", file_path) from e
    return hasher.hexdigest()


def get_file_size(file_path: Path) -> int:
    """
    Get file size in bytes.

    Raises:
        IoError: If the file cannot be stat'ed
    """
    try:
        return file_path.stat().st_size
    except OSError as e:
        raise IoError(f"Failed to get size for {file_path}: {e}", file_path) from e


def format_bytes(bytes_value: int) -> str:
    """
    Format bytes as human-readable string.

    Args:
        bytes_value: Size in bytes

    Returns:
        Formatted string like "1.2GB"
    """
    if bytes_value == 0:
        return "0B"

    units = ['B', 'KB', 'MB', 'GB', 'TB']
    unit_index = 0
    size = float(bytes_value)

    while size >= 1024.0 and unit_index < len(units) - 1:
        size /= 1024.0
        unit_index += 1

    return f"{size:.1f}{units[unit_index]}"


def get_available_space(path: Path) -> Optional[int]:
    """
    Get available disk space for a path in bytes.

    Args:
        path: Path to check

    Returns:
        Available space in bytes, None if it cannot be determined
    """
    try:
        usage = psutil.disk_usage(str(path))
        return usage.free
    except Exception as e:
        logger.warning(f"Failed to get disk space for {path}: {e}")
        return None


def ensure_directory(path: Path) -> None:
    """
    Ensure directory exists, creating it and any missing parents.

    Raises:
        IoError: If the directory cannot be created
    """
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise IoError(f"Failed to create directory {path}: {e}", path) from e


def is_within(path: Path, root: Path) -> bool:
    """Check whether resolved `path` equals or sits below resolved `root`."""
    path = path.resolve()
    root = root.resolve()
    return path == root or root in path.parents


def is_temp_artifact(name: str) -> bool:
    """Check whether a filename is a leftover cross-device temporary copy."""
    return name.startswith(TEMP_PREFIX) and name.endswith(TEMP_SUFFIX)


def fsync_file(file_path: Path) -> None:
    """Flush a written file to stable storage."""
    fd = os.open(str(file_path), os.O_RDONLY)
    try:
        os.fsync(fd)
    finally:
        os.close(fd)
