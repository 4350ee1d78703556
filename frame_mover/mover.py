"""Filesystem moves with cross-volume fallback."""

import errno
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Optional

from .config import Config
from .exceptions import CrossDeviceFallbackFailure, IoError
from .utils import (
    TEMP_PREFIX,
    TEMP_SUFFIX,
    calculate_sha256,
    ensure_directory,
    format_bytes,
    fsync_file,
    get_available_space,
    get_file_size,
)

logger = logging.getLogger(__name__)


class FileMover:
    """Moves single files, preferring an atomic rename."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or Config()
        self.verify_copies = self.config.should_verify_copies()
        self.chunk_size = self.config.get_hash_chunk_size()
        self.min_free_space_bytes = self.config.get_min_free_space_mb() * 1024 * 1024

    def move(self, source: Path, destination: Path, expected_digest: Optional[str] = None) -> Path:
        """
        Move `source` to `destination`.

        Missing parent directories are created first. A same-volume rename
        is attempted; on EXDEV the file is copied to a temporary name in the
        destination directory, verified, the source deleted and the copy
        renamed into place.

        Args:
            source: File to move
            destination: Final path; must not already exist
            expected_digest: SHA256 of the source, used to verify fallback copies

        Returns:
            The destination path

        Raises:
            IoError: The move failed and the source is untouched
            CrossDeviceFallbackFailure: The fallback stopped part-way
        """
        ensure_directory(destination.parent)

        try:
            os.rename(source, destination)
            logger.debug(f"Renamed {source} -> {destination}")
            return destination
        except OSError as e:
            if e.errno != errno.EXDEV:
                raise IoError(f"Failed to move {source} -> {destination}: {e}", source) from e
            logger.debug(f"Cross-device move, falling back to copy: {source} -> {destination}")

        return self._copy_and_delete(source, destination, expected_digest)

    def _check_space(self, source: Path, destination: Path) -> None:
        size = get_file_size(source)
        available = get_available_space(destination.parent)
        if available is None:
            return
        needed = size + self.min_free_space_bytes
        if needed > available:
            raise IoError(
                f"Insufficient space for {source}: "
                f"need {format_bytes(needed)}, have {format_bytes(available)}",
                source,
            )

    def _copy_to_temp(self, source: Path, destination: Path, expected_digest: Optional[str]) -> Path:
        try:
            fd, temp_name = tempfile.mkstemp(
                prefix=f"{TEMP_PREFIX}{destination.stem}-", suffix=TEMP_SUFFIX, dir=destination.parent
            )
            os.close(fd)
        except OSError as e:
            raise IoError(f"Failed to create temporary copy in {destination.parent}: {e}", source) from e
        temp_path = Path(temp_name)

        try:
            shutil.copy2(source, temp_path)
            fsync_file(temp_path)

            if get_file_size(temp_path) != get_file_size(source):
                raise IoError(f"Size mismatch after copying {source}", source)

            if self.verify_copies:
                source_hash = expected_digest or calculate_sha256(source, self.chunk_size)
                if calculate_sha256(temp_path, self.chunk_size) != source_hash:
                    raise IoError(f"Hash verification failed for {source}", source)
        except (OSError, IoError) as e:
            # Source is still intact, so the partial copy can go
            try:
                temp_path.unlink()
            except OSError as cleanup_error:
                logger.warning(f"Could not remove temporary copy {temp_path}: {cleanup_error}")
            if isinstance(e, IoError):
                raise
            raise IoError(f"Failed to copy {source} -> {destination}: {e}", source) from e

        return temp_path

    def _copy_and_delete(self, source: Path, destination: Path, expected_digest: Optional[str]) -> Path:
        self._check_space(source, destination)
        temp_path = self._copy_to_temp(source, destination, expected_digest)

        delete_error: Optional[OSError] = None
        try:
            source.unlink()
        except OSError as e:
            delete_error = e

        try:
            os.replace(temp_path, destination)
        except OSError as e:
            # The verified copy is kept under its temporary name
            raise CrossDeviceFallbackFailure(
                f"Copied {source} to {temp_path} but could not finalize {destination}: {e}",
                source,
                temp_path,
            ) from e

        if delete_error is not None:
            # Both copies remain; a rerun reports the source as a duplicate
            raise CrossDeviceFallbackFailure(
                f"Copied {source} -> {destination} but could not delete source: {delete_error}",
                source,
            ) from delete_error

        logger.debug(f"Copied and removed {source} -> {destination}")
        return destination
