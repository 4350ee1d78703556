"""Recursive source tree scanning."""

import logging
import os
from pathlib import Path
from typing import Callable, Generator, Optional

from .models import CancellationToken, FileCandidate

logger = logging.getLogger(__name__)

ScanErrorCallback = Callable[[Path, OSError], None]


class SourceScanner:
    """Lazily enumerates regular files under a source root.

    Traversal is depth-first with entries visited in sorted name order, so
    the sequence is deterministic for a fixed tree. Symbolic links (to files
    or directories) are never followed or yielded. Directories that cannot
    be listed are reported through `on_error` and skipped.
    """

    def __init__(self, source_root: Path, on_error: Optional[ScanErrorCallback] = None):
        self.source_root = Path(source_root)
        self.on_error = on_error

    def _report(self, path: Path, error: OSError) -> None:
        logger.warning(f"Cannot read {path}: {error}")
        if self.on_error:
            self.on_error(path, error)

    def _entries(self, directory: Path):
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda entry: entry.name)
        except OSError as e:
            self._report(directory, e)
            return []

    def iter_candidates(
        self, cancel_token: Optional[CancellationToken] = None
    ) -> Generator[FileCandidate, None, None]:
        """
        Yield a FileCandidate for every regular file in the tree.

        Args:
            cancel_token: Checked before each candidate is yielded; once set,
                the generator stops.
        """
        stack = [self.source_root]

        while stack:
            directory = stack.pop()
            subdirs = []

            for entry in self._entries(directory):
                try:
                    if entry.is_symlink():
                        logger.debug(f"Skipping symlink: {entry.path}")
                        continue
                    if entry.is_dir(follow_symlinks=False):
                        subdirs.append(Path(entry.path))
                        continue
                    if not entry.is_file(follow_symlinks=False):
                        continue
                except OSError as e:
                    self._report(Path(entry.path), e)
                    continue

                if cancel_token is not None and cancel_token.is_cancelled():
                    logger.debug("Scan stopped by cancellation")
                    return

                yield FileCandidate.from_path(Path(entry.path), self.source_root)

            # Reversed so the alphabetically first subdirectory is visited next
            stack.extend(reversed(subdirs))
