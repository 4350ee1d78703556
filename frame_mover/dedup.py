"""Per-run content index of destination directories."""

import logging
import os
from pathlib import Path
from typing import Callable, Dict, Optional, Set

from .exceptions import IoError
from .utils import calculate_sha256, is_temp_artifact

logger = logging.getLogger(__name__)


class DedupIndex:
    """Maps (destination directory, content digest) to an existing file.

    A directory is listed and hashed the first time it is consulted; after
    that only `add()` changes its entries, so files moved (or, in a dry
    run, planned) earlier in the run are seen by later lookups. Entries are
    never evicted.
    """

    def __init__(self, hasher: Optional[Callable[[Path], str]] = None):
        self._hasher = hasher or calculate_sha256
        self._digests: Dict[Path, Dict[str, Path]] = {}
        self._claimed: Set[Path] = set()

    def _load(self, directory: Path) -> Dict[str, Path]:
        entries: Dict[str, Path] = {}

        try:
            with os.scandir(directory) as it:
                names = sorted(
                    entry.name for entry in it
                    if entry.is_file(follow_symlinks=False) and not is_temp_artifact(entry.name)
                )
        except FileNotFoundError:
            logger.debug(f"Destination directory does not exist yet: {directory}")
            return entries
        except OSError as e:
            logger.warning(f"Cannot list destination directory {directory}: {e}")
            return entries

        for name in names:
            path = directory / name
            try:
                digest = self._hasher(path)
            except IoError as e:
                logger.warning(f"Not indexing unreadable destination file: {e}")
                continue
            entries.setdefault(digest, path)

        logger.debug(f"Indexed {len(entries)} files in {directory}")
        return entries

    def _directory(self, directory: Path) -> Dict[str, Path]:
        if directory not in self._digests:
            self._digests[directory] = self._load(directory)
        return self._digests[directory]

    def has(self, directory: Path, digest: str) -> Optional[Path]:
        """Return the existing path with `digest` in `directory`, or None."""
        return self._directory(directory).get(digest)

    def add(self, directory: Path, digest: str, path: Path) -> None:
        """Record a file written (or planned) during this run."""
        self._directory(directory).setdefault(digest, path)
        self._claimed.add(path)

    def is_claimed(self, path: Path) -> bool:
        """Check whether the run already placed (or planned) a file at `path`."""
        return path in self._claimed

    def indexed_directories(self) -> int:
        return len(self._digests)
