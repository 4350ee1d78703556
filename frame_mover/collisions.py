"""Unique naming for same-name, different-content destinations."""

import os
from itertools import count
from pathlib import Path
from typing import Callable, Optional


def collision_candidate(path: Path, index: int) -> Path:
    """Insert "-<index>" before the final extension: IMG_7612.jpg -> IMG_7612-1.jpg."""
    return path.with_name(f"{path.stem}-{index}{path.suffix}")


def resolve_destination(
    desired: Path, is_taken: Optional[Callable[[Path], bool]] = None
) -> Path:
    """
    Return `desired` if it is free, else the first free numbered variant.

    Args:
        desired: Mirrored destination path
        is_taken: Occupancy test; defaults to an existence check that
            also counts dangling symlinks

    Returns:
        A path not reported as taken
    """
    if is_taken is None:
        is_taken = os.path.lexists

    if not is_taken(desired):
        return desired

    for index in count(1):
        candidate = collision_candidate(desired, index)
        if not is_taken(candidate):
            return candidate
