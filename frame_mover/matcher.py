"""Filename matching against the suffix set."""

from .models import FileCandidate, MatchDecision, MatchReason
from .suffixes import SuffixSet

IMAGE_EXTENSIONS = frozenset(['jpg', 'jpeg', 'png', 'heic', 'gif', 'tiff', 'tif', 'webp'])


def is_image_extension(extension: str) -> bool:
    """Check an extension (with or without the leading dot), ignoring case."""
    return extension.lower().lstrip('.') in IMAGE_EXTENSIONS


def match_candidate(candidate: FileCandidate, suffixes: SuffixSet) -> MatchDecision:
    """
    Decide whether a candidate should be moved.

    The extension must be a supported image type and the stem (filename
    without its final extension) must end with one of the suffixes.
    `tif` is accepted as an alias of `tiff`, matching the extension table
    of the desktop tool this replaces.
    """
    if not is_image_extension(candidate.extension):
        return MatchDecision(accepted=False, reason=MatchReason.EXTENSION_REJECTED)

    suffix = suffixes.first_match(candidate.stem)
    if suffix is None:
        return MatchDecision(accepted=False, reason=MatchReason.SUFFIX_REJECTED)

    return MatchDecision(accepted=True, reason=MatchReason.ACCEPTED, suffix=suffix)
