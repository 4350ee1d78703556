"""Parsing of the operator-supplied suffix list."""

import logging
import re
from typing import Iterator, Optional, Tuple

from .exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)

_SEPARATORS = re.compile(r'[,\s]+')


class SuffixSet:
    """Ordered, de-duplicated set of digit suffixes.

    Members are kept as strings, so "007" and "7" are distinct suffixes
    and matching is a trailing-substring test rather than numeric equality.
    """

    def __init__(self, suffixes: Tuple[str, ...]):
        self._suffixes = suffixes

    @classmethod
    def parse(cls, raw_text: str) -> 'SuffixSet':
        """
        Parse suffixes separated by commas, whitespace or newlines.

        Tokens that are not plain digit strings are skipped with a warning.

        Args:
            raw_text: Text as typed by the operator, e.g. "7612, 7605\\n7608"

        Returns:
            SuffixSet in first-seen order

        Raises:
            InvalidConfiguration: If no valid suffix remains
        """
        if raw_text is None or not raw_text.strip():
            raise InvalidConfiguration("Suffix list is empty")

        seen = {}
        for token in _SEPARATORS.split(raw_text.strip()):
            if not token:
                continue
            if not (token.isascii() and token.isdigit()):
                logger.warning(f"Ignoring invalid suffix token: {token!r}")
                continue
            seen.setdefault(token, None)

        if not seen:
            raise InvalidConfiguration(f"No valid numeric suffixes in: {raw_text!r}")

        return cls(tuple(seen))

    def first_match(self, stem: str) -> Optional[str]:
        """Return the first suffix `stem` ends with, or None."""
        for suffix in self._suffixes:
            if stem.endswith(suffix):
                return suffix
        return None

    def __iter__(self) -> Iterator[str]:
        return iter(self._suffixes)

    def __len__(self) -> int:
        return len(self._suffixes)

    def __contains__(self, item: object) -> bool:
        return item in self._suffixes

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, SuffixSet):
            return NotImplemented
        return self._suffixes == other._suffixes

    def __hash__(self) -> int:
        return hash(self._suffixes)

    def as_tuple(self) -> Tuple[str, ...]:
        return self._suffixes

    def __repr__(self) -> str:
        return f"SuffixSet({', '.join(self._suffixes)})"
