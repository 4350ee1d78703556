"""Data model for frame mover runs."""

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union


class Phase(str, Enum):
    """Orchestrator phases, as reported in progress snapshots."""
    IDLE = 'idle'
    SCANNING = 'scanning'
    MATCHING = 'matching'
    HASHING = 'hashing'
    MOVING = 'moving'
    DONE = 'done'
    CANCELLED = 'cancelled'

    @property
    def is_terminal(self) -> bool:
        return self in (Phase.DONE, Phase.CANCELLED)


class MatchReason(str, Enum):
    EXTENSION_REJECTED = 'extension_rejected'
    SUFFIX_REJECTED = 'suffix_rejected'
    ACCEPTED = 'accepted'


class ErrorKind(str, Enum):
    IO_ERROR = 'io_error'
    CROSS_DEVICE_FALLBACK_FAILURE = 'cross_device_fallback_failure'
    SCAN_ERROR = 'scan_error'


@dataclass(frozen=True)
class FileCandidate:
    """A regular file found under the source root."""
    path: Path
    relative_path: Path
    stem: str
    extension: str

    @classmethod
    def from_path(cls, path: Path, source_root: Path) -> 'FileCandidate':
        """Build a candidate; the extension is stored lowercase without the dot."""
        return cls(
            path=path,
            relative_path=path.relative_to(source_root),
            stem=path.stem,
            extension=path.suffix.lower().lstrip('.'),
        )

    @property
    def name(self) -> str:
        return self.path.name


@dataclass(frozen=True)
class MatchDecision:
    accepted: bool
    reason: MatchReason
    suffix: Optional[str] = None


@dataclass(frozen=True)
class Moved:
    final_path: Path
    kind: str = field(default='moved', init=False)


@dataclass(frozen=True)
class SkippedDuplicate:
    existing_path: Path
    kind: str = field(default='skipped_duplicate', init=False)


@dataclass(frozen=True)
class ErrorOutcome:
    error_kind: ErrorKind
    message: str
    kind: str = field(default='error', init=False)


MoveOutcome = Union[Moved, SkippedDuplicate, ErrorOutcome]


@dataclass(frozen=True)
class ProgressSnapshot:
    """Immutable view of a run's counters at one point in time."""
    phase: Phase
    current_file: Optional[str]
    scanned: int
    matched: int
    moved: int
    skipped_duplicates: int
    errors: int
    percent: float

    def to_dict(self) -> Dict[str, Any]:
        """Wire representation with camelCase keys."""
        return {
            'phase': self.phase.value,
            'currentFile': self.current_file,
            'scanned': self.scanned,
            'matched': self.matched,
            'moved': self.moved,
            'skippedDuplicates': self.skipped_duplicates,
            'errors': self.errors,
            'percent': self.percent,
        }


@dataclass
class RunState:
    """Mutable counters for a single run, owned by the worker."""
    phase: Phase = Phase.IDLE
    current_file: Optional[str] = None
    scanned: int = 0
    matched: int = 0
    moved: int = 0
    skipped_duplicates: int = 0
    errors: int = 0
    percent: float = 0.0

    def snapshot(self) -> ProgressSnapshot:
        return ProgressSnapshot(
            phase=self.phase,
            current_file=self.current_file,
            scanned=self.scanned,
            matched=self.matched,
            moved=self.moved,
            skipped_duplicates=self.skipped_duplicates,
            errors=self.errors,
            percent=self.percent,
        )


@dataclass
class RunResult:
    """Final state of a run plus every recorded per-file outcome."""
    snapshot: ProgressSnapshot
    dry_run: bool
    source: Path
    dest: Path
    suffixes: Tuple[str, ...]
    outcomes: List[Tuple[Path, MoveOutcome]] = field(default_factory=list)

    @property
    def cancelled(self) -> bool:
        return self.snapshot.phase is Phase.CANCELLED

    @property
    def exit_code(self) -> int:
        return 0 if self.snapshot.errors == 0 else 1

    def to_dict(self) -> Dict[str, Any]:
        outcomes = []
        for path, outcome in self.outcomes:
            entry: Dict[str, Any] = {'path': str(path), 'outcome': outcome.kind}
            if isinstance(outcome, Moved):
                entry['final_path'] = str(outcome.final_path)
            elif isinstance(outcome, SkippedDuplicate):
                entry['existing_path'] = str(outcome.existing_path)
            else:
                entry['error_kind'] = outcome.error_kind.value
                entry['message'] = outcome.message
            outcomes.append(entry)

        return {
            'source': str(self.source),
            'dest': str(self.dest),
            'suffixes': list(self.suffixes),
            'dry_run': self.dry_run,
            'statistics': self.snapshot.to_dict(),
            'exit_code': self.exit_code,
            'outcomes': outcomes,
        }


class CancellationToken:
    """Thread-safe, set-once cancellation flag."""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()
