"""Scan, match, dedup and move: the run orchestrator."""

import logging
import os
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .collisions import resolve_destination
from .config import Config
from .dedup import DedupIndex
from .exceptions import CrossDeviceFallbackFailure, InvalidConfiguration, IoError
from .matcher import match_candidate
from .models import (
    CancellationToken,
    ErrorKind,
    ErrorOutcome,
    FileCandidate,
    MoveOutcome,
    Moved,
    Phase,
    ProgressSnapshot,
    RunResult,
    RunState,
    SkippedDuplicate,
)
from .mover import FileMover
from .progress import estimate_percent
from .scanner import SourceScanner
from .suffixes import SuffixSet
from .utils import calculate_sha256, is_within

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressSnapshot], None]


def validate_run_parameters(source, dest, suffixes: str) -> Tuple[Path, Path, SuffixSet]:
    """
    Check run parameters before anything touches the filesystem.

    Returns:
        Absolute source and destination paths and the parsed suffix set

    Raises:
        InvalidConfiguration: On any unusable parameter
    """
    if not source:
        raise InvalidConfiguration("Source directory not given")
    if not dest:
        raise InvalidConfiguration("Destination directory not given")

    source_dir = Path(source).expanduser().absolute()
    dest_dir = Path(dest).expanduser().absolute()

    if not source_dir.is_dir():
        raise InvalidConfiguration(f"Source is not an existing directory: {source_dir}")
    if not dest_dir.is_dir():
        raise InvalidConfiguration(f"Destination is not an existing directory: {dest_dir}")
    if not os.access(source_dir, os.R_OK | os.X_OK):
        raise InvalidConfiguration(f"Source directory is not readable: {source_dir}")
    if not os.access(dest_dir, os.W_OK | os.X_OK):
        raise InvalidConfiguration(f"Destination directory is not writable: {dest_dir}")
    if source_dir.resolve() == dest_dir.resolve():
        raise InvalidConfiguration(f"Source and destination are the same directory: {source_dir}")
    if is_within(dest_dir, source_dir):
        raise InvalidConfiguration(f"Destination {dest_dir} is inside source {source_dir}")

    return source_dir, dest_dir, SuffixSet.parse(suffixes)


class MoveEngine:
    """Drives one run at a time from scan to final snapshot.

    All state (counters, dedup index, outcomes) is created per run inside
    `run()` and owned by the calling thread.
    """

    def __init__(self, config: Optional[Config] = None, mover: Optional[FileMover] = None):
        self.config = config or Config()
        self.mover = mover or FileMover(self.config)
        self.chunk_size = self.config.get_hash_chunk_size()
        self.progress_interval = self.config.get_progress_interval()

    def run(
        self,
        source,
        dest,
        suffixes: str,
        dry_run: bool = False,
        verbose: bool = False,
        cancel_token: Optional[CancellationToken] = None,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> RunResult:
        """
        Move every matching image from `source` to the mirrored path under `dest`.

        Args:
            source: Source root directory
            dest: Destination root directory
            suffixes: Raw suffix text, e.g. "7612,7605"
            dry_run: Report outcomes without touching the filesystem
            verbose: Log per-file outcomes at INFO instead of DEBUG
            cancel_token: Checked between candidates
            progress_callback: Receives immutable snapshots; must not block

        Returns:
            RunResult with the final snapshot and per-file outcomes

        Raises:
            InvalidConfiguration: Before the run starts, on bad parameters
        """
        source_dir, dest_dir, suffix_set = validate_run_parameters(source, dest, suffixes)
        return _Run(
            engine=self,
            source_dir=source_dir,
            dest_dir=dest_dir,
            suffixes=suffix_set,
            dry_run=dry_run,
            verbose=verbose,
            cancel_token=cancel_token or CancellationToken(),
            progress_callback=progress_callback,
        ).execute()


class _Run:
    """State of a single orchestrator run."""

    def __init__(self, engine: MoveEngine, source_dir: Path, dest_dir: Path, suffixes: SuffixSet,
                 dry_run: bool, verbose: bool, cancel_token: CancellationToken,
                 progress_callback: Optional[ProgressCallback]):
        self.engine = engine
        self.source_dir = source_dir
        self.dest_dir = dest_dir
        self.suffixes = suffixes
        self.dry_run = dry_run
        self.detail_level = logging.INFO if verbose else logging.DEBUG
        self.cancel_token = cancel_token
        self.progress_callback = progress_callback

        self.state = RunState()
        self.index = DedupIndex(lambda path: calculate_sha256(path, engine.chunk_size))
        self.outcomes: List[Tuple[Path, MoveOutcome]] = []
        self.prefix = 'DRY RUN: ' if dry_run else ''

    def _emit(self) -> None:
        if self.progress_callback is None:
            return
        snapshot = self.state.snapshot()
        try:
            self.progress_callback(snapshot)
        except Exception:
            logger.exception("Progress consumer failed; continuing run")

    def _set_phase(self, phase: Phase, current_file: Optional[str] = None) -> None:
        self.state.phase = phase
        self.state.current_file = current_file

    def _advance_percent(self) -> None:
        self.state.percent = max(self.state.percent, estimate_percent(self.state.scanned))

    def _record(self, candidate: FileCandidate, outcome: MoveOutcome) -> None:
        self.outcomes.append((candidate.path, outcome))

    def _record_scan_error(self, path: Path, error: OSError) -> None:
        self.state.errors += 1
        self.outcomes.append((path, ErrorOutcome(ErrorKind.SCAN_ERROR, str(error))))

    def execute(self) -> RunResult:
        logger.info(
            f"{self.prefix}Moving files ending in {', '.join(self.suffixes)} "
            f"from {self.source_dir} to {self.dest_dir}"
        )
        start_time = time.time()

        self._set_phase(Phase.SCANNING)
        self._emit()

        scanner = SourceScanner(self.source_dir, on_error=self._record_scan_error)
        since_emit = 0

        for candidate in scanner.iter_candidates(self.cancel_token):
            self.state.scanned += 1
            self._set_phase(Phase.MATCHING, str(candidate.relative_path))
            self._advance_percent()

            decision = match_candidate(candidate, self.suffixes)
            if decision.accepted:
                self.state.matched += 1
                self._process(candidate, decision.suffix)
                since_emit = 0
            else:
                since_emit += 1
                if self.engine.progress_interval and since_emit >= self.engine.progress_interval:
                    self._emit()
                    since_emit = 0

            if self.cancel_token.is_cancelled():
                break

        if self.cancel_token.is_cancelled():
            self._set_phase(Phase.CANCELLED)
            logger.warning(f"{self.prefix}Run cancelled after {self.state.scanned:,} files scanned")
        else:
            self._set_phase(Phase.DONE)
            self.state.percent = 100.0

        self._emit()

        elapsed = time.time() - start_time
        logger.info(
            f"{self.prefix}Run {self.state.phase.value} in {elapsed:.1f}s: "
            f"{self.state.scanned:,} scanned, {self.state.matched:,} matched, "
            f"{self.state.moved:,} moved, {self.state.skipped_duplicates:,} duplicates skipped, "
            f"{self.state.errors:,} errors"
        )

        return RunResult(
            snapshot=self.state.snapshot(),
            dry_run=self.dry_run,
            source=self.source_dir,
            dest=self.dest_dir,
            suffixes=self.suffixes.as_tuple(),
            outcomes=self.outcomes,
        )

    def _process(self, candidate: FileCandidate, suffix: str) -> None:
        relative = str(candidate.relative_path)
        desired = self.dest_dir / candidate.relative_path
        target_dir = desired.parent

        logger.log(self.detail_level, f"Matched {relative} (suffix {suffix})")

        self._set_phase(Phase.HASHING, relative)
        self._emit()

        try:
            digest = calculate_sha256(candidate.path, self.engine.chunk_size)
        except IoError as e:
            self._fail(candidate, ErrorKind.IO_ERROR, str(e))
            return

        existing = self.index.has(target_dir, digest)
        if existing is not None:
            self.state.skipped_duplicates += 1
            self._record(candidate, SkippedDuplicate(existing))
            logger.log(self.detail_level, f"{self.prefix}Skip duplicate: {relative} (same as {existing})")
            self._emit()
            return

        final_path = resolve_destination(
            desired, lambda path: os.path.lexists(path) or self.index.is_claimed(path)
        )
        if final_path != desired:
            logger.log(self.detail_level, f"Name collision for {relative}, using {final_path.name}")

        self._set_phase(Phase.MOVING, relative)
        self._emit()

        if not self.dry_run:
            try:
                self.engine.mover.move(candidate.path, final_path, expected_digest=digest)
            except CrossDeviceFallbackFailure as e:
                if e.temp_path is None:
                    # Content reached final_path even though the source remains
                    self.index.add(target_dir, digest, final_path)
                self._fail(candidate, ErrorKind.CROSS_DEVICE_FALLBACK_FAILURE, str(e))
                return
            except IoError as e:
                self._fail(candidate, ErrorKind.IO_ERROR, str(e))
                return
            except OSError as e:
                self._fail(candidate, ErrorKind.IO_ERROR, f"Failed to move {candidate.path}: {e}")
                return

        self.index.add(target_dir, digest, final_path)
        self.state.moved += 1
        self._record(candidate, Moved(final_path))
        logger.log(
            self.detail_level,
            f"{self.prefix}{'Would move' if self.dry_run else 'Moved'} {relative} -> {final_path}",
        )
        self._emit()

    def _fail(self, candidate: FileCandidate, kind: ErrorKind, message: str) -> None:
        self.state.errors += 1
        self._record(candidate, ErrorOutcome(kind, message))
        logger.warning(f"{self.prefix}{message}")
        self._emit()
