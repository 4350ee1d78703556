"""Background worker that runs the engine off the controlling thread."""

import logging
import threading
from typing import Optional

from .config import Config
from .engine import MoveEngine, validate_run_parameters
from .exceptions import RunAlreadyActive
from .models import CancellationToken, ProgressSnapshot, RunResult
from .progress import ProgressChannel

logger = logging.getLogger(__name__)


class MoveRunner:
    """Runs at most one engine run at a time on a background thread.

    Snapshots go to `channel` (latest wins), so the interface can poll at
    its own pace without ever blocking the worker.
    """

    def __init__(self, config: Optional[Config] = None, engine: Optional[MoveEngine] = None,
                 channel: Optional[ProgressChannel] = None):
        self.config = config or Config()
        self.engine = engine or MoveEngine(self.config)
        self.channel = channel or ProgressChannel()

        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self._cancel_token: Optional[CancellationToken] = None
        self._result: Optional[RunResult] = None
        self._error: Optional[BaseException] = None

    @property
    def is_running(self) -> bool:
        with self._lock:
            return self._thread is not None and self._thread.is_alive()

    def start(self, source, dest, suffixes: str, dry_run: bool = False, verbose: bool = False) -> None:
        """
        Validate parameters and start a run in the background.

        Raises:
            InvalidConfiguration: Parameters are unusable; nothing was started
            RunAlreadyActive: Another run has not finished yet
        """
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                raise RunAlreadyActive("A run is already in progress")

            validate_run_parameters(source, dest, suffixes)

            self._cancel_token = CancellationToken()
            self._result = None
            self._error = None
            self._thread = threading.Thread(
                target=self._work,
                args=(source, dest, suffixes, dry_run, verbose, self._cancel_token),
                name='framemove-worker',
                daemon=True,
            )
            self._thread.start()

        logger.info(f"{'DRY RUN: ' if dry_run else ''}Started background run: {source} -> {dest}")

    def _work(self, source, dest, suffixes, dry_run, verbose, cancel_token) -> None:
        try:
            result = self.engine.run(
                source, dest, suffixes,
                dry_run=dry_run,
                verbose=verbose,
                cancel_token=cancel_token,
                progress_callback=self.channel.publish,
            )
        except Exception as e:
            logger.exception("Background run failed")
            with self._lock:
                self._error = e
            return

        with self._lock:
            self._result = result

    def cancel(self) -> None:
        """Request cancellation of the active run; no-op when idle."""
        with self._lock:
            if self._thread is None or not self._thread.is_alive() or self._cancel_token is None:
                logger.debug("Cancel requested with no active run")
                return
            self._cancel_token.cancel()
        logger.info("Cancellation requested")

    def wait(self, timeout: Optional[float] = None) -> Optional[RunResult]:
        """
        Wait for the current run to finish.

        Returns:
            The RunResult, or None if `timeout` expired first

        Raises:
            Exception: Whatever the background run raised
        """
        with self._lock:
            thread = self._thread
            if thread is None:
                return self._result

        thread.join(timeout)
        if thread.is_alive():
            return None

        with self._lock:
            if self._error is not None:
                raise self._error
            return self._result

    def latest_snapshot(self) -> Optional[ProgressSnapshot]:
        return self.channel.latest
