"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/aggregator.py
Collects exactly one outcome per dispatched file and owns the run's cancellation signal.

Per-file failures (open/read errors) are recoverable: they are counted and kept for
the summary. The only fatal class is a failure of the work source itself; the first
one cancels the run, in-flight work drains, and await_completion() raises it.
"""

import logging
import threading
import time
from typing import Callable, List, Optional

from duplicates.core.errors import PoolFatalError, ScanTimeoutError
from duplicates.core.models import FileResult, ResultStatus, RunOutcome

logger = logging.getLogger(__name__)


class CancellationState:
    """
    Write-once cancellation signal shared by discovery and all workers.
    Optionally also consults an external stopped_flag (e.g. a UI stop button).
    """

    def __init__(self, stopped_flag: Optional[Callable[[], bool]] = None):
        self._event = threading.Event()
        self._lock = threading.Lock()
        self._reason: Optional[str] = None
        self._stopped_flag = stopped_flag

    def cancel(self, reason: str = "cancelled") -> bool:
        """Returns True only for the call that actually cancelled the run."""
        with self._lock:
            if self._event.is_set():
                return False
            self._reason = reason
            self._event.set()
        logger.debug(f"Run cancelled: {reason}")
        return True

    def is_cancelled(self) -> bool:
        if self._event.is_set():
            return True
        if self._stopped_flag and self._stopped_flag():
            self.cancel("stopped by caller")
            return True
        return False

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    __call__ = is_cancelled


class ResultAggregator:
    """
    Counts dispatched items and their outcomes; signals completion once both match.

    Lifecycle:
        mark_dispatched() per item -> report() once per item -> seal() after the
        last dispatch -> await_completion() returns the final RunOutcome.
    """

    def __init__(self, outcome: Optional[RunOutcome] = None, cancellation: Optional[CancellationState] = None):
        self.outcome = outcome or RunOutcome()
        self.cancellation = cancellation or CancellationState()
        self.errors: List[FileResult] = []
        self._cond = threading.Condition()
        self._dispatched = 0
        self._reported = 0
        self._sealed = False
        self._fatal_error: Optional[BaseException] = None

    @property
    def dispatched(self) -> int:
        return self._dispatched

    @property
    def reported(self) -> int:
        return self._reported

    @property
    def fatal_error(self) -> Optional[BaseException]:
        return self._fatal_error

    def mark_dispatched(self) -> None:
        with self._cond:
            if self._sealed:
                raise RuntimeError("Cannot dispatch after the aggregator was sealed")
            self._dispatched += 1

    def report(self, result: FileResult) -> None:
        """Record the single outcome of one dispatched item."""
        with self._cond:
            if self._reported >= self._dispatched:
                raise RuntimeError(f"Outcome reported for an item that was not dispatched: {result.descriptor.path}")
            self._reported += 1

            if result.status == ResultStatus.HASHED:
                self.outcome.increment("hashed")
                self.outcome.increment("bytes_hashed", result.descriptor.size)
            elif result.status == ResultStatus.ERRORED:
                self.outcome.increment("errored")
                self.errors.append(result)
            else:
                self.outcome.increment("cancelled")

            self._cond.notify_all()

    def fail(self, error: BaseException) -> None:
        """Record a pool-fatal error. The first one wins and cancels the run."""
        with self._cond:
            if self._fatal_error is None:
                self._fatal_error = error
                logger.error(f"Work source failed, stopping dispatch: {error}")
            else:
                logger.debug(f"Ignoring additional fatal error: {error}")
        self.cancellation.cancel(f"fatal: {error}")

    def seal(self) -> None:
        """No more items will be dispatched."""
        with self._cond:
            self._sealed = True
            self._cond.notify_all()

    def is_complete(self) -> bool:
        with self._cond:
            return self._sealed and self._reported == self._dispatched

    def await_completion(self, timeout: Optional[float] = None, poll_interval: float = 0.25) -> RunOutcome:
        """
        Block until every dispatched item has reported.

        Raises:
            ScanTimeoutError: the deadline passed; raised after the run was cancelled and drained
            PoolFatalError: the work source failed; raised after drain
        """
        deadline = time.monotonic() + timeout if timeout is not None else None
        timed_out = False

        with self._cond:
            while not (self._sealed and self._reported == self._dispatched):
                wait_for = poll_interval
                if deadline is not None and not timed_out:
                    remaining = deadline - time.monotonic()
                    if remaining <= 0:
                        timed_out = True
                        self.cancellation.cancel(f"deadline of {timeout}s exceeded")
                        continue
                    wait_for = min(wait_for, remaining)
                # Short waits keep the main thread responsive to Ctrl+C
                self._cond.wait(wait_for)

        if self._fatal_error is not None:
            raise PoolFatalError(f"Work source failed: {self._fatal_error}") from self._fatal_error
        if timed_out:
            raise ScanTimeoutError(f"Scan did not finish within {timeout} seconds")
        return self.outcome
