"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/pipeline.py
Wires the work queue, worker pool, duplicate index and aggregator around any
source of FileDescriptors.

Threads involved in one run:
    - dispatcher: iterates the source (usually discovery) and submits to the pool
    - N workers: hash, index, report
    - caller: waits in ResultAggregator.await_completion()
The dispatcher always closes the pool, drains it and seals the aggregator, even when
the source raises; a source failure is recorded as the run's pool-fatal error.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

from duplicates.core.aggregator import CancellationState, ResultAggregator
from duplicates.core.hasher import HasherImpl
from duplicates.core.index import DuplicateIndex, IndexSnapshot
from duplicates.core.interfaces import Hasher
from duplicates.core.models import FileDescriptor, FileResult, RunOutcome
from duplicates.core.pool import WorkerPool

logger = logging.getLogger(__name__)


@dataclass
class ScanResult:
    """Frozen index plus the counters of the run that produced it."""
    index: IndexSnapshot
    outcome: RunOutcome
    errors: List[FileResult] = field(default_factory=list)
    total_time: float = 0.0

    @property
    def duplicate_group_count(self) -> int:
        return self.index.duplicate_group_count

    @property
    def redundant_file_count(self) -> int:
        return self.index.redundant_file_count

    def print_summary(self) -> str:
        counters = self.outcome.snapshot()
        lines = [
            "Scan Statistics:",
            f"Total Execution Time: {self.total_time:.3f}s",
            f"Visited: {counters['visited']} | Hashed: {counters['hashed']} | "
            f"Skipped: {counters['skipped']} | Errors: {counters['errored']}",
            f"Directories: {counters['directories']} | Walk errors: {counters['walk_errors']}",
            f"Duplicate groups: {self.duplicate_group_count} | Redundant files: {self.redundant_file_count}",
        ]
        if counters["cancelled"]:
            lines.append(f"Cancelled before hashing: {counters['cancelled']}")
        return "\n".join(lines)


class HashPipeline:
    """
    Runs one scan-and-hash pass over a descriptor source.
    A pipeline object is single-use: build a new one per run.
    """

    def __init__(
        self,
        hasher: Optional[Hasher] = None,
        workers: Optional[int] = None,
        queue_size: Optional[int] = None,
        index_shards: int = 1,
        outcome: Optional[RunOutcome] = None,
        cancellation: Optional[CancellationState] = None,
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ):
        self.hasher = hasher or HasherImpl()
        self.outcome = outcome or RunOutcome()
        self.cancellation = cancellation or CancellationState()
        self.index = DuplicateIndex(shards=index_shards)
        self.aggregator = ResultAggregator(self.outcome, self.cancellation)
        self.pool = WorkerPool(
            self.hasher,
            self.index,
            self.aggregator,
            workers=workers,
            queue_size=queue_size,
            progress_callback=progress_callback
        )
        self._dispatcher: Optional[threading.Thread] = None

    def run(self, source: Iterable[FileDescriptor], timeout: Optional[float] = None) -> ScanResult:
        """
        Hash every descriptor produced by source.

        Raises:
            PoolFatalError: iterating source raised; raised after in-flight work drained
            ScanTimeoutError: timeout expired; raised after in-flight work drained
            KeyboardInterrupt: re-raised after cancelling and draining
        """
        if self._dispatcher is not None:
            raise RuntimeError("HashPipeline instances are single-use")

        start_time = time.time()
        self.pool.start()
        self._dispatcher = threading.Thread(target=self._dispatch, args=(source,), name="dispatcher", daemon=True)
        self._dispatcher.start()

        try:
            self.aggregator.await_completion(timeout=timeout)
        except KeyboardInterrupt:
            self.cancellation.cancel("interrupted by user")
            self.aggregator.await_completion()
            raise
        finally:
            self._dispatcher.join()

        snapshot = self.index.freeze()
        elapsed = time.time() - start_time
        logger.info(
            f"Hashed {self.outcome.hashed} file(s) in {elapsed:.2f}s: "
            f"{snapshot.duplicate_group_count} duplicate group(s), {self.outcome.errored} error(s)"
        )
        return ScanResult(index=snapshot, outcome=self.outcome, errors=list(self.aggregator.errors),
                          total_time=elapsed)

    def _dispatch(self, source: Iterable[FileDescriptor]) -> None:
        try:
            for descriptor in source:
                if not self.pool.submit(descriptor):
                    logger.debug("Dispatch stopped by cancellation")
                    break
        except Exception as e:
            self.aggregator.fail(e)
        finally:
            self.pool.join()
            self.aggregator.seal()
