"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/pool.py
The work queue and the fixed-size pool of hashing workers.

A bounded queue.Queue connects the single producer to N worker threads. A full
queue blocks submit(), which throttles discovery to the speed of hashing. Each
worker checks the cancellation signal between items (never in the middle of a
file), hashes the file with a bounded buffer, appends the fingerprint to the
shared index and reports exactly one FileResult per item it dequeued.
"""

import logging
import queue
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from duplicates.core.aggregator import ResultAggregator
from duplicates.core.errors import FileProcessingError
from duplicates.core.index import DuplicateIndex
from duplicates.core.interfaces import Hasher
from duplicates.core.models import FileDescriptor, FileResult, ResultStatus, ScanConfig

logger = logging.getLogger(__name__)


@dataclass
class WorkerStats:
    processed_files: int = 0
    total_bytes: int = 0
    errors: int = 0


class WorkerPool:
    """
    Fixed-size thread pool consuming FileDescriptors from a bounded queue.

    Usage:
        pool.start()
        for descriptor in source:
            if not pool.submit(descriptor):
                break  # cancelled
        pool.join()  # closes the queue, waits for workers, reports leftovers
    """

    def __init__(
        self,
        hasher: Hasher,
        index: DuplicateIndex,
        aggregator: ResultAggregator,
        workers: Optional[int] = None,
        queue_size: Optional[int] = None,
        poll_interval: float = ScanConfig.QUEUE_POLL_INTERVAL,
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ):
        self.workers = ScanConfig.default_workers() if workers is None else workers
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        self.queue_size = self.workers * ScanConfig.QUEUE_SLOTS_PER_WORKER if queue_size is None else queue_size
        if self.queue_size < 1:
            raise ValueError("queue_size must be at least 1")
        self.poll_interval = poll_interval

        self._hasher = hasher
        self._index = index
        self._aggregator = aggregator
        self._cancellation = aggregator.cancellation
        self._progress_callback = progress_callback

        self._queue: "queue.Queue[FileDescriptor]" = queue.Queue(maxsize=self.queue_size)
        self._closed = threading.Event()
        self._threads: List[threading.Thread] = []
        self.worker_stats: List[WorkerStats] = []

    def start(self) -> None:
        if self._threads:
            raise RuntimeError("Worker pool already started")

        logger.info(f"Starting {self.workers} worker(s), queue size {self.queue_size}")
        for worker_id in range(1, self.workers + 1):
            stats = WorkerStats()
            self.worker_stats.append(stats)
            thread = threading.Thread(
                target=self._worker,
                args=(worker_id, stats),
                name=f"hash-worker-{worker_id}",
                daemon=True
            )
            self._threads.append(thread)
            thread.start()

    def submit(self, descriptor: FileDescriptor) -> bool:
        """
        Dispatch one descriptor, blocking while the queue is full.
        Returns False if the run was cancelled before the item could be queued;
        such an item is reported as cancelled right here.
        """
        if self._closed.is_set():
            raise RuntimeError("Cannot submit to a closed worker pool")

        self._aggregator.mark_dispatched()
        while True:
            if self._cancellation.is_cancelled():
                self._aggregator.report(FileResult.cancelled(descriptor))
                return False
            try:
                self._queue.put(descriptor, timeout=self.poll_interval)
                return True
            except queue.Full:
                continue

    def close(self) -> None:
        """No more submissions. Workers exit once the queue is empty."""
        self._closed.set()

    def join(self) -> None:
        """
        Close the queue, wait for every worker and report queued items that
        were never picked up (only possible after cancellation) as cancelled.
        """
        self.close()
        for thread in self._threads:
            thread.join()

        leftovers = 0
        while True:
            try:
                descriptor = self._queue.get_nowait()
            except queue.Empty:
                break
            self._aggregator.report(FileResult.cancelled(descriptor))
            leftovers += 1

        if leftovers:
            logger.info(f"{leftovers} queued file(s) were not hashed because the run was cancelled")

    def _worker(self, worker_id: int, stats: WorkerStats) -> None:
        logger.debug(f"Worker {worker_id} started")
        try:
            while not self._cancellation.is_cancelled():
                try:
                    descriptor = self._queue.get(timeout=self.poll_interval)
                except queue.Empty:
                    # No put can happen after close(), so an empty queue is final
                    if self._closed.is_set() and self._queue.empty():
                        break
                    continue

                logger.debug(f"Worker {worker_id} processing {descriptor.path} ({descriptor.size} bytes)")
                result = self._process(descriptor)

                stats.processed_files += 1
                if result.status == ResultStatus.HASHED:
                    stats.total_bytes += descriptor.size
                else:
                    stats.errors += 1

                self._aggregator.report(result)
                self._notify_progress()
        finally:
            logger.debug(
                f"Worker {worker_id} finished: processed={stats.processed_files}, "
                f"bytes={stats.total_bytes}, errors={stats.errors}"
            )

    def _process(self, descriptor: FileDescriptor) -> FileResult:
        """Hash one file and index it. Never raises: failures become errored results."""
        try:
            fingerprint = self._hasher.compute_fingerprint(descriptor)
        except FileProcessingError as e:
            logger.error(str(e))
            return FileResult.errored(descriptor, e)
        except Exception as e:
            logger.exception(f"Unexpected error while hashing {descriptor.path}")
            return FileResult.errored(descriptor, FileProcessingError(descriptor.path, FileProcessingError.READ, e))

        try:
            self._index.add(fingerprint, descriptor)
        except ValueError as e:
            logger.error(f"Failed to index {descriptor.path}: {e}")
            return FileResult.errored(
                descriptor, FileProcessingError(descriptor.path, FileProcessingError.READ, e, message=str(e))
            )

        return FileResult.hashed(descriptor, fingerprint)

    def _notify_progress(self) -> None:
        if not self._progress_callback:
            return
        try:
            self._progress_callback("Hashing", self._aggregator.outcome.completed, self._aggregator.dispatched)
        except Exception as e:
            logger.debug(f"Progress callback failed: {e}")
