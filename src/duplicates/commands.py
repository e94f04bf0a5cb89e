"""
Unified command orchestrator for a duplicate scan.
This is the SINGLE source of truth for business logic, used by the CLI and by library callers.
"""
import logging
from typing import Callable, Optional

from duplicates.core.aggregator import CancellationState
from duplicates.core.filters import FileFilter
from duplicates.core.hasher import HasherImpl, get_algorithm
from duplicates.core.models import RunOutcome, ScanParams
from duplicates.core.pipeline import HashPipeline, ScanResult
from duplicates.core.scanner import FileScannerImpl

logger = logging.getLogger(__name__)


class ScanCommand:
    """
    Orchestrates the whole scan:
    1. Validate roots (fails before any thread is started)
    2. Stream discovery into the hashing pipeline
    3. Wait for the drain and return the frozen index with the run counters

    Usage:
        params = ScanParams(roots=["~/Downloads"], min_size_bytes=1024)
        result = ScanCommand().execute(
            params,
            progress_callback=cli_progress_printer,
            stopped_flag=signal_handler_check
        )
        for group in result.index.duplicate_groups():
            ...
    """

    def __init__(self):
        self._last_result: Optional[ScanResult] = None

    def execute(
            self,
            params: ScanParams,
            progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None,
            stopped_flag: Optional[Callable[[], bool]] = None
    ) -> ScanResult:
        """
        Execute a scan with given parameters.

        Args:
            params: Validated scan parameters
            progress_callback: (stage: str, current: int, total: Optional[int]) -> None
            stopped_flag: () -> bool (returns True if the run should stop)

        Returns:
            ScanResult with the frozen duplicate index and run counters

        Raises:
            ScanSetupError: If a root is missing or not a directory
            PoolFatalError: If discovery itself failed (after in-flight work drained)
            ScanTimeoutError: If params.timeout expired (after in-flight work drained)
        """
        scanner = FileScannerImpl(
            roots=params.roots,
            predicate=FileFilter(params.min_size_bytes, params.name_filter)
        )
        scanner.validate_roots()

        outcome = RunOutcome()
        cancellation = CancellationState(stopped_flag)
        hasher = HasherImpl(get_algorithm(params.algorithm), buffer_size=params.buffer_size)

        pipeline = HashPipeline(
            hasher=hasher,
            workers=params.effective_workers,
            queue_size=params.queue_size,
            index_shards=params.index_shards,
            outcome=outcome,
            cancellation=cancellation,
            progress_callback=progress_callback
        )

        logger.debug(f"Scanning {params.roots} with {params.effective_workers} worker(s), "
                     f"algorithm={params.algorithm.value}, min_size={params.min_size_bytes}, "
                     f"pattern={params.name_filter}")

        source = scanner.iter_files(
            outcome,
            stopped_flag=cancellation.is_cancelled,
            progress_callback=progress_callback
        )
        result = pipeline.run(source, timeout=params.timeout)

        if not outcome.is_consistent():
            logger.warning(f"Run counters are inconsistent: {outcome}")

        self._last_result = result
        return result

    @property
    def last_result(self) -> Optional[ScanResult]:
        return self._last_result
