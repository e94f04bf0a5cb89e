"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/scanner.py
Implements file discovery: the single producer feeding the worker pool.
Features:
- Recursively walks one or more roots with os.walk (symlinks are never followed)
- Applies the (size, name) inclusion predicate before anything is dispatched
- Yields FileDescriptors lazily so a bounded work queue can throttle the walk
- Logs and skips per-entry filesystem errors; one bad entry never stops the walk
"""

import os
import stat
import time
import logging
from typing import List, Optional, Callable, Iterator

logger = logging.getLogger(__name__)

# Local imports
from duplicates.core.errors import ScanSetupError
from duplicates.core.filters import FileFilter
from duplicates.core.interfaces import FileScanner, InclusionPredicate
from duplicates.core.models import FileDescriptor, RunOutcome, ScanConfig


class FileScannerImpl(FileScanner):
    """
    Walks directories recursively and filters files with an inclusion predicate.

    Attributes:
        roots: Root directories to walk
        predicate: Callable (size, name) -> bool deciding whether a file is dispatched
        progress_interval: Entries between progress callback invocations
    """

    def __init__(
        self,
        roots: List[str],
        predicate: Optional[InclusionPredicate] = None,
        progress_interval: int = ScanConfig.SCAN_PROGRESS_INTERVAL
    ):
        self.roots = [roots] if isinstance(roots, str) else list(roots)
        self.predicate = predicate or FileFilter()
        self.progress_interval = max(1, progress_interval)

    def validate_roots(self) -> List[str]:
        """
        Check that every root exists and is a directory.
        Roots nested inside another root are dropped so no file is produced twice.
        Returns absolute root paths in their original order.
        Raises:
            ScanSetupError: if a root is missing or is not a directory
        """
        if not self.roots:
            raise ScanSetupError("At least one root directory is required")

        accepted = []
        real_roots = []
        for root in self.roots:
            if not os.path.exists(root):
                raise ScanSetupError(f"Directory does not exist: {root}")
            if not os.path.isdir(root):
                raise ScanSetupError(f"Not a directory: {root}")

            real = os.path.realpath(root)
            if any(self._is_within(real, other) for other in real_roots):
                logger.debug(f"Skipping root nested in another root: {root}")
                continue
            # A later root may contain an earlier one
            keep = [i for i, other in enumerate(real_roots) if not self._is_within(other, real)]
            accepted = [accepted[i] for i in keep]
            real_roots = [real_roots[i] for i in keep]

            accepted.append(os.path.abspath(root))
            real_roots.append(real)
        return accepted

    def iter_files(
        self,
        outcome: RunOutcome,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> Iterator[FileDescriptor]:
        """
        Lazily yield every regular file that passes the predicate.
        Directories are counted in outcome.directories; every other entry is
        counted as visited and, unless yielded, as skipped.
        """
        roots = self.validate_roots()
        logger.debug(f"Starting discovery in {len(roots)} root(s): {roots}")

        start_time = time.time()
        progress_counter = 0
        yielded = 0

        for root in roots:
            for dirpath, dirnames, filenames in os.walk(root, onerror=self._walk_error_handler(outcome)):
                if stopped_flag and stopped_flag():
                    logger.debug("Discovery interrupted by cancellation")
                    return

                outcome.increment("directories")

                # os.walk lists symlinked directories but does not descend into them
                for dirname in dirnames:
                    if os.path.islink(os.path.join(dirpath, dirname)):
                        outcome.increment("visited")
                        outcome.increment("skipped")
                        logger.debug(f"Skipping symbolic link: {os.path.join(dirpath, dirname)}")

                for filename in filenames:
                    if stopped_flag and stopped_flag():
                        logger.debug("Discovery interrupted by cancellation")
                        return

                    descriptor = self._process_entry(os.path.join(dirpath, filename), filename, outcome)
                    if descriptor is not None:
                        yielded += 1
                        yield descriptor

                    progress_counter += 1
                    if progress_callback and progress_counter >= self.progress_interval:
                        self._notify(progress_callback, outcome.visited)
                        progress_counter = 0

        if progress_callback:
            self._notify(progress_callback, outcome.visited)

        elapsed_time = time.time() - start_time
        logger.debug(f"Discovery finished in {elapsed_time:.2f} seconds: "
                     f"{outcome.visited} entries visited, {yielded} dispatched")

    def scan(self, outcome: Optional[RunOutcome] = None,
             stopped_flag: Optional[Callable[[], bool]] = None) -> List[FileDescriptor]:
        """Eager variant of iter_files(), mostly useful for tests and small trees."""
        return list(self.iter_files(outcome or RunOutcome(), stopped_flag=stopped_flag))

    def _process_entry(self, path: str, name: str, outcome: RunOutcome) -> Optional[FileDescriptor]:
        """
        Classify a single non-directory entry.
        Returns:
            FileDescriptor if the entry is a regular file passing the predicate, else None
        """
        outcome.increment("visited")

        try:
            st = os.lstat(path)
        except OSError as e:
            logger.warning(f"Cannot stat {path}: {e}")
            outcome.increment("walk_errors")
            outcome.increment("skipped")
            return None

        if stat.S_ISLNK(st.st_mode):
            logger.debug(f"Skipping symbolic link: {path}")
            outcome.increment("skipped")
            return None

        if not stat.S_ISREG(st.st_mode):
            logger.debug(f"Skipping non-regular file: {path}")
            outcome.increment("skipped")
            return None

        if not self.predicate(st.st_size, name):
            logger.debug(f"Skipping {path} (size {st.st_size} bytes or name filtered)")
            outcome.increment("skipped")
            return None

        return FileDescriptor(path=path, size=st.st_size, name=name)

    @staticmethod
    def _walk_error_handler(outcome: RunOutcome) -> Callable[[OSError], None]:
        def on_error(error: OSError) -> None:
            logger.warning(f"Cannot read directory {getattr(error, 'filename', '?')}: {error}")
            outcome.increment("walk_errors")
        return on_error

    @staticmethod
    def _is_within(path: str, directory: str) -> bool:
        return path == directory or path.startswith(directory.rstrip(os.sep) + os.sep)

    @staticmethod
    def _notify(progress_callback: Callable[[str, int, Optional[int]], None], current: int) -> None:
        try:
            progress_callback("Scanning", current, None)
        except Exception as e:
            logger.debug(f"Progress callback failed: {e}")
