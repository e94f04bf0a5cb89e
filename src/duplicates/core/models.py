"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/models.py
Data models shared by discovery, the worker pool, the duplicate index and the reporter.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Optional
import os
import threading
from enum import Enum

from duplicates.core.errors import FileProcessingError, ScanSetupError
from duplicates.core.filters import NameFilter, PatternSyntax
from duplicates.utils.convert_utils import ConvertUtils


# =============================
# Enums
# =============================

class HashAlgorithmName(Enum):
    """
    Fingerprint functions available to the pipeline.
    """
    XXH64 = "xxh64"
    XXH128 = "xxh128"
    MD5 = "md5"
    SHA256 = "sha256"

    @property
    def display_name(self) -> str:
        """Human-readable name for help text."""
        mapping = {
            HashAlgorithmName.XXH64: "xxHash64",
            HashAlgorithmName.XXH128: "XXH3 128-bit",
            HashAlgorithmName.MD5: "MD5",
            HashAlgorithmName.SHA256: "SHA-256",
        }
        return mapping.get(self, self.value)

    def __repr__(self) -> str:
        return self.value


class KeepPolicy(Enum):
    """
    Which path of a duplicate group survives deletion.
    Every policy except FIRST_SEEN is deterministic across runs.
    """
    LEXICOGRAPHIC = "lexicographic"
    SHORTEST_PATH = "shortest-path"
    SHORTEST_FILENAME = "shortest-filename"
    FIRST_SEEN = "first-seen"

    @property
    def display_name(self) -> str:
        mapping = {
            KeepPolicy.LEXICOGRAPHIC: "Lexicographically smallest path",
            KeepPolicy.SHORTEST_PATH: "Shortest Path",
            KeepPolicy.SHORTEST_FILENAME: "Shortest Filename",
            KeepPolicy.FIRST_SEEN: "First hashed (non-deterministic)",
        }
        return mapping.get(self, self.value)


class ResultStatus(str, Enum):
    HASHED = "hashed"
    ERRORED = "errored"
    CANCELLED = "cancelled"


# ======================
#  Core Data Models
# ======================

@dataclass(frozen=True)
class FileDescriptor:
    """
    A candidate file found by discovery.
    Immutable: produced once, consumed by exactly one worker.
    """
    path: str
    size: int  # in bytes
    name: str = ""

    def __post_init__(self):
        if not self.name:
            object.__setattr__(self, "name", os.path.basename(self.path))

    @property
    def depth(self) -> int:
        """Number of path separators, used to prefer files closer to the root."""
        return self.path.rstrip(os.sep).count(os.sep)

    def __repr__(self):
        return f"<FileDescriptor path={self.path}, size={self.size}>"


@dataclass(frozen=True)
class FileResult:
    """The single outcome reported for one dispatched FileDescriptor."""
    descriptor: FileDescriptor
    status: ResultStatus
    fingerprint: Optional[bytes] = None
    error: Optional[FileProcessingError] = None

    @classmethod
    def hashed(cls, descriptor: FileDescriptor, fingerprint: bytes) -> "FileResult":
        return cls(descriptor, ResultStatus.HASHED, fingerprint=fingerprint)

    @classmethod
    def errored(cls, descriptor: FileDescriptor, error: FileProcessingError) -> "FileResult":
        return cls(descriptor, ResultStatus.ERRORED, error=error)

    @classmethod
    def cancelled(cls, descriptor: FileDescriptor) -> "FileResult":
        return cls(descriptor, ResultStatus.CANCELLED)


@dataclass
class DuplicateGroup:
    """
    Files sharing one fingerprint.
    Only groups with at least two files are duplicates.
    """
    fingerprint: bytes
    files: List[FileDescriptor]

    @property
    def size(self) -> int:
        return self.files[0].size if self.files else 0

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    @property
    def duplicate_count(self) -> int:
        """How many files are in this group."""
        return len(self.files)

    def is_duplicate(self) -> bool:
        """True if this group contains at least two files."""
        return self.duplicate_count >= 2

    def __repr__(self):
        return f"<DuplicateGroup fingerprint={self.fingerprint.hex()}, count={len(self.files)}>"


class RunOutcome:
    """
    Counters for one run, shared by discovery, workers and the aggregator.

    Every counter is an independent scalar bumped under a small lock, so readers
    (progress display, tests) may see slightly stale values but never torn ones.
    Invariant after a completed run:
        visited == hashed + skipped + errored + cancelled
    """
    COUNTERS = (
        "visited", "hashed", "skipped", "errored", "cancelled",
        "directories", "walk_errors", "bytes_hashed",
    )

    def __init__(self):
        self._lock = threading.Lock()
        self.visited: int = 0
        self.hashed: int = 0
        self.skipped: int = 0
        self.errored: int = 0
        self.cancelled: int = 0
        self.directories: int = 0
        self.walk_errors: int = 0
        self.bytes_hashed: int = 0

    def increment(self, counter: str, amount: int = 1) -> None:
        if counter not in self.COUNTERS:
            raise AttributeError(f"Unknown counter: {counter}")
        with self._lock:
            setattr(self, counter, getattr(self, counter) + amount)

    @property
    def completed(self) -> int:
        """Dispatched items that have reported an outcome."""
        return self.hashed + self.errored + self.cancelled

    def is_consistent(self) -> bool:
        with self._lock:
            return self.visited == self.hashed + self.skipped + self.errored + self.cancelled

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return {name: getattr(self, name) for name in self.COUNTERS}

    def __repr__(self):
        values = ", ".join(f"{k}={v}" for k, v in self.snapshot().items())
        return f"<RunOutcome {values}>"


class ScanConfig:
    READ_BUFFER_SIZE = 1024 * 1024  # 1MB, bounded per worker
    QUEUE_SLOTS_PER_WORKER = 4
    QUEUE_POLL_INTERVAL = 0.05  # seconds between cancellation checks while blocked on the queue
    SCAN_PROGRESS_INTERVAL = 1000  # entries between discovery progress updates
    DEFAULT_MIN_SIZE = 1

    @staticmethod
    def default_workers() -> int:
        return os.cpu_count() or 1


# ======================
#  Parameters
# ======================

@dataclass
class ScanParams:
    """
    DTO for scan parameters with built-in validation.
    Interface-agnostic: used by the CLI and by library callers.
    """
    roots: List[str]
    min_size_bytes: int = ScanConfig.DEFAULT_MIN_SIZE
    name_pattern: Optional[str] = "*"
    pattern_syntax: PatternSyntax = PatternSyntax.GLOB
    workers: Optional[int] = None
    queue_size: Optional[int] = None
    algorithm: HashAlgorithmName = HashAlgorithmName.XXH128
    buffer_size: int = ScanConfig.READ_BUFFER_SIZE
    keep_policy: KeepPolicy = KeepPolicy.LEXICOGRAPHIC
    index_shards: int = 1
    timeout: Optional[float] = None
    name_filter: NameFilter = field(init=False, repr=False)

    def __post_init__(self):
        """Validate parameters immediately after creation."""
        if isinstance(self.roots, str):
            self.roots = [self.roots]
        self.roots = [r for r in self.roots if r]
        if not self.roots:
            raise ScanSetupError("At least one root directory is required")

        if self.min_size_bytes < 0:
            raise ScanSetupError("Minimum size cannot be negative")

        if self.workers is not None and self.workers < 1:
            raise ScanSetupError("Worker count must be at least 1")

        if self.queue_size is not None and self.queue_size < 1:
            raise ScanSetupError("Queue size must be at least 1")

        if self.buffer_size < 1:
            raise ScanSetupError("Read buffer size must be at least 1 byte")

        if self.index_shards < 1:
            raise ScanSetupError("Index shard count must be at least 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ScanSetupError("Timeout must be positive")

        if not isinstance(self.algorithm, HashAlgorithmName):
            try:
                self.algorithm = HashAlgorithmName(self.algorithm)
            except ValueError:
                raise ScanSetupError(f"Unknown hash algorithm: '{self.algorithm}'")

        # Compile once here so an invalid pattern fails before scanning
        self.name_filter = NameFilter(self.name_pattern, self.pattern_syntax)

    @property
    def effective_workers(self) -> int:
        return self.workers or ScanConfig.default_workers()

    @staticmethod
    def from_human_readable(
            roots: List[str],
            min_size_str: str = "1",
            name_pattern: Optional[str] = "*",
            regex: bool = False,
            workers: Optional[int] = None,
            queue_size: Optional[int] = None,
            algorithm: str = HashAlgorithmName.XXH128.value,
            keep_policy: KeepPolicy = KeepPolicy.LEXICOGRAPHIC,
            timeout: Optional[float] = None,
    ) -> 'ScanParams':
        """
        Factory method to create params from human-readable inputs.
        Useful for CLI argument parsing.
        """
        try:
            min_size = ConvertUtils.human_to_bytes(min_size_str)
        except ValueError as e:
            raise ScanSetupError(str(e)) from e

        return ScanParams(
            roots=list(roots),
            min_size_bytes=min_size,
            name_pattern=name_pattern,
            pattern_syntax=PatternSyntax.REGEX if regex else PatternSyntax.GLOB,
            workers=workers,
            queue_size=queue_size,
            algorithm=algorithm,
            keep_policy=keep_policy,
            timeout=timeout,
        )
