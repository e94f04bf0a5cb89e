"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

interfaces.py

Defines core interfaces (Protocols) used throughout the scan-and-hash pipeline.
Structural typing keeps the pool agnostic to the concrete fingerprint function
and to where FileDescriptors come from.

Key Components:
---------------
- HashState / HashAlgorithm: streaming hash functions (xxHash, MD5, SHA-256, ...).
- Hasher: turns a FileDescriptor into a fingerprint using a bounded read buffer.
- InclusionPredicate: the `(size, name) -> bool` filter applied during discovery.
- FileScanner: lazily produces FileDescriptors for the worker pool.
"""

from typing import Protocol, Iterator, Optional, Callable
from duplicates.core.models import FileDescriptor, RunOutcome


class HashState(Protocol):
    """An in-progress hash computation."""
    def update(self, data: bytes) -> None: ...
    def digest(self) -> bytes: ...


class HashAlgorithm(Protocol):
    """
    Interface for streaming hash algorithms.

    Allows plugging in different hashing functions like SHA-256, MD5, or xxHash
    without affecting the rest of the pipeline.
    """
    name: str
    digest_size: int

    def new(self) -> HashState:
        """Returns a fresh, independent hash state."""
        ...


class Hasher(Protocol):
    """Interface for computing the content fingerprint of one file."""
    def compute_fingerprint(self, file: FileDescriptor) -> bytes: ...


class InclusionPredicate(Protocol):
    def __call__(self, size: int, name: str) -> bool: ...


class FileScanner(Protocol):
    """
    Interface for walking file systems and producing candidate files.
    """
    def iter_files(
        self,
        outcome: RunOutcome,
        stopped_flag: Optional[Callable[[], bool]] = None,
        progress_callback: Optional[Callable[[str, int, Optional[int]], None]] = None
    ) -> Iterator[FileDescriptor]:
        """
        Yield every regular file under the configured roots that passes the filters.

        Args:
            outcome: Counters for visited/skipped entries and walk errors.
            stopped_flag: Function that returns True if discovery should stop.
            progress_callback: Optional callback for reporting progress (stage, current, total).
        """
        ...
