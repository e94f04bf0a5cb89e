"""
Core scan-and-hash engine: discovery, fingerprinting, worker pool, duplicate index.

This package contains the concurrency-critical foundation of duplicates:
- FileScannerImpl: recursive directory walk with size/name filters
- HasherImpl + algorithm implementations: streaming xxHash/MD5/SHA-256 fingerprints
- WorkerPool: bounded queue + fixed-size pool of hashing threads
- DuplicateIndex: lock-protected fingerprint -> files mapping and its frozen snapshot
- ResultAggregator / CancellationState: one outcome per file, first fatal error wins
- HashPipeline: wires all of the above around a descriptor source
- Models: FileDescriptor, DuplicateGroup, RunOutcome and ScanParams

No UI dependencies: suitable for CLI and library usage.
"""

from .errors import (
    DuplicatesError, ScanSetupError, FileProcessingError, PoolFatalError, ScanTimeoutError)
from .filters import FileFilter, NameFilter, PatternSyntax
from .hasher import (
    HasherImpl, XXHash64AlgorithmImpl, XXHash128AlgorithmImpl, MD5AlgorithmImpl,
    SHA256AlgorithmImpl, get_algorithm)
from .scanner import FileScannerImpl
from .index import DuplicateIndex, IndexSnapshot
from .aggregator import CancellationState, ResultAggregator
from .pool import WorkerPool
from .pipeline import HashPipeline, ScanResult
from .sorter import Sorter
from .models import (
    FileDescriptor, FileResult, ResultStatus, DuplicateGroup, RunOutcome,
    ScanParams, ScanConfig, HashAlgorithmName, KeepPolicy)

__all__ = [
    "DuplicatesError",
    "ScanSetupError",
    "FileProcessingError",
    "PoolFatalError",
    "ScanTimeoutError",
    "FileFilter",
    "NameFilter",
    "PatternSyntax",
    "HasherImpl",
    "XXHash64AlgorithmImpl",
    "XXHash128AlgorithmImpl",
    "MD5AlgorithmImpl",
    "SHA256AlgorithmImpl",
    "get_algorithm",
    "FileScannerImpl",
    "DuplicateIndex",
    "IndexSnapshot",
    "CancellationState",
    "ResultAggregator",
    "WorkerPool",
    "HashPipeline",
    "ScanResult",
    "Sorter",
    "FileDescriptor",
    "FileResult",
    "ResultStatus",
    "DuplicateGroup",
    "RunOutcome",
    "ScanParams",
    "ScanConfig",
    "HashAlgorithmName",
    "KeepPolicy",
]
