"""
duplicates: concurrent duplicate file finder.

Core features:
- Streams a directory walk into a bounded queue feeding a fixed-size pool of hashing workers
- Full-content fingerprints (xxHash by default, MD5 or SHA-256 on request) with a bounded read buffer
- Per-file failures are logged and counted, never abort the run
- Deterministic choice of the copy to keep; deletion goes to the system trash (via send2trash)
- CLI interface for headless/server usage
"""

from importlib.metadata import PackageNotFoundError, version as _version

try:
    __version__ = _version("duplicates")
except PackageNotFoundError:
    __version__ = "0.0.0"

# Public API: only what users should import directly
from duplicates.commands import ScanCommand
from duplicates.core import (
    ScanParams, ScanResult, KeepPolicy, HashAlgorithmName, FileDescriptor, DuplicateGroup,
    RunOutcome, HashPipeline, ScanSetupError, PoolFatalError, ScanTimeoutError)
from duplicates.utils.convert_utils import ConvertUtils
from duplicates.services import DuplicateService
from duplicates.services.file_service import FileService

__all__ = [
    "ScanCommand",
    "ScanParams",
    "ScanResult",
    "KeepPolicy",
    "HashAlgorithmName",
    "FileDescriptor",
    "DuplicateGroup",
    "RunOutcome",
    "HashPipeline",
    "ScanSetupError",
    "PoolFatalError",
    "ScanTimeoutError",
    "ConvertUtils",
    "DuplicateService",
    "FileService",
    "__version__",
]
