"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/errors.py
Exception hierarchy shared by the scanner, the worker pool and the CLI.
"""
from typing import Optional


class DuplicatesError(Exception):
    """Base class for all errors raised by the duplicates engine."""


class ScanSetupError(DuplicatesError, ValueError):
    """Invalid root, pattern or parameter. Raised before any scanning begins."""


class FileProcessingError(DuplicatesError):
    """
    A single file could not be opened or read.
    Recoverable: the file is counted as errored and the run continues.
    """
    OPEN = "open"
    READ = "read"

    def __init__(self, path: str, stage: str, cause: Optional[BaseException] = None, message: Optional[str] = None):
        self.path = path
        self.stage = stage
        self.cause = cause
        detail = message or (str(cause) if cause is not None else "unknown error")
        super().__init__(f"Failed to {stage} {path}: {detail}")


class PoolFatalError(DuplicatesError):
    """The work source itself failed. Raised after in-flight work has drained."""


class ScanTimeoutError(DuplicatesError, TimeoutError):
    """The overall run deadline expired. Raised after in-flight work has drained."""
