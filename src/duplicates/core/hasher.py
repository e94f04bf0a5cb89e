"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

hasher.py
Implements the fingerprint function: a file's content streamed through a pluggable
hash algorithm with a bounded read buffer, so memory use does not grow with file size.

Every call creates its own hash state and buffer. Nothing is shared between calls,
which makes one HasherImpl safe to use from all workers at once.
"""

import hashlib
import xxhash
from typing import Dict, Type, Union

from duplicates.core.errors import FileProcessingError, ScanSetupError
from duplicates.core.interfaces import HashAlgorithm, HashState
from duplicates.core.models import FileDescriptor, HashAlgorithmName, ScanConfig


# Use the same way to implement and use any other hashing algorithm
class XXHash64AlgorithmImpl(HashAlgorithm):
    name = HashAlgorithmName.XXH64.value
    digest_size = 8

    def new(self) -> HashState:
        return xxhash.xxh64()


class XXHash128AlgorithmImpl(HashAlgorithm):
    name = HashAlgorithmName.XXH128.value
    digest_size = 16

    def new(self) -> HashState:
        return xxhash.xxh3_128()


class MD5AlgorithmImpl(HashAlgorithm):
    name = HashAlgorithmName.MD5.value
    digest_size = 16

    def new(self) -> HashState:
        return hashlib.md5()


class SHA256AlgorithmImpl(HashAlgorithm):
    name = HashAlgorithmName.SHA256.value
    digest_size = 32

    def new(self) -> HashState:
        return hashlib.sha256()


ALGORITHMS: Dict[HashAlgorithmName, Type[HashAlgorithm]] = {
    HashAlgorithmName.XXH64: XXHash64AlgorithmImpl,
    HashAlgorithmName.XXH128: XXHash128AlgorithmImpl,
    HashAlgorithmName.MD5: MD5AlgorithmImpl,
    HashAlgorithmName.SHA256: SHA256AlgorithmImpl,
}


def get_algorithm(name: Union[str, HashAlgorithmName]) -> HashAlgorithm:
    """Looks up an algorithm by enum or by its CLI name ('xxh128', 'md5', ...)."""
    try:
        key = name if isinstance(name, HashAlgorithmName) else HashAlgorithmName(name)
    except ValueError:
        raise ScanSetupError(f"Unknown hash algorithm: '{name}'")
    return ALGORITHMS[key]()


class HasherImpl:
    """
    A hasher implementation that supports any algorithm via the HashAlgorithm interface.
    Streams the whole file in buffer_size chunks.
    """

    def __init__(self, algorithm: HashAlgorithm = None, buffer_size: int = ScanConfig.READ_BUFFER_SIZE):
        if buffer_size < 1:
            raise ValueError("buffer_size must be positive")
        self.algorithm = algorithm or XXHash128AlgorithmImpl()
        self.buffer_size = buffer_size

    def compute_fingerprint(self, file: FileDescriptor) -> bytes:
        """
        Computes the fingerprint of the file's full content.

        Raises:
            FileProcessingError: stage 'open' if the file cannot be opened,
                stage 'read' if reading fails or the file changed size since discovery.
        """
        try:
            handle = open(file.path, "rb")
        except OSError as e:
            raise FileProcessingError(file.path, FileProcessingError.OPEN, e) from e

        state = self.algorithm.new()
        total = 0
        with handle:
            try:
                for chunk in iter(lambda: handle.read(self.buffer_size), b""):
                    state.update(chunk)
                    total += len(chunk)
            except OSError as e:
                raise FileProcessingError(file.path, FileProcessingError.READ, e) from e

        if total != file.size:
            raise FileProcessingError(
                file.path,
                FileProcessingError.READ,
                message=f"size changed during scan (expected {file.size} bytes, read {total})"
            )
        return state.digest()
