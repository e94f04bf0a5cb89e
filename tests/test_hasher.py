"""
Unit tests for HasherImpl and the pluggable hash algorithms.
Verifies full-content fingerprints, bounded streaming and typed open/read failures.
"""
import hashlib
import threading
from unittest import mock

import pytest
import xxhash

from duplicates.core.errors import FileProcessingError, ScanSetupError
from duplicates.core.hasher import (
    HasherImpl, XXHash64AlgorithmImpl, XXHash128AlgorithmImpl, MD5AlgorithmImpl,
    SHA256AlgorithmImpl, get_algorithm
)
from duplicates.core.models import FileDescriptor, HashAlgorithmName


def _descriptor(path) -> FileDescriptor:
    return FileDescriptor(path=str(path), size=path.stat().st_size)


class TestHasherImpl:
    """Test fingerprint computation with chunk-based reading."""

    def test_same_content_produces_same_fingerprint(self, temp_dir):
        """Identical files must produce identical fingerprints."""
        content = b"test content " * 1000
        f1 = temp_dir / "one.bin"
        f2 = temp_dir / "two.bin"
        f1.write_bytes(content)
        f2.write_bytes(content)

        hasher = HasherImpl()
        fp1 = hasher.compute_fingerprint(_descriptor(f1))
        fp2 = hasher.compute_fingerprint(_descriptor(f2))

        assert fp1 == fp2
        assert isinstance(fp1, bytes)
        assert len(fp1) == 16  # XXH3 128-bit

    def test_different_content_produces_different_fingerprints(self, temp_dir):
        """Same size, different bytes: fingerprints must differ."""
        f1 = temp_dir / "a.bin"
        f2 = temp_dir / "b.bin"
        f1.write_bytes(b"A" * 1024)
        f2.write_bytes(b"B" * 1024)

        hasher = HasherImpl()
        assert hasher.compute_fingerprint(_descriptor(f1)) != hasher.compute_fingerprint(_descriptor(f2))

    def test_difference_in_last_byte_is_detected(self, temp_dir):
        """The whole file is hashed, not just a prefix."""
        f1 = temp_dir / "a.bin"
        f2 = temp_dir / "b.bin"
        f1.write_bytes(b"X" * 300_000 + b"1")
        f2.write_bytes(b"X" * 300_000 + b"2")

        hasher = HasherImpl(buffer_size=4096)
        assert hasher.compute_fingerprint(_descriptor(f1)) != hasher.compute_fingerprint(_descriptor(f2))

    def test_small_buffer_gives_same_result_as_one_shot_hash(self, temp_dir):
        """Streaming in tiny chunks must equal hashing the whole content at once."""
        content = bytes(range(256)) * 100
        f = temp_dir / "data.bin"
        f.write_bytes(content)

        streamed = HasherImpl(XXHash64AlgorithmImpl(), buffer_size=7).compute_fingerprint(_descriptor(f))

        assert streamed == xxhash.xxh64(content).digest()

    def test_reads_are_bounded_by_buffer_size(self, temp_dir):
        """No single read may request more than buffer_size bytes."""
        f = temp_dir / "big.bin"
        f.write_bytes(b"Z" * 100_000)
        requested = []
        real_open = open

        class RecordingHandle:
            def __init__(self, path, mode):
                self._handle = real_open(path, mode)

            def read(self, n=-1):
                requested.append(n)
                return self._handle.read(n)

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                self._handle.close()

        with mock.patch("duplicates.core.hasher.open", RecordingHandle, create=True):
            HasherImpl(buffer_size=8192).compute_fingerprint(_descriptor(f))

        assert requested
        assert all(0 < n <= 8192 for n in requested)

    def test_empty_file_has_a_fingerprint(self, temp_dir):
        f = temp_dir / "empty.bin"
        f.write_bytes(b"")

        fp = HasherImpl(MD5AlgorithmImpl()).compute_fingerprint(_descriptor(f))

        assert fp == hashlib.md5(b"").digest()

    def test_missing_file_raises_open_error(self, temp_dir):
        """A file removed after discovery fails at the 'open' stage."""
        descriptor = FileDescriptor(path=str(temp_dir / "gone.txt"), size=5)

        with pytest.raises(FileProcessingError) as exc_info:
            HasherImpl().compute_fingerprint(descriptor)

        assert exc_info.value.stage == FileProcessingError.OPEN
        assert exc_info.value.path == descriptor.path
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    def test_read_failure_raises_read_error(self, temp_dir):
        """I/O error in the middle of a file fails at the 'read' stage."""
        f = temp_dir / "flaky.bin"
        f.write_bytes(b"data" * 10)

        class FailingHandle:
            calls = 0

            def read(self, n=-1):
                FailingHandle.calls += 1
                if FailingHandle.calls > 1:
                    raise OSError(5, "Input/output error")
                return b"data"

            def __enter__(self):
                return self

            def __exit__(self, *exc):
                return False

        with mock.patch("duplicates.core.hasher.open", return_value=FailingHandle(), create=True):
            with pytest.raises(FileProcessingError) as exc_info:
                HasherImpl(buffer_size=4).compute_fingerprint(_descriptor(f))

        assert exc_info.value.stage == FileProcessingError.READ

    def test_truncated_file_raises_read_error(self, temp_dir):
        """File shrank between discovery and hashing: reported, not silently hashed."""
        f = temp_dir / "shrinking.bin"
        f.write_bytes(b"0123456789")
        descriptor = _descriptor(f)
        f.write_bytes(b"01234")

        with pytest.raises(FileProcessingError, match="size changed") as exc_info:
            HasherImpl().compute_fingerprint(descriptor)

        assert exc_info.value.stage == FileProcessingError.READ

    def test_rejects_non_positive_buffer(self):
        with pytest.raises(ValueError):
            HasherImpl(buffer_size=0)

    def test_concurrent_calls_do_not_interfere(self, temp_dir):
        """One hasher shared by many threads yields the same fingerprints as sequential use."""
        paths = []
        for i in range(8):
            p = temp_dir / f"f{i}.bin"
            p.write_bytes(bytes([i]) * (10_000 + i))
            paths.append(p)

        hasher = HasherImpl(buffer_size=1024)
        expected = {str(p): hasher.compute_fingerprint(_descriptor(p)) for p in paths}
        results = {}
        lock = threading.Lock()

        def work(p):
            fp = hasher.compute_fingerprint(_descriptor(p))
            with lock:
                results[str(p)] = fp

        threads = [threading.Thread(target=work, args=(p,)) for p in paths * 3]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results == expected


class TestAlgorithms:
    """Every algorithm produces its documented digest size and matches its reference library."""

    @pytest.mark.parametrize("algorithm, size", [
        (XXHash64AlgorithmImpl(), 8),
        (XXHash128AlgorithmImpl(), 16),
        (MD5AlgorithmImpl(), 16),
        (SHA256AlgorithmImpl(), 32),
    ])
    def test_digest_sizes(self, temp_dir, algorithm, size):
        f = temp_dir / "x.bin"
        f.write_bytes(b"payload")

        fp = HasherImpl(algorithm).compute_fingerprint(_descriptor(f))

        assert len(fp) == size == algorithm.digest_size

    def test_sha256_matches_hashlib(self, temp_dir):
        f = temp_dir / "x.bin"
        f.write_bytes(b"hello world")

        fp = HasherImpl(SHA256AlgorithmImpl()).compute_fingerprint(_descriptor(f))

        assert fp == hashlib.sha256(b"hello world").digest()

    def test_get_algorithm_by_name_and_enum(self):
        assert isinstance(get_algorithm("md5"), MD5AlgorithmImpl)
        assert isinstance(get_algorithm(HashAlgorithmName.XXH64), XXHash64AlgorithmImpl)

    def test_get_algorithm_rejects_unknown_name(self):
        with pytest.raises(ScanSetupError, match="Unknown hash algorithm"):
            get_algorithm("crc32")

    def test_new_returns_independent_states(self):
        algorithm = XXHash128AlgorithmImpl()
        a = algorithm.new()
        b = algorithm.new()
        a.update(b"one")
        b.update(b"two")
        assert a.digest() != b.digest()
