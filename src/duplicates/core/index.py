"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/index.py
The duplicate index: fingerprint -> files sharing it.

DuplicateIndex is the only structure mutated by several workers. Appends are
serialized per shard (one shard by default, i.e. a single global lock); workers
appending under different shards never wait for each other. Once every worker
has drained, freeze() hands out an immutable IndexSnapshot for reporting.
"""

import threading
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Tuple

from duplicates.core.models import DuplicateGroup, FileDescriptor


class IndexSnapshot:
    """
    Read-only view of a finished index.
    Duplicate counts are derived from the groups on demand, never stored.
    """

    def __init__(self, groups: Dict[bytes, Tuple[FileDescriptor, ...]]):
        self._groups: Mapping[bytes, Tuple[FileDescriptor, ...]] = MappingProxyType(dict(groups))

    def __len__(self) -> int:
        return len(self._groups)

    def __contains__(self, fingerprint: bytes) -> bool:
        return fingerprint in self._groups

    def __getitem__(self, fingerprint: bytes) -> Tuple[FileDescriptor, ...]:
        return self._groups[fingerprint]

    @property
    def fingerprints(self) -> List[bytes]:
        return list(self._groups)

    def groups(self) -> List[DuplicateGroup]:
        """All groups, including single-file ones. Each call returns fresh lists."""
        return [DuplicateGroup(fingerprint=fp, files=list(files)) for fp, files in self._groups.items()]

    def duplicate_groups(self) -> List[DuplicateGroup]:
        """Groups with more than one file, largest files first."""
        result = [g for g in self.groups() if g.is_duplicate()]
        result.sort(key=lambda g: (-g.size, min(g.paths)))
        return result

    @property
    def duplicate_group_count(self) -> int:
        return sum(1 for files in self._groups.values() if len(files) > 1)

    @property
    def redundant_file_count(self) -> int:
        return sum(len(files) - 1 for files in self._groups.values() if len(files) > 1)

    @property
    def redundant_bytes(self) -> int:
        return sum((len(files) - 1) * files[0].size for files in self._groups.values() if len(files) > 1)

    @property
    def file_count(self) -> int:
        return sum(len(files) for files in self._groups.values())

    def as_path_sets(self) -> Dict[bytes, FrozenSet[str]]:
        """Fingerprint -> set of paths, for comparisons that ignore insertion order."""
        return {fp: frozenset(f.path for f in files) for fp, files in self._groups.items()}

    def find(self, path: str) -> bytes:
        """Returns the fingerprint a path was indexed under. Raises KeyError if absent."""
        for fp, files in self._groups.items():
            if any(f.path == path for f in files):
                return fp
        raise KeyError(path)

    def __repr__(self):
        return f"<IndexSnapshot groups={len(self._groups)}, duplicates={self.duplicate_group_count}>"


class DuplicateIndex:
    """
    Concurrently-safe mapping from fingerprint to the ordered list of files sharing it.

    Invariants:
        - a path is indexed at most once across all fingerprints
        - entries are only ever added while the index is open
    """

    def __init__(self, shards: int = 1):
        if shards < 1:
            raise ValueError("shards must be at least 1")
        self._shards: List[Dict[bytes, List[FileDescriptor]]] = [{} for _ in range(shards)]
        self._locks = [threading.Lock() for _ in range(shards)]
        # Seen paths are sharded by path, independently of the fingerprint shards
        self._path_sets: List[set] = [set() for _ in range(shards)]
        self._path_locks = [threading.Lock() for _ in range(shards)]
        self._frozen = False

    @property
    def shard_count(self) -> int:
        return len(self._shards)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _shard_for(self, fingerprint: bytes) -> int:
        if len(self._shards) == 1:
            return 0
        return int.from_bytes(fingerprint[:4], "big") % len(self._shards)

    def add(self, fingerprint: bytes, file: FileDescriptor) -> None:
        """
        Append a file under its fingerprint.
        Raises:
            RuntimeError: if the index has been frozen
            ValueError: if the path was already indexed
        """
        if self._frozen:
            raise RuntimeError("Cannot add to a frozen index")

        path_shard = hash(file.path) % len(self._path_sets)
        with self._path_locks[path_shard]:
            if file.path in self._path_sets[path_shard]:
                raise ValueError(f"Path already indexed: {file.path}")
            self._path_sets[path_shard].add(file.path)

        shard = self._shard_for(fingerprint)
        with self._locks[shard]:
            self._shards[shard].setdefault(fingerprint, []).append(file)

    def __len__(self) -> int:
        return sum(len(shard) for shard in self._shards)

    def freeze(self) -> IndexSnapshot:
        """
        Close the index for writing and return its snapshot.
        Must only be called once every worker has finished.
        """
        self._frozen = True
        merged: Dict[bytes, Tuple[FileDescriptor, ...]] = {}
        for lock, shard in zip(self._locks, self._shards):
            with lock:
                for fp, files in shard.items():
                    merged[fp] = tuple(files)
        return IndexSnapshot(merged)
