"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/sorter.py
Pure sorting logic for duplicate groups.
The first file of a sorted group is the one the deleter keeps.
"""
from typing import List, Optional
from duplicates.core.models import DuplicateGroup, KeepPolicy


class Sorter:
    """
    Sorts files inside duplicate groups according to a keep policy.
    Modifies groups in-place.
    Ordering per policy (ties always broken by the full path, so the result is
    the same on every run no matter in which order workers finished):
       - LEXICOGRAPHIC: smallest path first (DEFAULT)
       - SHORTEST_PATH: file closest to the root first, then shortest filename
       - SHORTEST_FILENAME: shortest filename first, then closest to the root
       - FIRST_SEEN: left in insertion order (order in which hashing completed)
    """

    @staticmethod
    def sort_files_inside_groups(groups: List[DuplicateGroup], policy: Optional[KeepPolicy] = None) -> None:
        if not groups:
            return

        if policy is None:
            policy = KeepPolicy.LEXICOGRAPHIC

        if policy == KeepPolicy.FIRST_SEEN:
            return

        if policy == KeepPolicy.SHORTEST_PATH:
            key_func = lambda f: (f.depth, len(f.name), f.path)
        elif policy == KeepPolicy.SHORTEST_FILENAME:
            key_func = lambda f: (len(f.name), f.depth, f.path)
        else:
            key_func = lambda f: f.path

        for group in groups:
            group.files.sort(key=key_func)
