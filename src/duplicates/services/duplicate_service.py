from typing import List, Optional, Tuple
from duplicates.core.models import DuplicateGroup, KeepPolicy
from duplicates.core.sorter import Sorter


class DuplicateService:
    @staticmethod
    def keep_only_one_file_per_group(
            groups: List[DuplicateGroup],
            policy: Optional[KeepPolicy] = None
    ) -> Tuple[List[str], List[str]]:
        """
        Orders each group by the keep policy, keeps its first file and marks the rest for deletion.
        Groups are sorted in place.
        Returns:
            - List of file paths to be deleted
            - List of file paths that are kept (one per duplicate group)
        """
        Sorter.sort_files_inside_groups(groups, policy)

        files_to_delete = []
        files_to_keep = []
        for group in groups:
            if len(group.files) > 1:
                files_to_keep.append(group.files[0].path)
                files_to_delete.extend(f.path for f in group.files[1:])

        return files_to_delete, files_to_keep

    @staticmethod
    def calculate_space_savings(groups: List[DuplicateGroup], files_to_delete: List[str]) -> int:
        """Total bytes that deleting files_to_delete would free."""
        delete_set = set(files_to_delete)
        return sum(f.size for group in groups for f in group.files if f.path in delete_set)
