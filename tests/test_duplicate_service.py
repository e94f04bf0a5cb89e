"""
Tests for duplicate service logic: validates which file of each group survives deletion.
"""
from duplicates.core.models import DuplicateGroup, FileDescriptor, KeepPolicy
from duplicates.services.duplicate_service import DuplicateService


def _group(fingerprint, *paths, size=100):
    return DuplicateGroup(fingerprint=fingerprint, files=[FileDescriptor(path=p, size=size) for p in paths])


class TestKeepOnlyOneFilePerGroup:
    """Test that the service keeps exactly one file per group."""

    def test_keeps_lexicographically_smallest_path_by_default(self):
        group = _group(b"a", "/c/file.txt", "/a/file.txt", "/b/file.txt")

        to_delete, to_keep = DuplicateService.keep_only_one_file_per_group([group])

        assert to_keep == ["/a/file.txt"]
        assert sorted(to_delete) == ["/b/file.txt", "/c/file.txt"]

    def test_handles_multiple_groups_independently(self):
        g1 = _group(b"1", "/g1/b.jpg", "/g1/a.jpg")
        g2 = _group(b"2", "/g2/z.jpg", "/g2/y.jpg", "/g2/x.jpg")

        to_delete, to_keep = DuplicateService.keep_only_one_file_per_group([g1, g2])

        assert to_keep == ["/g1/a.jpg", "/g2/x.jpg"]
        assert len(to_delete) == 3

    def test_single_file_groups_are_left_alone(self):
        lonely = _group(b"u", "/only/one.txt")

        to_delete, to_keep = DuplicateService.keep_only_one_file_per_group([lonely])

        assert to_delete == []
        assert to_keep == []

    def test_respects_keep_policy(self):
        group = _group(b"p", "/deep/nested/dir/a.txt", "/top/long_name.txt")

        _, to_keep = DuplicateService.keep_only_one_file_per_group([group], KeepPolicy.SHORTEST_PATH)

        assert to_keep == ["/top/long_name.txt"]

    def test_never_deletes_every_copy(self):
        groups = [_group(bytes([i]), *(f"/d{i}/f{j}" for j in range(i + 2))) for i in range(5)]

        to_delete, to_keep = DuplicateService.keep_only_one_file_per_group(groups)

        for group in groups:
            assert any(p in to_keep for p in group.paths)
        assert not set(to_delete) & set(to_keep)


class TestCalculateSpaceSavings:
    def test_sums_sizes_of_deleted_files(self):
        g1 = _group(b"1", "/a", "/b", size=100)
        g2 = _group(b"2", "/c", "/d", "/e", size=1000)

        savings = DuplicateService.calculate_space_savings([g1, g2], ["/b", "/d", "/e"])

        assert savings == 2100
