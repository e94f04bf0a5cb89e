"""
CLI tests: report format, exit codes and deletion safety.
"""
import os
import sys
from unittest import mock

import pytest

from duplicates.cli import CLIApplication, GROUP_SEPARATOR, main
from duplicates.core.errors import ScanTimeoutError
from duplicates.commands import ScanCommand
from duplicates.services.file_service import FileService


def _exit_code(argv):
    with pytest.raises(SystemExit) as exc_info:
        main(argv)
    return exc_info.value.code


class TestReportOutput:
    """Duplicate groups go to stdout, one path per line, separated by a delimiter."""

    def test_quiet_output_lists_only_groups(self, hello_tree, capsys):
        main(["-i", str(hello_tree), "--quiet"])

        out = capsys.readouterr().out
        assert out.splitlines() == [str(hello_tree / "a.txt"), str(hello_tree / "b.txt"), GROUP_SEPARATOR]

    def test_summary_line_is_printed(self, hello_tree, capsys):
        main(["-i", str(hello_tree), "--workers", "2"])

        captured = capsys.readouterr()
        assert "Found 1 duplicate groups (1 redundant files) from 3 files" in captured.out
        assert "[Scanning]" in captured.err

    def test_no_progress_hides_summary(self, hello_tree, capsys):
        main(["-i", str(hello_tree), "--no-progress"])

        captured = capsys.readouterr()
        assert "Found" not in captured.out
        assert captured.err == ""

    def test_min_size_filters_all_files(self, hello_tree, capsys):
        main(["-i", str(hello_tree), "-m", "10", "-q"])

        assert capsys.readouterr().out == ""

    def test_groups_sorted_by_size(self, test_files, temp_dir, capsys):
        main(["-i", str(temp_dir), "-q", "--single-thread"])

        lines = capsys.readouterr().out.splitlines()
        assert lines.count(GROUP_SEPARATOR) == 2
        assert lines[0].endswith("dup2_a.txt")
        assert lines[1].endswith("dup2_b.txt")

    def test_glob_name_filter(self, test_files, temp_dir, capsys):
        main(["-i", str(temp_dir), "-q", "-n", "dup1_*"])

        lines = capsys.readouterr().out.splitlines()
        assert lines == [str(test_files["dup1_a"]), str(test_files["dup1_b"]), GROUP_SEPARATOR]


class TestUndecodableNames:
    """File names that are not valid UTF-8 are reported byte for byte."""

    def test_non_utf8_duplicate_is_listed(self, temp_dir, capsysbinary):
        if sys.platform == "win32" or sys.getfilesystemencoding().lower() != "utf-8":
            pytest.skip("Needs a POSIX filesystem with UTF-8 file name decoding")
        raw_name = b"a\xff.txt"
        try:
            (temp_dir / os.fsdecode(raw_name)).write_bytes(b"hello")
        except (OSError, UnicodeError):
            pytest.skip("Filesystem rejects non-UTF-8 file names")
        (temp_dir / "b.txt").write_bytes(b"hello")

        main(["-i", str(temp_dir), "-q"])

        lines = capsysbinary.readouterr().out.splitlines()
        assert lines == [
            os.fsencode(str(temp_dir)) + b"/" + raw_name,
            os.fsencode(str(temp_dir / "b.txt")),
            GROUP_SEPARATOR.encode(),
        ]


class TestProgressOutput:
    def test_shorter_line_overwrites_longer_one(self, capsys):
        """The previous progress line is fully covered by the next one."""
        app = CLIApplication()

        app.progress_callback("Scanning", 12345, None)
        app.progress_callback("Hashing", 1, 2)

        err = capsys.readouterr().err
        last = err.split("\r")[-1]
        assert last.startswith("  [Hashing] 1/2 (50.0%)")
        assert "visited" not in last
        assert len(last) == len("  [Scanning] 12345 files visited...")


class TestExitCodes:
    """Setup errors exit with 1 before scanning; Ctrl+C exits with 130."""

    def test_missing_root(self, temp_dir, capsys):
        assert _exit_code(["-i", str(temp_dir / "missing")]) == 1
        assert "Directory not found" in capsys.readouterr().err

    def test_file_as_root(self, hello_tree, capsys):
        assert _exit_code(["-i", str(hello_tree / "a.txt")]) == 1
        assert "not a directory" in capsys.readouterr().err

    def test_invalid_regex(self, hello_tree, capsys):
        assert _exit_code(["-i", str(hello_tree), "-n", "(", "--regex"]) == 1
        assert "Invalid name pattern" in capsys.readouterr().err

    def test_invalid_size(self, hello_tree, capsys):
        assert _exit_code(["-i", str(hello_tree), "-m", "huge"]) == 1
        assert "Invalid size format" in capsys.readouterr().err

    @pytest.mark.parametrize("flags", [["--workers", "0"], ["--queue-size", "0"], ["--timeout", "0"]])
    def test_out_of_range_numbers(self, hello_tree, flags):
        assert _exit_code(["-i", str(hello_tree)] + flags) == 1

    def test_force_requires_delete(self, hello_tree, capsys):
        assert _exit_code(["-i", str(hello_tree), "--force"]) == 1
        assert "--force can only be used with --delete" in capsys.readouterr().err

    def test_permanent_requires_delete(self, hello_tree):
        assert _exit_code(["-i", str(hello_tree), "--permanent"]) == 1

    def test_delete_without_force_in_non_interactive_session(self, hello_tree, capsys):
        with mock.patch.object(sys.stdin, "isatty", return_value=False):
            assert _exit_code(["-i", str(hello_tree), "--delete"]) == 1
        assert "non-interactive" in capsys.readouterr().err
        assert (hello_tree / "b.txt").exists()

    def test_timeout_exits_with_error(self, hello_tree, capsys):
        with mock.patch.object(ScanCommand, "execute", side_effect=ScanTimeoutError("Scan did not finish")):
            assert _exit_code(["-i", str(hello_tree), "--timeout", "5"]) == 1
        assert "Scan did not finish" in capsys.readouterr().err

    def test_keyboard_interrupt_exits_130(self, hello_tree):
        with mock.patch.object(CLIApplication, "run", side_effect=KeyboardInterrupt):
            assert _exit_code(["-i", str(hello_tree)]) == 130

    def test_unexpected_error_exits_1(self, hello_tree, monkeypatch):
        monkeypatch.delenv("DEBUG", raising=False)
        with mock.patch.object(CLIApplication, "run", side_effect=RuntimeError("boom")):
            assert _exit_code(["-i", str(hello_tree)]) == 1


class TestDeletion:
    """CRITICAL: exactly one file of each group survives."""

    def test_force_trash_keeps_lexicographically_first(self, hello_tree, capsys):
        with mock.patch.object(FileService, "move_to_trash") as mock_trash:
            main(["-i", str(hello_tree), "--delete", "--force"])

        deleted = [call.args[0] for call in mock_trash.call_args_list]
        assert deleted == [str(hello_tree / "b.txt")]
        out = capsys.readouterr().out
        assert f"[KEEP] {hello_tree / 'a.txt'}" in out
        assert f"[DEL]  {hello_tree / 'b.txt'}" in out

    def test_permanent_delete_removes_files(self, test_files, temp_dir):
        main(["-i", str(temp_dir), "--delete", "--force", "--permanent", "-q"])

        assert test_files["dup1_a"].exists()
        assert not test_files["dup1_b"].exists()
        assert not test_files["sub_dup"].exists()
        assert test_files["dup2_a"].exists()
        assert not test_files["dup2_b"].exists()
        assert test_files["unique1"].exists()

    def test_keep_policy_shortest_filename(self, temp_dir):
        (temp_dir / "long_name_copy.txt").write_bytes(b"same")
        nested = temp_dir / "deep"
        nested.mkdir()
        (nested / "x.txt").write_bytes(b"same")

        with mock.patch.object(FileService, "move_to_trash") as mock_trash:
            main(["-i", str(temp_dir), "--delete", "--force", "--keep", "shortest-filename", "-q"])

        mock_trash.assert_called_once_with(str(temp_dir / "long_name_copy.txt"))

    def test_interactive_decline_deletes_nothing(self, hello_tree, capsys):
        with mock.patch.object(sys.stdin, "isatty", return_value=True), \
                mock.patch.object(sys.stdout, "isatty", return_value=True), \
                mock.patch("builtins.input", return_value="n"), \
                mock.patch.object(FileService, "delete_multiple") as mock_delete:
            main(["-i", str(hello_tree), "--delete"])

        mock_delete.assert_not_called()
        assert "Deletion cancelled by user." in capsys.readouterr().out

    def test_no_groups_means_nothing_to_delete(self, hello_tree, capsys):
        (hello_tree / "b.txt").write_bytes(b"other")

        main(["-i", str(hello_tree), "--delete", "--force"])

        assert "No duplicate groups found." in capsys.readouterr().out


class TestArgumentParsing:
    def test_defaults(self):
        args = CLIApplication.parse_args(["-i", "/tmp"])

        assert args.min_size == "1"
        assert args.name == "*"
        assert args.hash == "xxh128"
        assert args.keep == "lexicographic"
        assert not args.delete

    def test_multiple_roots(self, temp_dir):
        args = CLIApplication.parse_args(["-i", "/a", "/b"])
        assert args.input == ["/a", "/b"]

    def test_single_thread_sets_one_worker(self, hello_tree):
        app = CLIApplication()
        args = app.parse_args(["-i", str(hello_tree), "--single-thread", "--hash", "md5"])

        params = app.create_params(args)

        assert params.workers == 1
        assert params.algorithm.value == "md5"
