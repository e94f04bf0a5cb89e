#!/usr/bin/env python3
"""
duplicates CLI: find files with identical content and report or delete the redundant copies.
Report goes to stdout; progress, warnings and per-file errors go to stderr.
Deletion moves files to the system trash unless --permanent is given.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import sys
import threading
import time
from pathlib import Path
from typing import List, Optional, NoReturn

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from duplicates.core.errors import PoolFatalError, ScanSetupError, ScanTimeoutError
from duplicates.core.filters import NameFilter, PatternSyntax
from duplicates.core.models import DuplicateGroup, KeepPolicy, ScanParams
from duplicates.core.pipeline import ScanResult
from duplicates.core.sorter import Sorter
from duplicates.commands import ScanCommand
from duplicates.utils.convert_utils import ConvertUtils
from duplicates.services.file_service import FileService
from duplicates.services.duplicate_service import DuplicateService
from duplicates.aliases import (
    HASH_ALIASES, HASH_CHOICES, HASH_HELP_TEXT,
    KEEP_ALIASES, KEEP_CHOICES, KEEP_HELP_TEXT,
    EPILOG_TEXT
)

GROUP_SEPARATOR = "---------"


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbose: bool = False
        self.quiet: bool = False
        self.show_progress: bool = True

        self._progress_lock = threading.Lock()
        self._progress_width = 0

        # UTF-8 for Windows consoles; undecodable file names are written back as their raw bytes
        for stream in (sys.stdout, sys.stderr):
            if hasattr(stream, "reconfigure"):
                stream.reconfigure(encoding="utf-8", errors="surrogateescape")

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments."""
        parser = argparse.ArgumentParser(
            prog="duplicates",
            description="duplicates: find files with identical content in a directory tree",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        # Required arguments
        parser.add_argument(
            "--input", "-i",
            required=True,
            nargs="+",
            type=str,
            metavar="PATH",
            help="Directories (space separated) to scan for duplicates"
        )

        # Filtering options
        parser.add_argument(
            "--min-size", "-m",
            default="1",
            type=str,
            metavar='',
            help="Minimum file size (e.g., 1, 500KB, 1MB). Smaller files are skipped. Default: 1"
        )
        parser.add_argument(
            "--name", "-n",
            default="*",
            type=str,
            metavar='',
            help="File name pattern (glob, e.g. '*.jpg'). Default: '*' (all files)"
        )
        parser.add_argument(
            "--regex",
            action="store_true",
            help="Treat --name as a regular expression searched in the file name"
        )

        # Pool options
        parser.add_argument(
            "--workers", "-w",
            default=None,
            type=int,
            metavar='',
            help="Number of hashing workers. Default: number of CPUs"
        )
        parser.add_argument(
            "--single-thread",
            action="store_true",
            dest="single_thread",
            help="Hash files one at a time (same as --workers 1)"
        )
        parser.add_argument(
            "--queue-size",
            default=None,
            type=int,
            metavar='',
            dest="queue_size",
            help="Maximum number of discovered files waiting for a worker. Default: 4 per worker"
        )
        parser.add_argument(
            "--hash",
            choices=HASH_CHOICES,
            default="xxh128",
            type=str,
            help=HASH_HELP_TEXT
        )
        parser.add_argument(
            "--timeout",
            default=None,
            type=float,
            metavar='',
            help="Abort the scan after this many seconds"
        )

        # Actions
        parser.add_argument(
            "--delete",
            action="store_true",
            help="Keep one file per duplicate group and delete the rest. "
                 "Always shows preview before deletion for safety."
        )
        parser.add_argument(
            "--keep",
            choices=KEEP_CHOICES,
            default="lexicographic",
            type=str,
            help=KEEP_HELP_TEXT
        )
        parser.add_argument(
            "--force",
            action="store_true",
            help="Skip confirmation prompt when used with --delete (for automation/scripts)"
        )
        parser.add_argument(
            "--permanent",
            action="store_true",
            help="With --delete: remove files permanently instead of moving them to trash"
        )

        # Output options
        parser.add_argument(
            "--no-progress",
            action="store_true",
            dest="no_progress",
            help="Do not show progress and summary lines"
        )
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            help="Suppress non-essential output (only duplicate groups are printed)"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="store_true",
            help="Show debug logging and detailed statistics"
        )

        return parser.parse_args(args)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before any scanning starts."""
        if args.force and not args.delete:
            self.error_exit("--force can only be used with --delete")
        if args.permanent and not args.delete:
            self.error_exit("--permanent can only be used with --delete")

        # Prevent interactive confirmation in non-TTY environments
        if args.delete and not args.force:
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Cannot request interactive confirmation in non-interactive session.\n"
                    "Use --force flag to proceed without confirmation when piping output or running in scripts."
                )

        for root in args.input:
            root_path = Path(root)
            if not root_path.exists():
                self.error_exit(f"Directory not found: {root}")
            if not root_path.is_dir():
                self.error_exit(f"Path is not a directory: {root}")

        if not ConvertUtils.is_valid_size_format(args.min_size):
            self.error_exit(f"Invalid size format: '{args.min_size}'")

        try:
            NameFilter(args.name, PatternSyntax.REGEX if args.regex else PatternSyntax.GLOB)
        except ScanSetupError as e:
            self.error_exit(str(e))

        if args.workers is not None and args.workers < 1:
            self.error_exit("--workers must be at least 1")
        if args.queue_size is not None and args.queue_size < 1:
            self.error_exit("--queue-size must be at least 1")
        if args.timeout is not None and args.timeout <= 0:
            self.error_exit("--timeout must be positive")

    def create_params(self, args: argparse.Namespace) -> ScanParams:
        """Create ScanParams from CLI arguments."""
        workers = 1 if args.single_thread else args.workers
        try:
            params = ScanParams.from_human_readable(
                roots=args.input,
                min_size_str=args.min_size,
                name_pattern=args.name,
                regex=args.regex,
                workers=workers,
                queue_size=args.queue_size,
                algorithm=HASH_ALIASES[args.hash].value,
                keep_policy=KEEP_ALIASES.get(args.keep, KeepPolicy.LEXICOGRAPHIC),
                timeout=args.timeout,
            )
            return params
        except ScanSetupError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback. Best effort: counters may be slightly stale."""
        if not self.show_progress:
            return

        if total and total > 0:
            percent = (current / total) * 100
            line = f"  [{stage}] {current}/{total} ({percent:.1f}%)"
        else:
            line = f"  [{stage}] {current} files visited..."

        # Discovery and workers report from different threads
        with self._progress_lock:
            sys.stderr.write("\r" + line.ljust(self._progress_width))
            sys.stderr.flush()
            self._progress_width = len(line)

    @staticmethod
    def stopped_flag() -> bool:
        """Check if operation should stop (placeholder for signal handling)."""
        return False

    def run_scan(self, params: ScanParams) -> ScanResult:
        """Execute the scan-and-hash pipeline."""
        command = ScanCommand()
        try:
            result = command.execute(
                params,
                progress_callback=self.progress_callback if self.show_progress else None,
                stopped_flag=self.stopped_flag
            )
        except (ScanSetupError, PoolFatalError, ScanTimeoutError) as e:
            if self.show_progress:
                sys.stderr.write("\n")
            self.error_exit(str(e))

        if self.show_progress:
            sys.stderr.write("\n")
        if self.verbose:
            print(result.print_summary(), file=sys.stderr)
        return result

    def summary_line(self, result: ScanResult, params: ScanParams) -> str:
        roots = ", ".join(params.roots)
        line = (
            f"Found {result.duplicate_group_count} duplicate groups "
            f"({result.redundant_file_count} redundant files) from {result.outcome.hashed} files "
            f"in {roots} with options {{ size: '{params.min_size_bytes}', name: '{params.name_pattern}' }}"
        )
        if result.outcome.errored:
            line += f"\n{result.outcome.errored} file(s) could not be read, see log for details"
        return line

    def print_summary(self, result: ScanResult, params: ScanParams) -> None:
        if self.quiet or not self.show_progress:
            return
        print(f"\n{self.summary_line(result, params)}\n")

    @staticmethod
    def output_results(groups: List[DuplicateGroup]) -> None:
        """Print each duplicate group, one path per line, groups separated by a delimiter."""
        for group in groups:
            for path in group.paths:
                print(path)
            print(GROUP_SEPARATOR)

    def execute_delete(self, groups: List[DuplicateGroup], params: ScanParams,
                       force: bool = False, permanent: bool = False) -> None:
        """Keep one file per group, delete the rest. Always shows preview before deletion."""
        if not groups:
            if not self.quiet:
                print("No duplicate groups found.")
            return

        files_to_delete, files_to_keep = DuplicateService.keep_only_one_file_per_group(groups, params.keep_policy)
        space_saved_str = ConvertUtils.bytes_to_human(
            DuplicateService.calculate_space_savings(groups, files_to_delete)
        )

        # Always show deletion preview before action (safety first)
        for group in groups:
            print(f"[KEEP] {group.files[0].path}")
            for file in group.files[1:]:
                print(f"[DEL]  {file.path}")
            print(GROUP_SEPARATOR)

        action = "delete permanently" if permanent else "move to trash"
        print(f"Keep 1 file per group ({len(files_to_keep)} files preserved, "
              f"{len(files_to_delete)} files to {action}, {space_saved_str} freed)")
        print(f"Kept file chosen by: {params.keep_policy.display_name}")

        if force:
            if not self.quiet:
                print("⚠️  WARNING: --force flag skips confirmation. Proceeding with deletion...")
        else:
            # Safety check: confirm we're still in interactive mode
            if not sys.stdin.isatty() or not sys.stdout.isatty():
                self.error_exit(
                    "Lost interactive terminal during operation. "
                    "Use --force to proceed in non-interactive environments."
                )
            response = input(f"Are you sure you want to {action} {len(files_to_delete)} files? [y/N]: ")
            if response.strip().lower() not in ("y", "yes"):
                print("Deletion cancelled by user.")
                return

        failed_files = FileService.delete_multiple(files_to_delete, permanent=permanent)
        deleted_count = len(files_to_delete) - len(failed_files)

        if failed_files:
            for path, error in failed_files:
                self.warning(f"Failed to delete {path}: {error}")
            print(f"\n⚠️  Partial success: {deleted_count}/{len(files_to_delete)} files deleted.")
            print(f"Failed to delete {len(failed_files)} file(s):")
            print(FileService.summarize_errors(failed_files))
        else:
            print(f"✅ Successfully deleted {deleted_count} files ({space_saved_str}).")

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"⚠️  {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"❌ Error: {message}", file=sys.stderr)
        sys.exit(code)

    @staticmethod
    def configure_logging(verbose: bool, quiet: bool) -> None:
        if verbose:
            level = logging.DEBUG
        elif quiet:
            level = logging.ERROR
        else:
            level = logging.WARNING
        logging.getLogger().setLevel(level)

    def run(self, args=None) -> None:
        """Main entry point with conditional output behavior."""
        args = self.parse_args(args)
        self.verbose = args.verbose
        self.quiet = args.quiet
        self.show_progress = not (args.no_progress or args.quiet)
        self.configure_logging(self.verbose, self.quiet)

        self.validate_args(args)
        params = self.create_params(args)

        if self.show_progress:
            print(f"\nSearching duplicates in '{', '.join(params.roots)}' with name that match "
                  f"'{params.name_pattern}' and minimum size '{params.min_size_bytes}' bytes\n")

        result = self.run_scan(params)
        groups = result.index.duplicate_groups()

        self.print_summary(result, params)
        if args.delete:
            self.execute_delete(groups, params, force=args.force, permanent=args.permanent)
        else:
            Sorter.sort_files_inside_groups(groups, params.keep_policy)
            self.output_results(groups)
        self.print_summary(result, params)

        elapsed = time.time() - self.start_time
        if self.verbose:
            print(f"\n✅ Completed in {elapsed:.2f} seconds", file=sys.stderr)


def main(argv=None) -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        app.run(argv)
    except KeyboardInterrupt:
        print("\n⚠️  Operation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(130)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"❌ Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
