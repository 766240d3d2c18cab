#!/usr/bin/env python3
"""
finddup CLI: maintain a catalog of file digests and find duplicate files in it.
Each invocation runs exactly one operating mode against one catalog.
Hardlinking duplicates is experimental and never replaces an existing file without --force.
"""
from __future__ import annotations  # Enable postponed evaluation of annotations (PEP 563)
import argparse
import logging
import os
import signal
import sys
import time
from typing import List, NoReturn, Optional

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)-8s | %(name)-25s | %(message)s"
)

from finddup.aliases import (
    EPILOG_TEXT, FAST_DIGEST_CHOICES, FAST_DIGEST_HELP_TEXT, MODE_ALIASES, SIZE_HELP_TEXT,
)
from finddup.commands import CatalogCommand
from finddup.config import load_config
from finddup.core.exceptions import FinddupError
from finddup.core.models import (
    CatalogParams, CleanupResult, DuplicateReport, MergeResult, OperatingMode, ScanResult,
)
from finddup.services.duplicate_service import DuplicateService
from finddup.utils.convert_utils import ConvertUtils

EXIT_INTERRUPTED = 130

# Values used when neither the command line nor the config file sets an option
DEFAULTS = {
    "database": "finddup.db",
    "data_path": None,
    "min_size": "0",
    "max_size": None,
    "exclude": [],
    "follow_symlinks": False,
    "force": False,
    "no_hash": False,
    "no_cleanup": False,
    "trash": False,
    "no_concurrent_hashing": False,
    "fast_digest": "md5",
    "no_nice": False,
    "experimental": False,
    "quiet": False,
    "verbose": 0,
}

VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}


class CLIApplication:
    """Main CLI application controller."""

    def __init__(self):
        self.start_time: float = time.time()
        self.verbosity: int = 0
        self.quiet: bool = False
        self.interrupted: bool = False

    @staticmethod
    def parse_args(args=None) -> argparse.Namespace:
        """Parse command-line arguments. Options left unset are None so the config file can fill them."""
        parser = argparse.ArgumentParser(
            prog="finddup",
            description="finddup: catalog file digests and find (or hardlink) duplicate files",
            formatter_class=argparse.RawTextHelpFormatter,
            epilog=EPILOG_TEXT
        )

        modes = parser.add_mutually_exclusive_group(required=True)
        modes.add_argument(
            "--initialize", dest="mode", action="store_const", const=OperatingMode.INITIALIZE.value,
            help="Build a new catalog of --data-path (refuses to overwrite without --force)"
        )
        modes.add_argument(
            "--update", dest="mode", action="store_const", const=OperatingMode.UPDATE.value,
            help="Index new and modified files of --data-path into an existing catalog"
        )
        modes.add_argument(
            "--cleanup", dest="mode", action="store_const", const=OperatingMode.CLEANUP.value,
            help="Remove catalog records whose file no longer exists"
        )
        modes.add_argument(
            "--show-duplicates", dest="mode", action="store_const",
            const=OperatingMode.SHOW_DUPLICATES.value,
            help="List duplicate groups and wasted space"
        )
        modes.add_argument(
            "--csv", dest="mode", action="store_const", const=OperatingMode.CSV.value,
            help="Write duplicate groups as CSV rows (group, size, path)"
        )
        modes.add_argument(
            "--hardlink-duplicates", dest="mode", action="store_const",
            const=OperatingMode.HARDLINK_DUPLICATES.value,
            help="Replace duplicates with hardlinks to one copy (needs --experimental)"
        )

        parser.add_argument(
            "--database", "-d",
            default=None,
            type=str,
            metavar='',
            help=f"Catalog file. Default: {DEFAULTS['database']}"
        )
        parser.add_argument(
            "--data-path", "-p",
            default=None,
            type=str,
            metavar='',
            dest="data_path",
            help="Directory to index; for duplicate modes, only report files below it"
        )
        parser.add_argument(
            "--min-size", "-m",
            default=None,
            type=str,
            metavar='',
            dest="min_size",
            help=f"Ignore files smaller than this. {SIZE_HELP_TEXT}"
        )
        parser.add_argument(
            "--max-size", "-M",
            default=None,
            type=str,
            metavar='',
            dest="max_size",
            help="Ignore files of this size or larger"
        )
        parser.add_argument(
            "--exclude", "-x",
            action="append",
            default=None,
            type=str,
            metavar='',
            help="Regular expression; matching directories are not descended into (repeatable)"
        )
        parser.add_argument(
            "--follow-symlinks", "-L",
            action="store_true",
            default=None,
            dest="follow_symlinks",
            help="Follow symbolic links instead of skipping them"
        )
        parser.add_argument(
            "--force", "-f",
            action="store_true",
            default=None,
            help="Rebuild an existing catalog on --initialize; replace existing files when hardlinking"
        )
        parser.add_argument(
            "--no-hash",
            action="store_true",
            default=None,
            dest="no_hash",
            help="Do not compute digests (experimental, every file ends up in one group)"
        )
        parser.add_argument(
            "--no-cleanup",
            action="store_true",
            default=None,
            dest="no_cleanup",
            help="Do not remove stale records before --update"
        )
        parser.add_argument(
            "--trash",
            action="store_true",
            default=None,
            help="Move replaced files to the system trash when hardlinking"
        )
        parser.add_argument(
            "--no-concurrent-hashing",
            action="store_true",
            default=None,
            dest="no_concurrent_hashing",
            help="Compute both digests of large files one after the other"
        )
        parser.add_argument(
            "--fast-digest",
            choices=FAST_DIGEST_CHOICES,
            default=None,
            type=str,
            dest="fast_digest",
            help=FAST_DIGEST_HELP_TEXT
        )
        parser.add_argument(
            "--no-nice",
            action="store_true",
            default=None,
            dest="no_nice",
            help="Do not lower CPU and I/O priority while scanning"
        )
        parser.add_argument(
            "--experimental",
            action="store_true",
            default=None,
            help="Enable experimental features"
        )
        parser.add_argument(
            "--config", "-c",
            default=None,
            type=str,
            metavar='',
            help="TOML configuration file with a [finddup] table"
        )

        # Output options
        parser.add_argument(
            "--quiet", "-q",
            action="store_true",
            default=None,
            help="Suppress non-essential output"
        )
        parser.add_argument(
            "--verbose", "-v",
            action="count",
            default=None,
            help="Report per-file actions (-v) or debug details (-vv)"
        )

        return parser.parse_args(args)

    def apply_config(self, args: argparse.Namespace) -> None:
        """Fill options not given on the command line from the config file, then from DEFAULTS."""
        try:
            config = load_config(args.config)
        except FinddupError as e:
            self.error_exit(str(e))

        for key, default in DEFAULTS.items():
            if getattr(args, key) is None:
                setattr(args, key, config.get(key, default))

    def configure_logging(self) -> None:
        if self.quiet:
            level = logging.ERROR
        else:
            level = VERBOSITY_LEVELS.get(self.verbosity, logging.DEBUG)
        logging.getLogger("finddup").setLevel(level)

    def validate_args(self, args: argparse.Namespace) -> None:
        """Validate command-line arguments before execution."""
        mode = MODE_ALIASES[args.mode]

        if mode.is_experimental and not args.experimental:
            self.error_exit(f"--{mode.value} is experimental, add --experimental to enable it")
        if args.no_hash and not args.experimental:
            self.error_exit("--no-hash is experimental, add --experimental to enable it")

        if mode in (OperatingMode.INITIALIZE, OperatingMode.UPDATE):
            if not args.data_path:
                self.error_exit(f"--data-path is required with --{mode.value}")
            if not os.path.exists(args.data_path):
                self.error_exit(f"Directory not found: {args.data_path}")
            if not os.path.isdir(args.data_path):
                self.error_exit(f"Path is not a directory: {args.data_path}")

        for name in ("min_size", "max_size"):
            value = getattr(args, name)
            if value is not None and not ConvertUtils.is_valid_size_format(value):
                self.error_exit(f"Invalid size format for --{name.replace('_', '-')}: {value}")

        if args.trash and mode != OperatingMode.HARDLINK_DUPLICATES:
            self.warning("--trash only applies to --hardlink-duplicates")
        if args.no_cleanup and mode != OperatingMode.UPDATE:
            self.warning("--no-cleanup only applies to --update")

    def create_params(self, args: argparse.Namespace) -> CatalogParams:
        """Create CatalogParams from parsed (and config-merged) arguments."""
        concurrent: Optional[bool] = False if args.no_concurrent_hashing else None
        try:
            return CatalogParams.from_human_readable(
                database=args.database,
                data_path=args.data_path,
                min_size_str=args.min_size,
                max_size_str=args.max_size,
                exclude_patterns=args.exclude,
                follow_symlinks=args.follow_symlinks,
                force=args.force,
                hashing_enabled=not args.no_hash,
                cleanup_before_update=not args.no_cleanup,
                use_trash=args.trash,
                concurrent_hashing=concurrent,
                fast_algorithm=args.fast_digest,
                lower_priority=not args.no_nice,
                allow_experimental=args.experimental,
            )
        except FinddupError as e:
            self.error_exit(f"Parameter error: {e}")

    def progress_callback(self, stage: str, current: int, total: Optional[int]) -> None:
        """CLI progress callback - shows progress in console."""
        if not self.verbosity or self.quiet:
            return

        if total and total > 0:
            percent = (current / total) * 100
            sys.stderr.write(f"\r  [{stage}] {current}/{total} ({percent:.1f}%)")
        else:
            sys.stderr.write(f"\r  [{stage}] {current} files processed...")
        sys.stderr.flush()

    def stopped_flag(self) -> bool:
        """True once SIGINT has been received."""
        return self.interrupted

    def _on_sigint(self, signum, frame) -> None:
        if self.interrupted:
            # second Ctrl+C: stop immediately
            raise KeyboardInterrupt
        self.interrupted = True
        print("\nInterrupt received, finishing current file...", file=sys.stderr)

    def run_scan(self, command: CatalogCommand, mode: OperatingMode) -> ScanResult:
        if not self.quiet:
            print(f"{mode.display_name}: indexing {command.params.data_path} into {command.params.database}")

        run = command.initialize if mode == OperatingMode.INITIALIZE else command.update
        result = run(stopped_flag=self.stopped_flag, progress_callback=self.progress_callback)

        if self.verbosity and not self.quiet:
            sys.stderr.write("\n")
        if not self.quiet:
            print(result.print_summary())
        return result

    def run_cleanup(self, command: CatalogCommand) -> CleanupResult:
        result = command.cleanup()
        if not self.quiet:
            print(f"Checked {result.checked} records, removed {result.removed}")
        return result

    def output_report(self, report: DuplicateReport) -> None:
        if not report.groups:
            if not self.quiet:
                print("No duplicate groups found.")
            return

        for line in DuplicateService.report_lines(report, show_totals=not self.quiet):
            print(line)
        if not self.quiet:
            print(DuplicateService.summary_line(report))

    def output_csv(self, report: DuplicateReport) -> None:
        DuplicateService.write_csv(report, sys.stdout, include_total=not self.quiet)

    def output_merge(self, result: MergeResult) -> None:
        if result.failures:
            print(f"Failed to link {len(result.failures)} file(s):", file=sys.stderr)
            for path, error in result.failures[:5]:
                print(f"  • {path}: {error}", file=sys.stderr)
            if len(result.failures) > 5:
                print(f"  ...and {len(result.failures) - 5} more files", file=sys.stderr)

        if not self.quiet:
            print(
                f"Linked {result.linked} files, skipped {result.skipped}, failed {result.failed}. "
                f"Reclaimed {ConvertUtils.bytes_to_human(result.bytes_reclaimed)}"
            )

    def warning(self, message: str) -> None:
        """Print a warning message to stderr."""
        if not self.quiet:
            print(f"Warning: {message}", file=sys.stderr)

    @staticmethod
    def error_exit(message: str, code: int = 1) -> NoReturn:
        """Print error and exit."""
        print(f"Error: {message}", file=sys.stderr)
        sys.exit(code)

    def execute(self, mode: OperatingMode, params: CatalogParams) -> bool:
        """Runs one mode. Returns True if it was cancelled."""
        command = CatalogCommand(params)

        if mode in (OperatingMode.INITIALIZE, OperatingMode.UPDATE):
            return self.run_scan(command, mode).cancelled

        if mode == OperatingMode.CLEANUP:
            self.run_cleanup(command)
            return False

        if mode == OperatingMode.HARDLINK_DUPLICATES:
            result = command.merge_duplicates(stopped_flag=self.stopped_flag)
            self.output_merge(result)
            return result.cancelled

        report = command.find_duplicates(stopped_flag=self.stopped_flag)
        if mode == OperatingMode.CSV:
            self.output_csv(report)
        else:
            self.output_report(report)
        return report.cancelled

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Main entry point. Returns the process exit code."""
        args = self.parse_args(argv)
        self.apply_config(args)
        self.verbosity = args.verbose
        self.quiet = args.quiet
        self.configure_logging()

        self.validate_args(args)
        mode = MODE_ALIASES[args.mode]
        params = self.create_params(args)

        previous_handler = signal.signal(signal.SIGINT, self._on_sigint)
        try:
            cancelled = self.execute(mode, params)
        except FinddupError as e:
            self.error_exit(str(e))
        finally:
            signal.signal(signal.SIGINT, previous_handler)

        if cancelled:
            print("Operation cancelled by user (Ctrl+C), results above are partial", file=sys.stderr)
            return EXIT_INTERRUPTED

        elapsed = time.time() - self.start_time
        if self.verbosity and not self.quiet:
            print(f"\nCompleted in {elapsed:.2f} seconds", file=sys.stderr)
        return 0


def main(argv: Optional[List[str]] = None) -> None:
    """Application entry point."""
    app = CLIApplication()
    try:
        code = app.run(argv)
    except KeyboardInterrupt:
        print("\nOperation cancelled by user (Ctrl+C)", file=sys.stderr)
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        if os.environ.get("DEBUG"):
            raise
        print(f"Unexpected error: {e}", file=sys.stderr)
        sys.exit(1)
    sys.exit(code)


if __name__ == "__main__":
    main()
