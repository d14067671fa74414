#!/usr/bin/env python3
"""
Zip Batcher CLI Tool

Packs the files matching a glob pattern into stored ZIP archives of a fixed
number of files each, and writes a results.csv manifest recording which
archive holds every file.

Usage:
    python3 cli_batch.py create "data/**/*.json" /backups/json-batch
    python3 cli_batch.py create "logs/*.log" /backups/logs -f 500 --case-insensitive
    python3 cli_batch.py verify /backups/json-batch
    python3 cli_batch.py info /backups/json-batch/zip/json-batch_0.zip
"""

import argparse
import logging
import sys
import zipfile
from pathlib import Path
from typing import Optional

from batch_config import load_settings
from colored_logger import setup_colored_logging, get_colored_logger, resolve_level
from io_ops.archive_manager import BatchArchiveManager
from io_ops.archive_verifier import ManifestVerifier, ZipArchiveVerifier
from io_ops.errors import BatchArchiveError, DestinationNotEmptyError
from io_ops.file_scanner import MatchOptions

__version__ = "0.1.0"

logger = get_colored_logger(__name__)


class BatchCLI:
    """Command-line interface for batch archiving."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="zip-batcher",
            description="Store files matching a pattern in ZIP archives of a fixed size",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="""
Examples:
  # 1000 files per archive (default)
  zip-batcher create "data/*.json" /backups/json-batch

  # 500 files per archive, case-insensitive matching
  zip-batcher create "logs/**/*.LOG" /backups/logs -f 500 --case-insensitive

  # Check that results.csv and the archives agree
  zip-batcher verify /backups/json-batch

  # Show one archive's contents
  zip-batcher info /backups/json-batch/zip/json-batch_0.zip --detailed
            """,
        )
        parser.add_argument(
            "--version", action="version", version=f"%(prog)s {__version__}"
        )
        parser.add_argument(
            "--config", help="YAML configuration file (default: ./zip-batcher.yml)"
        )
        parser.add_argument(
            "--verbose", "-v", action="store_true", help="Enable debug logging"
        )

        subparsers = parser.add_subparsers(dest="command", help="Available commands")

        create_parser = subparsers.add_parser(
            "create", help="Archive files matching a pattern into fixed-size ZIPs"
        )
        create_parser.add_argument("pattern", help="Filename pattern matching (glob)")
        create_parser.add_argument("dst", help="Destination folder")
        create_parser.add_argument(
            "--file-count-per-file",
            "-f",
            type=int,
            help="Number of files stored per archive (default from config: 1000)",
        )
        create_parser.add_argument(
            "--case-insensitive",
            action="store_true",
            help="Match the pattern without regard to case",
        )
        create_parser.add_argument(
            "--require-literal-separator",
            action="store_true",
            help=(
                "Wildcards never match a path separator. Directories are matched "
                "one component at a time, so this never changes which files "
                "create selects"
            ),
        )
        create_parser.add_argument(
            "--require-literal-leading-dot",
            action="store_true",
            help="Names starting with . only match when the . appears literally",
        )
        create_parser.add_argument(
            "--duplicate-names",
            choices=["error", "overwrite"],
            help="What to do when two files of one archive share a name",
        )
        create_parser.add_argument(
            "--quiet", "-q", action="store_true", help="Suppress progress output"
        )

        verify_parser = subparsers.add_parser(
            "verify", help="Check a destination's manifest against its archives"
        )
        verify_parser.add_argument("dst", help="Destination folder of a finished run")

        info_parser = subparsers.add_parser(
            "info", help="Display information about one archive"
        )
        info_parser.add_argument("archive_path", help="Path to the archive file")
        info_parser.add_argument(
            "--detailed", action="store_true", help="Show detailed entry listing"
        )

        return parser

    def run(self, args: Optional[list] = None) -> int:
        """Run the CLI with the given arguments."""
        parsed_args = self.parser.parse_args(args)

        if not parsed_args.command:
            self.parser.print_help()
            return 1

        try:
            settings = load_settings(parsed_args.config)
            level = logging.DEBUG if parsed_args.verbose else resolve_level(settings.log_level)
            logging.getLogger().setLevel(level)

            if parsed_args.command == "create":
                return self._handle_create(parsed_args, settings)
            elif parsed_args.command == "verify":
                return self._handle_verify(parsed_args, settings)
            elif parsed_args.command == "info":
                return self._handle_info(parsed_args)
            else:
                logger.error("Unknown command: %s", parsed_args.command)
                return 1

        except KeyboardInterrupt:
            logger.info("Operation cancelled by user")
            return 130
        except DestinationNotEmptyError as e:
            logger.notice("%s", e)
            return 0
        except (BatchArchiveError, OSError, zipfile.BadZipFile) as e:
            logger.error("Error: %s", e)
            logger.debug("Full error details:", exc_info=True)
            return 1

    def _handle_create(self, args, settings) -> int:
        """Handle the 'create' command."""
        files_per_archive = (
            args.file_count_per_file
            if args.file_count_per_file is not None
            else settings.max_files_per_archive
        )
        match_options = MatchOptions(
            case_sensitive=not args.case_insensitive,
            require_literal_separator=args.require_literal_separator,
            require_literal_leading_dot=args.require_literal_leading_dot,
        )

        manager = BatchArchiveManager(
            max_files_per_archive=files_per_archive,
            duplicate_names=args.duplicate_names or settings.duplicate_names,
            archive_subdirectory=settings.archive_subdirectory,
            manifest_name=settings.manifest_name,
            show_progress=not args.quiet,
        )
        result = manager.run(args.pattern, args.dst, match_options)

        logger.success(
            "Stored %d files in %d archives under %s",
            result.manifest_rows,
            result.archive_count,
            result.destination,
        )
        return 0

    def _handle_verify(self, args, settings) -> int:
        """Handle the 'verify' command."""
        logger.info("Verifying destination: %s", args.dst)
        verifier = ManifestVerifier(
            archive_subdirectory=settings.archive_subdirectory,
            manifest_name=settings.manifest_name,
        )
        report = verifier.verify(args.dst)

        logger.info(
            "Archives: %d, manifest rows: %d, archive entries: %d",
            report.archive_count,
            report.row_count,
            report.entry_count,
        )
        if report.ok:
            logger.success("Manifest and archives are consistent")
            return 0

        for problem in report.problems:
            logger.error("  %s", problem)
        logger.failure("Verification found %d problem(s)", len(report.problems))
        return 1

    def _handle_info(self, args) -> int:
        """Handle the 'info' command."""
        archive_path = Path(args.archive_path)

        if not archive_path.exists():
            logger.error("Archive file does not exist: %s", archive_path)
            return 1

        verifier = ZipArchiveVerifier()
        info = verifier.get_archive_info(archive_path)

        logger.info("Archive: %s", info["path"])
        logger.info(
            "Size: %.2f MB (%d bytes)", info["size_bytes"] / (1024 * 1024), info["size_bytes"]
        )
        logger.info("Modified: %s", info["modified_time"])
        logger.info("Files: %d", info["file_count"])
        logger.info("Content size: %.2f MB", info["uncompressed_size"] / (1024 * 1024))
        logger.info("Stored without compression: %s", "Yes" if info["stored_only"] else "No")
        logger.info(
            "Integrity: %s", "OK" if verifier.verify_integrity(archive_path) else "FAILED"
        )

        if args.detailed:
            logger.info("")
            logger.info("Entries:")
            for entry in info["entries"]:
                logger.info(
                    "  %s (%.1f KB, %s)", entry["name"], entry["size_bytes"] / 1024, entry["mode"]
                )
        return 0


def main():
    """Main entry point for the CLI."""
    setup_colored_logging(level=logging.INFO)

    cli = BatchCLI()
    return cli.run()


if __name__ == "__main__":
    sys.exit(main())
