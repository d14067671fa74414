"""
Integration tests for the zip-batcher command line.

These tests drive BatchCLI.run() with argument lists and check exit codes
together with what ends up on disk.
"""

import logging
import os
import shutil
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest.mock import patch

from cli_batch import BatchCLI
from io_ops import read_manifest


class TestBatchCLI(unittest.TestCase):
    """Test the create, verify and info commands."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.original_cwd = os.getcwd()
        os.chdir(self.temp_dir)
        self.root_level = logging.getLogger().level

        self.source = Path(self.temp_dir) / "data"
        (self.source / "nested").mkdir(parents=True)
        for i in range(7):
            (self.source / f"record_{i}.json").write_text(f'{{"id": {i}}}', encoding="utf-8")
        (self.source / "nested" / "extra.json").write_text("{}", encoding="utf-8")
        (self.source / "README.md").write_text("ignored", encoding="utf-8")

        self.destination = Path(self.temp_dir) / "out"
        self.cli = BatchCLI()

    def tearDown(self):
        logging.getLogger().setLevel(self.root_level)
        os.chdir(self.original_cwd)
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def _create(self, *extra):
        return self.cli.run(
            ["create", f"{self.source}/*.json", str(self.destination), "--quiet", *extra]
        )

    def test_create_writes_archives_and_manifest(self):
        self.assertEqual(self._create("-f", "3"), 0)

        archives = sorted(p.name for p in (self.destination / "zip").iterdir())
        self.assertEqual(archives, ["out_0.zip", "out_1.zip", "out_2.zip"])
        rows = read_manifest(self.destination / "results.csv")
        self.assertEqual(len(rows), 7)
        self.assertEqual(rows[0].archive, "out_0.zip")

    def test_default_files_per_archive(self):
        self.assertEqual(self._create(), 0)

        archives = list((self.destination / "zip").iterdir())
        self.assertEqual(len(archives), 1)
        with zipfile.ZipFile(archives[0]) as zipf:
            self.assertEqual(len(zipf.namelist()), 7)

    def test_recursive_pattern(self):
        exit_code = self.cli.run(
            ["create", f"{self.source}/**/*.json", str(self.destination), "-q"]
        )

        self.assertEqual(exit_code, 0)
        rows = read_manifest(self.destination / "results.csv")
        self.assertIn("extra.json", [row.filename for row in rows])

    def test_non_empty_destination_exits_cleanly(self):
        self.destination.mkdir()
        (self.destination / "existing.txt").write_text("keep", encoding="utf-8")

        self.assertEqual(self._create(), 0)
        self.assertEqual([p.name for p in self.destination.iterdir()], ["existing.txt"])

    def test_zero_files_per_archive_fails(self):
        self.assertEqual(self._create("-f", "0"), 1)

    def test_malformed_pattern_fails(self):
        exit_code = self.cli.run(["create", f"{self.source}/[oops", str(self.destination)])
        self.assertEqual(exit_code, 1)

    def test_non_utf8_file_name_fails_cleanly(self):
        raw_path = os.path.join(os.fsencode(self.source), b"bad\xff.json")
        try:
            with open(raw_path, "wb") as f:
                f.write(b"{}")
        except OSError:
            self.skipTest("filesystem rejects non-UTF-8 file names")

        self.assertEqual(self._create(), 1)
        self.assertFalse((self.destination / "results.csv").exists())

    def test_config_file_sets_defaults(self):
        config = Path(self.temp_dir) / "zip-batcher.yml"
        config.write_text("batch:\n  max_files_per_archive: 2\n", encoding="utf-8")

        self.assertEqual(self._create(), 0)
        self.assertEqual(len(list((self.destination / "zip").iterdir())), 4)

    def test_invalid_config_fails(self):
        config = Path(self.temp_dir) / "bad.yml"
        config.write_text("batch:\n  duplicate_names: rename\n", encoding="utf-8")

        exit_code = self.cli.run(
            ["--config", str(config), "create", f"{self.source}/*.json", str(self.destination)]
        )
        self.assertEqual(exit_code, 1)

    def test_verify_after_create(self):
        self.assertEqual(self._create("-f", "4"), 0)
        self.assertEqual(self.cli.run(["verify", str(self.destination)]), 0)

    def test_verify_detects_tampering(self):
        self.assertEqual(self._create("-f", "4"), 0)
        (self.destination / "zip" / "out_1.zip").unlink()

        self.assertEqual(self.cli.run(["verify", str(self.destination)]), 1)

    def test_info_on_archive(self):
        self.assertEqual(self._create(), 0)
        archive = self.destination / "zip" / "out_0.zip"

        self.assertEqual(self.cli.run(["info", str(archive), "--detailed"]), 0)

    def test_info_on_missing_archive(self):
        self.assertEqual(self.cli.run(["info", str(Path(self.temp_dir) / "none.zip")]), 1)

    def test_no_command_prints_help(self):
        with patch.object(self.cli.parser, "print_help") as print_help:
            self.assertEqual(self.cli.run([]), 1)
        print_help.assert_called_once()

    def test_keyboard_interrupt(self):
        with patch("cli_batch.BatchArchiveManager.run", side_effect=KeyboardInterrupt):
            self.assertEqual(self._create(), 130)


if __name__ == "__main__":
    unittest.main()
