"""
Tests for archive integrity checks and manifest verification.
"""

import shutil
import tempfile
import unittest
import zipfile
from pathlib import Path

from io_ops import BatchArchiveManager, FileEntry, ManifestVerifier, ZipArchiveVerifier


class TestZipArchiveVerifier(unittest.TestCase):
    """Test single-archive checks."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        self.archive_path = Path(self.temp_dir) / "sample.zip"
        with zipfile.ZipFile(self.archive_path, "w", zipfile.ZIP_STORED) as zipf:
            zipf.writestr("one.txt", "first")
            zipf.writestr("two.txt", "second entry")

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_valid_archive_passes(self):
        self.assertTrue(ZipArchiveVerifier().verify_integrity(self.archive_path))

    def test_non_zip_fails(self):
        bogus = Path(self.temp_dir) / "bogus.zip"
        bogus.write_bytes(b"not a zip archive")
        self.assertFalse(ZipArchiveVerifier().verify_integrity(bogus))

    def test_list_entries_in_stored_order(self):
        self.assertEqual(
            ZipArchiveVerifier().list_entries(self.archive_path), ["one.txt", "two.txt"]
        )

    def test_archive_info(self):
        info = ZipArchiveVerifier().get_archive_info(self.archive_path)

        self.assertEqual(info["file_count"], 2)
        self.assertEqual(info["uncompressed_size"], len("first") + len("second entry"))
        self.assertTrue(info["stored_only"])
        self.assertEqual([entry["name"] for entry in info["entries"]], ["one.txt", "two.txt"])

    def test_missing_archive_raises(self):
        with self.assertRaises(FileNotFoundError):
            ZipArchiveVerifier().get_archive_info(Path(self.temp_dir) / "absent.zip")


class TestManifestVerifier(unittest.TestCase):
    """Test comparison of manifest rows and archive entries."""

    def setUp(self):
        self.temp_dir = tempfile.mkdtemp()
        source = Path(self.temp_dir) / "source"
        source.mkdir()
        entries = []
        for i in range(5):
            path = source / f"item_{i}.txt"
            path.write_text(str(i), encoding="utf-8")
            entries.append(FileEntry(path))

        self.destination = Path(self.temp_dir) / "dest"
        BatchArchiveManager(max_files_per_archive=2, show_progress=False).archive_files(
            entries, self.destination
        )
        self.manifest_path = self.destination / "results.csv"

    def tearDown(self):
        shutil.rmtree(self.temp_dir, ignore_errors=True)

    def test_consistent_destination(self):
        report = ManifestVerifier().verify(self.destination)

        self.assertTrue(report.ok)
        self.assertEqual(report.archive_count, 3)
        self.assertEqual(report.row_count, 5)
        self.assertEqual(report.entry_count, 5)

    def test_row_without_entry_reported(self):
        with open(self.manifest_path, "a", encoding="utf-8") as f:
            f.write("dest_2.zip,ghost.txt\n")

        report = ManifestVerifier().verify(self.destination)

        self.assertFalse(report.ok)
        self.assertEqual(len(report.problems), 1)
        self.assertIn("ghost.txt", report.problems[0])

    def test_row_naming_missing_archive_reported(self):
        with open(self.manifest_path, "a", encoding="utf-8") as f:
            f.write("dest_9.zip,item_0.txt\n")

        report = ManifestVerifier().verify(self.destination)

        self.assertFalse(report.ok)
        self.assertIn("missing archive dest_9.zip", report.problems[0])

    def test_entry_without_row_reported(self):
        lines = self.manifest_path.read_text(encoding="utf-8").splitlines()
        self.manifest_path.write_text("\n".join(lines[:-1]) + "\n", encoding="utf-8")

        report = ManifestVerifier().verify(self.destination)

        self.assertFalse(report.ok)
        self.assertIn("item_4.txt", report.problems[0])
        self.assertIn("without manifest row", report.problems[0])

    def test_missing_manifest_reported(self):
        self.manifest_path.unlink()

        report = ManifestVerifier().verify(self.destination)

        self.assertFalse(report.ok)
        self.assertIn("Manifest not found", report.problems[0])

    def test_malformed_manifest_reported(self):
        self.manifest_path.write_text("wrong,header\n", encoding="utf-8")

        report = ManifestVerifier().verify(self.destination)

        self.assertFalse(report.ok)

    def test_corrupt_archive_reported(self):
        (self.destination / "zip" / "dest_1.zip").write_bytes(b"garbage")

        report = ManifestVerifier().verify(self.destination)

        self.assertFalse(report.ok)
        self.assertTrue(any("integrity check failed" in p for p in report.problems))


if __name__ == "__main__":
    unittest.main()
