"""
Tests for splitting matched files into fixed-size partitions.
"""

import unittest
from pathlib import Path

from io_ops import FileEntry, InvalidChunkSizeError, Partition, partition_files


def _paths(count):
    return [Path(f"/data/file_{i:04d}.bin") for i in range(count)]


class TestPartitionFiles(unittest.TestCase):
    """Test partition sizes, order and indexing."""

    def test_partition_count_is_ceiling(self):
        for total, chunk, expected in [(10, 3, 4), (9, 3, 3), (1, 1000, 1), (2500, 1000, 3)]:
            with self.subTest(total=total, chunk=chunk):
                self.assertEqual(len(partition_files(_paths(total), chunk)), expected)

    def test_partition_sizes_match_remainder(self):
        partitions = partition_files(_paths(2500), 1000)
        self.assertEqual([len(p) for p in partitions], [1000, 1000, 500])

    def test_last_partition_full_when_evenly_divisible(self):
        partitions = partition_files(_paths(6), 3)
        self.assertEqual([len(p) for p in partitions], [3, 3])

    def test_order_preserved_without_duplicates_or_omissions(self):
        paths = _paths(7)
        partitions = partition_files(paths, 3)

        flattened = [entry.path for partition in partitions for entry in partition]
        self.assertEqual(flattened, paths)

    def test_input_order_is_not_resorted(self):
        paths = [Path("/z/b.txt"), Path("/a/c.txt"), Path("/m/a.txt")]
        partitions = partition_files(paths, 2)
        self.assertEqual(
            [entry.path for entry in partitions[0]], [Path("/z/b.txt"), Path("/a/c.txt")]
        )
        self.assertEqual([entry.path for entry in partitions[1]], [Path("/m/a.txt")])

    def test_indexes_follow_position(self):
        partitions = partition_files(_paths(5), 2)
        self.assertEqual([p.index for p in partitions], [0, 1, 2])

    def test_empty_input_yields_no_partitions(self):
        self.assertEqual(partition_files([], 10), [])

    def test_accepts_file_entries_and_strings(self):
        partitions = partition_files([FileEntry(Path("/x/a")), "/x/b"], 5)
        self.assertEqual(
            partitions[0],
            Partition(index=0, entries=(FileEntry(Path("/x/a")), FileEntry(Path("/x/b")))),
        )

    def test_deterministic(self):
        paths = _paths(11)
        self.assertEqual(partition_files(paths, 4), partition_files(paths, 4))

    def test_non_positive_chunk_size_rejected(self):
        for chunk in (0, -1):
            with self.subTest(chunk=chunk):
                with self.assertRaises(InvalidChunkSizeError):
                    partition_files(_paths(3), chunk)

    def test_non_integer_chunk_size_rejected(self):
        for chunk in (2.5, "10", True):
            with self.subTest(chunk=chunk):
                with self.assertRaises(InvalidChunkSizeError):
                    partition_files(_paths(3), chunk)

    def test_entry_name_is_base_name(self):
        entry = FileEntry(Path("/deep/nested/dir/report.csv"))
        self.assertEqual(entry.entry_name, "report.csv")


if __name__ == "__main__":
    unittest.main()
