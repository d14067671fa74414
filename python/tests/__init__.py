"""
Test suite for zip-batcher.

This package contains tests for every stage of a batch run, from pattern
matching through archive writing to manifest verification.

Test Categories:
- Unit tests: Pattern compilation, partitioning, archive and manifest writers
- Integration tests: Full pipeline runs and the command line
"""
