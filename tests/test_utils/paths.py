"""Path utilities for tests.

This module provides utilities for working with paths in tests, particularly
sentinel paths that allow tests to avoid unnecessary filesystem dependencies.
"""

from pathlib import Path


def sentinel_path() -> Path:
    """Return sentinel path for tests that don't need real filesystem.

    Use this when testing pure logic (CLI exit codes, error messages, planning)
    that doesn't actually perform filesystem I/O.

    Examples:
        cwd = sentinel_path()
        repo_root = sentinel_path()

    Note:
        - BranchlineContext.for_test() accepts any Path without validating existence
        - FakeGit is pure in-memory (no filesystem I/O)
        - All tests share the same sentinel path - tests are isolated via separate
          BranchlineContext instances, not different paths
    """
    return Path("/test/sentinel")
