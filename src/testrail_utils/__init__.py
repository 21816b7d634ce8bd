"""Find runs, tests and cases in TestRail and sync cases with test files on disk."""

__version__ = "0.4.0"
