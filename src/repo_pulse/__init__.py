"""repo-pulse: commit activity statistics for local git repositories."""

__version__ = "0.1.0"
