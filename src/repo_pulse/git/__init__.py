"""Commit traversal and per-commit diff statistics."""

from .diff import CommitRecord, DiffStats, FileChange
from .repository import Repository, is_git_repository

__all__ = ["CommitRecord", "DiffStats", "FileChange", "Repository", "is_git_repository"]
