"""Per-commit diff statistics: lines added, lines deleted, files changed."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime

from ..zones import ensure_aware


@dataclass(frozen=True)
class FileChange:
    path: str
    additions: int = 0
    deletions: int = 0

    @property
    def extension(self) -> str | None:
        """Text after the last dot of the file name, without the dot.

        ``Makefile`` and dot-files such as ``.gitignore`` have no extension.
        """
        name = self.path.rsplit("/", 1)[-1]
        idx = name.rfind(".")
        if idx <= 0:
            return None
        return name[idx + 1 :]

    def matches_extensions(self, extensions: Sequence[str]) -> bool:
        """Case-sensitive match against extensions given without a leading dot.

        An empty list means "no filter" and matches every file.
        """
        if not extensions:
            return True
        ext = self.extension
        return ext is not None and ext in extensions


@dataclass
class DiffStats:
    """Diff summary of one commit.

    The scalar totals mirror ``files``; grow them through :meth:`add_file`.
    """

    additions: int = 0
    deletions: int = 0
    files_changed: int = 0
    files: list[FileChange] = field(default_factory=list)

    @classmethod
    def summary(cls, additions: int, deletions: int, files_changed: int) -> DiffStats:
        """Totals-only stats for sources that carry no per-file breakdown."""
        return cls(additions=additions, deletions=deletions, files_changed=files_changed)

    @classmethod
    def from_files(cls, files: Sequence[FileChange]) -> DiffStats:
        stats = cls()
        for f in files:
            stats.add_file(f)
        return stats

    def add_file(self, file: FileChange) -> None:
        self.additions += file.additions
        self.deletions += file.deletions
        self.files_changed += 1
        self.files.append(file)

    def net_lines(self) -> int:
        return self.additions - self.deletions

    def filtered(self, extensions: Sequence[str] | None) -> tuple[int, int, int]:
        """Return ``(additions, deletions, files_changed)`` for matching files only.

        Without a filter the stored totals are returned as-is.
        """
        if not extensions:
            return self.additions, self.deletions, self.files_changed
        additions = deletions = files_changed = 0
        for f in self.files:
            if f.matches_extensions(extensions):
                additions += f.additions
                deletions += f.deletions
                files_changed += 1
        return additions, deletions, files_changed


@dataclass(frozen=True)
class CommitRecord:
    """One traversed commit. Naive timestamps are taken to be UTC."""

    id: str
    timestamp: datetime
    is_merge: bool = False
    diff: DiffStats = field(default_factory=DiffStats)

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", ensure_aware(self.timestamp))
