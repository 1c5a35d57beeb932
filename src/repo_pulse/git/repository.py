"""Walk a local git repository with GitPython and produce commit records."""

from __future__ import annotations

import logging
from datetime import date, datetime, time, timedelta, timezone
from pathlib import Path

from git import Commit, Repo
from git.exc import GitCommandError, InvalidGitRepositoryError, NoSuchPathError

from ..config import expand_tilde
from ..errors import GitOperationError, NotGitRepositoryError, RepositoryNotFoundError
from ..models import DateRange
from ..zones import TimeZoneMode
from .diff import CommitRecord, DiffStats, FileChange

logger = logging.getLogger(__name__)

SHORT_ID_LENGTH = 7
# git rejects pre-epoch --since values; earlier ranges walk the full history
PREFILTER_FLOOR = date(1970, 1, 3)


def is_git_repository(path: Path) -> bool:
    return (path / ".git").exists() or (path / "HEAD").exists()


_C_ESCAPES = {
    "a": 0x07,
    "b": 0x08,
    "f": 0x0C,
    "n": 0x0A,
    "r": 0x0D,
    "t": 0x09,
    "v": 0x0B,
    "\\": 0x5C,
    '"': 0x22,
}


def unquote_git_path(path: str) -> str:
    """Undo git's C-style quoting of paths with special or non-ASCII bytes.

    With ``core.quotepath`` on (the default) ``café.py`` is printed as
    ``"caf\\303\\251.py"``: the octal escapes are raw UTF-8 bytes.
    """
    if len(path) < 2 or not (path.startswith('"') and path.endswith('"')):
        return path
    body = path[1:-1]
    out = bytearray()
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\" or i + 1 >= len(body):
            out += ch.encode("utf-8")
            i += 1
            continue
        nxt = body[i + 1]
        octal = body[i + 1 : i + 4]
        if len(octal) == 3 and all(c in "01234567" for c in octal):
            out.append(int(octal, 8) & 0xFF)
            i += 4
        elif nxt in _C_ESCAPES:
            out.append(_C_ESCAPES[nxt])
            i += 2
        else:
            out += nxt.encode("utf-8")
            i += 2
    return out.decode("utf-8", errors="replace")


def normalize_numstat_path(path: str) -> str:
    p = unquote_git_path(path.strip())
    # numstat may render renames like: src/{old => new}/file.py or old.py => new.py
    if " => " in p:
        if "{" in p and "}" in p:
            prefix, rest = p.split("{", 1)
            inner, suffix = rest.split("}", 1)
            p = prefix + inner.split(" => ")[-1] + suffix
            p = p.replace("//", "/")
        else:
            p = unquote_git_path(p.split(" => ")[-1].strip())
    return p.strip()


def diff_stats_for_commit(commit: Commit) -> DiffStats:
    """Per-file line counts against the first parent (or the empty tree)."""
    stats = DiffStats()
    for path, counts in commit.stats.files.items():
        stats.add_file(
            FileChange(
                path=normalize_numstat_path(str(path)),
                additions=int(counts.get("insertions", 0)),
                deletions=int(counts.get("deletions", 0)),
            )
        )
    return stats


def _prefilter_since(date_range: DateRange) -> str | None:
    # git filters on committer date, normally no earlier than the author date.
    # Two days of slack cover every UTC offset; epoch seconds avoid approxidate.
    if date_range.start < PREFILTER_FLOOR:
        return None
    start = datetime.combine(date_range.start - timedelta(days=2), time(), tzinfo=timezone.utc)
    return str(int(start.timestamp()))


class Repository:
    """A named local repository opened through GitPython."""

    def __init__(self, repo: Repo, name: str) -> None:
        self._repo = repo
        self.name = name

    @classmethod
    def open(cls, path: Path | str, name: str | None = None) -> Repository:
        expanded = expand_tilde(Path(path))
        if not expanded.exists():
            raise RepositoryNotFoundError(expanded)
        if not is_git_repository(expanded):
            raise NotGitRepositoryError(expanded)
        try:
            repo = Repo(expanded)
        except (InvalidGitRepositoryError, NoSuchPathError) as exc:
            raise NotGitRepositoryError(expanded) from exc
        return cls(repo, name or expanded.name or "repository")

    @property
    def path(self) -> Path:
        return Path(self._repo.working_tree_dir or self._repo.git_dir)

    def close(self) -> None:
        """Stop the persistent git processes GitPython keeps for this repo."""
        self._repo.close()

    def __enter__(self) -> Repository:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _revision(self, branch: str | None) -> str | None:
        if branch:
            if branch not in self._repo.heads:
                raise GitOperationError(f"Branch not found in {self.name}: {branch}")
            return f"refs/heads/{branch}"
        if not self._repo.head.is_valid():
            return None
        return "HEAD"

    def commits_in_range(
        self,
        date_range: DateRange,
        branch: str | None = None,
        exclude_merges: bool = True,
        tz: TimeZoneMode | None = None,
    ) -> list[CommitRecord]:
        """Commits on *branch* (default HEAD) authored within *date_range*.

        Author dates are converted to *tz* before the range check, so the
        result lines up with how the collector buckets days.
        """
        tz = tz or TimeZoneMode.utc()
        if date_range.is_empty:
            return []
        rev = self._revision(branch)
        if rev is None:
            logger.info("Repository %s has no commits yet", self.name)
            return []

        since = _prefilter_since(date_range)
        options = {"since": since} if since else {}
        records: list[CommitRecord] = []
        try:
            for commit in self._repo.iter_commits(rev, **options):
                timestamp = commit.authored_datetime
                if not date_range.contains(tz.date_naive(timestamp)):
                    continue
                is_merge = len(commit.parents) > 1
                if exclude_merges and is_merge:
                    continue
                records.append(
                    CommitRecord(
                        id=commit.hexsha[:SHORT_ID_LENGTH],
                        timestamp=timestamp,
                        is_merge=is_merge,
                        diff=diff_stats_for_commit(commit),
                    )
                )
        except GitCommandError as exc:
            raise GitOperationError(f"git failed for {self.name}: {exc}") from exc

        logger.info("Collected %d commits from %s", len(records), self.name)
        return records
