from __future__ import annotations

import dataclasses
from pathlib import Path

from .repo_url import parse_repo_url

RECENT_COMMITS_LIMIT = 10


@dataclasses.dataclass(frozen=True)
class RepositoryRef:
    owner: str
    repo: str
    remote_url: str
    local_path: Path

    @classmethod
    def from_url(cls, remote_url: str, root: Path) -> "RepositoryRef":
        owner, repo = parse_repo_url(remote_url)
        return cls(owner=owner, repo=repo, remote_url=remote_url.strip(), local_path=Path(root).resolve() / owner / repo)

    @property
    def label(self) -> str:
        return f"{self.owner}/{self.repo}"


@dataclasses.dataclass(frozen=True)
class CommitRecord:
    hash: str = ""
    author: str = ""
    date: str = ""
    message: str = ""

    def to_dict(self) -> dict[str, str]:
        return dataclasses.asdict(self)


@dataclasses.dataclass
class ContributorRecord:
    name: str = ""
    email: str = ""
    commit_count: int = 0
    additions: int = 0
    deletions: int = 0
    first_commit_date: str = ""
    last_commit_date: str = ""

    @property
    def changed(self) -> int:
        return self.additions + self.deletions

    def to_dict(self) -> dict[str, object]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class RepositorySummary:
    total_commits: int = 0
    total_contributors: int = 0
    first_commit_date: str = ""
    last_commit_date: str = ""

    @classmethod
    def build(cls, commits: list[CommitRecord], contributors: list[ContributorRecord]) -> "RepositorySummary":
        # commits are newest first
        return cls(
            total_commits=len(commits),
            total_contributors=len(contributors),
            first_commit_date=commits[-1].date if commits else "",
            last_commit_date=commits[0].date if commits else "",
        )

    def to_dict(self) -> dict[str, object]:
        return dataclasses.asdict(self)


@dataclasses.dataclass(frozen=True)
class AnalysisResult:
    summary: RepositorySummary
    contributors: tuple[ContributorRecord, ...]
    recent_commits: tuple[CommitRecord, ...]
    repository_path: str

    @classmethod
    def assemble(
        cls,
        commits: list[CommitRecord],
        contributors: list[ContributorRecord],
        repository_path: Path,
    ) -> "AnalysisResult":
        ranked = sorted(contributors, key=lambda c: -c.commit_count)
        return cls(
            summary=RepositorySummary.build(commits, ranked),
            contributors=tuple(dataclasses.replace(c) for c in ranked),
            recent_commits=tuple(commits[:RECENT_COMMITS_LIMIT]),
            repository_path=str(repository_path),
        )

    @property
    def total_additions(self) -> int:
        return sum(c.additions for c in self.contributors)

    @property
    def total_deletions(self) -> int:
        return sum(c.deletions for c in self.contributors)

    def to_dict(self) -> dict[str, object]:
        return {
            "summary": self.summary.to_dict(),
            "contributors": [c.to_dict() for c in self.contributors],
            "recent_commits": [c.to_dict() for c in self.recent_commits],
            "repository_path": self.repository_path,
        }
