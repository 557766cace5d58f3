from __future__ import annotations

import time
from pathlib import Path

from . import console
from .acquire import acquire, remove_working_copy
from .git import DEFAULT_TIMEOUT_S, ensure_git_available
from .history import DEFAULT_AUTHOR_JOBS, fill_author_stats, query_commit_log, query_shortlog
from .models import AnalysisResult, RepositoryRef
from .parsing import parse_commit_log, parse_shortlog

DEFAULT_ROOT = Path("temp")


class RepositoryAnalyzer:
    """Clone-or-update one repository and collect its contributor and commit stats.

    Construction parses the URL and checks that git is installed, so a bad
    URL fails before any work starts.
    """

    def __init__(
        self,
        remote_url: str,
        root: Path = DEFAULT_ROOT,
        *,
        author_jobs: int = DEFAULT_AUTHOR_JOBS,
        timeout_s: int = DEFAULT_TIMEOUT_S,
    ) -> None:
        self.ref = RepositoryRef.from_url(remote_url, root)
        self.author_jobs = author_jobs
        self.timeout_s = timeout_s
        ensure_git_available()

    def repository_info(self) -> dict[str, str]:
        return {
            "owner": self.ref.owner,
            "repo": self.ref.repo,
            "local_path": str(self.ref.local_path),
        }

    def analyze(self) -> AnalysisResult:
        ref = self.ref
        start = time.monotonic()
        try:
            acquire(ref, timeout_s=self.timeout_s)
            contributors = parse_shortlog(query_shortlog(ref, timeout_s=self.timeout_s))
            fill_author_stats(ref, contributors, jobs=self.author_jobs, timeout_s=self.timeout_s)
            commits = parse_commit_log(query_commit_log(ref, timeout_s=self.timeout_s))
            result = AnalysisResult.assemble(commits, list(contributors.values()), ref.local_path)
        except Exception:
            console.failure(f"{console.repo_tag(ref.label)}: Analysis failed")
            remove_working_copy(ref)
            raise

        s = result.summary
        console.success(
            f"{console.repo_tag(ref.label)}: Analysis complete {console.elapsed(start)}\n"
            f"   [bold]{s.total_commits}[/bold] commits, [bold]{s.total_contributors}[/bold] contributors\n"
            f"   [green]+{result.total_additions}[/green] [red]-{result.total_deletions}[/red] lines of code\n"
            f"   First commit: [grey50]{s.first_commit_date or 'N/A'}[/grey50]\n"
            f"   Latest commit: [grey50]{s.last_commit_date or 'N/A'}[/grey50]"
        )
        return result


def analyze_repository(
    remote_url: str,
    root: Path = DEFAULT_ROOT,
    *,
    author_jobs: int = DEFAULT_AUTHOR_JOBS,
    timeout_s: int = DEFAULT_TIMEOUT_S,
) -> AnalysisResult:
    return RepositoryAnalyzer(remote_url, root, author_jobs=author_jobs, timeout_s=timeout_s).analyze()
