from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, as_completed

from .errors import HistoryQueryFailedError
from .git import DEFAULT_TIMEOUT_S, run_git, run_git_checked
from .models import ContributorRecord, RepositoryRef
from .parsing import LOG_FORMAT, first_last_dates, sum_shortstat

DEFAULT_AUTHOR_JOBS = 4


def _query(ref: RepositoryRef, args: list[str], timeout_s: int) -> str:
    return run_git_checked(args, cwd=ref.local_path, label=ref.label, error=HistoryQueryFailedError, timeout_s=timeout_s)


# `git log` on an unborn branch exits non-zero; that is an empty history, not a failure
def has_commits(ref: RepositoryRef, timeout_s: int = DEFAULT_TIMEOUT_S) -> bool:
    code, _, _ = run_git(["rev-parse", "--verify", "--quiet", "HEAD"], cwd=ref.local_path, timeout_s=timeout_s)
    return code == 0


def query_shortlog(ref: RepositoryRef, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    if not has_commits(ref, timeout_s=timeout_s):
        return ""
    return _query(ref, ["shortlog", "-sne", "--all"], timeout_s)


def query_commit_log(ref: RepositoryRef, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    if not has_commits(ref, timeout_s=timeout_s):
        return ""
    return _query(ref, ["log", f"--pretty=format:{LOG_FORMAT}", "--date=short"], timeout_s)


def _author_filter(email: str) -> list[str]:
    return ["--fixed-strings", f"--author=<{email}>"]


def query_author_dates(ref: RepositoryRef, email: str, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    return _query(ref, ["log", *_author_filter(email), "--pretty=format:%ad", "--date=short", "--reverse"], timeout_s)


def query_author_shortstat(ref: RepositoryRef, email: str, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    return _query(ref, ["log", *_author_filter(email), "--shortstat", "--pretty=format:"], timeout_s)


def _author_stats(ref: RepositoryRef, email: str, timeout_s: int) -> tuple[str, str, str, int, int]:
    first, last = first_last_dates(query_author_dates(ref, email, timeout_s=timeout_s))
    additions, deletions = sum_shortstat(query_author_shortstat(ref, email, timeout_s=timeout_s))
    return email, first, last, additions, deletions


def fill_author_stats(
    ref: RepositoryRef,
    contributors: dict[str, ContributorRecord],
    *,
    jobs: int = DEFAULT_AUTHOR_JOBS,
    timeout_s: int = DEFAULT_TIMEOUT_S,
) -> None:
    if not contributors or not has_commits(ref, timeout_s=timeout_s):
        return
    with ThreadPoolExecutor(max_workers=max(1, jobs)) as ex:
        futs = [ex.submit(_author_stats, ref, email, timeout_s) for email in contributors]
        for fut in as_completed(futs):
            email, first, last, additions, deletions = fut.result()
            c = contributors[email]
            c.first_commit_date = first
            c.last_commit_date = last
            c.additions = additions
            c.deletions = deletions
