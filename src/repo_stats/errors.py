from __future__ import annotations


class RepoStatsError(RuntimeError):
    pass


class InvalidUrlError(RepoStatsError, ValueError):
    def __init__(self, url: str) -> None:
        super().__init__(f"unable to parse repository URL: {url!r}")
        self.url = url


class GitMissingError(RepoStatsError):
    def __init__(self) -> None:
        super().__init__("git is required but was not found on PATH")


class UnresolvableBranchError(RepoStatsError):
    def __init__(self, label: str) -> None:
        super().__init__(f"{label}: could not determine default branch")
        self.label = label
        self.step = "resolve-branch"


class GitCommandError(RepoStatsError):
    """A git invocation for one repository exited non-zero (or timed out).

    `stderr` keeps the raw diagnostic text; the message names the repository
    and the step so the failure can be read without it.
    """

    step = "git"

    def __init__(self, label: str, command: list[str], returncode: int | None, stderr: str) -> None:
        detail = stderr.strip()[:500]
        msg = f"{label}: {self.step} failed"
        if returncode is None:
            msg += " (timed out)"
        else:
            msg += f" (exit {returncode})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)
        self.label = label
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr


class CloneFailedError(GitCommandError):
    step = "clone"


class FetchFailedError(GitCommandError):
    step = "fetch"


class ResetFailedError(GitCommandError):
    step = "reset"


class CleanFailedError(GitCommandError):
    step = "clean"


class HistoryQueryFailedError(GitCommandError):
    step = "history query"
