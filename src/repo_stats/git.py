from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

from .errors import GitCommandError, GitMissingError

DEFAULT_TIMEOUT_S = 300

# no credential prompts; untranslated output so `remote show` can be parsed
_GIT_ENV_OVERRIDES = {"GIT_TERMINAL_PROMPT": "0", "LC_ALL": "C"}


def run_git(args: list[str], cwd: Path, timeout_s: int = DEFAULT_TIMEOUT_S) -> tuple[int, str, str]:
    proc = subprocess.run(
        ["git", *args],
        cwd=str(cwd),
        stdin=subprocess.DEVNULL,
        env={**os.environ, **_GIT_ENV_OVERRIDES},
        capture_output=True,
        text=True,
        encoding="utf-8",
        errors="replace",
        timeout=timeout_s,
    )
    return proc.returncode, proc.stdout, proc.stderr


def run_git_checked(
    args: list[str],
    cwd: Path,
    *,
    label: str,
    error: type[GitCommandError],
    timeout_s: int = DEFAULT_TIMEOUT_S,
) -> str:
    """Run git and return stdout, raising `error` on a non-zero exit or timeout."""
    try:
        code, out, err = run_git(args, cwd=cwd, timeout_s=timeout_s)
    except subprocess.TimeoutExpired as e:
        raise error(label, ["git", *args], None, f"git {args[0]} timed out after {timeout_s}s") from e
    if code != 0:
        raise error(label, ["git", *args], code, err)
    return out


def git_available() -> bool:
    return shutil.which("git") is not None


def ensure_git_available() -> None:
    if not git_available():
        raise GitMissingError()


def is_working_copy(path: Path) -> bool:
    return path.is_dir() and (path / ".git").exists()


def get_remote_origin(repo: Path, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    try:
        code, out, _ = run_git(["remote", "get-url", "origin"], cwd=repo, timeout_s=timeout_s)
    except subprocess.TimeoutExpired:
        return ""
    if code == 0:
        return out.strip()
    return ""
