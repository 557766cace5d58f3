from __future__ import annotations

import re
import shutil
import subprocess
import time
from pathlib import Path

from . import console
from .errors import CloneFailedError, CleanFailedError, FetchFailedError, ResetFailedError, UnresolvableBranchError
from .git import DEFAULT_TIMEOUT_S, get_remote_origin, is_working_copy, run_git, run_git_checked
from .models import RepositoryRef
from .repo_url import same_remote

ABSENT = "absent"
VALID_EXISTING = "valid-existing"
STALE = "stale"

# Anything that fails this check is never put on a git command line.
BRANCH_NAME_RE = re.compile(r"^[A-Za-z0-9_.-]+$")
FALLBACK_BRANCHES = ("main", "master")
_REMOTE_HEAD_PREFIX = "refs/remotes/origin/"


def is_valid_branch_name(name: str) -> bool:
    return bool(name) and BRANCH_NAME_RE.match(name) is not None


def working_copy_state(ref: RepositoryRef, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    if not is_working_copy(ref.local_path):
        return ABSENT
    current = get_remote_origin(ref.local_path, timeout_s=timeout_s)
    if current and same_remote(current, ref.remote_url):
        return VALID_EXISTING
    return STALE


def remove_working_copy(ref: RepositoryRef) -> None:
    shutil.rmtree(ref.local_path, ignore_errors=True)


def clone_fresh(ref: RepositoryRef, timeout_s: int = DEFAULT_TIMEOUT_S) -> None:
    console.progress(f"{console.repo_tag(ref.label)}: Cloning repository...")
    start = time.monotonic()
    ref.local_path.parent.mkdir(parents=True, exist_ok=True)
    run_git_checked(
        ["clone", "--", ref.remote_url, str(ref.local_path)],
        cwd=Path.cwd(),
        label=ref.label,
        error=CloneFailedError,
        timeout_s=timeout_s,
    )
    console.success(f"{console.repo_tag(ref.label)}: Clone complete {console.elapsed(start)}")


def _try_git(args: list[str], ref: RepositoryRef, timeout_s: int) -> str | None:
    try:
        code, out, _ = run_git(args, cwd=ref.local_path, timeout_s=timeout_s)
    except subprocess.TimeoutExpired:
        return None
    if code != 0:
        return None
    return out


def _remote_head_branch(ref: RepositoryRef, timeout_s: int) -> str:
    out = _try_git(["remote", "show", "origin"], ref, timeout_s)
    for line in (out or "").splitlines():
        line = line.strip()
        if line.startswith("HEAD branch:"):
            return line.split(":", 1)[1].strip()
    return ""


def _symbolic_head_branch(ref: RepositoryRef, timeout_s: int) -> str:
    out = (_try_git(["symbolic-ref", _REMOTE_HEAD_PREFIX + "HEAD"], ref, timeout_s) or "").strip()
    if out.startswith(_REMOTE_HEAD_PREFIX):
        return out[len(_REMOTE_HEAD_PREFIX) :]
    return ""


def resolve_default_branch(ref: RepositoryRef, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    for candidate in (_remote_head_branch(ref, timeout_s), _symbolic_head_branch(ref, timeout_s)):
        if is_valid_branch_name(candidate):
            return candidate
    for name in FALLBACK_BRANCHES:
        if _try_git(["rev-parse", "--verify", "--quiet", f"{_REMOTE_HEAD_PREFIX}{name}"], ref, timeout_s) is not None:
            return name
    raise UnresolvableBranchError(ref.label)


def update_existing(ref: RepositoryRef, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    console.progress(f"{console.repo_tag(ref.label)}: Updating existing repository...")
    start = time.monotonic()
    run_git_checked(["fetch", "--all", "--tags"], cwd=ref.local_path, label=ref.label, error=FetchFailedError, timeout_s=timeout_s)

    branch = resolve_default_branch(ref, timeout_s=timeout_s)
    console.progress(f"{console.repo_tag(ref.label)}: Resetting to [blue]{branch}[/blue]...")
    run_git_checked(
        ["reset", "--hard", f"origin/{branch}"],
        cwd=ref.local_path,
        label=ref.label,
        error=ResetFailedError,
        timeout_s=timeout_s,
    )
    run_git_checked(["clean", "-fd"], cwd=ref.local_path, label=ref.label, error=CleanFailedError, timeout_s=timeout_s)
    console.success(f"{console.repo_tag(ref.label)}: Repository updated {console.elapsed(start)}")
    return branch


def acquire(ref: RepositoryRef, timeout_s: int = DEFAULT_TIMEOUT_S) -> str:
    """Clone or update `ref.local_path` until it is ready for history queries.

    Returns the state the working copy was found in.
    """
    state = working_copy_state(ref, timeout_s=timeout_s)
    if state == VALID_EXISTING:
        update_existing(ref, timeout_s=timeout_s)
    elif state == STALE:
        console.warn(f"{console.repo_tag(ref.label)}: Remote URL differs, recloning...")
        shutil.rmtree(ref.local_path)
        clone_fresh(ref, timeout_s=timeout_s)
    else:
        # leftovers without git metadata; clone needs an empty target
        if ref.local_path.is_dir():
            shutil.rmtree(ref.local_path)
        elif ref.local_path.exists():
            ref.local_path.unlink()
        clone_fresh(ref, timeout_s=timeout_s)
    return state
