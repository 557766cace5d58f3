from __future__ import annotations

import re

from .errors import InvalidUrlError

# https://host/owner/repo(.git)
_HTTPS_RE = re.compile(r"/([^/]+)/([^/]+?)(?:\.git)?$")
# git@host:owner/repo(.git)
_SSH_RE = re.compile(r"[:/]([^/:]+)/([^/]+?)(?:\.git)?$")
_SCP_LIKE_RE = re.compile(r"^(?:[^@/:]+@)?([^/:]+):(?!//)(.+)$")


def parse_repo_url(url: str) -> tuple[str, str]:
    """Return (owner, repo) for an HTTPS- or SSH-style remote URL.

    The repo part never includes a trailing `.git`.
    """
    s = (url or "").strip().rstrip("/")
    for pattern in (_HTTPS_RE, _SSH_RE):
        m = pattern.search(s)
        if m:
            owner, repo = m.group(1), m.group(2)
            if owner and repo and repo != ".git":
                return owner, repo
    raise InvalidUrlError(url)


def normalize_remote_url(url: str) -> str:
    u = (url or "").strip().rstrip("/")
    if u.endswith(".git"):
        u = u[: -len(".git")]
    if "://" not in u:
        m = _SCP_LIKE_RE.match(u)
        if m:
            u = f"https://{m.group(1)}/{m.group(2)}"
    return u


def same_remote(a: str, b: str) -> bool:
    return normalize_remote_url(a) == normalize_remote_url(b)
