from __future__ import annotations

import re

from .models import CommitRecord, ContributorRecord

# Field separator for `git log --pretty=format:`; ASCII unit separator never shows up in names or subjects.
LOG_FIELD_SEP = "\x1f"
LOG_FORMAT = LOG_FIELD_SEP.join(["%H", "%an", "%ad", "%s"])

_SHORTLOG_LINE_RE = re.compile(r"^\s*(\d+)\s+(.+?)\s+<(.+)>$")
_INSERTIONS_RE = re.compile(r"(\d+) insertion")
_DELETIONS_RE = re.compile(r"(\d+) deletion")


def parse_shortlog(text: str) -> dict[str, ContributorRecord]:
    """Parse `git shortlog -sne` output into contributors keyed by email.

    Lines that do not look like `<count> <name> <email>` are skipped. When the
    same email shows up under several names the counts are added together and
    the first name seen is kept.
    """
    contributors: dict[str, ContributorRecord] = {}
    for raw_line in text.splitlines():
        m = _SHORTLOG_LINE_RE.match(raw_line.strip())
        if not m:
            continue
        count = int(m.group(1))
        name = m.group(2)
        email = m.group(3)
        existing = contributors.get(email)
        if existing is None:
            contributors[email] = ContributorRecord(name=name, email=email, commit_count=count)
        else:
            existing.commit_count += count
    return contributors


def parse_commit_line(line: str) -> CommitRecord:
    parts = line.split(LOG_FIELD_SEP, 3)
    parts += [""] * (4 - len(parts))
    return CommitRecord(hash=parts[0], author=parts[1], date=parts[2], message=parts[3])


def parse_commit_log(text: str) -> list[CommitRecord]:
    return [parse_commit_line(line) for line in text.splitlines() if line]


def sum_shortstat(text: str) -> tuple[int, int]:
    """Total (insertions, deletions) over every shortstat line in `text`."""
    insertions = sum(int(n) for n in _INSERTIONS_RE.findall(text or ""))
    deletions = sum(int(n) for n in _DELETIONS_RE.findall(text or ""))
    return insertions, deletions


def first_last_dates(text: str) -> tuple[str, str]:
    dates = [line.strip() for line in (text or "").splitlines() if line.strip()]
    if not dates:
        return "", ""
    return dates[0], dates[-1]
