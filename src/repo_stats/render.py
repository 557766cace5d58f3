from __future__ import annotations

from .models import AnalysisResult

TOP_CONTRIBUTORS = 10


def fmt_int(n: int) -> str:
    return f"{int(n):,}"


def trunc(s: str, max_len: int) -> str:
    if len(s) <= max_len:
        return s
    if max_len <= 1:
        return s[:max_len]
    return s[: max_len - 1] + "…"


def render_result(result: AnalysisResult, top_n: int = TOP_CONTRIBUTORS) -> str:
    s = result.summary
    lines: list[str] = []
    lines.append("=== Repository Analysis Results ===")
    lines.append("")
    lines.append(f"Repository location: {result.repository_path}")
    lines.append("")
    lines.append("Summary:")
    lines.append(f"  Commits: {fmt_int(s.total_commits)}")
    lines.append(f"  Contributors: {fmt_int(s.total_contributors)}")
    lines.append(f"  First commit: {s.first_commit_date or 'N/A'}")
    lines.append(f"  Latest commit: {s.last_commit_date or 'N/A'}")
    lines.append(f"  Lines: +{fmt_int(result.total_additions)} -{fmt_int(result.total_deletions)}")
    lines.append("")

    lines.append(f"Top contributors (top {top_n}):")
    if not result.contributors:
        lines.append("  (none)")
    for c in result.contributors[:top_n]:
        who = trunc(f"{c.name} <{c.email}>", 48)
        lines.append(
            f"  {who:<48} {fmt_int(c.commit_count):>8} commits  +{fmt_int(c.additions)} -{fmt_int(c.deletions)}"
            f"  {c.first_commit_date or '?'} .. {c.last_commit_date or '?'}"
        )
    lines.append("")

    lines.append("Recent commits:")
    if not result.recent_commits:
        lines.append("  (none)")
    for commit in result.recent_commits:
        lines.append(f"  {commit.hash[:10]:<10} {commit.date:<10} {trunc(commit.author, 20):<20} {trunc(commit.message, 72)}")
    return "\n".join(lines)
