from __future__ import annotations

import os
import shutil
import subprocess
from pathlib import Path

import pytest

from repo_stats import analyzer as analyzer_mod
from repo_stats.analyzer import RepositoryAnalyzer, analyze_repository
from repo_stats.errors import CloneFailedError, FetchFailedError, GitMissingError, HistoryQueryFailedError, InvalidUrlError


def _run(cmd: list[str], *, cwd: Path, env: dict[str, str] | None = None) -> str:
    proc = subprocess.run(cmd, cwd=str(cwd), env=env, check=True, capture_output=True, text=True)
    return proc.stdout


def _commit(repo: Path, files: dict[str, str], *, author: tuple[str, str], date: str, message: str) -> None:
    for name, content in files.items():
        (repo / name).write_text(content, encoding="utf-8")
        _run(["git", "add", name], cwd=repo)
    env = os.environ.copy()
    env.update(
        {
            "GIT_AUTHOR_NAME": author[0],
            "GIT_AUTHOR_EMAIL": author[1],
            "GIT_COMMITTER_NAME": author[0],
            "GIT_COMMITTER_EMAIL": author[1],
            "GIT_AUTHOR_DATE": date,
            "GIT_COMMITTER_DATE": date,
        }
    )
    _run(["git", "commit", "-m", message], cwd=repo, env=env)


JANE = ("Jane Doe", "jane@example.com")
BOB = ("Bob", "bob@example.com")


def _init_remote(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    _run(["git", "init", "-b", "main"], cwd=path)
    _commit(path, {"a.txt": "1\n2\n3\n"}, author=JANE, date="2024-01-01T12:00:00+00:00", message="add a")
    _commit(path, {"b.txt": "b\n"}, author=BOB, date="2024-02-01T12:00:00+00:00", message="add b")
    _commit(path, {"a.txt": "1\n2\n"}, author=JANE, date="2024-03-01T12:00:00+00:00", message="trim a | keep b")
    return path


def test_analyze_repository_end_to_end(tmp_path: Path) -> None:
    remote = _init_remote(tmp_path / "remotes" / "acme" / "widget")
    result = analyze_repository(str(remote), tmp_path / "work")

    s = result.summary
    assert s.total_commits == 3
    assert s.total_contributors == 2
    assert s.first_commit_date == "2024-01-01"
    assert s.last_commit_date == "2024-03-01"

    jane, bob = result.contributors
    assert (jane.email, jane.name, jane.commit_count) == ("jane@example.com", "Jane Doe", 2)
    assert (jane.additions, jane.deletions) == (3, 1)
    assert (jane.first_commit_date, jane.last_commit_date) == ("2024-01-01", "2024-03-01")
    assert (bob.email, bob.commit_count, bob.additions, bob.deletions) == ("bob@example.com", 1, 1, 0)
    assert bob.first_commit_date == bob.last_commit_date == "2024-02-01"

    assert [c.message for c in result.recent_commits] == ["trim a | keep b", "add b", "add a"]
    assert result.recent_commits[0].author == "Jane Doe"
    assert len(result.recent_commits[0].hash) == 40
    assert result.repository_path == str((tmp_path / "work" / "acme" / "widget").resolve())


def test_second_run_reuses_working_copy(tmp_path: Path) -> None:
    remote = _init_remote(tmp_path / "remotes" / "acme" / "widget")
    analyzer = RepositoryAnalyzer(str(remote), tmp_path / "work")
    analyzer.analyze()
    _commit(remote, {"c.txt": "c\n"}, author=BOB, date="2024-04-01T12:00:00+00:00", message="add c")

    result = analyzer.analyze()
    assert result.summary.total_commits == 4
    assert result.summary.last_commit_date == "2024-04-01"
    assert result.contributors[0].commit_count == 2


def test_empty_repository_yields_empty_summary(tmp_path: Path) -> None:
    remote = tmp_path / "remotes" / "acme" / "empty"
    remote.mkdir(parents=True)
    _run(["git", "init", "-b", "main"], cwd=remote)

    result = analyze_repository(str(remote), tmp_path / "work")
    assert result.summary.total_commits == 0
    assert result.summary.first_commit_date == ""
    assert result.summary.last_commit_date == ""
    assert result.contributors == ()
    assert result.recent_commits == ()


def test_failure_removes_working_copy(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    remote = _init_remote(tmp_path / "remotes" / "acme" / "widget")
    analyzer = RepositoryAnalyzer(str(remote), tmp_path / "work")

    def boom(ref, timeout_s):
        assert ref.local_path.exists()
        raise HistoryQueryFailedError(ref.label, ["git", "shortlog"], 128, "fatal: simulated")

    monkeypatch.setattr(analyzer_mod, "query_shortlog", boom)
    with pytest.raises(HistoryQueryFailedError) as exc_info:
        analyzer.analyze()
    assert "simulated" in exc_info.value.stderr
    assert not analyzer.ref.local_path.exists()


def test_clone_failure_propagates(tmp_path: Path) -> None:
    analyzer = RepositoryAnalyzer(str(tmp_path / "remotes" / "acme" / "missing"), tmp_path / "work")
    with pytest.raises(CloneFailedError):
        analyzer.analyze()
    assert not analyzer.ref.local_path.exists()


def test_invalid_url_fails_at_construction(tmp_path: Path) -> None:
    with pytest.raises(InvalidUrlError):
        RepositoryAnalyzer("not-a-repo", tmp_path / "work")
    assert not (tmp_path / "work").exists()


def test_missing_git_fails_at_construction(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    empty_bin = tmp_path / "bin"
    empty_bin.mkdir()
    monkeypatch.setenv("PATH", str(empty_bin))
    with pytest.raises(GitMissingError):
        RepositoryAnalyzer("https://github.com/octo/widget", tmp_path / "work")


def test_repository_info(tmp_path: Path) -> None:
    analyzer = RepositoryAnalyzer("git@github.com:octo/widget.git", tmp_path / "work")
    info = analyzer.repository_info()
    assert info == {
        "owner": "octo",
        "repo": "widget",
        "local_path": str((tmp_path / "work" / "octo" / "widget").resolve()),
    }


def test_update_failure_removes_working_copy(tmp_path: Path) -> None:
    remote = _init_remote(tmp_path / "remotes" / "acme" / "widget")
    analyzer = RepositoryAnalyzer(str(remote), tmp_path / "work")
    analyzer.analyze()
    assert analyzer.ref.local_path.exists()

    shutil.rmtree(remote)
    with pytest.raises(FetchFailedError) as exc_info:
        analyzer.analyze()
    assert "fetch failed" in str(exc_info.value)
    assert not analyzer.ref.local_path.exists()
