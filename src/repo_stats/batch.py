from __future__ import annotations

import contextlib
import os
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Optional, Protocol

from rich.markup import escape

from . import console
from .analyzer import DEFAULT_ROOT, RepositoryAnalyzer
from .git import DEFAULT_TIMEOUT_S
from .history import DEFAULT_AUTHOR_JOBS
from .models import AnalysisResult, RepositoryRef

DEFAULT_CONCURRENCY = 3


class Analyzer(Protocol):
    ref: RepositoryRef

    def analyze(self) -> AnalysisResult: ...

    def repository_info(self) -> dict[str, str]: ...


@contextlib.contextmanager
def preserve_cwd(original: str) -> Iterator[None]:
    try:
        yield
    finally:
        if os.getcwd() != original:
            os.chdir(original)


def chunked(items: list, size: int) -> list[list]:
    if size < 1:
        raise ValueError(f"concurrency must be >= 1, got {size}")
    return [items[i : i + size] for i in range(0, len(items), size)]


# two units sharing a working copy would clone into and delete each other's directory
def _unique_by_path(analyzers: list[Analyzer]) -> list[Analyzer]:
    out: list[Analyzer] = []
    seen: set[Path] = set()
    for a in analyzers:
        if a.ref.local_path in seen:
            console.warn(
                f"{console.repo_tag(a.ref.label)}: Skipping {escape(a.ref.remote_url)}, "
                f"same working copy as an earlier entry"
            )
            continue
        seen.add(a.ref.local_path)
        out.append(a)
    return out


class BatchAnalyzer:
    """Analyze many repositories; a failing repository is reported and left out of the results."""

    def __init__(self, analyzers: list[Analyzer]) -> None:
        self.analyzers = _unique_by_path(analyzers)

    @classmethod
    def from_urls(
        cls,
        urls: list[str],
        root: Path = DEFAULT_ROOT,
        *,
        author_jobs: int = DEFAULT_AUTHOR_JOBS,
        timeout_s: int = DEFAULT_TIMEOUT_S,
    ) -> "BatchAnalyzer":
        # every URL is parsed up front so a malformed one fails before any clone
        return cls([RepositoryAnalyzer(u, root, author_jobs=author_jobs, timeout_s=timeout_s) for u in urls])

    def repositories_info(self) -> list[dict[str, str]]:
        return [a.repository_info() for a in self.analyzers]

    def _analyze_one(self, analyzer: Analyzer, original_cwd: str) -> Optional[AnalysisResult]:
        with preserve_cwd(original_cwd):
            try:
                return analyzer.analyze()
            except Exception as e:
                console.failure(f"Failed to analyze repository: {escape(str(analyzer.ref.local_path))}")
                console.failure(escape(str(e) or type(e).__name__))
                return None

    def analyze_all(self) -> list[AnalysisResult]:
        original_cwd = os.getcwd()
        results: list[AnalysisResult] = []
        for analyzer in self.analyzers:
            r = self._analyze_one(analyzer, original_cwd)
            if r is not None:
                results.append(r)
        return results

    def analyze_all_parallel(self, concurrency: int = DEFAULT_CONCURRENCY) -> list[AnalysisResult]:
        chunks = chunked(self.analyzers, concurrency)
        original_cwd = os.getcwd()
        results: list[AnalysisResult] = []
        for chunk in chunks:
            with ThreadPoolExecutor(max_workers=len(chunk)) as ex:
                futs = [ex.submit(self._analyze_one, a, original_cwd) for a in chunk]
                chunk_results = [f.result() for f in futs]
            results.extend(r for r in chunk_results if r is not None)
        return results
