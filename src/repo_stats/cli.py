from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from rich.markup import escape

from . import console
from .analyzer import RepositoryAnalyzer
from .batch import BatchAnalyzer
from .config import DEFAULT_CONFIG_PATH, Settings, load_config, resolve_settings
from .errors import GitMissingError, InvalidUrlError
from .models import AnalysisResult
from .render import render_result
from .results import write_results


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repo-stats",
        description="Clone or update git repositories and report contributor and commit stats.",
    )
    parser.add_argument("urls", nargs="*", help="Repository remote URLs (HTTPS or SSH).")
    parser.add_argument("--config", type=Path, default=DEFAULT_CONFIG_PATH, help="Path to a JSON config file.")
    parser.add_argument("--root", type=Path, default=None, help="Directory for local working copies (default: temp).")
    parser.add_argument("--results-dir", type=Path, default=None, help="Directory for JSON results (default: results).")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--parallel", dest="parallel", action="store_const", const=True, default=None, help="Analyze repos in concurrent chunks.")
    mode.add_argument("--sequential", dest="parallel", action="store_const", const=False, help="Analyze repos one at a time (default).")
    parser.add_argument("--concurrency", type=int, default=None, help="Repos per chunk in --parallel mode (default: 3).")
    parser.add_argument("--author-jobs", type=int, default=None, help="Parallel per-author git queries per repo (default: 4).")
    parser.add_argument("--timeout", type=int, default=None, help="Timeout in seconds for each git call (default: 300).")
    parser.add_argument("--no-save", action="store_true", help="Do not write the JSON results file.")
    parser.add_argument("--json", action="store_true", help="Print results as JSON instead of text.")
    parser.add_argument("--quiet", action="store_true", help="Only print results and failures.")
    return parser


def _print_results(results: list[AnalysisResult], as_json: bool) -> None:
    if as_json:
        print(json.dumps([r.to_dict() for r in results], indent=2))
        return
    for r in results:
        print("")
        print(render_result(r))


def run(settings: Settings, *, as_json: bool = False) -> int:
    try:
        if len(settings.repos) == 1:
            analyzer = RepositoryAnalyzer(
                settings.repos[0], settings.root, author_jobs=settings.author_jobs, timeout_s=settings.git_timeout_s
            )
            batch = None
        else:
            batch = BatchAnalyzer.from_urls(
                settings.repos, settings.root, author_jobs=settings.author_jobs, timeout_s=settings.git_timeout_s
            )
    except (InvalidUrlError, GitMissingError) as e:
        console.failure(escape(str(e)))
        return 2

    if batch is None:
        try:
            results = [analyzer.analyze()]
        except Exception as e:
            console.failure(escape(str(e) or type(e).__name__))
            return 1
    elif settings.parallel:
        results = batch.analyze_all_parallel(settings.concurrency)
    else:
        results = batch.analyze_all()

    _print_results(results, as_json)

    if settings.save_results and results:
        path = write_results(results, settings.results_dir)
        console.success(f"Results saved to {escape(str(path))}")

    if not results:
        console.failure("No repositories were analyzed successfully.")
        return 1
    return 0


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]
    parser = _build_parser()
    args = parser.parse_args(argv)
    console.set_quiet(bool(args.quiet or args.json))

    try:
        settings = resolve_settings(load_config(args.config), args)
    except ValueError as e:
        console.failure(f"Invalid configuration: {escape(str(e))}")
        return 2
    if not settings.repos:
        parser.print_usage(sys.stderr)
        console.failure("No repositories given (pass URLs or set `repos` in the config file).")
        return 2
    return run(settings, as_json=bool(args.json))


if __name__ == "__main__":
    raise SystemExit(main())
