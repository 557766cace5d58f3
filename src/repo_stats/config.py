from __future__ import annotations

import argparse
import dataclasses
import json
from pathlib import Path

from .analyzer import DEFAULT_ROOT
from .batch import DEFAULT_CONCURRENCY
from .git import DEFAULT_TIMEOUT_S
from .history import DEFAULT_AUTHOR_JOBS
from .results import DEFAULT_RESULTS_DIR

DEFAULT_CONFIG_PATH = Path("repo-stats.json")


def load_config(config_path: Path) -> dict:
    if not config_path.exists():
        return {}
    data = json.loads(config_path.read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError(f"{config_path}: expected a JSON object at top level")
    return data


@dataclasses.dataclass(frozen=True)
class Settings:
    repos: list[str]
    root: Path = DEFAULT_ROOT
    results_dir: Path = DEFAULT_RESULTS_DIR
    parallel: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    author_jobs: int = DEFAULT_AUTHOR_JOBS
    git_timeout_s: int = DEFAULT_TIMEOUT_S
    save_results: bool = True

    def validate(self) -> None:
        if self.concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {self.concurrency}")
        if self.author_jobs < 1:
            raise ValueError(f"author_jobs must be >= 1, got {self.author_jobs}")
        if self.git_timeout_s <= 0:
            raise ValueError(f"git_timeout_s must be > 0, got {self.git_timeout_s}")


def _dedupe(urls: list[str]) -> list[str]:
    out: list[str] = []
    seen: set[str] = set()
    for u in urls:
        u = str(u).strip()
        if u and u not in seen:
            seen.add(u)
            out.append(u)
    return out


def _as_bool(key: str, value: object) -> bool:
    if not isinstance(value, bool):
        raise ValueError(f"{key} must be true or false, got {value!r}")
    return value


def _as_int(key: str, value: object) -> int:
    # bool is an int subclass; `"concurrency": true` is still a mistake
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{key} must be an integer, got {value!r}")
    return value


def _config_repos(config: dict) -> list[str]:
    repos = config.get("repos") or []
    if not isinstance(repos, list) or not all(isinstance(u, str) for u in repos):
        raise ValueError(f"repos must be a list of URL strings, got {repos!r}")
    return repos


def resolve_settings(config: dict, args: argparse.Namespace) -> Settings:
    """Merge the config file with command-line flags; flags win when given."""

    def pick(arg_value: object, key: str, default: object) -> object:
        if arg_value is not None:
            return arg_value
        value = config.get(key)
        return default if value is None else value

    repos = _dedupe(_config_repos(config) + list(args.urls or []))
    settings = Settings(
        repos=repos,
        root=Path(str(pick(args.root, "root", DEFAULT_ROOT))),
        results_dir=Path(str(pick(args.results_dir, "results_dir", DEFAULT_RESULTS_DIR))),
        parallel=_as_bool("parallel", pick(args.parallel, "parallel", False)),
        concurrency=_as_int("concurrency", pick(args.concurrency, "concurrency", DEFAULT_CONCURRENCY)),
        author_jobs=_as_int("author_jobs", pick(args.author_jobs, "author_jobs", DEFAULT_AUTHOR_JOBS)),
        git_timeout_s=_as_int("git_timeout_s", pick(args.timeout, "git_timeout_s", DEFAULT_TIMEOUT_S)),
        save_results=_as_bool("save_results", pick(False if args.no_save else None, "save_results", True)),
    )
    settings.validate()
    return settings
