from __future__ import annotations

from dataclasses import asdict, dataclass, field
import os
from pathlib import Path
from typing import Any

import yaml

from reporank.paths import config_root

TOKEN_ENV_VARS = ("REPORANK_GITHUB_TOKEN", "GITHUB_TOKEN")


@dataclass(slots=True)
class ApiConfig:
    base_url: str = "https://api.github.com"
    token: str | None = None
    timeout: float = 15.0
    per_page: int = 30
    contributors_per_page: int = 10
    user_repos_per_page: int = 100

    def resolved_token(self) -> str | None:
        if self.token:
            return self.token
        for name in TOKEN_ENV_VARS:
            value = os.environ.get(name)
            if value:
                return value
        return None


@dataclass(slots=True)
class RetryConfig:
    retries: int = 3
    backoff_ms: int = 500


@dataclass(slots=True)
class RankConfig:
    descriptive_chars: int = 20
    descriptive_words: int = 3
    enrich_limit: int = 30
    concurrency: int = 6
    summary_words: int = 20
    default_query: str = "stars:>1"


@dataclass(slots=True)
class UIConfig:
    show_logo: bool = True


@dataclass(slots=True)
class AppConfig:
    api: ApiConfig = field(default_factory=ApiConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)
    rank: RankConfig = field(default_factory=RankConfig)
    ui: UIConfig = field(default_factory=UIConfig)


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = dict(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def _to_config(data: dict[str, Any]) -> AppConfig:
    return AppConfig(
        api=ApiConfig(**data.get("api", {})),
        retry=RetryConfig(**data.get("retry", {})),
        rank=RankConfig(**data.get("rank", {})),
        ui=UIConfig(**data.get("ui", {})),
    )


def default_config_path() -> Path:
    return config_root() / "config.yaml"


def load_config(config_path: Path | None = None, overrides: dict[str, Any] | None = None) -> AppConfig:
    path = config_path or default_config_path()
    base: dict[str, Any] = {}
    if path.exists():
        loaded = yaml.safe_load(path.read_text())
        if isinstance(loaded, dict):
            base = loaded
    if overrides:
        base = _merge(base, overrides)
    return _to_config(base)


def write_default_config(path: Path | None = None) -> Path:
    target = path or default_config_path()
    target.parent.mkdir(parents=True, exist_ok=True)
    if target.exists():
        return target
    defaults = asdict(AppConfig())
    # token is resolved from the environment at runtime
    defaults["api"].pop("token", None)
    target.write_text(yaml.safe_dump(defaults, sort_keys=False))
    return target
