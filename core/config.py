"""
Bot configuration loading and validation.

Settings come from the environment; main.py loads .env before calling
load_config().
"""
from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional, Union

BASE_DIR = Path(__file__).resolve().parent.parent

DEFAULT_DB_PATH = "data/reactions.db"
DEFAULT_ADMIN_HOST = "127.0.0.1"
DEFAULT_ADMIN_PORT = 8080

_TRUE_VALUES = {"1", "true", "yes", "on"}


class ConfigError(RuntimeError):
    pass


def resolve_repo_path(path: Union[str, Path]) -> Path:
    if str(path) == ":memory:":
        return Path(":memory:")
    candidate = Path(path)
    if candidate.is_absolute() or candidate.drive:
        return candidate
    return BASE_DIR / candidate


@dataclass
class BotConfig:
    token: Optional[str] = None
    log_level: str = "INFO"
    db_path: Path = BASE_DIR / DEFAULT_DB_PATH
    admin_host: str = DEFAULT_ADMIN_HOST
    admin_port: int = DEFAULT_ADMIN_PORT
    admin_token: Optional[str] = None
    raw_keyword_patterns: bool = False


def _env_flag(env: Mapping[str, str], key: str) -> bool:
    return (env.get(key) or "").strip().lower() in _TRUE_VALUES


def _env_port(env: Mapping[str, str], key: str, default: int) -> int:
    raw = (env.get(key) or "").strip()
    if not raw:
        return default
    try:
        port = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc
    if not 1 <= port <= 65535:
        raise ConfigError(f"{key} must be between 1 and 65535, got {port}")
    return port


def load_config(env: Optional[Mapping[str, str]] = None) -> BotConfig:
    if env is None:
        env = os.environ
    return BotConfig(
        token=env.get("DISCORD_BOT_TOKEN") or env.get("BOT_TOKEN") or None,
        log_level=(env.get("LOG_LEVEL") or "INFO").upper(),
        db_path=resolve_repo_path(env.get("REACTIONS_DB_PATH") or DEFAULT_DB_PATH),
        admin_host=env.get("ADMIN_API_HOST") or DEFAULT_ADMIN_HOST,
        admin_port=_env_port(env, "ADMIN_API_PORT", DEFAULT_ADMIN_PORT),
        admin_token=env.get("ADMIN_API_TOKEN") or None,
        raw_keyword_patterns=_env_flag(env, "REACTIONS_RAW_KEYWORD_PATTERNS"),
    )
