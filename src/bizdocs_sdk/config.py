from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable

from dotenv import load_dotenv
from platformdirs import user_data_dir


class ConfigError(ValueError):
    pass


@dataclass(frozen=True)
class ClientConfig:
    env_name: str
    api_base_url: str
    connect_timeout_seconds: float = 5.0
    read_timeout_seconds: float = 15.0
    retries: int = 3
    retry_backoff_seconds: float = 0.3
    max_connections: int = 20
    verify_ssl: bool = True
    offline_fallback: bool = True
    local_store_dir: str | None = None

    @property
    def normalized_env(self) -> str:
        return self.env_name.lower().strip()

    def resolved_store_dir(self) -> Path:
        if self.local_store_dir:
            return Path(self.local_store_dir)
        return Path(user_data_dir("bizdocs", "BizDocs")) / self.normalized_env


_TRUE_VALUES = {"1", "true", "yes", "on"}


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


def _env_number(name: str, default: float, cast: Callable[[str], Any], *, minimum: float, inclusive: bool) -> Any:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return cast(str(default))
    try:
        value = cast(raw.strip())
    except ValueError as exc:
        raise ConfigError(f"Invalid {name}: expected a number, got {raw!r}") from exc
    if value < minimum or (value == minimum and not inclusive):
        bound = ">=" if inclusive else ">"
        raise ConfigError(f"Invalid {name}: expected {bound} {minimum:g}, got {value}")
    return value


def _base_url(env_name: str) -> str:
    for name in (f"BIZDOCS_API_BASE_URL_{env_name.upper()}", "BIZDOCS_API_BASE_URL"):
        value = (os.getenv(name) or "").strip()
        if value:
            return value.rstrip("/")
    raise ConfigError("Missing required config values: BIZDOCS_API_BASE_URL")


def load_config(env_file: str | None = None) -> ClientConfig:
    """Load config from the environment, with an optional .env file underneath.

    ``BIZDOCS_API_BASE_URL_<ENV>`` wins over ``BIZDOCS_API_BASE_URL`` so one
    .env can carry several deployments. ``BIZDOCS_TIMEOUT_SECONDS`` seeds the
    connect and read timeouts when those are not set on their own.
    """
    load_dotenv(env_file)
    env_name = (os.getenv("BIZDOCS_ENV") or "dev").strip()
    api_base_url = _base_url(env_name)

    timeout = _env_number("BIZDOCS_TIMEOUT_SECONDS", 10.0, float, minimum=0, inclusive=False)
    connect_timeout = _env_number(
        "BIZDOCS_CONNECT_TIMEOUT_SECONDS", min(timeout, 5.0), float, minimum=0, inclusive=False
    )
    read_timeout = _env_number(
        "BIZDOCS_READ_TIMEOUT_SECONDS", max(timeout, connect_timeout), float, minimum=0, inclusive=False
    )
    return ClientConfig(
        env_name=env_name,
        api_base_url=api_base_url,
        connect_timeout_seconds=connect_timeout,
        read_timeout_seconds=read_timeout,
        retries=_env_number("BIZDOCS_RETRIES", 3, int, minimum=0, inclusive=True),
        retry_backoff_seconds=_env_number("BIZDOCS_RETRY_BACKOFF_SECONDS", 0.3, float, minimum=0, inclusive=True),
        max_connections=_env_number("BIZDOCS_MAX_CONNECTIONS", 20, int, minimum=1, inclusive=True),
        verify_ssl=_env_flag("BIZDOCS_VERIFY_SSL", True),
        offline_fallback=_env_flag("BIZDOCS_OFFLINE_FALLBACK", True),
        local_store_dir=(os.getenv("BIZDOCS_LOCAL_STORE_DIR") or "").strip() or None,
    )
