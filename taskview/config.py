"""Configuration loading for the task view service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_PER_PAGE = 50
MAX_PER_PAGE = 500


class ConfigError(RuntimeError):
    """Raised when required configuration is missing or invalid."""


@dataclass(frozen=True)
class AppConfig:
    log_level: str
    default_per_page: int
    raw_fallback: bool


def _read_dotenv_value(dotenv_path: Path, key: str) -> str | None:
    """Read a single key from a .env file without mutating the environment."""
    if not dotenv_path.is_file():
        return None
    try:
        content = dotenv_path.read_text(encoding="utf-8")
    except OSError:
        return None

    for line in content.splitlines():
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        if stripped.startswith("export "):
            stripped = stripped[len("export ") :].strip()
        if "=" not in stripped:
            continue
        name, value = stripped.split("=", 1)
        name = name.strip()
        if name != key:
            continue
        value = value.strip()
        if len(value) >= 2 and value[0] == value[-1] and value[0] in {"'", '"'}:
            value = value[1:-1]
        return value or None
    return None


def _read_setting(dotenv_path: Path, key: str) -> str | None:
    raw_value = os.environ.get(key)
    if raw_value is None:
        raw_value = _read_dotenv_value(dotenv_path, key)
    return raw_value


def _read_bool(raw_value: str | None, *, default: bool, key: str) -> bool:
    if raw_value is None:
        return default
    normalized = raw_value.strip().lower()
    if not normalized:
        return default
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ConfigError(f"{key} must be a boolean value.")


def _read_per_page(raw_value: str | None, *, key: str) -> int:
    if raw_value is None or not raw_value.strip():
        return DEFAULT_PER_PAGE
    try:
        value = int(raw_value.strip())
    except ValueError:
        raise ConfigError(f"{key} must be an integer.") from None
    if value <= 0 or value > MAX_PER_PAGE:
        raise ConfigError(f"{key} must be between 1 and {MAX_PER_PAGE}.")
    return value


def load_config() -> AppConfig:
    """Load service configuration from the environment and an optional .env."""
    dotenv_path = Path.cwd() / ".env"

    log_level = (_read_setting(dotenv_path, "TASKVIEW_LOG_LEVEL") or "info").strip()

    per_page_key = "TASKVIEW_DEFAULT_PER_PAGE"
    default_per_page = _read_per_page(
        _read_setting(dotenv_path, per_page_key), key=per_page_key
    )

    raw_fallback_key = "TASKVIEW_RAW_FALLBACK"
    raw_fallback = _read_bool(
        _read_setting(dotenv_path, raw_fallback_key),
        default=True,
        key=raw_fallback_key,
    )

    return AppConfig(
        log_level=log_level or "info",
        default_per_page=default_per_page,
        raw_fallback=raw_fallback,
    )
