"""Configuration management that reads exclusively from `common/config/settings.toml`."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import re
import tomllib
from typing import Any


PROJECT_ROOT = Path(__file__).resolve().parent.parent
CONFIG_PATH = PROJECT_ROOT / "common" / "config" / "settings.toml"


class SettingsError(RuntimeError):
    """Raised when configuration cannot be loaded."""


def _load_config_file(path: Path) -> dict[str, Any]:
    """Load TOML configuration from disk."""
    if not path.exists():
        raise SettingsError(
            f"Configuration file '{path}' is missing. "
            "Create 'common/config/settings.toml' before launching the backend."
        )
    with path.open("rb") as fp:
        return tomllib.load(fp)


def _require_section(raw: dict[str, Any], section: str) -> dict[str, Any]:
    if section not in raw or not isinstance(raw[section], dict):
        raise SettingsError(
            f"Section '[{section}]' is missing in '{CONFIG_PATH}'. "
            "All settings must be defined in the config file."
        )
    return raw[section]


def _require_value(section: dict[str, Any], key: str, *, section_name: str) -> Any:
    if key not in section:
        raise SettingsError(
            f"Missing key '{section_name}.{key}' in '{CONFIG_PATH}'. "
            "Configuration values cannot be overridden via environment variables "
            "or CLI flags."
        )
    return section[key]


def _extract_settings(raw: dict[str, Any]) -> dict[str, Any]:
    """Map nested TOML structure into flat settings attributes."""
    database = _require_section(raw, "database")
    server = _require_section(raw, "server")
    cors = _require_section(raw, "cors")
    api = _require_section(raw, "api")
    query = _require_section(raw, "query")
    logging_section = _require_section(raw, "logging")

    api_prefix = str(_require_value(api, "prefix", section_name="api")).rstrip("/")
    default_task_limit = int(
        _require_value(query, "default_task_limit", section_name="query")
    )
    if default_task_limit < 1:
        raise SettingsError("'query.default_task_limit' must be a positive integer")

    log_dir = Path(_require_value(logging_section, "dir", section_name="logging"))
    if not log_dir.is_absolute():
        log_dir = PROJECT_ROOT / log_dir

    return {
        "database_url": _require_value(database, "url", section_name="database"),
        "host": _require_value(server, "host", section_name="server"),
        "port": _require_value(server, "port", section_name="server"),
        "debug": _require_value(server, "debug", section_name="server"),
        "cors_origins": _require_value(cors, "origins", section_name="cors"),
        "api_prefix": api_prefix,
        "default_task_limit": default_task_limit,
        "log_dir": log_dir,
    }


@dataclass(slots=True)
class Settings:
    """Application settings loaded from a config file."""

    database_url: str
    host: str
    port: int
    debug: bool
    cors_origins: list[str]
    api_prefix: str
    default_task_limit: int
    log_dir: Path

    @property
    def cors_origins_list(self) -> list[str]:
        """Return exact CORS origins (wildcard patterns are served by `cors_origin_regex`)."""
        return [origin for origin in self.cors_origins if "*" not in origin]

    @property
    def cors_origin_regex(self) -> str | None:
        """Combine wildcard origins (e.g. "http://127.0.0.1:*") into one regex."""
        patterns = [
            re.escape(origin).replace(r"\*", r".*")
            for origin in self.cors_origins
            if "*" in origin
        ]
        if not patterns:
            return None
        return "|".join(f"(?:{pattern})" for pattern in patterns)


def load_settings(path: Path = CONFIG_PATH) -> Settings:
    """Build a `Settings` object from the TOML file at `path`."""
    raw = _load_config_file(path)
    return Settings(**_extract_settings(raw))


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get application settings (singleton pattern)."""
    global _settings
    if _settings is None:
        _settings = load_settings(CONFIG_PATH)
    return _settings
