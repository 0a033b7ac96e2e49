"""Unit tests for taskboard/config.py."""

from pathlib import Path
import re

import pytest

from taskboard.config import PROJECT_ROOT, SettingsError, get_settings, load_settings


VALID_CONFIG = """
[database]
url = "sqlite:///./test.db"

[server]
host = "127.0.0.1"
port = 4100
debug = true

[cors]
origins = ["http://localhost:3000", "http://127.0.0.1:*"]

[api]
prefix = "/api/"

[query]
default_task_limit = 50

[logging]
dir = "var/logs"
"""


def _write(tmp_path: Path, content: str) -> Path:
    path = tmp_path / "settings.toml"
    path.write_text(content, encoding="utf-8")
    return path


class TestLoadSettings:
    """Loading settings from TOML."""

    def test_valid_file(self, tmp_path: Path) -> None:
        settings = load_settings(_write(tmp_path, VALID_CONFIG))

        assert settings.database_url == "sqlite:///./test.db"
        assert (settings.host, settings.port, settings.debug) == ("127.0.0.1", 4100, True)
        assert settings.api_prefix == "/api"
        assert settings.default_task_limit == 50
        assert settings.log_dir == PROJECT_ROOT / "var" / "logs"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(SettingsError, match="missing"):
            load_settings(tmp_path / "absent.toml")

    def test_missing_section(self, tmp_path: Path) -> None:
        content = VALID_CONFIG.replace("[query]\ndefault_task_limit = 50\n", "")

        with pytest.raises(SettingsError, match=r"\[query\]"):
            load_settings(_write(tmp_path, content))

    def test_missing_key(self, tmp_path: Path) -> None:
        content = VALID_CONFIG.replace('url = "sqlite:///./test.db"\n', "")

        with pytest.raises(SettingsError, match="database.url"):
            load_settings(_write(tmp_path, content))

    def test_non_positive_task_limit(self, tmp_path: Path) -> None:
        content = VALID_CONFIG.replace("default_task_limit = 50", "default_task_limit = 0")

        with pytest.raises(SettingsError):
            load_settings(_write(tmp_path, content))


class TestCorsOrigins:
    """Exact and wildcard CORS origins."""

    def test_wildcards_are_split_out(self, tmp_path: Path) -> None:
        settings = load_settings(_write(tmp_path, VALID_CONFIG))

        assert settings.cors_origins_list == ["http://localhost:3000"]
        pattern = settings.cors_origin_regex
        assert pattern is not None
        assert re.fullmatch(pattern, "http://127.0.0.1:5173")
        assert not re.fullmatch(pattern, "http://example.com")

    def test_no_wildcards(self, tmp_path: Path) -> None:
        content = VALID_CONFIG.replace(', "http://127.0.0.1:*"', "")

        assert load_settings(_write(tmp_path, content)).cors_origin_regex is None


def test_repository_settings_file_loads() -> None:
    settings = get_settings()

    assert settings.api_prefix == "/api"
    assert settings.default_task_limit == 100
