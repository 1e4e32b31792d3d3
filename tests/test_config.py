"""Tests for sdkbuilder.config -- XDG paths, atomic writes, endpoint files, precedence."""

from __future__ import annotations

import json
import stat
from pathlib import Path
from typing import Any

import pytest

from sdkbuilder.config import (
    atomic_write,
    get_data_dir,
    get_sessions_dir,
    load_endpoints_file,
    resolve_client_config,
)
from sdkbuilder.exceptions import ConfigError


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


TREE = {"users": {"getAll": {"path": "/users", "method": "GET"}}}


def _write_json(path: Path, data: Any) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# XDG path resolution
# ---------------------------------------------------------------------------


class TestDataDir:
    def test_xdg_default(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sdkbuilder.config._is_xdg_platform", lambda: True)
        monkeypatch.delenv("XDG_DATA_HOME", raising=False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        result = get_data_dir()
        assert result == tmp_path / ".local" / "share" / "sdkbuilder"
        assert result.is_dir()

    def test_xdg_custom(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        custom = tmp_path / "custom_data"
        monkeypatch.setattr("sdkbuilder.config._is_xdg_platform", lambda: True)
        monkeypatch.setenv("XDG_DATA_HOME", str(custom))

        assert get_data_dir() == custom / "sdkbuilder"

    def test_fallback(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr("sdkbuilder.config._is_xdg_platform", lambda: False)
        monkeypatch.setattr(Path, "home", classmethod(lambda cls: tmp_path))

        assert get_data_dir() == tmp_path / ".sdkbuilder"

    def test_sessions_dir(self, isolated_data: Path) -> None:
        result = get_sessions_dir()
        assert result == isolated_data / "data" / "sdkbuilder" / "sessions"
        assert result.is_dir()


# ---------------------------------------------------------------------------
# Atomic writes
# ---------------------------------------------------------------------------


class TestAtomicWrite:
    def test_writes_content(self, tmp_path: Path) -> None:
        target = tmp_path / "nested" / "file.txt"
        atomic_write(target, "hello")
        assert target.read_text(encoding="utf-8") == "hello"

    def test_replaces_existing(self, tmp_path: Path) -> None:
        target = tmp_path / "file.txt"
        target.write_text("old", encoding="utf-8")
        atomic_write(target, "new")
        assert target.read_text(encoding="utf-8") == "new"

    def test_permissions(self, tmp_path: Path) -> None:
        target = tmp_path / "secret.json"
        atomic_write(target, "{}", permissions=0o600)
        assert stat.S_IMODE(target.stat().st_mode) == 0o600

    def test_no_temp_files_left(self, tmp_path: Path) -> None:
        atomic_write(tmp_path / "file.txt", "x")
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]


# ---------------------------------------------------------------------------
# Endpoint files
# ---------------------------------------------------------------------------


class TestLoadEndpointsFile:
    def test_bare_json_tree(self, tmp_path: Path) -> None:
        path = _write_json(tmp_path / "api.json", TREE)
        assert load_endpoints_file(path) == {"endpoints": TREE}

    def test_client_document(self, tmp_path: Path) -> None:
        path = _write_json(
            tmp_path / "api.json",
            {"base": "https://api.example.com", "request_timeout_ms": 5000, "endpoints": TREE},
        )
        document = load_endpoints_file(path)
        assert document["base"] == "https://api.example.com"
        assert document["request_timeout_ms"] == 5000
        assert document["endpoints"] == TREE

    def test_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "api.yaml"
        path.write_text(
            "base: https://api.example.com\n"
            "default_headers:\n"
            "  X-App: demo\n"
            "endpoints:\n"
            "  users:\n"
            "    getAll: {path: /users, method: GET}\n",
            encoding="utf-8",
        )
        document = load_endpoints_file(path)
        assert document["default_headers"] == {"X-App": "demo"}
        assert document["endpoints"] == TREE

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="not found"):
            load_endpoints_file(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "api.json"
        path.write_text("{broken", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid endpoints file"):
            load_endpoints_file(path)

    def test_non_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "api.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_endpoints_file(path)


# ---------------------------------------------------------------------------
# Precedence
# ---------------------------------------------------------------------------


class TestResolveClientConfig:
    def test_document_values(self, isolated_data: Path) -> None:
        config = resolve_client_config({"base": "https://doc.example.com", "endpoints": TREE})
        assert config.base == "https://doc.example.com"
        assert config.request_timeout_ms == 30000

    def test_env_overrides_document(self, isolated_data: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SDKBUILDER_BASE_URL", "https://env.example.com")
        monkeypatch.setenv("SDKBUILDER_TIMEOUT_MS", "1500")
        config = resolve_client_config({"base": "https://doc.example.com", "endpoints": TREE})
        assert config.base == "https://env.example.com"
        assert config.request_timeout_ms == 1500

    def test_cli_overrides_env(self, isolated_data: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SDKBUILDER_BASE_URL", "https://env.example.com")
        config = resolve_client_config(
            {"endpoints": TREE}, cli_base_url="https://cli.example.com", cli_timeout_ms=10
        )
        assert config.base == "https://cli.example.com"
        assert config.request_timeout_ms == 10

    def test_missing_base(self, isolated_data: Path) -> None:
        with pytest.raises(ConfigError, match="No base URL"):
            resolve_client_config({"endpoints": TREE})

    def test_relative_base_rejected(self, isolated_data: Path) -> None:
        with pytest.raises(ConfigError, match="Invalid client configuration"):
            resolve_client_config({"base": "/api", "endpoints": TREE})

    def test_bad_env_timeout(self, isolated_data: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SDKBUILDER_TIMEOUT_MS", "soon")
        with pytest.raises(ConfigError, match="SDKBUILDER_TIMEOUT_MS"):
            resolve_client_config({"base": "https://doc.example.com", "endpoints": TREE})
