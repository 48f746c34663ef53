"""Tests for settings loading."""

import sys
from pathlib import Path

import pytest

from bootup_checks.settings import (
    DEFAULT_REQUIRED_DEPENDENCIES,
    DEFAULT_SETTINGS_TOML,
    load_settings,
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in (
        "BOOTUP_CHECKS_REQUIRED",
        "BOOTUP_CHECKS_CONFIG_PATH",
        "BOOTUP_CHECKS_MAX_ATTEMPTS",
        "BOOTUP_CHECKS_INSTALL_LOG",
    ):
        monkeypatch.delenv(var, raising=False)


def test_defaults_without_file(tmp_path):
    settings = load_settings(tmp_path / "missing.toml")
    assert settings.required_dependencies == DEFAULT_REQUIRED_DEPENDENCIES
    assert settings.config_path == Path("config.json")
    assert settings.max_attempts is None
    assert settings.install_command[0] == sys.executable
    assert settings._settings_file == ""


def test_reads_settings_file(tmp_path):
    path = tmp_path / "bootup-checks.toml"
    path.write_text(
        """
[dependencies]
required = ["flask", " gunicorn "]
install_command = ["uv", "pip", "install", "{name}"]

[port]
config_path = "settings/server.json"
max_attempts = 3

[logging]
install_log = ""
""",
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.required_dependencies == ["flask", "gunicorn"]
    assert settings.install_command == ["uv", "pip", "install", "{name}"]
    assert settings.config_path == Path("settings/server.json")
    assert settings.max_attempts == 3
    assert settings.install_log is None
    assert settings._settings_file == str(path)


def test_default_template_parses(tmp_path):
    path = tmp_path / "bootup-checks.toml"
    path.write_text(DEFAULT_SETTINGS_TOML, encoding="utf-8")
    settings = load_settings(path)
    assert settings.required_dependencies == ["fastapi", "uvicorn"]
    assert settings.max_attempts is None
    assert settings.install_log is not None


def test_corrupt_file_falls_back_to_defaults(tmp_path, caplog):
    path = tmp_path / "bootup-checks.toml"
    path.write_text("this is [not toml", encoding="utf-8")
    settings = load_settings(path)
    assert settings.required_dependencies == DEFAULT_REQUIRED_DEPENDENCIES
    assert "Failed to parse settings file" in caplog.text


def test_env_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("BOOTUP_CHECKS_REQUIRED", "a, b,,c")
    monkeypatch.setenv("BOOTUP_CHECKS_CONFIG_PATH", "other.json")
    monkeypatch.setenv("BOOTUP_CHECKS_MAX_ATTEMPTS", "5")
    monkeypatch.setenv("BOOTUP_CHECKS_INSTALL_LOG", str(tmp_path / "log.jsonl"))
    settings = load_settings(tmp_path / "missing.toml")
    assert settings.required_dependencies == ["a", "b", "c"]
    assert settings.config_path == Path("other.json")
    assert settings.max_attempts == 5
    assert settings.install_log == tmp_path / "log.jsonl"


def test_empty_required_env_means_no_dependencies(tmp_path, monkeypatch):
    monkeypatch.setenv("BOOTUP_CHECKS_REQUIRED", "")
    assert load_settings(tmp_path / "missing.toml").required_dependencies == []


def test_non_table_sections_are_ignored(tmp_path, caplog):
    path = tmp_path / "bootup-checks.toml"
    path.write_text(
        'port = 3000\ndependencies = "flask"\n\n[logging]\ninstall_log = ""\n',
        encoding="utf-8",
    )
    settings = load_settings(path)
    assert settings.required_dependencies == DEFAULT_REQUIRED_DEPENDENCIES
    assert settings.config_path == Path("config.json")
    assert settings.install_log is None
    assert "expected a [port] table" in caplog.text
