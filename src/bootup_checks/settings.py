"""
Settings for bootup-checks.

Reads ``bootup-checks.toml`` from the working directory. Environment
variables override config-file values.

Usage::

    from .settings import load_settings
    settings = load_settings()
    print(settings.required_dependencies)
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from .config import DEFAULT_CONFIG_PATH
from .dependencies import DEFAULT_INSTALL_COMMAND
from .logging_manager import DEFAULT_INSTALL_LOG

logger = logging.getLogger(__name__)

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

SETTINGS_FILE_NAME = "bootup-checks.toml"
DEFAULT_REQUIRED_DEPENDENCIES = ["fastapi", "uvicorn"]


@dataclass
class Settings:
    """Resolved settings (config file + env var overrides)."""

    # [dependencies]
    required_dependencies: List[str] = field(
        default_factory=lambda: list(DEFAULT_REQUIRED_DEPENDENCIES)
    )
    install_command: List[str] = field(
        default_factory=lambda: list(DEFAULT_INSTALL_COMMAND)
    )

    # [port]
    config_path: Path = field(default_factory=lambda: Path(DEFAULT_CONFIG_PATH))
    max_attempts: Optional[int] = None

    # [logging]; None disables the install attempt log
    install_log: Optional[Path] = DEFAULT_INSTALL_LOG

    # Path to the settings file that was loaded (empty string if none)
    _settings_file: str = ""


def _parse_name_list(raw: object) -> Optional[List[str]]:
    if not isinstance(raw, list):
        return None
    return [str(entry).strip() for entry in raw if str(entry).strip()]


def _parse_attempts(raw: object) -> Optional[int]:
    """0, negative or missing values mean unbounded."""
    try:
        value = int(raw)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return value if value > 0 else None


def _section(data: dict, name: str) -> dict:
    """Return the [name] table, or an empty one if it is missing or not a table."""
    section = data.get(name, {})
    if not isinstance(section, dict):
        logger.warning("Ignoring settings key %r: expected a [%s] table", name, name)
        return {}
    return section


def _parse_log_path(raw: str) -> Optional[Path]:
    raw = raw.strip()
    return Path(raw).expanduser() if raw else None


def load_settings(settings_path: Optional[Path] = None) -> Settings:
    """Load settings from the TOML file, then apply env var overrides."""
    settings = Settings()
    path = settings_path or Path.cwd() / SETTINGS_FILE_NAME

    # --- Read settings file ---
    if path.is_file():
        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
            settings._settings_file = str(path)

            deps = _section(data, "dependencies")
            required = _parse_name_list(deps.get("required"))
            if required is not None:
                settings.required_dependencies = required
            command = _parse_name_list(deps.get("install_command"))
            if command:
                settings.install_command = command

            port = _section(data, "port")
            if "config_path" in port:
                settings.config_path = Path(str(port["config_path"]))
            settings.max_attempts = _parse_attempts(port.get("max_attempts"))

            log_section = _section(data, "logging")
            if "install_log" in log_section:
                settings.install_log = _parse_log_path(str(log_section["install_log"]))

            logger.debug("Loaded settings from %s", path)
        except (OSError, tomllib.TOMLDecodeError):
            logger.warning("Failed to parse settings file %s", path, exc_info=True)

    # --- Env var overrides (take priority over settings file) ---
    env_required = os.environ.get("BOOTUP_CHECKS_REQUIRED")
    if env_required is not None:
        settings.required_dependencies = [
            name.strip() for name in env_required.split(",") if name.strip()
        ]

    env_config = os.environ.get("BOOTUP_CHECKS_CONFIG_PATH", "").strip()
    if env_config:
        settings.config_path = Path(env_config)

    env_attempts = os.environ.get("BOOTUP_CHECKS_MAX_ATTEMPTS", "").strip()
    if env_attempts:
        settings.max_attempts = _parse_attempts(env_attempts)

    env_log = os.environ.get("BOOTUP_CHECKS_INSTALL_LOG")
    if env_log is not None:
        settings.install_log = _parse_log_path(env_log)

    return settings


# ---------------------------------------------------------------------------
# Default settings template (written by ``bootup-checks init``)
# ---------------------------------------------------------------------------

DEFAULT_SETTINGS_TOML = """\
# bootup-checks settings

[dependencies]
# Import names that must resolve before the server starts
required = ["fastapi", "uvicorn"]
# Command used to install a missing dependency; {name} is replaced
# install_command = ["python", "-m", "pip", "install", "{name}"]

[port]
# Server configuration file holding the "port" field
config_path = "config.json"
# Maximum new-port prompts; 0 means keep asking
max_attempts = 0

[logging]
# JSONL log of install attempts; empty string disables it
install_log = "~/.bootup-checks/logs/install_attempts.jsonl"
"""
