"""
Server configuration file access.

Only the ``port`` field is ever changed; every other field is written back
exactly as it was loaded.
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Union

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"


class ConfigLoadError(ValueError):
    """The configuration file is missing, unreadable or not a JSON object."""


class ServerConfigStore:
    """Reads and rewrites the server's JSON configuration file."""

    def __init__(self, config_path: Union[str, Path] = DEFAULT_CONFIG_PATH):
        self.config_path = Path(config_path)

    def load(self) -> Dict[str, Any]:
        """Load the configuration record."""
        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigLoadError(f"Configuration file contains invalid JSON: {e}")
        except OSError as e:
            raise ConfigLoadError(f"Cannot read configuration file: {e}")

        if not isinstance(data, dict):
            raise ConfigLoadError(
                f"Configuration file must contain a JSON object, got {type(data).__name__}"
            )
        logger.debug("Loaded configuration from %s", self.config_path)
        return data

    def save(self, record: Dict[str, Any]) -> None:
        """Write ``record`` back, pretty-printed with 2-space indentation.

        The file is replaced via a temporary sibling, so an interrupted write
        leaves the previous contents in place.
        """
        payload = json.dumps(record, indent=2, ensure_ascii=False) + "\n"
        tmp = self.config_path.with_name(self.config_path.name + ".tmp")
        try:
            tmp.write_text(payload, encoding="utf-8")
            tmp.replace(self.config_path)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        logger.debug("Saved configuration to %s", self.config_path)

    def update_port(self, record: Dict[str, Any], port: int) -> None:
        record["port"] = port
        self.save(record)
