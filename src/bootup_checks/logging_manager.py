"""
Logging setup and the install attempt log.

Each install command run by the dependency stage is appended as one JSON
line to ``install_attempts.jsonl`` so failed installs can be inspected after
the console transcript is gone.
"""

import json
import logging
from pathlib import Path
from typing import List, Optional, Union

from .models import InstallAttemptRecord

logger = logging.getLogger(__name__)

DEFAULT_INSTALL_LOG = Path.home() / ".bootup-checks" / "logs" / "install_attempts.jsonl"


def configure_logging(verbose: bool = False) -> None:
    """Configure root logging for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


class InstallAttemptLog:
    """Append-only JSONL log of install attempts."""

    def __init__(self, log_path: Optional[Union[str, Path]] = None):
        self.log_path = Path(log_path) if log_path else DEFAULT_INSTALL_LOG

    def record(self, attempt: InstallAttemptRecord) -> None:
        """Append ``attempt``; write failures are logged, never raised."""
        try:
            self.log_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.log_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(attempt.model_dump(mode="json")) + "\n")
        except OSError as e:
            logger.error(f"Failed to update install log {self.log_path}: {e}")

    def read(self) -> List[InstallAttemptRecord]:
        """Return every readable entry, skipping corrupt lines."""
        if not self.log_path.exists():
            return []
        entries: List[InstallAttemptRecord] = []
        with open(self.log_path, "r", encoding="utf-8") as f:
            for line in f:
                line = line.strip()
                if not line:
                    continue
                try:
                    entries.append(InstallAttemptRecord.model_validate_json(line))
                except ValueError:
                    logger.debug("Skipping corrupt install log line: %s", line[:200])
        return entries
