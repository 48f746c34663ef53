"""
Port validation, availability probing and interactive port replacement.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional

from .config import ConfigLoadError, ServerConfigStore
from .console import Console
from .models import PortCheckOutcome, PortCheckResult
from .prompter import Prompter

logger = logging.getLogger(__name__)

MIN_PORT = 1
MAX_PORT = 65535


def is_valid_port(port: Any) -> bool:
    """Return True if ``port`` is an integer in 1..65535."""
    if isinstance(port, bool) or not isinstance(port, int):
        return False
    return MIN_PORT <= port <= MAX_PORT


async def _close_immediately(
    reader: asyncio.StreamReader, writer: asyncio.StreamWriter
) -> None:
    writer.close()


async def is_port_in_use(port: int) -> bool:
    """Try to listen on ``port`` on all interfaces.

    Any bind failure counts as "in use". On success the listener is closed
    before returning, so the port is free again for the caller.
    """
    if not is_valid_port(port):
        # Port 0 would bind an ephemeral port; getaddrinfo may wrap large values.
        logger.debug("Port %s is out of range; treating as in use", port)
        return True
    try:
        server = await asyncio.start_server(_close_immediately, host=None, port=port)
    except (OSError, OverflowError, ValueError) as e:
        logger.debug("Port %s probe failed: %s", port, e)
        return True

    server.close()
    await server.wait_closed()
    return False


def parse_port(answer: str) -> Optional[int]:
    """Parse operator input as a base-10 integer, or None."""
    try:
        return int(answer.strip(), 10)
    except ValueError:
        return None


@dataclass
class RetryPolicy:
    """How many new-port prompts are allowed; ``None`` means no limit."""

    max_attempts: Optional[int] = None

    def allows(self, attempts_made: int) -> bool:
        return self.max_attempts is None or attempts_made < self.max_attempts

    @classmethod
    def from_limit(cls, limit: Optional[int]) -> "RetryPolicy":
        """Build a policy where None, 0 or a negative limit mean unbounded."""
        if limit is None or limit <= 0:
            return cls(max_attempts=None)
        return cls(max_attempts=limit)


class PortRemediator:
    """Checks the configured port and asks for a replacement until one works."""

    def __init__(
        self,
        prompter: Prompter,
        store: ServerConfigStore,
        retry_policy: Optional[RetryPolicy] = None,
        validator: Callable[[Any], bool] = is_valid_port,
        probe: Callable[[int], Awaitable[bool]] = is_port_in_use,
    ):
        self.prompter = prompter
        self.store = store
        self.retry_policy = retry_policy or RetryPolicy()
        self.validator = validator
        self.probe = probe
        self.console = Console("port")

    async def _is_usable(self, port: Any) -> bool:
        if not port or not self.validator(port):
            return False
        return not await self.probe(port)

    async def remediate(self) -> PortCheckResult:
        config_path = str(self.store.config_path)
        try:
            record = self.store.load()
        except ConfigLoadError as e:
            logger.error(f"Failed to load {config_path}: {e}")
            self.console.failure(f"Could not load {config_path}: {e}")
            return PortCheckResult(
                outcome=PortCheckOutcome.ABORTED,
                config_path=config_path,
                message=str(e),
            )

        current = record.get("port")
        if await self._is_usable(current):
            self.console.success(f"Port {current} is valid and available.")
            return PortCheckResult(
                outcome=PortCheckOutcome.UNCHANGED,
                config_path=config_path,
                original_port=current,
                port=current,
                message=f"Port {current} is valid and available",
            )

        self.console.failure(f"Port {current} is invalid or already in use.")
        return await self._prompt_for_port(record, current)

    async def _prompt_for_port(self, record: dict, current: Any) -> PortCheckResult:
        config_path = str(self.store.config_path)
        prompts = 0
        while self.retry_policy.allows(prompts):
            prompts += 1
            answer = await self.prompter.ask("Enter a new port: ")
            candidate = parse_port(answer)

            if candidate is None or not self.validator(candidate):
                self.console.failure(
                    f"Invalid port. Please enter a number between {MIN_PORT} and {MAX_PORT}."
                )
                continue
            if await self.probe(candidate):
                self.console.failure(
                    f"Port {candidate} is already in use. Please choose another port."
                )
                continue

            try:
                self.store.update_port(record, candidate)
            except OSError as e:
                logger.error(f"Failed to write {config_path}: {e}")
                self.console.failure(f"Could not save {config_path}: {e}")
                return PortCheckResult(
                    outcome=PortCheckOutcome.ABORTED,
                    config_path=config_path,
                    original_port=current,
                    port=current if self.validator(current) else None,
                    prompts=prompts,
                    message=str(e),
                )

            self.console.success(f"Port updated to {candidate} in {config_path}.")
            return PortCheckResult(
                outcome=PortCheckOutcome.UPDATED,
                config_path=config_path,
                original_port=current,
                port=candidate,
                prompts=prompts,
                message=f"Port updated to {candidate}",
            )

        self.console.failure(
            f"No usable port entered after {prompts} attempts; {config_path} left unchanged."
        )
        return PortCheckResult(
            outcome=PortCheckOutcome.EXHAUSTED,
            config_path=config_path,
            original_port=current,
            port=current if self.validator(current) else None,
            prompts=prompts,
            message=f"Gave up after {prompts} attempts",
        )
