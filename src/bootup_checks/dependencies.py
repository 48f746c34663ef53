"""
Required dependency checks and interactive installation.

Missing dependencies are offered to the operator one at a time; accepted ones
are installed with the configured package manager command, whose output goes
straight to the terminal.
"""

import asyncio
import importlib.util
import logging
import shlex
import sys
import time
from datetime import datetime
from typing import Awaitable, Callable, List, Optional, Sequence

from .console import Console
from .logging_manager import InstallAttemptLog
from .models import (
    DependencyCheckResult,
    DependencyReport,
    DependencyState,
    InstallAttemptRecord,
)
from .prompter import Prompter

logger = logging.getLogger(__name__)

NAME_PLACEHOLDER = "{name}"
DEFAULT_INSTALL_COMMAND = [sys.executable, "-m", "pip", "install", NAME_PLACEHOLDER]

CommandRunner = Callable[[List[str]], Awaitable[None]]


class InstallCommandError(RuntimeError):
    """The package manager command exited unsuccessfully."""

    def __init__(self, command: Sequence[str], return_code: int):
        self.command = list(command)
        self.return_code = return_code
        super().__init__(
            f"Command '{shlex.join(self.command)}' exited with code {return_code}"
        )


def is_installed(name: str) -> bool:
    """Return True if ``name`` resolves as an importable module."""
    try:
        return importlib.util.find_spec(name) is not None
    except Exception as e:  # noqa: BLE001
        logger.debug("Resolution of %r failed: %s", name, e)
        return False


class SubprocessRunner:
    """Runs a command with the terminal's own stdin/stdout/stderr."""

    async def __call__(self, command: List[str]) -> None:
        process = await asyncio.create_subprocess_exec(*command)
        return_code = await process.wait()
        if return_code != 0:
            raise InstallCommandError(command, return_code)


def build_install_command(
    name: str, template: Optional[Sequence[str]] = None
) -> List[str]:
    """Substitute ``name`` into the install command template."""
    parts = list(template or DEFAULT_INSTALL_COMMAND)
    if not any(NAME_PLACEHOLDER in part for part in parts):
        return parts + [name]
    return [part.replace(NAME_PLACEHOLDER, name) for part in parts]


class DependencyRemediator:
    """Offers to install each missing dependency and summarizes the result."""

    def __init__(
        self,
        prompter: Prompter,
        runner: Optional[CommandRunner] = None,
        install_command: Optional[Sequence[str]] = None,
        auditor: Callable[[str], bool] = is_installed,
        attempt_log: Optional[InstallAttemptLog] = None,
    ):
        self.prompter = prompter
        self.runner = runner or SubprocessRunner()
        self.install_command = list(install_command or DEFAULT_INSTALL_COMMAND)
        self.auditor = auditor
        self.attempt_log = attempt_log
        self.console = Console("dependencies")

    async def remediate(self, names: Sequence[str]) -> List[str]:
        """Run the dependency stage and return the declined or failed names."""
        report = await self.check(names)
        return report.unresolved

    async def check(self, names: Sequence[str]) -> DependencyReport:
        report = DependencyReport()
        missing = []
        for name in names:
            if self.auditor(name):
                report.results.append(
                    DependencyCheckResult(name=name, state=DependencyState.PRESENT)
                )
            else:
                missing.append(name)

        if missing:
            logger.info(f"Missing dependencies: {', '.join(missing)}")

        for name in missing:
            report.results.append(await self._remediate_one(name))

        self._print_summary(report)
        return report

    async def _remediate_one(self, name: str) -> DependencyCheckResult:
        command = build_install_command(name, self.install_command)
        answer = await self.prompter.ask(
            f'Do you want to install "{name}"? (yes/no): '
        )
        if answer != "yes":
            return DependencyCheckResult(
                name=name, state=DependencyState.DECLINED, command=command
            )

        self.console.info(f'Installing "{name}"...')
        attempt = InstallAttemptRecord(
            name=name, command=command, started_at=datetime.now()
        )
        started = time.monotonic()
        try:
            await self.runner(command)
        except Exception as e:  # noqa: BLE001
            attempt.error = str(e)
            attempt.return_code = getattr(e, "return_code", None)
            logger.error(f"Install of {name} failed: {e}")
            self.console.failure(f'Failed to install "{name}". Error: {e}')
            result = DependencyCheckResult(
                name=name, state=DependencyState.FAILED, command=command, error=str(e)
            )
        else:
            attempt.success = True
            attempt.return_code = 0
            self.console.success(f'"{name}" installed successfully!')
            result = DependencyCheckResult(
                name=name, state=DependencyState.INSTALLED, command=command
            )
        finally:
            attempt.ended_at = datetime.now()
            attempt.duration_seconds = time.monotonic() - started
            if self.attempt_log is not None:
                self.attempt_log.record(attempt)
        return result

    def _print_summary(self, report: DependencyReport) -> None:
        unresolved = [
            r
            for r in report.results
            if r.state in (DependencyState.DECLINED, DependencyState.FAILED)
        ]
        if not unresolved:
            self.console.blank()
            self.console.success("All dependencies are installed!")
            return

        self.console.blank()
        self.console.failure("The following dependencies were not installed:")
        for result in unresolved:
            self.console.info(f"  {result.name} ({result.state.value})")
        self.console.blank()
        self.console.info("You can install them manually with the following commands:")
        for result in unresolved:
            command = result.command or build_install_command(
                result.name, self.install_command
            )
            self.console.info(f"  {shlex.join(command)}")
