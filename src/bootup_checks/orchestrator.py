"""
Runs the bootup checks in order: dependencies first, then the port.

The port stage runs even if some dependencies were left unresolved; the
prompt session is closed once both stages are done.
"""

import logging
from typing import Sequence

from .dependencies import DependencyRemediator
from .models import BootCheckReport
from .ports import PortRemediator
from .prompter import Prompter

logger = logging.getLogger(__name__)


class BootChecker:
    """Sequences the dependency and port stages over one prompt session."""

    def __init__(
        self,
        prompter: Prompter,
        dependency_remediator: DependencyRemediator,
        port_remediator: PortRemediator,
    ):
        self.prompter = prompter
        self.dependency_remediator = dependency_remediator
        self.port_remediator = port_remediator

    async def run(self, required: Sequence[str]) -> BootCheckReport:
        report = BootCheckReport()
        try:
            report.dependencies = await self.dependency_remediator.check(required)
            report.port = await self.port_remediator.remediate()
        finally:
            self.prompter.close()
        logger.info(
            "Bootup checks finished: %d unresolved dependencies, port %s",
            len(report.dependencies.unresolved),
            report.port.outcome.value,
        )
        return report

    async def run_dependencies(self, required: Sequence[str]) -> BootCheckReport:
        try:
            return BootCheckReport(
                dependencies=await self.dependency_remediator.check(required)
            )
        finally:
            self.prompter.close()

    async def run_port(self) -> BootCheckReport:
        try:
            return BootCheckReport(port=await self.port_remediator.remediate())
        finally:
            self.prompter.close()
