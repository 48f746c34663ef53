"""
Data models for the bootup checks.
"""

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, Field


class DependencyState(str, Enum):
    """Outcome for a single required dependency."""

    PRESENT = "present"  # Resolvable before any remediation
    INSTALLED = "installed"  # Missing, operator agreed, install command succeeded
    DECLINED = "declined"  # Missing, operator said anything other than "yes"
    FAILED = "failed"  # Missing, operator agreed, install command failed


class DependencyCheckResult(BaseModel):
    """Result of checking one dependency."""

    name: str = Field(description="Import name of the dependency")
    state: DependencyState = Field(description="Final state for this run")
    command: Optional[List[str]] = Field(
        None, description="Install command that was run or suggested"
    )
    error: Optional[str] = Field(None, description="Install failure message")


class DependencyReport(BaseModel):
    """Summary of the dependency stage."""

    results: List[DependencyCheckResult] = Field(default_factory=list)

    def names_in(self, state: DependencyState) -> List[str]:
        return [r.name for r in self.results if r.state == state]

    @property
    def missing(self) -> List[str]:
        return [r.name for r in self.results if r.state != DependencyState.PRESENT]

    @property
    def declined(self) -> List[str]:
        return self.names_in(DependencyState.DECLINED)

    @property
    def failed(self) -> List[str]:
        return self.names_in(DependencyState.FAILED)

    @property
    def unresolved(self) -> List[str]:
        """Declined and failed names, in the order they were processed."""
        return [
            r.name
            for r in self.results
            if r.state in (DependencyState.DECLINED, DependencyState.FAILED)
        ]


class PortCheckOutcome(str, Enum):
    """Terminal state of the port stage."""

    UNCHANGED = "unchanged"
    UPDATED = "updated"
    ABORTED = "aborted"  # Configuration could not be loaded or written
    EXHAUSTED = "exhausted"  # Bounded retry policy ran out of attempts


class PortCheckResult(BaseModel):
    """Result of the port stage."""

    outcome: PortCheckOutcome = Field(description="Terminal state")
    config_path: str = Field(description="Configuration file that was checked")
    original_port: Optional[Any] = Field(
        None, description="Raw port value found in the configuration"
    )
    port: Optional[int] = Field(None, description="Port stored after the stage")
    prompts: int = Field(0, description="Number of new-port prompts issued")
    message: str = Field("", description="Human-readable summary")


class BootCheckReport(BaseModel):
    """Combined result of a full bootup check run."""

    dependencies: Optional[DependencyReport] = None
    port: Optional[PortCheckResult] = None

    @property
    def clean(self) -> bool:
        """True when nothing is left for the operator to fix."""
        if self.dependencies is not None and self.dependencies.unresolved:
            return False
        if self.port is not None and self.port.outcome in (
            PortCheckOutcome.ABORTED,
            PortCheckOutcome.EXHAUSTED,
        ):
            return False
        return True


class InstallAttemptRecord(BaseModel):
    """Log entry for a single install command invocation."""

    name: str = Field(description="Dependency being installed")
    command: List[str] = Field(description="Command that was executed")
    started_at: datetime = Field(description="When the attempt started")
    ended_at: Optional[datetime] = Field(None, description="When the attempt ended")
    duration_seconds: Optional[float] = Field(
        None, description="How long the attempt took"
    )
    success: bool = Field(default=False, description="Whether the command succeeded")
    return_code: Optional[int] = Field(None, description="Command return code")
    error: Optional[str] = Field(None, description="Failure message if any")
