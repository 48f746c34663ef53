"""
Command-line interface for bootup-checks.
"""

import asyncio
import json
import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from .config import ServerConfigStore
from .console import Console
from .dependencies import DependencyRemediator
from .logging_manager import InstallAttemptLog, configure_logging
from .models import BootCheckReport
from .orchestrator import BootChecker
from .ports import PortRemediator, RetryPolicy, is_port_in_use, is_valid_port
from .prompter import Prompter, ScriptedReader
from .settings import DEFAULT_SETTINGS_TOML, SETTINGS_FILE_NAME, Settings, load_settings


def build_checker(settings: Settings, answers: Tuple[str, ...] = ()) -> BootChecker:
    """Wire one prompt session into both stages."""
    prompter = Prompter(reader=ScriptedReader(answers) if answers else None)
    attempt_log = InstallAttemptLog(settings.install_log) if settings.install_log else None
    return BootChecker(
        prompter,
        DependencyRemediator(
            prompter,
            install_command=settings.install_command,
            attempt_log=attempt_log,
        ),
        PortRemediator(
            prompter,
            ServerConfigStore(settings.config_path),
            retry_policy=RetryPolicy.from_limit(settings.max_attempts),
        ),
    )


def _resolve_settings(
    settings_file: Optional[str],
    config_path: Optional[str] = None,
    required: Tuple[str, ...] = (),
    max_attempts: Optional[int] = None,
) -> Settings:
    settings = load_settings(Path(settings_file) if settings_file else None)
    if config_path:
        settings.config_path = Path(config_path)
    if required:
        settings.required_dependencies = list(required)
    if max_attempts is not None:
        settings.max_attempts = RetryPolicy.from_limit(max_attempts).max_attempts
    return settings


def _run_checks(coro) -> BootCheckReport:
    try:
        return asyncio.run(coro)
    except EOFError as e:
        print(f"Input ended before the checks finished: {e}", file=sys.stderr)
        sys.exit(1)


def _finish(report: BootCheckReport, output_format: str, strict: bool) -> None:
    if output_format == "json":
        print(report.model_dump_json(indent=2))
    if strict and not report.clean:
        sys.exit(1)


settings_option = click.option(
    "--settings",
    "settings_file",
    type=click.Path(dir_okay=False),
    help=f"Settings file (default: ./{SETTINGS_FILE_NAME})",
)
answer_option = click.option(
    "--answer",
    "answers",
    multiple=True,
    help="Pre-scripted answer to the next prompt (repeatable, for non-interactive runs)",
)
format_option = click.option(
    "--format",
    "output_format",
    default="text",
    type=click.Choice(["text", "json"]),
    help="Output format",
)
strict_option = click.option(
    "--strict", is_flag=True, help="Exit with code 1 if anything is left unresolved"
)


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def main(verbose: bool):
    """Pre-launch checks: required dependencies and the server port."""
    configure_logging(verbose)


@main.command()
@settings_option
@click.option("--config", "config_path", help="Server configuration file")
@click.option("--require", "required", multiple=True, help="Required dependency (repeatable)")
@click.option("--max-attempts", type=int, help="Maximum new-port prompts (0 = unbounded)")
@answer_option
@format_option
@strict_option
def run(
    settings_file: Optional[str],
    config_path: Optional[str],
    required: tuple,
    max_attempts: Optional[int],
    answers: tuple,
    output_format: str,
    strict: bool,
):
    """Check dependencies, then the configured port."""
    settings = _resolve_settings(settings_file, config_path, required, max_attempts)
    checker = build_checker(settings, answers)
    report = _run_checks(checker.run(settings.required_dependencies))
    _finish(report, output_format, strict)


@main.command()
@settings_option
@click.option("--require", "required", multiple=True, help="Required dependency (repeatable)")
@answer_option
@format_option
@strict_option
def deps(
    settings_file: Optional[str],
    required: tuple,
    answers: tuple,
    output_format: str,
    strict: bool,
):
    """Check required dependencies only."""
    settings = _resolve_settings(settings_file, required=required)
    checker = build_checker(settings, answers)
    report = _run_checks(checker.run_dependencies(settings.required_dependencies))
    _finish(report, output_format, strict)


@main.command()
@settings_option
@click.option("--config", "config_path", help="Server configuration file")
@click.option("--max-attempts", type=int, help="Maximum new-port prompts (0 = unbounded)")
@answer_option
@format_option
@strict_option
def port(
    settings_file: Optional[str],
    config_path: Optional[str],
    max_attempts: Optional[int],
    answers: tuple,
    output_format: str,
    strict: bool,
):
    """Check the configured server port only."""
    settings = _resolve_settings(settings_file, config_path, max_attempts=max_attempts)
    checker = build_checker(settings, answers)
    report = _run_checks(checker.run_port())
    _finish(report, output_format, strict)


@main.command()
@click.argument("port_number", metavar="PORT")
def probe(port_number: str):
    """Report whether PORT is valid and free, without prompting."""
    console = Console("probe")
    try:
        value = int(port_number, 10)
    except ValueError:
        value = None

    if value is None or not is_valid_port(value):
        console.failure(f"{port_number} is not a valid port.")
        sys.exit(1)
    if asyncio.run(is_port_in_use(value)):
        console.failure(f"Port {value} is already in use.")
        sys.exit(1)
    console.success(f"Port {value} is free.")


@main.command()
@settings_option
@click.option("--limit", default=10, help="Number of recent attempts to show")
@format_option
def history(settings_file: Optional[str], limit: int, output_format: str):
    """Show recent install attempts."""
    settings = _resolve_settings(settings_file)
    if not settings.install_log:
        print("Install attempt log is disabled.")
        return

    entries = InstallAttemptLog(settings.install_log).read()[-limit:]
    if output_format == "json":
        print(json.dumps([e.model_dump(mode="json") for e in entries], indent=2))
        return
    if not entries:
        print("No install attempts recorded.")
        return

    print("\n=== Recent Install Attempts ===")
    for entry in reversed(entries):
        status = "✓" if entry.success else "✗"
        duration = (
            f"{entry.duration_seconds:.1f}s" if entry.duration_seconds is not None else "N/A"
        )
        print(f"  {status} {entry.name} ({duration}) {entry.started_at:%Y-%m-%d %H:%M:%S}")
        if entry.error:
            print(f"     Error: {entry.error[:100]}")


@main.command()
@click.option("--force", is_flag=True, help="Overwrite an existing settings file")
def init(force: bool):
    """Write a default settings file to the current directory."""
    path = Path.cwd() / SETTINGS_FILE_NAME
    if path.exists() and not force:
        print(f"Settings file already exists at: {path}")
        return
    path.write_text(DEFAULT_SETTINGS_TOML, encoding="utf-8")
    print(f"Settings file written to: {path}")


if __name__ == "__main__":
    main()
