"""
Operator-facing console transcript.

Every line is prefixed with the component tag; status lines also carry a
✅ or ❌ glyph.
"""

import click

SUCCESS_GLYPH = "✅"
FAILURE_GLYPH = "❌"


class Console:
    """Writes tagged lines for one component."""

    def __init__(self, tag: str):
        self.tag = tag

    def info(self, message: str) -> None:
        click.echo(f"[{self.tag}] {message}")

    def success(self, message: str) -> None:
        click.echo(f"{SUCCESS_GLYPH} [{self.tag}] {message}")

    def failure(self, message: str) -> None:
        click.echo(f"{FAILURE_GLYPH} [{self.tag}] {message}")

    def blank(self) -> None:
        click.echo("")
