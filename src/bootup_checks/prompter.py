"""
Interactive question/answer session.

One ``Prompter`` owns the terminal for the whole run. It is created once by
the caller and handed to every stage that needs to ask the operator
something, then closed exactly once at the end.
"""

import asyncio
import logging
from typing import Callable, Iterable, List, Optional

import click

logger = logging.getLogger(__name__)

Reader = Callable[[str], str]


class PrompterClosedError(RuntimeError):
    """Raised when ``ask`` is called after the session was closed."""


def _click_reader(question: str) -> str:
    return click.prompt(
        question, default="", show_default=False, prompt_suffix=""
    )


class ScriptedReader:
    """Replays canned answers and records every question asked."""

    def __init__(self, answers: Iterable[str]):
        self._answers = list(answers)
        self.questions: List[str] = []

    def __call__(self, question: str) -> str:
        self.questions.append(question)
        if not self._answers:
            raise EOFError(f"No scripted answer left for: {question!r}")
        answer = self._answers.pop(0)
        click.echo(f"{question}{answer}")
        return answer

    @property
    def remaining(self) -> int:
        return len(self._answers)


class Prompter:
    """A single interactive session."""

    def __init__(self, reader: Optional[Reader] = None):
        self._reader = reader or _click_reader
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def ask(self, question: str) -> str:
        """Ask ``question`` and return the trimmed, lowercased answer."""
        if self._closed:
            raise PrompterClosedError("Prompt session is already closed")
        answer = await asyncio.to_thread(self._reader, question)
        return answer.strip().lower()

    def close(self) -> None:
        if self._closed:
            logger.warning("Prompt session closed more than once")
            return
        self._closed = True
        logger.debug("Prompt session closed")
