"""
Pytest configuration and shared fixtures for bootup-checks tests.
"""

import json
import socket
from unittest.mock import AsyncMock, MagicMock

import pytest

from bootup_checks.prompter import Prompter, ScriptedReader


@pytest.fixture
def write_config(tmp_path):
    """Factory fixture writing a server configuration file."""

    def _write(data, name="config.json"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def scripted():
    """Factory fixture returning a (prompter, reader) pair with canned answers."""

    def _make(*answers):
        reader = ScriptedReader(answers)
        return Prompter(reader=reader), reader

    return _make


@pytest.fixture
def fake_runner():
    """A command runner that records calls and succeeds."""
    return AsyncMock(return_value=None)


@pytest.fixture
def free_port():
    """A port that was free a moment ago."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


@pytest.fixture
def occupied_port():
    """A port held by a listening socket for the duration of the test."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("0.0.0.0", 0))
    s.listen(1)
    yield s.getsockname()[1]
    s.close()


@pytest.fixture
def make_mock_process():
    """Factory fixture for creating mock asyncio subprocess processes."""

    def _make(returncode=0):
        process = MagicMock()
        process.returncode = returncode
        process.pid = 12345
        process.wait = AsyncMock(return_value=returncode)
        return process

    return _make


# Pytest configuration
def pytest_configure(config):
    """Configure pytest settings."""
    config.addinivalue_line(
        "markers", "integration: binds real sockets on the local machine"
    )


def pytest_collection_modifyitems(config, items):
    """Mark tests that touch real ports as integration tests."""
    for item in items:
        if {"free_port", "occupied_port"} & set(getattr(item, "fixturenames", ())):
            item.add_marker(pytest.mark.integration)
