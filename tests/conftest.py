"""Shared fixtures for the conch test suite."""

import io

import pytest

from conch.shell import Shell
from fakes import ScriptedSource


@pytest.fixture
def make_shell():
    """Build shells fed by a ScriptedSource and writing to a StringIO."""
    shells: list[Shell] = []

    def factory(items=(), **kwargs) -> tuple[Shell, io.StringIO]:
        writer = io.StringIO()
        shell = Shell(ScriptedSource(items), writer=writer, **kwargs)
        shells.append(shell)
        return shell, writer

    yield factory
    for shell in shells:
        shell.close()
