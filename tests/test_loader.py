"""Tests for loading commands from a plugin package."""

import io
import sys
import textwrap
from pathlib import Path

import pytest

from conch.interface import load_commands
from conch.shell import Shell
from fakes import ScriptedSource

PACKAGE = "conch_test_plugins"


def _write(path: Path, source: str) -> None:
    """Write a dedented module file, creating parent folders."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(source), encoding="utf-8")


@pytest.fixture
def plugin_package(tmp_path: Path, monkeypatch):
    """Create a plugin package with every supported layout."""
    root = tmp_path / PACKAGE
    _write(root / "__init__.py", "")
    _write(root / "alpha.py", """
        from conch.commands import Command

        COMMAND = Command("alpha", "first", handler=lambda ctx: "alpha ran")
    """)
    _write(root / "bundle" / "__init__.py", "")
    _write(root / "bundle" / "entrypoint.py", """
        from conch.commands import Command

        COMMANDS = [
            Command("beta", "second", handler=lambda ctx: "beta ran"),
            Command("gamma", "third", handler=lambda ctx: "gamma ran"),
            "not a command",
        ]
    """)
    _write(root / "hooks.py", """
        def register(shell):
            @shell.command(aliases=["d"])
            def delta(ctx):
                \"\"\"Fourth command.\"\"\"
                return "delta ran"
    """)
    _write(root / "_private.py", "raise RuntimeError('private modules are skipped')\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    yield PACKAGE
    for name in [m for m in sys.modules if m.split(".")[0] == PACKAGE]:
        del sys.modules[name]


class TestLoadCommands:
    """Verify plugin discovery and registration."""

    def test_modules_counted(self, plugin_package: str) -> None:
        """Every public module or entrypoint is imported once."""
        shell = Shell(ScriptedSource(), writer=io.StringIO())
        assert load_commands(shell, plugin_package) == 3

    def test_commands_registered(self, plugin_package: str) -> None:
        """COMMAND, COMMANDS and register() all add commands."""
        shell = Shell(ScriptedSource(), writer=io.StringIO())
        load_commands(shell, plugin_package)
        names = {c.name for c in shell.commands()}
        assert {"alpha", "beta", "gamma", "delta"} <= names
        assert shell.find_command(["d"])[0].help == "Fourth command."

    def test_loaded_commands_dispatch(self, plugin_package: str) -> None:
        """Loaded commands run like any other."""
        out = io.StringIO()
        shell = Shell(ScriptedSource(["alpha", "beta"]), writer=out)
        load_commands(shell, plugin_package)
        shell.run()
        assert "alpha ran" in out.getvalue()
        assert "beta ran" in out.getvalue()

    def test_not_a_package(self) -> None:
        """Plain modules cannot be plugin packages."""
        shell = Shell(ScriptedSource(), writer=io.StringIO())
        with pytest.raises(RuntimeError):
            load_commands(shell, "json.decoder")
