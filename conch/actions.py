#!/usr/bin/env python3
# conch/actions.py
from __future__ import annotations

"""
Actions available to hosts and command handlers.

Both Shell and Context expose these; handlers usually reach them through
the Context they receive. Read actions are safe to call from inside a
handler while the run loop is blocked on that very handler.
"""

from typing import TYPE_CHECKING, Any, Callable

from conch.interface.reader import ReadResult
from conch.ui import clear_screen, print_line, write_text

if TYPE_CHECKING:  # pragma: no cover
    from conch.commands import Command
    from conch.shell import Shell


class Actions:
    """Mixin implementing the shell actions on top of `self.shell`."""

    shell: "Shell"

    # ---------------- Input ----------------

    def read_line(self) -> str:
        """Read a line. Interrupts and end of input yield what was typed (often '')."""
        return self.read_line_result().text

    def read_line_result(self) -> ReadResult:
        """Read a line and return the full ReadResult (text and signal)."""
        return self.shell.reader.request_line()

    def read_password(self, prompt: str = "") -> str:
        """Read a line without echoing the characters."""
        return self.read_password_result(prompt).text

    def read_password_result(self, prompt: str = "") -> ReadResult:
        return self.shell.reader.request_password(prompt=prompt)

    def read_multi_lines_func(self, keep_reading: Callable[[str], bool]) -> str:
        """Read lines, passing each to keep_reading, until it returns False."""
        lines, _result = self.shell.assembler.read_lines(keep_reading)
        return "\n".join(lines)

    def read_multi_lines(self, terminator: str) -> str:
        """
        Read lines until one ends with terminator.

        Returns the lines read including the terminator.
        """
        return self.read_multi_lines_func(
            lambda line: not line.strip().endswith(terminator))

    # ---------------- Output ----------------

    def print(self, *values: Any, sep: str = " ") -> None:
        write_text(sep.join(str(v) for v in values), file=self.shell.writer)

    def println(self, *values: Any, sep: str = " ") -> None:
        print_line(sep.join(str(v) for v in values), file=self.shell.writer, flush=True)

    def printf(self, fmt: str, *values: Any) -> None:
        write_text(fmt % values if values else fmt, file=self.shell.writer)

    def clear_screen(self) -> None:
        clear_screen(self.shell.writer)

    # ---------------- Prompt ----------------

    def set_prompt(self, prompt: str) -> None:
        self.shell.reader.prompt = prompt

    def set_multi_prompt(self, prompt: str) -> None:
        """Prompt shown from the second line of a multi-line input."""
        self.shell.reader.multi_prompt = prompt

    def show_prompt(self, show: bool) -> None:
        """Whether prompts show when requesting input. Defaults to True."""
        self.shell.reader.show_prompt = show

    # ---------------- Commands ----------------

    def commands(self) -> list["Command"]:
        """Top level commands added to the shell."""
        return self.shell.tree.commands()

    def help_text(self) -> str:
        """Computed help of the top level commands."""
        return self.shell.tree.help_text()

    def stop(self) -> None:
        """
        Stop the shell loop.

        A stopped shell is inactive but functional; it can be run again.
        """
        self.shell.halt()
