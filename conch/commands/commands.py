#!/usr/bin/env python3
# conch/commands/commands.py
from __future__ import annotations

"""
Command tree and registration utilities.

This module provides:
- CommandTree: the root of a shell's commands plus the registration lock.
- Lookup of argument vectors against the tree (greedy prefix walk).
"""

import threading
from typing import Callable, Iterable, Optional, Sequence

from conch.commands.command_types import Command, Completer, Handler


class CommandTree:
    """Holds a shell's command hierarchy and provides lookup utilities."""

    def __init__(self, *, ignore_case: bool = False) -> None:
        self.root = Command()
        self.ignore_case = ignore_case
        # Guards registration-time mutation against concurrent lookups
        self._mutex = threading.RLock()

    # ---------------- Registration ----------------

    def add_command(
        self,
        name: str | Command,
        aliases: Iterable[str] = (),
        help: str = "",
        long_help: str = "",
        handler: Handler | None = None,
        completer: Completer | None = None,
    ) -> Command:
        """
        Register a top level command and return its node.

        Accepts either a ready Command or the fields to build one.
        """
        if isinstance(name, Command):
            cmd = name
        else:
            cmd = Command(
                name=name,
                help=help,
                long_help=long_help,
                handler=handler,
                completer=completer,
                aliases=set(aliases),
            )
        if not cmd.name:
            raise ValueError("Command name must not be empty.")
        with self._mutex:
            return self.root.add_command(cmd)

    def delete_command(self, name: str) -> Optional[Command]:
        """Delete a top level command and its subtree."""
        with self._mutex:
            return self.root.delete_command(name)

    def command(
        self,
        name: str | None = None,
        *,
        aliases: Iterable[str] = (),
        help: str | None = None,
        long_help: str | None = None,
        completer: Completer | None = None,
    ) -> Callable[[Handler], Command]:
        """Decorator registering a function as a top level command."""
        register = self.root.command(
            name, aliases=aliases, help=help, long_help=long_help, completer=completer)

        def wrapper(func: Handler) -> Command:
            with self._mutex:
                return register(func)

        return wrapper

    # ---------------- Lookup ----------------

    def find_command(self, args: Sequence[str]) -> tuple[Optional[Command], list[str]]:
        """Resolve args to (deepest matching command, remaining args)."""
        with self._mutex:
            return self.root.resolve(args, ignore_case=self.ignore_case)

    def commands(self) -> list[Command]:
        """Return the top level commands sorted by name."""
        with self._mutex:
            return self.root.children()

    def help_text(self) -> str:
        """Return the computed help of top level commands."""
        with self._mutex:
            return self.root.help_text()
