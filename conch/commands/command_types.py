#!/usr/bin/env python3
# conch/commands/command_types.py
from __future__ import annotations

"""
Command data structures and protocols.

This module defines:
- Handler: the callable protocol for a command implementation.
- Completer: the callable protocol for dynamic argument completion.
- Command: one node of the command tree, owning its subcommands.
"""

import inspect
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Protocol, Sequence

from conch.ui import format_columns

if TYPE_CHECKING:  # pragma: no cover
    from conch.context import Context


class Handler(Protocol):
    """Protocol for any command function. A non-None return value is printed."""

    def __call__(self, ctx: "Context") -> Any:  # pragma: no cover - signature only
        ...


class Completer(Protocol):
    """Protocol for custom completion: receives the unresolved trailing words."""

    def __call__(self, args: list[str]) -> Iterable[str]:  # pragma: no cover - signature only
        ...


# Name of the synthetic help command that does not count as a subcommand.
HELP_COMMAND = "help"


@dataclass(slots=True, eq=False)
class Command:
    """
    A command node with metadata, an optional handler and subcommands.

    Important fields:
        name: Name used to invoke the command; empty for the root node.
        help: One-line help shown in the parent's command table.
        long_help: Descriptive help shown by '<command> help'.
        handler: Function executed for the command. None makes a namespace.
        completer: Custom autocomplete. Overrides subcommand completion.
        aliases: Extra names resolving to the same node.
    """

    name: str = ""
    help: str = ""
    long_help: str = ""
    handler: Optional[Handler] = None
    completer: Optional[Completer] = None
    aliases: set[str] = field(default_factory=set)
    _children: dict[str, "Command"] = field(
        default_factory=dict, repr=False)

    def __post_init__(self) -> None:
        self.aliases = {alias for alias in self.aliases if alias and alias != self.name}

    # ---------------- Subcommands ----------------

    def add_command(self, cmd: "Command") -> "Command":
        """
        Add cmd as a subcommand.

        Names and aliases are unique within a node; the newest registration
        claims them. A child whose name is claimed is replaced, a child whose
        alias is claimed loses that alias.
        """
        claims = {cmd.name, *cmd.aliases}
        for existing in list(self._children.values()):
            if existing.name in claims:
                del self._children[existing.name]
            else:
                existing.aliases.difference_update(claims)
        self._children[cmd.name] = cmd
        return cmd

    def delete_command(self, name: str) -> Optional["Command"]:
        """Delete a subcommand (by name or alias) together with its subtree."""
        child = self.find_child(name)
        if child is None:
            return None
        return self._children.pop(child.name)

    def find_child(self, word: str, *, ignore_case: bool = False) -> Optional["Command"]:
        """Return the direct child named `word`: exact name first, then alias."""
        child = self._children.get(word)
        if child is not None:
            return child
        for child in self._children.values():
            if word in child.aliases:
                return child
        if not ignore_case:
            return None

        folded = word.casefold()
        for child in self._children.values():
            if child.name.casefold() == folded:
                return child
        for child in self._children.values():
            if any(alias.casefold() == folded for alias in child.aliases):
                return child
        return None

    def children(self) -> list["Command"]:
        """Return the subcommands sorted by name."""
        return sorted(self._children.values(), key=lambda c: c.name)

    def child_names(self) -> list[str]:
        return sorted(self._children)

    def has_subcommands(self) -> bool:
        """True if there are subcommands other than the synthetic help."""
        if len(self._children) > 1:
            return True
        return bool(self._children) and HELP_COMMAND not in self._children

    # ---------------- Resolution ----------------

    def resolve(
        self, args: Sequence[str], *, ignore_case: bool = False
    ) -> tuple[Optional["Command"], list[str]]:
        """
        Find the deepest command matching the leading words of args.

        Returns the command (None if not even the first word matched) and the
        remaining args. The walk is greedy and never backtracks: a word that
        names a subcommand is always taken as that subcommand.
        """
        node = self
        found: Optional[Command] = None
        for index, word in enumerate(args):
            child = node.find_child(word, ignore_case=ignore_case)
            if child is None:
                return found, list(args[index:])
            node = found = child
        return found, []

    # ---------------- Help ----------------

    def help_text(self) -> str:
        """Return the computed help of the command and its subcommands."""
        lines: list[str] = []
        if self.long_help:
            lines += ["", self.long_help]
        elif self.help:
            lines += ["", self.help]
        elif self.name:
            lines += ["", f"{self.name} has no help"]

        if self.has_subcommands():
            rows = [[child.name, child.help] for child in self.children()]
            lines += ["", "Commands:", format_columns(rows), ""]
        return "\n".join(lines)

    # ---------------- Decorator registration ----------------

    def command(
        self,
        name: str | None = None,
        *,
        aliases: Iterable[str] = (),
        help: str | None = None,
        long_help: str | None = None,
        completer: Completer | None = None,
    ) -> Callable[[Handler], "Command"]:
        """
        Decorator to register a function as a subcommand.

        - Function name is transformed from snake_case to kebab-case for `name` if not provided.
        - `help` defaults to the first docstring line, `long_help` to the whole docstring.
        - Returns the created Command so further subcommands can hang off it.
        """

        def wrapper(func: Handler) -> "Command":
            return self.add_command(
                command_from_function(
                    func,
                    name=name,
                    aliases=aliases,
                    help=help,
                    long_help=long_help,
                    completer=completer,
                )
            )

        return wrapper


def command_from_function(
    func: Handler,
    *,
    name: str | None = None,
    aliases: Iterable[str] = (),
    help: str | None = None,
    long_help: str | None = None,
    completer: Completer | None = None,
) -> Command:
    """Build a Command from a handler function and its docstring."""
    doc = inspect.getdoc(func) or ""
    first_line = doc.splitlines()[0] if doc else ""
    return Command(
        name=name or getattr(func, "__name__", "").replace("_", "-"),
        help=help if help is not None else first_line,
        long_help=long_help if long_help is not None else (doc if "\n" in doc else ""),
        handler=func,
        completer=completer,
        aliases=set(aliases),
    )
