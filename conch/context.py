#!/usr/bin/env python3
# conch/context.py
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional

from conch.actions import Actions
from conch.commands import Command
from conch.errors import WarnError

if TYPE_CHECKING:  # pragma: no cover
    from conch.shell import Shell


class Context(Actions):
    """
    What a handler receives: its arguments plus the shell actions.

    Attributes:
        args: Words left after the command path was resolved.
        raw_args: Whitespace-split words of the raw input line(s).
        command: The executing command (an empty Command for not-found,
            interrupt and EOF handlers).
        error: Error flagged with err(), routed by the dispatcher.
    """

    def __init__(
        self,
        shell: "Shell",
        command: Optional[Command] = None,
        args: Iterable[str] = (),
        raw_args: Iterable[str] = (),
        values: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.shell = shell
        self.command = command if command is not None else Command()
        self.args = list(args)
        self.raw_args = list(raw_args)
        self.error: Optional[BaseException] = None
        self._values = dict(values or {})

    def err(self, error: BaseException | str) -> None:
        """Inform the shell that an error occurred in the current handler."""
        self.error = WarnError(error) if isinstance(error, str) else error

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)
