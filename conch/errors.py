#!/usr/bin/env python3
# conch/errors.py
from __future__ import annotations

"""
Error taxonomy for the shell engine.

Handlers report problems either by raising or through `Context.err()`.
The dispatcher routes a `ShellError` by its level:

    WARN   print and keep reading
    STOP   print and stop the shell loop
    EXIT   print and terminate the process (SystemExit(1))
    FATAL  re-raise to the host

Anything that is not a ShellError is logged and printed as a WARN.
"""

from enum import IntEnum


class ErrLevel(IntEnum):
    """Severity of a shell error."""

    WARN = 1
    STOP = 2
    EXIT = 3
    FATAL = 4


class ShellError(Exception):
    """Base class for errors the dispatcher knows how to route."""

    level: ErrLevel = ErrLevel.WARN

    def __init__(self, message: str = "", level: ErrLevel | None = None) -> None:
        super().__init__(message)
        self.message = message
        if level is not None:
            self.level = level

    def __str__(self) -> str:
        return self.message


class WarnError(ShellError):
    level = ErrLevel.WARN


class StopError(ShellError):
    """Shell stops if encountered."""

    level = ErrLevel.STOP


class ExitError(ShellError):
    """Program terminates if encountered."""

    level = ErrLevel.EXIT


class FatalError(ShellError):
    """Propagates out of the run loop."""

    level = ErrLevel.FATAL


class TokenizeError(ShellError):
    """Malformed quoting in a statement."""

    def __init__(self, message: str, text: str = "") -> None:
        super().__init__(message)
        self.text = text


class NoHandlerError(ShellError):
    def __init__(self, message: str = "incorrect input, try 'help'") -> None:
        super().__init__(message)


class NoInterruptHandlerError(ShellError):
    def __init__(self, message: str = "no interrupt handler") -> None:
        super().__init__(message)


class ReadCancelled(Exception):
    """A wait on an in-flight read was cancelled by a stop request."""
