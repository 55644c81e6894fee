#!/usr/bin/env python3
# conch/__init__.py
from __future__ import annotations
"""
conch: an embeddable interactive command shell.

Register commands on a Shell, then run it:

    from conch import Shell

    shell = Shell()
    shell.add_command("greet", help="greet user",
                      handler=lambda ctx: ctx.println("Hello", *ctx.args))
    shell.run()
"""

from conch.commands import Command, CommandTree, command_from_function
from conch.config import ShellConfig, load_config
from conch.context import Context
from conch.errors import (
    ErrLevel,
    ShellError,
    WarnError,
    StopError,
    ExitError,
    FatalError,
    TokenizeError,
    NoHandlerError,
    NoInterruptHandlerError,
    ReadCancelled,
)
from conch.interface import ReadResult, ReadSignal, load_commands
from conch.shell import Shell, stop_after_interrupts

__version__ = "0.1.0"

__all__ = [
    "Command",
    "CommandTree",
    "command_from_function",
    "ShellConfig",
    "load_config",
    "Context",
    "ErrLevel",
    "ShellError",
    "WarnError",
    "StopError",
    "ExitError",
    "FatalError",
    "TokenizeError",
    "NoHandlerError",
    "NoInterruptHandlerError",
    "ReadCancelled",
    "ReadResult",
    "ReadSignal",
    "load_commands",
    "Shell",
    "stop_after_interrupts",
]
