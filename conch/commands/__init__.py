#!/usr/bin/env python3
# conch/commands/__init__.py
from __future__ import annotations

"""
Package for command definition and lookup.

Provides:
- Data structures and protocols (`Command`, `Handler`, `Completer`).
- The per-shell command tree (`CommandTree`).

This package re-exports public APIs from:
- command_types.py
- commands.py
"""


# Re-export from submodules
from .command_types import Command, Handler, Completer, HELP_COMMAND, command_from_function
from .commands import CommandTree

__all__ = [
    "Command",
    "Handler",
    "Completer",
    "HELP_COMMAND",
    "command_from_function",
    "CommandTree",
]
