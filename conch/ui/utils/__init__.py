#!/usr/bin/env python3
# conch/ui/utils/__init__.py
from __future__ import annotations
from .ansi import (
    ANSI,
    CLEAR_SEQUENCE,
    strip_ansi,
    enable_windows_vt,
    clear_screen,
    colorize,
)
from .console import PRINT_MUTEX, print_line, write_text

__all__ = [
    "ANSI",
    "CLEAR_SEQUENCE",
    "strip_ansi",
    "enable_windows_vt",
    "clear_screen",
    "colorize",
    "PRINT_MUTEX",
    "print_line",
    "write_text",
]
