#!/usr/bin/env python3
# conch/ui/__init__.py
from __future__ import annotations
# Re-export convenient top-level API
from .utils import (
    ANSI,
    CLEAR_SEQUENCE,
    strip_ansi,
    enable_windows_vt,
    clear_screen,
    colorize,
    PRINT_MUTEX,
    print_line,
    write_text,
)
from .static import (
    format_columns,
    init_logger,
    ColorizingStreamHandler,
    PlainFormatter,
)

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
    "format_columns",
    "init_logger",
    "ColorizingStreamHandler",
    "PlainFormatter",
]
