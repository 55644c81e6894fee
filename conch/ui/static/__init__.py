#!/usr/bin/env python3
# conch/ui/static/__init__.py
from __future__ import annotations
from .table import format_columns
from .logging import (
    init_logger,
    ColorizingStreamHandler,
    PlainFormatter,
)

__all__ = [
    "format_columns",
    "init_logger",
    "ColorizingStreamHandler",
    "PlainFormatter",
]
