#!/usr/bin/env python3
# conch/ui/utils/console.py
from __future__ import annotations

import sys
import threading
from typing import TextIO

# Single shared print mutex for all shell output (handlers, logging, prompts).
PRINT_MUTEX = threading.Lock()


def print_line(text: str = "", *, file: TextIO | None = None, flush: bool = False) -> None:
    """Thread-safe single-line print."""
    target = file if file is not None else sys.stdout
    with PRINT_MUTEX:
        target.write(f"{text}\n")
        if flush:
            target.flush()


def write_text(text: str, *, file: TextIO | None = None) -> None:
    """Thread-safe write without a trailing newline; always flushed."""
    target = file if file is not None else sys.stdout
    with PRINT_MUTEX:
        target.write(text)
        target.flush()
