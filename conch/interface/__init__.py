#!/usr/bin/env python3
# conch/interface/__init__.py
from __future__ import annotations

"""
Package for terminal input and command dispatch.

Provides:
- Line sources with history and completion (prompt_toolkit / readline / plain).
- The concurrent reader sharing one line source between consumers.
- Statement assembly (continuation lines, heredocs) and tokenizing.
- Completion helpers built on the command tree.
- The statement dispatcher and error routing.
- Dynamic command loader for plugin packages.
"""


# Sources first (the reader depends on them)
from .source import (
    InputInterrupted,
    LineSource,
    BaseSource,
    PromptToolkitSource,
    ReadlineSource,
    StreamSource,
    SOURCE_KINDS,
    make_source,
)

# Reader
from .reader import (
    ConcurrentReader,
    Handoff,
    ReadKind,
    ReadResult,
    ReadSignal,
    StopToken,
    DEFAULT_PROMPT,
    DEFAULT_MULTI_PROMPT,
)

# Parser utilities
from .parser import (
    tokenize,
    split_words,
    LineAssembler,
    Statement,
    HEREDOC_MARKER,
    CONTINUATION,
)

# Completion
from .completion import CompleterBridge, LineCompleter, make_prompt_toolkit_completer, readline_completer

# Dispatcher
from .handler import Dispatcher, InterruptState

# Loader
from .loader import load_commands

__all__ = [
    # source
    "InputInterrupted",
    "LineSource",
    "BaseSource",
    "PromptToolkitSource",
    "ReadlineSource",
    "StreamSource",
    "SOURCE_KINDS",
    "make_source",
    # reader
    "ConcurrentReader",
    "Handoff",
    "ReadKind",
    "ReadResult",
    "ReadSignal",
    "StopToken",
    "DEFAULT_PROMPT",
    "DEFAULT_MULTI_PROMPT",
    # parser
    "tokenize",
    "split_words",
    "LineAssembler",
    "Statement",
    "HEREDOC_MARKER",
    "CONTINUATION",
    # completion
    "CompleterBridge",
    "LineCompleter",
    "make_prompt_toolkit_completer",
    "readline_completer",
    # handler
    "Dispatcher",
    "InterruptState",
    # loader
    "load_commands",
]
