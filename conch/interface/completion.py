#!/usr/bin/env python3
# conch/interface/completion.py
from __future__ import annotations

"""
Command line completion utilities.

CompleterBridge walks the command tree with the words before the cursor and
offers either the reached node's subcommands or the output of the node's
custom completer. Suggestions are returned as deltas: the part of each
candidate that still has to be typed after the current prefix.

Adapters for prompt_toolkit and readline are built on the same bridge.
"""

import logging
from typing import Any, Callable, Iterable, Optional, Sequence

from conch.commands import CommandTree
from conch.interface.parser import split_words

logger = logging.getLogger(__name__)

# (line, cursor) -> (suggestions, prefix_length), the same contract as complete()
LineCompleter = Callable[[str, int], tuple[Sequence[str], int]]


def _last_word_start(text: str) -> int:
    """Index where the last word of text starts, skipping quoted or escaped blanks."""
    start, quote, escaped = 0, "", False
    for index, char in enumerate(text):
        if escaped:
            escaped = False
        elif char == "\\" and quote != "'":
            escaped = True
        elif quote:
            if char == quote:
                quote = ""
        elif char in "\"'":
            quote = char
        elif char.isspace():
            start = index + 1
    return start


class CompleterBridge:
    """Turns a line buffer and cursor position into completion suggestions."""

    def __init__(self, tree: CommandTree, *, enabled: bool = True) -> None:
        self.tree = tree
        self.enabled = enabled
        # replaces tree-based completion when set
        self.custom: Optional[LineCompleter] = None

    def complete(self, line: str, cursor: Optional[int] = None) -> tuple[list[str], int]:
        """
        Return (suggestions, prefix_length) for the buffer up to cursor.

        If the character before the cursor is not whitespace, the last word is
        the prefix being completed and is not used to walk the tree. The
        prefix length counts the word as typed, quotes and escapes included.
        """
        if not self.enabled:
            return [], 0
        if cursor is None:
            cursor = len(line)
        if self.custom is not None:
            suggestions, prefix_len = self.custom(line, cursor)
            return list(suggestions), prefix_len
        before = line[:cursor]
        words = split_words(before)

        prefix = ""
        prefix_len = 0
        if words and before and not before[-1].isspace():
            prefix = words[-1]
            words = words[:-1]
            prefix_len = len(before) - _last_word_start(before)

        suggestions = sorted(
            candidate[len(prefix):]
            for candidate in set(self.candidates(words))
            if candidate.startswith(prefix)
        )
        # A fully typed word: advance past it instead of completing nothing.
        if suggestions == [""]:
            suggestions = [" "]
        return suggestions, prefix_len

    def candidates(self, words: list[str]) -> list[str]:
        """Return every word that may follow `words`."""
        cmd, args = self.tree.find_command(words)
        if cmd is None:
            cmd, args = self.tree.root, list(words)
        if cmd.completer is None:
            return cmd.child_names()
        try:
            return [str(word) for word in cmd.completer(args)]
        except Exception as exc:
            logger.warning("completer for '%s' failed: %s: %s",
                           cmd.name, type(exc).__name__, exc)
            return []


def make_prompt_toolkit_completer(bridge: CompleterBridge) -> Any:
    """Build a prompt_toolkit Completer backed by the bridge."""
    from prompt_toolkit.completion import Completer, Completion

    class ShellCompleter(Completer):
        def get_completions(self, document, complete_event) -> Iterable[Completion]:
            text_before_cursor = document.text_before_cursor
            suggestions, prefix_len = bridge.complete(text_before_cursor)
            typed = text_before_cursor[len(text_before_cursor) - prefix_len:]
            for delta in suggestions:
                # insert only the delta; show the whole word in the menu
                yield Completion(delta, start_position=0, display=(typed + delta).strip() or delta)

    return ShellCompleter()


def readline_completer(
    bridge: CompleterBridge,
    get_line_buffer: Callable[[], str],
    get_endidx: Callable[[], int],
) -> Callable[[str, int], Optional[str]]:
    """Build a readline completer function (text, state) backed by the bridge."""

    def _complete(text_fragment: str, state_index: int) -> Optional[str]:
        buffer_text = get_line_buffer()
        cursor = get_endidx()
        suggestions, prefix_len = bridge.complete(buffer_text, cursor)
        prefix = buffer_text[cursor - prefix_len:cursor]
        # readline replaces the fragment with whole words
        matches = [prefix if delta == " " else prefix + delta for delta in suggestions]
        return matches[state_index] if state_index < len(matches) else None

    return _complete
