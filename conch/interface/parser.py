#!/usr/bin/env python3
# conch/interface/parser.py
from __future__ import annotations

"""
Statement assembly and tokenizing.

Responsibilities:
- Tokenize a command line into shell-like words (shlex, POSIX rules).
- Assemble raw input lines into one statement, following continuation
  lines (trailing backslash) and heredocs (<<TOKEN ... TOKEN).

Examples:
    'a \\' + 'b'                          -> ['a', 'b']
    'run <<EOF' + 'l1' + 'l2' + 'EOF'     -> ['run', 'l1\\nl2']
"""

import shlex
from dataclasses import dataclass, field
from typing import Callable, Optional

from conch.errors import TokenizeError
from conch.interface.reader import ConcurrentReader, ReadResult, ReadSignal, StopToken

HEREDOC_MARKER = "<<"
CONTINUATION = "\\"


def tokenize(command_line: str) -> list[str]:
    """Split a raw command line into tokens using POSIX rules."""
    try:
        return shlex.split(command_line, posix=True)
    except ValueError as exc:
        raise TokenizeError(str(exc), command_line) from exc


def split_words(command_line: str) -> list[str]:
    """Like tokenize(), but falls back to whitespace splitting on malformed quotes."""
    try:
        return shlex.split(command_line, posix=True)
    except ValueError:
        return command_line.split()


def is_continued(line: str) -> bool:
    return line.rstrip().endswith(CONTINUATION)


def heredoc_terminator(line: str) -> Optional[str]:
    """Return TOKEN if the line opens a heredoc with '<<TOKEN', else None."""
    if HEREDOC_MARKER not in line:
        return None
    token = line.split(HEREDOC_MARKER, 1)[1].strip()
    return token or None


def join_continued(lines: list[str]) -> str:
    """Join continuation lines, dropping each trailing backslash for a space."""
    parts: list[str] = []
    for line in lines:
        if is_continued(line):
            parts.append(line.rstrip()[: -len(CONTINUATION)])
        else:
            parts.append(line)
    return " ".join(parts)


@dataclass(slots=True)
class Statement:
    """
    One logical statement read from the shell input.

    Attributes:
        text: Raw input lines joined with newlines.
        args: Tokenized words (heredoc body is a single trailing word).
        heredoc: True if the statement was built from a heredoc.
        signal: How the last read ended (NONE for a complete statement).
        error: Exception attached to an ERROR read.
    """
    text: str = ""
    args: list[str] = field(default_factory=list)
    heredoc: bool = False
    signal: ReadSignal = ReadSignal.NONE
    error: Optional[BaseException] = None

    @property
    def raw_args(self) -> list[str]:
        """Whitespace-split words of the raw text (quotes kept)."""
        return self.text.split()

    @property
    def empty(self) -> bool:
        return not self.args


class LineAssembler:
    """Pulls lines from a ConcurrentReader and builds statements."""

    def __init__(self, reader: ConcurrentReader) -> None:
        self.reader = reader

    def read_lines(
        self, keep_reading: Callable[[str], bool], token: StopToken | None = None
    ) -> tuple[list[str], ReadResult]:
        """
        Read lines until keep_reading(line) is False or a read signals.

        From the second line on the reader shows the continuation prompt;
        the standard prompt is restored before returning.
        """
        lines: list[str] = []
        multi = False
        try:
            while True:
                if len(lines) == 1:
                    self.reader.multi_mode = multi = True
                result = self.reader.request_line(token)
                if result.ok or result.text:
                    lines.append(result.text)
                if not result.ok or not keep_reading(result.text):
                    return lines, result
        finally:
            if multi:
                self.reader.multi_mode = False

    def read_statement(self, token: StopToken | None = None) -> Statement:
        """
        Read and tokenize one statement.

        Raises TokenizeError on malformed quoting. Interrupt, EOF and read
        errors are reported on the returned Statement's signal.
        """
        terminator: Optional[str] = None

        def keep_reading(line: str) -> bool:
            nonlocal terminator
            if terminator is None:
                terminator = heredoc_terminator(line)
                if terminator is not None:
                    return True
                return is_continued(line)
            return line.strip() != terminator

        lines, result = self.read_lines(keep_reading, token)
        text = "\n".join(lines)
        if not result.ok:
            return Statement(
                text=text,
                args=split_words(join_continued(lines)),
                heredoc=terminator is not None,
                signal=result.signal,
                error=result.error,
            )

        if terminator is None:
            return Statement(text=text, args=tokenize(join_continued(lines)))
        return self._heredoc_statement(lines, terminator)

    @staticmethod
    def _heredoc_statement(lines: list[str], terminator: str) -> Statement:
        start = next(i for i, line in enumerate(lines) if heredoc_terminator(line))
        head = lines[:start] + [lines[start].split(HEREDOC_MARKER, 1)[0]]
        body = lines[start + 1:]
        if body and body[-1].strip() == terminator:
            body = body[:-1]

        args = tokenize(join_continued(head))
        args.append("\n".join(body))
        return Statement(text="\n".join(lines), args=args, heredoc=True)
