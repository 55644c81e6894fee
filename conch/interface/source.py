#!/usr/bin/env python3
# conch/interface/source.py
from __future__ import annotations

"""
Line sources: the blocking "read one line" primitives behind the shell.

Selection order (make_source):
    1) prompt_toolkit (rich completion + history)
    2) readline / pyreadline3 (basic completion + history)
    3) plain text stream (last resort, also used for pipes and tests)

Contract: read_line(prompt) returns the line without its newline, raises
KeyboardInterrupt on a break signal (InputInterrupted carries the partial
buffer when known) and EOFError when input is closed. History is the
source's business.
"""

import getpass
import sys
from pathlib import Path
from typing import TYPE_CHECKING, Optional, Protocol, TextIO

if TYPE_CHECKING:  # pragma: no cover
    from conch.interface.completion import CompleterBridge


class InputInterrupted(KeyboardInterrupt):
    """Break signal raised by a source, carrying whatever was typed so far."""

    def __init__(self, text: str = "") -> None:
        super().__init__(text)
        self.text = text


class LineSource(Protocol):
    """Protocol for the blocking line-editing primitive."""

    def read_line(self, prompt: str) -> str:  # pragma: no cover - signature only
        ...

    def read_password(self, prompt: str) -> str:  # pragma: no cover - signature only
        ...

    def close(self) -> None:  # pragma: no cover - signature only
        ...


class BaseSource:
    """
    Base for line sources.

    Subclasses implement read_line(); setup()/close() are optional hooks.
    Context manager support guarantees close().
    """

    def setup(self) -> None:
        ...

    def read_line(self, prompt: str) -> str:  # pragma: no cover - interface
        raise NotImplementedError

    def read_password(self, prompt: str) -> str:
        return getpass.getpass(prompt)

    def close(self) -> None:
        ...

    def __enter__(self) -> "BaseSource":
        self.setup()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


# ===== Preferred: prompt_toolkit =====
class PromptToolkitSource(BaseSource):
    """Rich line editor with history and live completion."""

    def __init__(
        self,
        *,
        history_file: Optional[Path] = None,
        bridge: Optional["CompleterBridge"] = None,
    ) -> None:
        from prompt_toolkit import PromptSession, prompt
        from prompt_toolkit.history import FileHistory, InMemoryHistory
        from prompt_toolkit.key_binding import KeyBindings
        from conch.interface.completion import make_prompt_toolkit_completer

        self._prompt = prompt
        history = FileHistory(str(history_file)) if history_file else InMemoryHistory()

        # Ctrl-C ends the read but keeps the partial buffer for interrupt handlers.
        kb = KeyBindings()

        @kb.add("c-c")
        def _(event):
            buffer_text = event.app.current_buffer.text
            event.app.exit(exception=InputInterrupted(buffer_text), style="class:aborting")

        self._session = PromptSession(
            history=history,
            completer=make_prompt_toolkit_completer(bridge) if bridge is not None else None,
            complete_while_typing=False,
            key_bindings=kb,
        )

    def setup(self) -> None:
        history = getattr(self._session.history, "filename", None)
        if history:
            Path(history).touch(exist_ok=True)

    def read_line(self, prompt: str) -> str:
        return self._session.prompt(prompt)

    def read_password(self, prompt: str) -> str:
        # Standalone prompt: password never lands in the session history.
        return self._prompt(prompt, is_password=True)


# ===== Fallback: readline / pyreadline3 =====
class ReadlineSource(BaseSource):
    """Fallback editor with basic completion and history."""

    def __init__(
        self,
        *,
        history_file: Optional[Path] = None,
        bridge: Optional["CompleterBridge"] = None,
    ) -> None:
        import readline  # type: ignore[attr-defined]

        self.readline = readline
        self.history_file = history_file
        self.bridge = bridge

    def setup(self) -> None:
        if self.history_file:
            Path(self.history_file).touch(exist_ok=True)
            try:
                self.readline.read_history_file(  # type: ignore
                    str(self.history_file))
            except OSError:
                pass

        if self.bridge is None:
            return
        from conch.interface.completion import readline_completer

        try:
            self.readline.set_completer_delims(" \t\n")  # type: ignore
        except Exception:
            pass
        self.readline.set_completer(  # type: ignore
            readline_completer(self.bridge, self.readline.get_line_buffer, self.readline.get_endidx))
        try:
            self.readline.parse_and_bind("tab: complete")  # type: ignore
        except Exception:
            pass

    def read_line(self, prompt: str) -> str:
        return input(prompt)

    def close(self) -> None:
        if not self.history_file:
            return
        try:
            self.readline.write_history_file(  # type: ignore
                str(self.history_file))
        except OSError:
            pass


# ===== Last resort: plain stream =====
class StreamSource(BaseSource):
    """Reads lines from a text stream. No completion, no history."""

    def __init__(self, stream: TextIO | None = None, *, output: TextIO | None = None) -> None:
        self.stream = stream if stream is not None else sys.stdin
        self.output = output if output is not None else sys.stdout

    def _read(self, prompt: str) -> str:
        if prompt:
            self.output.write(prompt)
            self.output.flush()
        line = self.stream.readline()
        if line == "":
            raise EOFError
        return line.rstrip("\r\n")

    def read_line(self, prompt: str) -> str:
        return self._read(prompt)

    def read_password(self, prompt: str) -> str:
        if self.stream is sys.stdin and sys.stdin.isatty():
            return getpass.getpass(prompt)
        return self._read(prompt)


SOURCE_KINDS = ("auto", "prompt_toolkit", "readline", "plain")


def make_source(
    kind: str = "auto",
    *,
    history_file: Optional[Path] = None,
    bridge: Optional["CompleterBridge"] = None,
) -> BaseSource:
    """
    Factory to select the best available line source at runtime.

    'auto' falls back prompt_toolkit -> readline -> plain, and picks the plain
    stream straight away when stdin is not a terminal.
    """
    if kind not in SOURCE_KINDS:
        raise ValueError(f"Unknown line source {kind!r}; expected one of {SOURCE_KINDS}")

    if kind == "plain" or (kind == "auto" and not sys.stdin.isatty()):
        source: BaseSource = StreamSource()
    elif kind == "prompt_toolkit":
        source = PromptToolkitSource(history_file=history_file, bridge=bridge)
    elif kind == "readline":
        source = ReadlineSource(history_file=history_file, bridge=bridge)
    else:
        try:
            source = PromptToolkitSource(history_file=history_file, bridge=bridge)
        except Exception:
            try:
                source = ReadlineSource(history_file=history_file, bridge=bridge)
            except Exception:
                source = StreamSource()
    source.setup()
    return source
