"""Fake line sources standing in for the terminal in tests.

ScriptedSource replays a list of lines and exceptions; BlockingSource holds
every read until the test releases it, which makes in-flight reads
observable.
"""

import threading


class ScriptedSource:
    """Replay items: strings are returned, exceptions raised, then EOF."""

    def __init__(self, items=()) -> None:
        self.items = list(items)
        self.prompts: list[str] = []
        self.password_prompts: list[str] = []
        self.closed = False
        self._lock = threading.Lock()

    def _next(self) -> str:
        with self._lock:
            if not self.items:
                raise EOFError
            item = self.items.pop(0)
        if isinstance(item, BaseException) or (
            isinstance(item, type) and issubclass(item, BaseException)
        ):
            raise item
        return item

    def read_line(self, prompt: str) -> str:
        self.prompts.append(prompt)
        return self._next()

    def read_password(self, prompt: str) -> str:
        self.password_prompts.append(prompt)
        return self._next()

    def close(self) -> None:
        self.closed = True


class BlockingSource:
    """Block each read until `release` is set, then return the next line."""

    def __init__(self, lines=()) -> None:
        self.lines = list(lines)
        self.release = threading.Event()
        self.started = threading.Event()
        self.calls: list[str] = []
        self.closed = False

    def _read(self, kind: str) -> str:
        self.calls.append(kind)
        self.started.set()
        self.release.wait(5)
        if not self.lines:
            raise EOFError
        return self.lines.pop(0)

    def read_line(self, prompt: str) -> str:
        return self._read("line")

    def read_password(self, prompt: str) -> str:
        return self._read("password")

    def close(self) -> None:
        self.closed = True
