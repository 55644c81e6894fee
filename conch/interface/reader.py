#!/usr/bin/env python3
# conch/interface/reader.py
from __future__ import annotations

"""
Concurrent line reader.

One blocking LineSource is shared by every part of the shell that wants
input: the run loop, handlers asking for a line or a password, and reads
left over from a stopped loop. The reader guarantees:

- at most one physical read in flight at any time;
- every consumer registered before a read completes receives its result;
- a waiting consumer can be woken early by a StopToken, without aborting
  the physical read (the line-editing primitive cannot be aborted).
"""

import logging
import threading
from contextlib import contextmanager, nullcontext
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Iterator, Optional

from conch.errors import ReadCancelled
from conch.interface.source import LineSource

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = ">>> "
DEFAULT_MULTI_PROMPT = "... "


class ReadSignal(Enum):
    """How a physical read ended."""

    NONE = "none"
    INTERRUPTED = "interrupted"
    EOF = "eof"
    ERROR = "error"


class ReadKind(Enum):
    LINE = "line"
    PASSWORD = "password"


@dataclass(frozen=True, slots=True)
class ReadResult:
    """Outcome of one physical read, shared by all of its consumers."""

    text: str = ""
    signal: ReadSignal = ReadSignal.NONE
    error: Optional[BaseException] = None

    @property
    def ok(self) -> bool:
        return self.signal is ReadSignal.NONE


class Handoff:
    """Single-slot mailbox for one consumer of a physical read."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._result: Optional[ReadResult] = None
        self._cancelled = False
        self._listeners: list[Callable[[], None]] = []

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def deliver(self, result: ReadResult) -> None:
        with self._cond:
            if self._result is None:
                self._result = result
                self._cond.notify_all()

    def cancel(self) -> None:
        with self._cond:
            self._cancelled = True
            self._cond.notify_all()
            listeners, self._listeners = self._listeners, []
        for listener in listeners:
            listener()

    def on_cancel(self, listener: Callable[[], None]) -> None:
        """Call listener once the handoff is cancelled (now, if it already is)."""
        with self._cond:
            if not self._cancelled:
                self._listeners.append(listener)
                return
        listener()

    def wait(self, timeout: float | None = None) -> ReadResult:
        """
        Block until a result is delivered or the handoff is cancelled.

        Raises ReadCancelled when cancelled first, TimeoutError on timeout.
        """
        with self._cond:
            ready = self._cond.wait_for(
                lambda: self._result is not None or self._cancelled, timeout)
            if not ready:
                raise TimeoutError("no line read within timeout")
            if self._result is not None:
                return self._result
            raise ReadCancelled()


class StopToken:
    """Cancellation flag that wakes every consumer waiting under it."""

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._stopped = False
        self._watching: set[Handoff] = set()

    @property
    def stopped(self) -> bool:
        return self._stopped

    def stop(self) -> None:
        with self._mutex:
            self._stopped = True
            watching, self._watching = self._watching, set()
        for handoff in watching:
            handoff.cancel()

    @contextmanager
    def watch(self, handoff: Handoff) -> Iterator[Handoff]:
        with self._mutex:
            if self._stopped:
                handoff.cancel()
            else:
                self._watching.add(handoff)
        try:
            yield handoff
        finally:
            with self._mutex:
                self._watching.discard(handoff)


class ConcurrentReader:
    """
    Serializes physical reads on a LineSource and fans results out.

    Prompt selection:
        - empty when prompting is hidden (show_prompt False)
        - multi_prompt while a multi-line statement is being assembled
        - prompt otherwise
    """

    def __init__(
        self,
        source: LineSource,
        *,
        prompt: str = DEFAULT_PROMPT,
        multi_prompt: str = DEFAULT_MULTI_PROMPT,
    ) -> None:
        self.source = source
        self.prompt = prompt
        self.multi_prompt = multi_prompt
        self.show_prompt = True
        self.multi_mode = False

        self._idle = threading.Condition(threading.Lock())
        self._consumers: list[Handoff] = []
        self._reading: Optional[ReadKind] = None
        self._physical_reads = 0

    # ---------------- State ----------------

    @property
    def reading(self) -> bool:
        """True while a physical read is in flight."""
        with self._idle:
            return self._reading is not None

    @property
    def physical_reads(self) -> int:
        """Number of physical reads started so far."""
        with self._idle:
            return self._physical_reads

    def current_prompt(self) -> str:
        if not self.show_prompt:
            return ""
        return self.multi_prompt if self.multi_mode else self.prompt

    # ---------------- Requests ----------------

    def submit(self, consumer: Handoff, kind: ReadKind = ReadKind.LINE, prompt: str | None = None) -> None:
        """
        Register consumer for the next result of kind `kind`.

        Joins the in-flight read when it is of the same kind, waits for a
        read of another kind to finish, otherwise starts a physical read.
        Raises ReadCancelled, without reading, once the consumer is cancelled.
        """
        consumer.on_cancel(self._wake)
        with self._idle:
            self._idle.wait_for(
                lambda: consumer.cancelled or self._reading in (None, kind))
            if consumer.cancelled:
                raise ReadCancelled()
            self._consumers.append(consumer)
            if self._reading is kind:
                return
            self._reading = kind
            self._physical_reads += 1
            number = self._physical_reads
            if prompt is None:
                prompt = self.current_prompt() if kind is ReadKind.LINE else ""
            worker = threading.Thread(
                target=self._read,
                args=(kind, prompt),
                name=f"conch-reader-{number}",
                daemon=True,
            )
            worker.start()
        logger.debug("physical %s read #%d started", kind.value, number)

    def request_line(self, token: StopToken | None = None, timeout: float | None = None) -> ReadResult:
        """Read a line, sharing an in-flight read if there is one."""
        return self._request(ReadKind.LINE, token, timeout, None)

    def request_password(
        self, token: StopToken | None = None, timeout: float | None = None, prompt: str = ""
    ) -> ReadResult:
        """Read a line without echo. The normal prompt is bypassed."""
        return self._request(ReadKind.PASSWORD, token, timeout, prompt)

    def _request(
        self, kind: ReadKind, token: StopToken | None, timeout: float | None, prompt: str | None
    ) -> ReadResult:
        if token is not None and token.stopped:
            raise ReadCancelled()
        consumer = Handoff()
        with token.watch(consumer) if token is not None else nullcontext(consumer):
            try:
                self.submit(consumer, kind, prompt)
                return consumer.wait(timeout)
            except KeyboardInterrupt:
                # stdlib input() sources: SIGINT lands on the waiting main thread
                return ReadResult("", ReadSignal.INTERRUPTED)
            finally:
                self._forget(consumer)

    def _wake(self) -> None:
        with self._idle:
            self._idle.notify_all()

    def _forget(self, consumer: Handoff) -> None:
        with self._idle:
            if consumer in self._consumers:
                self._consumers.remove(consumer)

    # ---------------- Worker ----------------

    def _read(self, kind: ReadKind, prompt: str) -> None:
        try:
            if kind is ReadKind.PASSWORD:
                result = ReadResult(self.source.read_password(prompt))
            else:
                result = ReadResult(self.source.read_line(prompt))
        except KeyboardInterrupt as exc:
            result = ReadResult(getattr(exc, "text", ""), ReadSignal.INTERRUPTED)
        except EOFError:
            result = ReadResult("", ReadSignal.EOF)
        except Exception as exc:
            logger.debug("physical read failed: %s: %s", type(exc).__name__, exc)
            result = ReadResult("", ReadSignal.ERROR, exc)

        with self._idle:
            consumers, self._consumers = self._consumers, []
            self._reading = None
            self._idle.notify_all()

        if not consumers:
            logger.debug("discarding orphaned %s read result", kind.value)
        for consumer in consumers:
            consumer.deliver(result)
