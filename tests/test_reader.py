"""Tests for the concurrent line reader.

One physical read at a time is performed on the line source; every
consumer registered while it is in flight receives the same result. A
consumer may stop waiting early through a StopToken without aborting the
physical read.
"""

import threading
import time

import pytest

from conch.errors import ReadCancelled
from conch.interface.reader import (
    ConcurrentReader,
    Handoff,
    ReadResult,
    ReadSignal,
    StopToken,
)
from conch.interface.source import InputInterrupted
from fakes import BlockingSource, ScriptedSource

TIMEOUT = 2.0


def _in_thread(fn) -> tuple[threading.Thread, dict]:
    """Run fn on a thread, capturing its result or exception."""
    outcome: dict = {}

    def target() -> None:
        try:
            outcome["result"] = fn()
        except BaseException as exc:  # noqa: BLE001 - captured for asserts
            outcome["error"] = exc

    thread = threading.Thread(target=target, daemon=True)
    thread.start()
    return thread, outcome


class TestFanOut:
    """Verify the single physical read shared by concurrent consumers."""

    def test_two_consumers_one_read(self) -> None:
        """Consumers registered before completion get the identical result."""
        source = BlockingSource(["hello"])
        reader = ConcurrentReader(source)
        first, second = Handoff(), Handoff()
        reader.submit(first)
        reader.submit(second)
        assert reader.reading
        source.release.set()
        assert first.wait(TIMEOUT) is second.wait(TIMEOUT)
        assert first.wait(TIMEOUT).text == "hello"
        assert reader.physical_reads == 1
        assert source.calls == ["line"]

    def test_late_request_joins_in_flight_read(self) -> None:
        """A request arriving mid-read waits for that read."""
        source = BlockingSource(["shared"])
        reader = ConcurrentReader(source)
        thread_a, outcome_a = _in_thread(reader.request_line)
        assert source.started.wait(TIMEOUT)
        late = Handoff()
        reader.submit(late)
        source.release.set()
        thread_a.join(TIMEOUT)
        assert outcome_a["result"].text == "shared"
        assert late.wait(TIMEOUT).text == "shared"
        assert reader.physical_reads == 1

    def test_sequential_requests(self) -> None:
        """Requests after completion trigger new reads."""
        reader = ConcurrentReader(ScriptedSource(["a", "b"]))
        assert reader.request_line().text == "a"
        assert reader.request_line().text == "b"
        assert reader.physical_reads == 2
        assert not reader.reading

    def test_password_waits_for_line_read(self) -> None:
        """A password request does not join a line read; it runs after it."""
        source = BlockingSource(["line", "secret"])
        reader = ConcurrentReader(source)
        line = Handoff()
        reader.submit(line)
        assert source.started.wait(TIMEOUT)
        thread, outcome = _in_thread(reader.request_password)
        assert source.calls == ["line"]
        source.release.set()
        thread.join(TIMEOUT)
        assert line.wait(TIMEOUT).text == "line"
        assert outcome["result"].text == "secret"
        assert source.calls == ["line", "password"]


class TestSignals:
    """Verify how source outcomes map to read signals."""

    def test_eof(self) -> None:
        """EOFError becomes the EOF signal."""
        result = ConcurrentReader(ScriptedSource()).request_line()
        assert result.signal is ReadSignal.EOF
        assert not result.ok

    def test_interrupt_with_partial_text(self) -> None:
        """A break signal keeps whatever was typed."""
        result = ConcurrentReader(ScriptedSource([InputInterrupted("par")])).request_line()
        assert result == ReadResult("par", ReadSignal.INTERRUPTED)

    def test_plain_keyboard_interrupt(self) -> None:
        """A bare KeyboardInterrupt carries no text."""
        result = ConcurrentReader(ScriptedSource([KeyboardInterrupt()])).request_line()
        assert result.signal is ReadSignal.INTERRUPTED
        assert result.text == ""

    def test_other_error(self) -> None:
        """Other exceptions are passed along, not raised."""
        failure = OSError("terminal gone")
        result = ConcurrentReader(ScriptedSource([failure])).request_line()
        assert result.signal is ReadSignal.ERROR
        assert result.error is failure


class TestPrompts:
    """Verify the prompt handed to the line source."""

    def test_standard_prompt(self) -> None:
        """The standard prompt is used by default."""
        source = ScriptedSource(["x"])
        reader = ConcurrentReader(source, prompt="$ ")
        reader.request_line()
        assert source.prompts == ["$ "]

    def test_multi_prompt(self) -> None:
        """Multi-line mode switches to the continuation prompt."""
        source = ScriptedSource(["x"])
        reader = ConcurrentReader(source, multi_prompt="+ ")
        reader.multi_mode = True
        reader.request_line()
        assert source.prompts == ["+ "]

    def test_hidden_prompt(self) -> None:
        """Hiding the prompt sends an empty one."""
        source = ScriptedSource(["x"])
        reader = ConcurrentReader(source)
        reader.show_prompt = False
        reader.request_line()
        assert source.prompts == [""]

    def test_password_prompt(self) -> None:
        """Password reads bypass the shell prompt."""
        source = ScriptedSource(["pw", "pw"])
        reader = ConcurrentReader(source, prompt="$ ")
        reader.request_password()
        reader.request_password(prompt="Password: ")
        assert source.password_prompts == ["", "Password: "]
        assert source.prompts == []


class TestCancellation:
    """Verify waking consumers early."""

    def test_stop_wakes_waiting_consumer(self) -> None:
        """Stopping the token cancels the wait but not the physical read."""
        source = BlockingSource(["late"])
        reader = ConcurrentReader(source)
        token = StopToken()
        thread, outcome = _in_thread(lambda: reader.request_line(token))
        assert source.started.wait(TIMEOUT)
        token.stop()
        thread.join(TIMEOUT)
        assert isinstance(outcome["error"], ReadCancelled)
        assert reader.reading
        source.release.set()

    def test_orphaned_read_joined_by_next_request(self) -> None:
        """A cancelled read's result goes to the next consumer."""
        source = BlockingSource(["kept"])
        reader = ConcurrentReader(source)
        token = StopToken()
        thread, _outcome = _in_thread(lambda: reader.request_line(token))
        assert source.started.wait(TIMEOUT)
        token.stop()
        thread.join(TIMEOUT)
        follower = Handoff()
        reader.submit(follower)
        source.release.set()
        assert follower.wait(TIMEOUT).text == "kept"
        assert reader.physical_reads == 1

    def test_stop_wakes_line_queued_behind_password(self) -> None:
        """A line request waiting for a password read to finish can be cancelled."""
        source = BlockingSource(["secret"])
        reader = ConcurrentReader(source)
        password_thread, _password = _in_thread(reader.request_password)
        assert source.started.wait(TIMEOUT)
        token = StopToken()
        line_thread, outcome = _in_thread(lambda: reader.request_line(token))
        time.sleep(0.1)  # let the line request queue behind the password read
        token.stop()
        line_thread.join(TIMEOUT)
        assert not line_thread.is_alive()
        assert isinstance(outcome["error"], ReadCancelled)
        assert source.calls == ["password"]
        source.release.set()
        password_thread.join(TIMEOUT)
        assert reader.physical_reads == 1

    def test_cancelled_consumer_starts_no_read(self) -> None:
        """Submitting an already cancelled consumer never reaches the source."""
        source = ScriptedSource(["x"])
        reader = ConcurrentReader(source)
        consumer = Handoff()
        consumer.cancel()
        with pytest.raises(ReadCancelled):
            reader.submit(consumer)
        assert reader.physical_reads == 0
        assert source.prompts == []

    def test_stopped_token_refuses_new_requests(self) -> None:
        """A request under a stopped token fails without reading."""
        source = ScriptedSource(["x"])
        reader = ConcurrentReader(source)
        token = StopToken()
        token.stop()
        with pytest.raises(ReadCancelled):
            reader.request_line(token)
        assert reader.physical_reads == 0

    def test_timeout(self) -> None:
        """A timed wait gives up with TimeoutError."""
        source = BlockingSource(["x"])
        reader = ConcurrentReader(source)
        with pytest.raises(TimeoutError):
            reader.request_line(timeout=0.05)
        source.release.set()


class TestHandoff:
    """Verify the single-slot mailbox."""

    def test_first_delivery_wins(self) -> None:
        """Later deliveries are ignored."""
        handoff = Handoff()
        handoff.deliver(ReadResult("one"))
        handoff.deliver(ReadResult("two"))
        assert handoff.wait(TIMEOUT).text == "one"

    def test_cancel(self) -> None:
        """A cancelled handoff raises ReadCancelled."""
        handoff = Handoff()
        handoff.cancel()
        assert handoff.cancelled
        with pytest.raises(ReadCancelled):
            handoff.wait(TIMEOUT)

    def test_cancel_listener(self) -> None:
        """Listeners run on cancel, or at once when already cancelled."""
        calls: list[str] = []
        handoff = Handoff()
        handoff.on_cancel(lambda: calls.append("early"))
        assert calls == []
        handoff.cancel()
        handoff.on_cancel(lambda: calls.append("late"))
        assert calls == ["early", "late"]
