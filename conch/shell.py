#!/usr/bin/env python3
# conch/shell.py
from __future__ import annotations

"""
The interactive shell object.

A Shell owns everything a running shell needs: its command tree, line
source, concurrent reader, interrupt state and handlers. Nothing is global,
so independent shells can live side by side in one process.

Typical use:

    shell = Shell()

    @shell.command(aliases=["hello"])
    def greet(ctx):
        "Greet user"
        ctx.println("Hello", *ctx.args)

    shell.run()
    shell.close()
"""

import logging
import threading
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, Sequence, TextIO

from conch.actions import Actions
from conch.commands import Command, CommandTree, Completer, Handler
from conch.context import Context
from conch.interface.completion import CompleterBridge, LineCompleter
from conch.interface.handler import Dispatcher, InterruptState
from conch.interface.parser import LineAssembler
from conch.interface.reader import (
    DEFAULT_MULTI_PROMPT,
    DEFAULT_PROMPT,
    ConcurrentReader,
    StopToken,
)
from conch.interface.source import LineSource, make_source

if TYPE_CHECKING:  # pragma: no cover
    from conch.config import ShellConfig

logger = logging.getLogger(__name__)

InterruptHandler = Callable[[Context, int, str], Any]


class Shell(Actions):
    """An interactive command shell."""

    def __init__(
        self,
        source: Optional[LineSource] = None,
        *,
        writer: Optional[TextIO] = None,
        prompt: str = DEFAULT_PROMPT,
        multi_prompt: str = DEFAULT_MULTI_PROMPT,
        ignore_case: bool = False,
        auto_help: bool = True,
        completion: bool = True,
        history_file: Optional[Path] = None,
        source_kind: str = "auto",
    ) -> None:
        # None writes to whatever sys.stdout is at print time
        self.writer = writer
        self.tree = CommandTree(ignore_case=ignore_case)
        self.bridge = CompleterBridge(self.tree, enabled=completion)
        if source is None:
            source = make_source(source_kind, history_file=history_file, bridge=self.bridge)
        self.source = source
        self.reader = ConcurrentReader(source, prompt=prompt, multi_prompt=multi_prompt)
        self.assembler = LineAssembler(self.reader)
        self.dispatcher = Dispatcher(self)
        self.interrupts = InterruptState()
        self.auto_help = auto_help

        self.not_found_handler: Optional[Handler] = None
        self.interrupt_handler: Optional[InterruptHandler] = None
        self.eof_handler: Optional[Handler] = None
        self._values: dict[str, Any] = {}

        self._mutex = threading.Lock()
        self._token = StopToken()
        self._active = False
        self._closed = False
        self._done = threading.Event()
        self._done.set()
        self._thread: Optional[threading.Thread] = None
        self._failure: Optional[BaseException] = None

        _add_default_commands(self)

    @classmethod
    def from_config(
        cls,
        config: "ShellConfig",
        source: Optional[LineSource] = None,
        writer: Optional[TextIO] = None,
    ) -> "Shell":
        """Build a shell from a loaded ShellConfig."""
        return cls(
            source,
            writer=writer,
            prompt=config.prompt,
            multi_prompt=config.multi_prompt,
            ignore_case=config.ignore_case,
            auto_help=config.auto_help,
            completion=config.enable_completion,
            history_file=config.history_file,
            source_kind=config.line_source,
        )

    @property
    def shell(self) -> "Shell":
        return self

    # ---------------- Commands ----------------

    def add_command(
        self,
        name: str | Command,
        aliases: Iterable[str] = (),
        help: str = "",
        long_help: str = "",
        handler: Handler | None = None,
        completer: Completer | None = None,
    ) -> Command:
        """Add a top level command. Last registration wins on name clashes."""
        return self.tree.add_command(name, aliases, help, long_help, handler, completer)

    def delete_command(self, name: str) -> Optional[Command]:
        """Delete a top level command (by name or alias) with its subcommands."""
        return self.tree.delete_command(name)

    def find_command(self, args: Sequence[str]) -> tuple[Optional[Command], list[str]]:
        """Return the deepest command matching args and the unconsumed words."""
        return self.tree.find_command(args)

    def command(
        self,
        name: str | None = None,
        *,
        aliases: Iterable[str] = (),
        help: str | None = None,
        long_help: str | None = None,
        completer: Completer | None = None,
    ) -> Callable[[Handler], Command]:
        """Decorator registering a function as a top level command."""
        return self.tree.command(
            name, aliases=aliases, help=help, long_help=long_help, completer=completer)

    @property
    def ignore_case(self) -> bool:
        return self.tree.ignore_case

    @ignore_case.setter
    def ignore_case(self, value: bool) -> None:
        self.tree.ignore_case = value

    def custom_completer(self, completer: Optional[LineCompleter]) -> Optional[LineCompleter]:
        """
        Replace command completion with completer(line, cursor).

        It returns (suggestions, prefix_length) like CompleterBridge.complete
        and takes effect on the running line source. None restores command
        completion.
        """
        self.bridge.custom = completer
        return completer

    # ---------------- Handlers ----------------

    def not_found(self, handler: Handler) -> Handler:
        """Set the handler for input that matches no command."""
        self.not_found_handler = handler
        return handler

    def on_interrupt(self, handler: InterruptHandler) -> InterruptHandler:
        """
        Set the handler for a break signal (Ctrl-C).

        The handler is called as handler(ctx, count, text), with the number
        of consecutive interrupts and whatever had been typed.
        """
        self.interrupt_handler = handler
        return handler

    def on_eof(self, handler: Handler) -> Handler:
        """Set the handler for end of input. Without one the loop ends."""
        self.eof_handler = handler
        return handler

    # ---------------- Values ----------------

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a value shared with every context created afterwards."""
        self._values[key] = value

    def delete(self, key: str) -> None:
        self._values.pop(key, None)

    def new_context(
        self,
        command: Optional[Command] = None,
        args: Iterable[str] = (),
        raw_args: Iterable[str] = (),
    ) -> Context:
        return Context(self, command, args, raw_args, values=self._values)

    # ---------------- Lifecycle ----------------

    @property
    def active(self) -> bool:
        """True while the run loop is running."""
        with self._mutex:
            return self._active

    def run(self) -> None:
        """Run the shell loop in the calling thread until stopped or end of input."""
        self._loop(self._prepare())

    def start(self) -> None:
        """Run the shell loop on a background thread. See wait() for how it ends."""
        token = self._prepare()
        self._thread = threading.Thread(
            target=self._loop, args=(token, True), name="conch-shell", daemon=True)
        self._thread.start()

    def wait(self, timeout: float | None = None) -> bool:
        """
        Block until the loop finishes. Returns False on timeout.

        An EXIT (SystemExit) or FATAL error that ended a loop started with
        start() is raised here, in the waiting thread.
        """
        if not self._done.wait(timeout):
            return False
        with self._mutex:
            failure, self._failure = self._failure, None
        if failure is not None:
            raise failure
        return True

    def halt(self) -> None:
        """
        Stop the loop from any thread.

        A read in flight is not aborted; the loop just stops waiting for it.
        """
        with self._mutex:
            token = self._token
        logger.debug("stop requested")
        token.stop()

    def close(self) -> None:
        """Stop the shell and close its line source. A closed shell cannot run."""
        self.halt()
        with self._mutex:
            if self._closed:
                return
            self._closed = True
        self.source.close()

    def process(self, *args: str) -> None:
        """
        Run the command matching args without reading input.

        Errors the handler raises or flags are raised to the caller.
        """
        error = self.dispatcher.handle_input(list(args), list(args))
        if error is not None:
            raise error

    def _prepare(self) -> StopToken:
        with self._mutex:
            if self._closed:
                raise RuntimeError("shell is closed")
            if self._active:
                raise RuntimeError("shell is already running")
            self._active = True
            self._token = token = StopToken()
            self._done.clear()
            self._failure = None
        self.interrupts.reset()
        return token

    def _loop(self, token: StopToken, background: bool = False) -> None:
        try:
            self.dispatcher.run(token)
        except BaseException as exc:
            if not background:
                raise
            # re-raised by wait()
            logger.debug("shell loop ended by %s", type(exc).__name__)
            with self._mutex:
                self._failure = exc
        finally:
            token.stop()
            with self._mutex:
                self._active = False
            self._done.set()


# ---------------------------------------------------------------------------
# Default commands and policies
# ---------------------------------------------------------------------------


def _exit_command(ctx: Context) -> None:
    ctx.stop()


def _help_command(ctx: Context) -> None:
    if not ctx.args:
        ctx.println(ctx.help_text())
        return
    cmd, _rest = ctx.shell.find_command(ctx.args)
    if cmd is None:
        ctx.err(f"no such command: {' '.join(ctx.args)}")
        return
    ctx.println(cmd.help_text())


def _clear_command(ctx: Context) -> None:
    ctx.clear_screen()


def _add_default_commands(shell: Shell) -> None:
    shell.add_command("exit", help="exit the program", handler=_exit_command)
    shell.add_command("help", help="display help", handler=_help_command)
    shell.add_command("clear", help="clear the screen", handler=_clear_command)


def stop_after_interrupts(
    threshold: int = 2,
    message: str = "Input Ctrl-C once more to exit",
) -> InterruptHandler:
    """
    Interrupt handler stopping the shell on the threshold-th consecutive Ctrl-C.

    Earlier interrupts print message.
    """

    def handler(ctx: Context, count: int, text: str) -> None:
        if count >= threshold:
            ctx.println("Interrupted")
            ctx.stop()
        else:
            ctx.println(message)

    return handler
