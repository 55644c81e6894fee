#!/usr/bin/env python3
# conch/interface/handler.py
from __future__ import annotations

"""
Statement dispatch and error routing.

The run loop pulls statements from the shell's LineAssembler and branches
on how each read ended:

  NONE         reset the interrupt count, resolve and invoke a handler
  INTERRUPTED  bump the interrupt count and call the interrupt handler
  EOF          call the EOF handler, or leave the loop
  ERROR        log and read again

Handlers run synchronously on the loop's thread. Their errors, whether
raised or flagged with ctx.err(), are routed by level (see conch.errors).
"""

import logging
import threading
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence

from conch.commands import HELP_COMMAND
from conch.errors import (
    ErrLevel,
    NoHandlerError,
    NoInterruptHandlerError,
    ReadCancelled,
    ShellError,
    TokenizeError,
)
from conch.interface.parser import Statement
from conch.interface.reader import ReadSignal, StopToken

if TYPE_CHECKING:  # pragma: no cover
    from conch.context import Context
    from conch.shell import Shell

logger = logging.getLogger(__name__)


class InterruptState:
    """Consecutive interrupt counter of one shell."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._count = 0

    @property
    def count(self) -> int:
        with self._lock:
            return self._count

    def increment(self) -> int:
        with self._lock:
            self._count += 1
            return self._count

    def reset(self) -> None:
        with self._lock:
            self._count = 0


class Dispatcher:
    """Runs the read/resolve/invoke loop on behalf of a Shell."""

    def __init__(self, shell: "Shell") -> None:
        self.shell = shell

    # ---------------- Loop ----------------

    def run(self, token: StopToken) -> None:
        """Dispatch statements until the token is stopped or input ends."""
        logger.debug("run loop started")
        while not token.stopped:
            try:
                statement = self.shell.assembler.read_statement(token)
            except ReadCancelled:
                break
            except TokenizeError as exc:
                self.route(exc)
                continue

            try:
                if not self.dispatch(statement):
                    break
            except KeyboardInterrupt:
                # break signal delivered while a handler was running
                self.handle_interrupt("")
        logger.debug("run loop finished")

    def dispatch(self, statement: Statement) -> bool:
        """Handle one statement. Returns False when the loop should end."""
        if statement.signal is ReadSignal.EOF:
            return self.handle_eof()

        if statement.signal is ReadSignal.ERROR:
            logger.warning("reading input failed: %s: %s",
                           type(statement.error).__name__, statement.error)
            return True

        if statement.signal is ReadSignal.INTERRUPTED:
            self.handle_interrupt(statement.text)
            return True

        self.shell.interrupts.reset()
        if statement.empty:
            return True

        error = self.handle_input(statement.args, statement.raw_args)
        if error is not None:
            self.route(error)
        return True

    # ---------------- Handlers ----------------

    def handle_input(
        self, args: Sequence[str], raw_args: Sequence[str]
    ) -> Optional[BaseException]:
        """
        Resolve args and run the matching handler.

        Returns the error the handler raised or flagged, if any.
        """
        shell = self.shell
        cmd, rest = shell.find_command(args)

        if cmd is None:
            if shell.not_found_handler is None:
                return NoHandlerError()
            logger.debug("no command for %r, calling not-found handler", list(args))
            ctx = shell.new_context(None, args, raw_args)
            return self._invoke(shell.not_found_handler, ctx)

        if cmd.handler is None or (shell.auto_help and rest == [HELP_COMMAND]):
            shell.println(cmd.help_text())
            return None

        logger.debug("dispatching '%s' with %r", cmd.name, rest)
        ctx = shell.new_context(cmd, rest, raw_args)
        return self._invoke(cmd.handler, ctx)

    def handle_interrupt(self, text: str) -> None:
        count = self.shell.interrupts.increment()
        handler = self.shell.interrupt_handler
        if handler is None:
            self.route(NoInterruptHandlerError())
            return

        ctx = self.shell.new_context()
        error = self._invoke(lambda c: handler(c, count, text), ctx)
        if error is not None:
            self.route(error)

    def handle_eof(self) -> bool:
        handler = self.shell.eof_handler
        if handler is None:
            self.shell.println("EOF")
            return False

        error = self._invoke(handler, self.shell.new_context())
        if error is not None:
            self.route(error)
        return True

    @staticmethod
    def _invoke(fn: Callable[["Context"], Any], ctx: "Context") -> Optional[BaseException]:
        try:
            result = fn(ctx)
        except Exception as exc:
            return exc
        if result is not None:
            ctx.println(result)
        return ctx.error

    # ---------------- Errors ----------------

    def route(self, error: BaseException) -> None:
        """
        Print an error and act on its level.

        FATAL errors are re-raised, EXIT raises SystemExit(1), STOP halts
        the shell. Anything else leaves the loop running.
        """
        if not isinstance(error, ShellError):
            logger.debug("handler failed", exc_info=error)
            self.shell.println(f"Error: {type(error).__name__}: {error}")
            return

        if error.level == ErrLevel.FATAL:
            raise error

        self.shell.println(f"Error: {error}")
        if error.level == ErrLevel.STOP:
            self.shell.halt()
        elif error.level == ErrLevel.EXIT:
            raise SystemExit(1)
