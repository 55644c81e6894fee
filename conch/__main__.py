#!/usr/bin/env python3
# conch/__main__.py
from __future__ import annotations

"""
Demo shell: `python -m conch`.

With arguments, runs that one command and exits:
    python -m conch greet Ada
"""

import sys
import time

from conch.commands import Command
from conch.config import ShellConfig, load_config
from conch.context import Context
from conch.errors import ShellError
from conch.interface import load_commands
from conch.shell import Shell, stop_after_interrupts
from conch.ui import colorize, init_logger

_WORDS: list[str] = []


def _greet(ctx: Context) -> None:
    ctx.println("Hello", " ".join(ctx.args) or "there")


def _login(ctx: Context) -> None:
    ctx.show_prompt(False)
    try:
        ctx.print("Username: ")
        username = ctx.read_line()
        password = ctx.read_password("Password: ")
    finally:
        ctx.show_prompt(True)
    ctx.println(f"Authenticated as {username or 'nobody'} "
                f"({len(password)} character password).")


def _multi(ctx: Context) -> None:
    ctx.println("Input multiple lines and end with semicolon ';'.")
    lines = ctx.read_multi_lines(";")
    ctx.println("Done reading. You wrote:")
    ctx.println(lines)


def _countdown(ctx: Context) -> None:
    seconds = int(ctx.args[0]) if ctx.args else 3
    for left in range(seconds, 0, -1):
        ctx.println(f"{left}...")
        time.sleep(1)
    ctx.println("Go!")


def _color(ctx: Context) -> str:
    return " ".join(colorize(name, name) for name in ("red", "green", "yellow", "blue"))


def _suggest_add(ctx: Context) -> None:
    _WORDS.extend(ctx.args)
    ctx.println("Words:", ", ".join(_WORDS) or "(none)")


def _suggest_clear(ctx: Context) -> None:
    _WORDS.clear()


def _suggest_words(ctx: Context) -> None:
    if not ctx.args:
        ctx.err("pick one of the added words (press tab)")
        return
    ctx.println("You picked", ctx.args[0])


def build_shell(config: ShellConfig) -> Shell:
    shell = Shell.from_config(config)
    shell.add_command(
        "greet",
        aliases=["hello", "welcome"],
        help="greet user",
        long_help="greet [name...]\n\nGreets the user, optionally by name.",
        handler=_greet,
    )
    shell.add_command("login", help="simulate a login", handler=_login)
    shell.add_command("multi", help="input in multiple lines", handler=_multi)
    shell.add_command("countdown", help="count down from N (try Ctrl-C)", handler=_countdown)
    shell.add_command("color", help="print some colors", handler=_color)

    suggest = shell.add_command("suggest", help="try auto-completion of words")
    suggest.add_command(Command("add", "add words to the suggestions", handler=_suggest_add))
    suggest.add_command(Command("clear", "forget all suggested words", handler=_suggest_clear))
    suggest.add_command(Command(
        "words",
        "pick one of the added words",
        handler=_suggest_words,
        completer=lambda args: list(_WORDS),
    ))

    shell.on_interrupt(stop_after_interrupts(2))

    package = config.extra.get("COMMANDS_PACKAGE")
    if package:
        load_commands(shell, str(package))
    return shell


def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    config = load_config()
    init_logger(
        "conch",
        level=config.log_level,
        logfile=str(config.log_file_path) if config.log_file_path else None,
    )

    shell = build_shell(config)
    try:
        if args:
            shell.process(*args)
            return 0
        shell.println("Sample interactive shell. Type 'help' for commands.")
        shell.run()
    except ShellError as exc:
        shell.println(f"Error: {exc}")
        return 1
    finally:
        shell.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
