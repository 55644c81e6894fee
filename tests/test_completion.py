"""Tests for tab completion.

The bridge walks the command tree with the words before the cursor and
offers the remaining part (delta) of each matching candidate, together
with the length of the prefix being completed.
"""

from conch.commands import Command, CommandTree
from conch.interface.completion import CompleterBridge, readline_completer


def _noop(ctx) -> None:
    """Do nothing."""


def _bridge(words=("apple", "apricot", "banana"), enabled: bool = True) -> CompleterBridge:
    """Create a bridge over a small tree with a custom completer."""
    tree = CommandTree()
    tree.add_command("greet", aliases=["hello"], handler=_noop)
    suggest = tree.add_command("suggest")
    suggest.add_command(Command("add", handler=_noop))
    suggest.add_command(Command("clear", handler=_noop))
    suggest.add_command(Command("words", handler=_noop, completer=lambda args: list(words)))
    return CompleterBridge(tree, enabled=enabled)


class TestSubcommandCompletion:
    """Verify completion of command names."""

    def test_empty_line_lists_top_level(self) -> None:
        """An empty buffer offers every top level name."""
        suggestions, prefix_len = _bridge().complete("")
        assert suggestions == ["greet", "suggest"]
        assert prefix_len == 0

    def test_prefix(self) -> None:
        """A partial word is completed with its missing part."""
        assert _bridge().complete("sug") == (["gest"], 3)

    def test_subcommand_prefix(self) -> None:
        """Subcommands are completed after their parent."""
        assert _bridge().complete("suggest ad") == (["d"], 2)

    def test_after_space_lists_children(self) -> None:
        """Trailing whitespace completes the next word."""
        suggestions, prefix_len = _bridge().complete("suggest ")
        assert suggestions == ["add", "clear", "words"]
        assert prefix_len == 0

    def test_full_word_advances(self) -> None:
        """A fully typed unique word yields a single space."""
        assert _bridge().complete("suggest add") == ([" "], 3)

    def test_no_match(self) -> None:
        """Unknown prefixes yield nothing."""
        assert _bridge().complete("zz") == ([], 2)

    def test_unresolved_words_fall_back_to_root(self) -> None:
        """Words that resolve to nothing are completed from the root."""
        assert _bridge().complete("nope gr") == (["eet"], 2)

    def test_cursor_in_the_middle(self) -> None:
        """Only the text before the cursor is considered."""
        assert _bridge().complete("sug whatever", cursor=3) == (["gest"], 3)


class TestCustomCompleter:
    """Verify commands with their own completer."""

    def test_custom_candidates(self) -> None:
        """A custom completer replaces subcommand completion."""
        assert _bridge().complete("suggest words ap") == (["ple", "ricot"], 2)

    def test_custom_candidates_receive_args(self) -> None:
        """The completer receives the words after the command."""
        seen: list[list[str]] = []
        tree = CommandTree()
        tree.add_command("pick", handler=_noop,
                         completer=lambda args: seen.append(list(args)) or ["x"])
        CompleterBridge(tree).complete("pick one two t")
        assert seen == [["one", "two"]]

    def test_failing_completer(self) -> None:
        """A completer that raises offers nothing."""
        tree = CommandTree()

        def broken(args):
            raise RuntimeError("boom")

        tree.add_command("pick", handler=_noop, completer=broken)
        assert CompleterBridge(tree).complete("pick ") == ([], 0)

    def test_disabled(self) -> None:
        """A disabled bridge never suggests."""
        assert _bridge(enabled=False).complete("sug") == ([], 0)

    def test_quoted_prefix_length_counts_typed_text(self) -> None:
        """The prefix length covers the quotes of a quoted word."""
        bridge = _bridge(words=("hello world", "help"))
        assert bridge.complete('suggest words "hello wor"') == (["ld"], 11)
        assert bridge.complete(r"suggest words hello\ wor") == (["ld"], 10)


class TestLineCompleter:
    """Verify replacing command completion entirely."""

    def test_replaces_tree_completion(self) -> None:
        """The line completer sees the whole buffer and cursor."""
        seen: list[tuple[str, int]] = []
        bridge = _bridge()
        bridge.custom = lambda line, cursor: seen.append((line, cursor)) or (("x", "y"), 1)
        assert bridge.complete("sug", 2) == (["x", "y"], 1)
        assert seen == [("sug", 2)]

    def test_disabled_bridge_skips_line_completer(self) -> None:
        """Disabling completion also silences the line completer."""
        bridge = _bridge(enabled=False)
        bridge.custom = lambda line, cursor: (["x"], 0)
        assert bridge.complete("sug") == ([], 0)


class TestReadlineAdapter:
    """Verify the readline completer function."""

    def test_whole_words_by_state(self) -> None:
        """readline receives whole words, one per state index."""
        buffer = "suggest words ap"
        complete = readline_completer(_bridge(), lambda: buffer, lambda: len(buffer))
        assert complete("ap", 0) == "apple"
        assert complete("ap", 1) == "apricot"
        assert complete("ap", 2) is None

    def test_full_word(self) -> None:
        """A completed word is offered unchanged."""
        buffer = "gre"
        complete = readline_completer(_bridge(), lambda: buffer, lambda: len(buffer))
        assert complete("gre", 0) == "greet"
