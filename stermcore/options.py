"""Short-option command-line parsing in the classic single-dash style."""

from __future__ import annotations

from collections.abc import Container, Sequence


class UsageError(Exception):
    """Raised when an option that needs a value is given none."""

    def __init__(self, option: str) -> None:
        super().__init__(f"option -{option} requires an argument")
        self.option = option


def parse_args(
    argv: Sequence[str], takes_value: Container[str]
) -> tuple[list[tuple[str, str | None]], list[str]]:
    """Split ``argv`` (without the program name) into options and operands.

    Options may be clustered (``-ab``); an option in ``takes_value`` takes the
    rest of its word or, failing that, the next word. ``--`` ends the options,
    as does the first word not starting with ``-`` or consisting of ``-`` alone.
    Returns the options in order as ``(letter, value)`` pairs and the operands.
    """
    args = list(argv)
    options: list[tuple[str, str | None]] = []
    while args and args[0].startswith("-") and len(args[0]) > 1:
        word = args.pop(0)
        if word == "--":
            break
        for pos, letter in enumerate(word[1:], start=1):
            if letter not in takes_value:
                options.append((letter, None))
                continue
            rest = word[pos + 1:]
            if rest:
                options.append((letter, rest))
            elif args:
                options.append((letter, args.pop(0)))
            else:
                raise UsageError(letter)
            break
    return options, args