"""A small command dispatcher on top of an argument parser."""

from __future__ import annotations

import abc
import argparse
import sys
from typing import Any, Iterable, Sequence


class EmptyAppNameError(ValueError):
    def __init__(self, message: str = "app name cannot be empty") -> None:
        super().__init__(message)


class EmptyCommandsError(ValueError):
    def __init__(self, message: str = "app must have at least one command") -> None:
        super().__init__(message)


class NoCommandSpecifiedError(ValueError):
    def __init__(self, message: str = "app command was not specified") -> None:
        super().__init__(message)


class CommandNotFoundError(LookupError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"'{name}': app command not found")


class FlagParseError(ValueError):
    """Global flags could not be parsed."""


class Command(abc.ABC):
    """A command the app can dispatch to by name."""

    name: str = ""
    help: str = ""
    synopsis: str = ""

    @abc.abstractmethod
    def run(self, args: list[str]) -> Any:
        """Run the command with the positional arguments, its name first."""


def _is_flag(token: str) -> bool:
    return token.startswith("-") and token != "-"


class App:
    """Parses global flags, then runs the command named by the first argument.

    A parser given by the caller should be built with ``exit_on_error=False``
    so that parse errors surface as exceptions.
    """

    def __init__(
        self,
        name: str,
        commands: Iterable[Command] | None,
        parser: argparse.ArgumentParser | None = None,
    ) -> None:
        if not name:
            raise EmptyAppNameError()
        self.commands = list(commands or [])
        if not self.commands:
            raise EmptyCommandsError()
        self.name = name
        self.parser = parser or argparse.ArgumentParser(
            prog="global", add_help=False, exit_on_error=False
        )
        self.options = argparse.Namespace()

    def run(self, argv: Sequence[str] | None = None) -> None:
        """Parse ``argv`` (default: the process arguments) and run a command."""
        tokens = list(sys.argv[1:] if argv is None else argv)
        try:
            options, rest = self.parser.parse_known_args(tokens)
        except argparse.ArgumentError as exc:
            raise FlagParseError(f"error parsing flags: {exc}") from exc

        unknown = [t for t in rest if _is_flag(t)]
        if unknown:
            flag = unknown[0].split("=", 1)[0]
            raise FlagParseError(f"error parsing flags: unknown flag: {flag}")
        self.options = options

        args = [t for t in rest if not _is_flag(t)]
        if not args:
            raise NoCommandSpecifiedError()

        command = next((c for c in self.commands if c.name == args[0]), None)
        if command is None:
            raise CommandNotFoundError(args[0])
        try:
            command.run(args)
        except Exception as exc:
            raise RuntimeError(
                f"error running command '{command.name}': {exc}"
            ) from exc