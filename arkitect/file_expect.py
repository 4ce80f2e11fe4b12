"""Expectations that files selected by a rule must satisfy."""

from __future__ import annotations

import abc
import os
import re
import subprocess
from dataclasses import dataclass
from typing import Any

from arkitect.file_rule import InvalidRuleBuilderError, RuleBuilder
from arkitect.rule import CoreViolation

_WINDOWS_SEPARATOR = os.sep == "\\"


def _base(path: str) -> str:
    """Return the last element of a path, as a file name."""
    trimmed = path.rstrip(os.sep)
    if not trimmed:
        return os.sep if path else "."
    return os.path.basename(trimmed)


@dataclass
class Options:
    """Settings that change how an expectation is evaluated."""

    negated: bool = False
    ignore_case: bool = False
    ignore_new_lines_at_the_end_of_file: bool = False
    match_single_lines: bool = False
    match_single_lines_separator: str = ""


def _require(opts: Options | None) -> Options:
    if opts is None:
        raise ValueError("empty options")
    return opts


@dataclass(frozen=True)
class Negated:
    """Invert the expectation; applying it twice cancels it out."""

    def apply(self, opts: Options | None) -> None:
        target = _require(opts)
        target.negated = not target.negated


@dataclass(frozen=True)
class IgnoreCase:
    """Compare content without regard to letter case."""

    def apply(self, opts: Options | None) -> None:
        _require(opts).ignore_case = True


@dataclass(frozen=True)
class IgnoreNewLinesAtTheEndOfFile:
    """Drop trailing newlines before comparing content."""

    def apply(self, opts: Options | None) -> None:
        _require(opts).ignore_new_lines_at_the_end_of_file = True


@dataclass(frozen=True)
class MatchSingleLines:
    """Check every line on its own; the separator defaults to a newline."""

    separator: str = ""

    def apply(self, opts: Options | None) -> None:
        target = _require(opts)
        target.match_single_lines = True
        target.match_single_lines_separator = self.separator or "\n"


class Expression(abc.ABC):
    """Base of all expectations: applies options and reports violations."""

    def __init__(self, *args: Any) -> None:
        self.options = Options()
        self.errors: list[Exception] = []
        for opt in args:
            self.apply_option(opt)

    def apply_option(self, opt: Any) -> None:
        """Apply one option, recording an error if it cannot be applied."""
        try:
            opt.apply(self.options)
        except ValueError as exc:
            self.errors.append(exc)

    def evaluate(self, rb: Any) -> list[CoreViolation]:
        """Check every file of the builder and return the violations found."""
        if not isinstance(rb, RuleBuilder):
            self.errors.append(InvalidRuleBuilderError())
            return []
        if self.errors:
            return []
        return [
            self._violation(fp)
            for fp in rb.files
            if self._check(rb, fp) != self.options.negated
        ]

    @abc.abstractmethod
    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        """Return True when the file does not satisfy the expectation."""

    @abc.abstractmethod
    def _violation(self, file_path: str) -> CoreViolation:
        """Describe how the file fails the expectation."""

    def _format(self, positive: str, negative: str) -> str:
        return negative if self.options.negated else positive


def not_(expr: Expression) -> Expression:
    """Negate an expression in place and return it."""
    expr.apply_option(Negated())
    return expr


class BeGitencrypted(Expression):
    """Files must be encrypted with git-crypt."""

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        command = ["git", "crypt", "status", file_path]
        try:
            result = subprocess.run(
                command,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                check=False,
            )
        except OSError as exc:
            rb.add_error(exc)
            return True
        if result.returncode != 0:
            rb.add_error(
                subprocess.CalledProcessError(result.returncode, command, result.stdout)
            )
            return True
        return b"not encrypted" in (result.stdout or b"")

    def _violation(self, file_path: str) -> CoreViolation:
        fmt = self._format("file '{}' is not gitencrypted", "file '{}' is gitencrypted")
        return CoreViolation(fmt.format(_base(file_path)))


class BeGitignored(Expression):
    """Files must be ignored by git."""

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        try:
            result = subprocess.run(
                ["git", "check-ignore", "-q", file_path],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                check=False,
            )
        except OSError as exc:
            rb.add_error(exc)
            return True
        return result.returncode != 0

    def _violation(self, file_path: str) -> CoreViolation:
        fmt = self._format("file '{}' is not gitignored", "file '{}' is gitignored")
        return CoreViolation(fmt.format(_base(file_path)))


class EndWith(Expression):
    """File names must end with a suffix."""

    def __init__(self, suffix: str, *args: Any) -> None:
        self.suffix = suffix
        super().__init__(*args)

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        name = _base(file_path)
        return len(self.suffix) <= len(name) and not name.endswith(self.suffix)

    def _violation(self, file_path: str) -> CoreViolation:
        fmt = self._format(
            "file's name '{}' does not end with '{}'",
            "file's name '{}' does end with '{}'",
        )
        return CoreViolation(fmt.format(_base(file_path), self.suffix))


class Exist(Expression):
    """Files must exist."""

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        try:
            os.stat(file_path)
        except FileNotFoundError:
            return True
        except OSError as exc:
            rb.add_error(exc)
            return True
        return False

    def _violation(self, file_path: str) -> CoreViolation:
        fmt = self._format("file '{}' does not exist", "file '{}' does exist")
        return CoreViolation(fmt.format(_base(file_path)))


def _class_char(pattern: str, i: int) -> tuple[str, int]:
    if i >= len(pattern) or pattern[i] in "-]":
        raise ValueError("syntax error in pattern")
    char = pattern[i]
    if char == "\\" and not _WINDOWS_SEPARATOR:
        i += 1
        if i >= len(pattern):
            raise ValueError("syntax error in pattern")
        char = pattern[i]
    return char, i + 1


def _parse_class(pattern: str, i: int) -> tuple[str, int]:
    negated = False
    if i < len(pattern) and pattern[i] == "^":
        negated = True
        i += 1
    ranges: list[tuple[str, str]] = []
    seen = 0
    while True:
        if i < len(pattern) and pattern[i] == "]" and seen > 0:
            i += 1
            break
        lo, i = _class_char(pattern, i)
        hi = lo
        if i < len(pattern) and pattern[i] == "-":
            hi, i = _class_char(pattern, i + 1)
        seen += 1
        if lo <= hi:
            ranges.append((lo, hi))
    body = "".join(f"{re.escape(lo)}-{re.escape(hi)}" for lo, hi in ranges)
    if negated:
        return (f"[^{body}]" if body else r"[\s\S]"), i
    return (f"[{body}]" if body else "(?!)"), i


def _glob_to_regex(pattern: str) -> re.Pattern[str]:
    """Translate a shell glob whose wildcards never cross a path separator."""
    sep = re.escape(os.sep)
    out: list[str] = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if char == "*":
            out.append(f"[^{sep}]*")
            i += 1
        elif char == "?":
            out.append(f"[^{sep}]")
            i += 1
        elif char == "[":
            cls, i = _parse_class(pattern, i + 1)
            out.append(cls)
        elif char == "\\" and not _WINDOWS_SEPARATOR:
            if i + 1 >= len(pattern):
                raise ValueError("syntax error in pattern")
            out.append(re.escape(pattern[i + 1]))
            i += 2
        else:
            out.append(re.escape(char))
            i += 1
    return re.compile("".join(out), re.DOTALL)


class MatchGlob(Expression):
    """File paths must match a glob pattern relative to a base path."""

    def __init__(self, glob: str, base_path: str, *args: Any) -> None:
        self.glob = glob
        self.base_path = base_path
        super().__init__(*args)

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        pattern = os.path.abspath(os.path.join(self.base_path, self.glob))
        target = os.path.abspath(file_path)
        try:
            regex = _glob_to_regex(pattern)
        except ValueError as exc:
            rb.add_error(exc)
            return True
        return regex.fullmatch(target) is None

    def _violation(self, file_path: str) -> CoreViolation:
        fmt = self._format(
            "file's path '{}' does not match glob pattern '{}'",
            "file's path '{}' does match glob pattern '{}'",
        )
        return CoreViolation(fmt.format(_base(file_path), self.glob))


class MatchRegex(Expression):
    """File names must match a regular expression."""

    def __init__(self, regex: str, *args: Any) -> None:
        self.regex = re.compile(regex)
        super().__init__(*args)

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        return self.regex.search(_base(file_path)) is None

    def _violation(self, file_path: str) -> CoreViolation:
        fmt = self._format(
            "file's name '{}' does not match regex '{}'",
            "file's name '{}' does match regex '{}'",
        )
        return CoreViolation(fmt.format(_base(file_path), self.regex.pattern))


class StartWith(Expression):
    """File names must start with a prefix."""

    def __init__(self, prefix: str, *args: Any) -> None:
        self.prefix = prefix
        super().__init__(*args)

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        name = _base(file_path)
        return len(self.prefix) <= len(name) and not name.startswith(self.prefix)

    def _violation(self, file_path: str) -> CoreViolation:
        fmt = self._format(
            "file's name '{}' does not start with '{}'",
            "file's name '{}' does start with '{}'",
        )
        return CoreViolation(fmt.format(_base(file_path), self.prefix))