"""Expectations on the content and the permissions of files."""

from __future__ import annotations

import os
import re
import stat
from typing import Any, Callable

from arkitect.file_expect import Expression
from arkitect.file_rule import RuleBuilder
from arkitect.rule import CoreViolation

_PERMISSIONS_PATTERN = re.compile(r"[d-][rwx-]{9}")


class InvalidPermissionsError(ValueError):
    """The permissions string given to an expectation is malformed."""

    def __init__(
        self,
        message: str = (
            "permissions must only contain the following characters: "
            "'d', 'r', 'w', 'x', '-'"
        ),
    ) -> None:
        super().__init__(message)


def _base(path: str) -> str:
    trimmed = path.rstrip(os.sep)
    if not trimmed:
        return os.sep if path else "."
    return os.path.basename(trimmed)


def _as_bytes(value: str | bytes) -> bytes:
    return value.encode() if isinstance(value, str) else bytes(value)


def _text(value: bytes) -> str:
    return value.decode("utf-8", errors="replace")


def _read(rb: RuleBuilder, file_path: str) -> bytes | None:
    try:
        with open(file_path, "rb") as handle:
            return handle.read()
    except OSError as exc:
        rb.add_error(exc)
        return None


class ContainValue(Expression):
    """Files must contain a value."""

    def __init__(self, value: str | bytes, *args: Any) -> None:
        self.value = _as_bytes(value)
        super().__init__(*args)

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        data = _read(rb, file_path)
        if data is None:
            return True
        value = self.value
        if self.options.ignore_case:
            data, value = data.lower(), value.lower()
        return value not in data

    def _violation(self, file_path: str) -> CoreViolation:
        fmt = self._format(
            "file '{}' does not contain the value '{}'",
            "file '{}' does contain the value '{}'",
        )
        return CoreViolation(fmt.format(_base(file_path), _text(self.value)))


class HaveContentMatching(Expression):
    """Files must have exactly the given content, or every line equal to it."""

    def __init__(self, value: str | bytes, *args: Any) -> None:
        self.value = _as_bytes(value)
        super().__init__(*args)

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        data = _read(rb, file_path)
        if data is None:
            return True
        value = self.value
        if self.options.ignore_new_lines_at_the_end_of_file:
            data, value = data.rstrip(b"\n"), value.rstrip(b"\n")
        if self.options.ignore_case:
            data, value = data.lower(), value.lower()
        if self.options.match_single_lines:
            separator = self.options.match_single_lines_separator.encode()
            return any(line != value for line in data.split(separator))
        return data != value

    def _violation(self, file_path: str) -> CoreViolation:
        single = self.options.match_single_lines
        if self.options.negated:
            fmt = (
                "file '{}' does have all lines matching '{}'"
                if single
                else "file '{}' does have content matching '{}'"
            )
        else:
            fmt = (
                "file '{}' does not have all lines matching '{}'"
                if single
                else "file '{}' does not have content matching '{}'"
            )
        return CoreViolation(fmt.format(_base(file_path), _text(self.value)))


class HaveContentMatchingRegex(Expression):
    """File content, or every line of it, must match a regular expression."""

    def __init__(self, regex: str, *args: Any) -> None:
        self.regex = regex
        super().__init__(*args)

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        data = _read(rb, file_path)
        if data is None:
            return True
        rx = re.compile(self.regex.encode())
        if self.options.ignore_new_lines_at_the_end_of_file:
            data = data.rstrip(b"\n")
        if self.options.ignore_case:
            data = data.lower()
        if self.options.match_single_lines:
            separator = self.options.match_single_lines_separator.encode()
            if any(rx.search(line) is None for line in data.split(separator)):
                return True
        return rx.search(data) is None

    def _violation(self, file_path: str) -> CoreViolation:
        single = self.options.match_single_lines
        if self.options.negated:
            fmt = (
                "file '{}' does have all lines matching regex '{}'"
                if single
                else "file '{}' does have content matching regex '{}'"
            )
        else:
            fmt = (
                "file '{}' does not have all lines matching regex '{}'"
                if single
                else "file '{}' does not have content matching regex '{}'"
            )
        return CoreViolation(fmt.format(_base(file_path), self.regex))


_TYPE_FLAGS: tuple[tuple[str, Callable[[int], bool]], ...] = (
    ("d", stat.S_ISDIR),
    ("l", stat.S_ISLNK),
    ("D", lambda m: stat.S_ISBLK(m) or stat.S_ISCHR(m)),
    ("p", stat.S_ISFIFO),
    ("S", stat.S_ISSOCK),
    ("u", lambda m: bool(m & stat.S_ISUID)),
    ("g", lambda m: bool(m & stat.S_ISGID)),
    ("c", stat.S_ISCHR),
    ("t", lambda m: bool(m & stat.S_ISVTX)),
)
_KNOWN_TYPES: tuple[Callable[[int], bool], ...] = (
    stat.S_ISREG,
    stat.S_ISDIR,
    stat.S_ISLNK,
    stat.S_ISBLK,
    stat.S_ISCHR,
    stat.S_ISFIFO,
    stat.S_ISSOCK,
)


def _mode_string(mode: int) -> str:
    """Render a mode as type letters followed by the nine permission bits."""
    kind = "".join(char for char, test in _TYPE_FLAGS if test(mode))
    if not any(test(mode) for test in _KNOWN_TYPES):
        kind += "?"
    perms = "".join(
        char if mode & (1 << (8 - i)) else "-" for i, char in enumerate("rwxrwxrwx")
    )
    return (kind or "-") + perms


class HavePermissions(Expression):
    """Files must have the given permissions, written like '-rw-r--r--'."""

    def __init__(self, permissions: str, *args: Any) -> None:
        self.permissions = permissions
        super().__init__(*args)
        if not _PERMISSIONS_PATTERN.fullmatch(permissions):
            self.errors.insert(0, InvalidPermissionsError())

    def _check(self, rb: RuleBuilder, file_path: str) -> bool:
        try:
            info = os.stat(file_path)
        except OSError as exc:
            rb.add_error(exc)
            return True
        return self.permissions != _mode_string(info.st_mode)

    def _violation(self, file_path: str) -> CoreViolation:
        try:
            info = os.stat(file_path)
        except OSError:
            return CoreViolation("")
        kind = "directory" if stat.S_ISDIR(info.st_mode) else "file"
        fmt = self._format(
            "{} '{}' does not have permissions matching '{}', '{}' found",
            "{} '{}' does have permissions matching '{}', '{}' found",
        )
        return CoreViolation(
            fmt.format(kind, _base(file_path), self.permissions, _mode_string(info.st_mode))
        )