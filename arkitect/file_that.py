"""Conditions that narrow the list of files a rule applies to."""

from __future__ import annotations

import os
import stat
from typing import Any, Iterator

from arkitect.file_rule import InvalidRuleBuilderError, RuleBuilder


def _base(path: str) -> str:
    trimmed = path.rstrip(os.sep)
    if not trimmed:
        return os.sep if path else "."
    return os.path.basename(trimmed)


def _wrap_os_error(message: str, exc: OSError) -> OSError:
    err = OSError(f"{message}: {exc}")
    err.__cause__ = exc
    return err


class _Condition:
    def __init__(self) -> None:
        self.errors: list[Exception] = []

    def _builder(self, rb: Any) -> RuleBuilder | None:
        if not isinstance(rb, RuleBuilder):
            self.errors.append(InvalidRuleBuilderError())
            return None
        return rb


class AreInFolder(_Condition):
    """Select the files inside a folder, optionally descending into subfolders."""

    def __init__(self, folder: str, recursive: bool = False) -> None:
        super().__init__()
        self.folder = folder
        self.recursive = recursive

    def evaluate(self, rb: Any) -> None:
        frb = self._builder(rb)
        if frb is None:
            return

        try:
            files = self._files_recursive() if self.recursive else self._files()
        except OSError as exc:
            frb.add_error(exc)
            files = []

        frb.files = files

    def _files_recursive(self) -> list[str]:
        try:
            return list(self._walk(self.folder))
        except OSError as exc:
            raise _wrap_os_error(f"error walking the path '{self.folder}'", exc) from exc

    def _walk(self, path: str) -> Iterator[str]:
        info = os.lstat(path)
        if not stat.S_ISDIR(info.st_mode):
            yield path
            return
        for name in sorted(os.listdir(path)):
            yield from self._walk(os.path.normpath(os.path.join(path, name)))

    def _files(self) -> list[str]:
        try:
            with os.scandir(self.folder) as entries:
                names = sorted(
                    entry.name for entry in entries if not entry.is_dir(follow_symlinks=False)
                )
        except OSError as exc:
            raise _wrap_os_error(
                f"error getting files in folder '{self.folder}'", exc
            ) from exc
        return [os.path.normpath(os.path.join(self.folder, name)) for name in names]


class ContainValue(_Condition):
    """Keep the files whose path contains a value."""

    def __init__(self, value: str) -> None:
        super().__init__()
        self.value = value

    def evaluate(self, rb: Any) -> None:
        frb = self._builder(rb)
        if frb is not None:
            frb.files = [f for f in frb.files if self.value in f]


class EndWith(_Condition):
    """Keep the files whose path ends with a suffix."""

    def __init__(self, suffix: str) -> None:
        super().__init__()
        self.suffix = suffix

    def evaluate(self, rb: Any) -> None:
        frb = self._builder(rb)
        if frb is not None:
            frb.files = [f for f in frb.files if f.endswith(self.suffix)]


class StartWith(_Condition):
    """Keep the files whose name starts with a prefix."""

    def __init__(self, prefix: str) -> None:
        super().__init__()
        self.prefix = prefix

    def evaluate(self, rb: Any) -> None:
        frb = self._builder(rb)
        if frb is not None:
            frb.files = [f for f in frb.files if _base(f).startswith(self.prefix)]