"""Exceptions that remove files from the list a rule applies to."""

from __future__ import annotations

import os
from typing import Any, Callable

from arkitect.file_rule import InvalidRuleBuilderError, RuleBuilder


class _Exception:
    def __init__(self) -> None:
        self.errors: list[Exception] = []

    def _filter(self, rb: Any, keep: Callable[[str], bool]) -> None:
        if not isinstance(rb, RuleBuilder):
            self.errors.append(InvalidRuleBuilderError())
            return
        rb.files = [f for f in rb.files if keep(f)]


class This(_Exception):
    """Exclude one file, matched by absolute path or by path suffix."""

    def __init__(self, file_path: str) -> None:
        super().__init__()
        self.file_path = file_path

    def evaluate(self, rb: Any) -> None:
        self._filter(rb, self._keep)

    def _keep(self, file_path: str) -> bool:
        if os.path.isabs(self.file_path):
            return os.path.abspath(file_path) != self.file_path
        return not os.path.normpath(file_path).endswith(os.path.normpath(self.file_path))