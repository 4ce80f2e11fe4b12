"""Rule builder that selects files and checks expectations against them."""

from __future__ import annotations

from typing import Any, Iterable

from arkitect.rule import CoreViolation, Severity, Violation


class RuleBuilderLockedError(Exception):
    """Raised into a builder's errors when it is reused after evaluation."""

    def __init__(
        self,
        message: str = (
            "this rule builder has been already used: "
            "create a new one if you want to test a new ruleset"
        ),
    ) -> None:
        super().__init__(message)


class InvalidRuleBuilderError(Exception):
    """Reported when an expression is given a builder of the wrong type."""

    def __init__(self, message: str = "invalid rule builder type") -> None:
        super().__init__(message)


class RuleBuilder:
    """Collects conditions, exceptions and expectations for a set of files.

    Conditions ("thats") narrow the file list, exceptions remove files from it,
    and expectations produce violations whose severity depends on whether they
    were added as musts, shoulds or coulds.
    """

    def __init__(self, files: Iterable[str] | None = None) -> None:
        self.files: list[str] = list(files) if files is not None else []
        self.thats: list[Any] = []
        self.excepts: list[Any] = []
        self.musts: list[Any] = []
        self.shoulds: list[Any] = []
        self.coulds: list[Any] = []
        self.reason: str = ""
        self.violations: list[Violation] = []
        self.errors: list[Exception] = []
        self._locked = False

    def _guarded_append(self, target: list[Any], item: Any) -> RuleBuilder:
        if self._locked:
            self.add_error(RuleBuilderLockedError())
        else:
            target.append(item)
        return self

    def that(self, t: Any) -> RuleBuilder:
        return self.and_that(t)

    def and_that(self, t: Any) -> RuleBuilder:
        return self._guarded_append(self.thats, t)

    def except_(self, *args: Any) -> RuleBuilder:
        if self._locked:
            self.add_error(RuleBuilderLockedError())
        else:
            self.excepts = list(args)
        return self

    def must(self, e: Any) -> RuleBuilder:
        return self.and_must(e)

    def and_must(self, e: Any) -> RuleBuilder:
        return self._guarded_append(self.musts, e)

    def should(self, e: Any) -> RuleBuilder:
        return self.and_should(e)

    def and_should(self, e: Any) -> RuleBuilder:
        return self._guarded_append(self.shoulds, e)

    def could(self, e: Any) -> RuleBuilder:
        return self.and_could(e)

    def and_could(self, e: Any) -> RuleBuilder:
        return self._guarded_append(self.coulds, e)

    def because(self, reason: str) -> tuple[list[Violation], list[Exception]]:
        """Evaluate the rule and return its violations and errors.

        A builder can be evaluated only once; later calls report a lock error.
        """
        if self._locked:
            self.add_error(RuleBuilderLockedError())
            return [], list(self.errors)

        self._locked = True
        self.reason = reason

        for condition in (*self.thats, *self.excepts):
            if condition.errors:
                return [], list(condition.errors)
            condition.evaluate(self)

        for expects, severity in (
            (self.musts, Severity.ERROR),
            (self.shoulds, Severity.WARNING),
            (self.coulds, Severity.INFO),
        ):
            for expect in expects:
                if expect.errors:
                    return [], list(expect.errors)
                core: list[CoreViolation] = expect.evaluate(self) or []
                self.violations.extend(Violation(str(cv), severity) for cv in core)

        return list(self.violations), list(self.errors)

    def add_error(self, err: Exception) -> None:
        """Record an error; nothing is added once a lock error is present."""
        if any(isinstance(e, RuleBuilderLockedError) for e in self.errors):
            return
        self.errors.append(err)


def all_files() -> RuleBuilder:
    """A builder with no files; conditions are expected to fill it."""
    return RuleBuilder()


def one(file_path: str) -> RuleBuilder:
    """A builder for a single file."""
    return RuleBuilder([file_path])


def set_of(*args: str) -> RuleBuilder:
    """A builder for the given files."""
    return RuleBuilder(args)