"""Configuration model for rule sets and execution of the rules it describes."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from arkitect.file_content import (
    ContainValue,
    HaveContentMatching,
    HaveContentMatchingRegex,
    HavePermissions,
)
from arkitect.file_except import This
from arkitect.file_expect import (
    BeGitencrypted,
    BeGitignored,
    EndWith,
    Exist,
    Expression,
    IgnoreCase,
    IgnoreNewLinesAtTheEndOfFile,
    MatchGlob,
    MatchRegex,
    MatchSingleLines,
    Negated,
    StartWith,
)
from arkitect.file_rule import RuleBuilder, all_files, one, set_of
from arkitect.file_that import AreInFolder
from arkitect.file_that import ContainValue as ThatContainValue
from arkitect.file_that import EndWith as ThatEndWith
from arkitect.rule import Violation


class _UnknownKindError(ValueError):
    what = ""

    def __init__(self, kind: str) -> None:
        self.kind = kind
        super().__init__(f"'{kind}': unknown '{self.what}'")


class UnknownRuleError(_UnknownKindError):
    """A rule has a kind that is not supported."""

    what = "rule"


class UnknownMatcherError(_UnknownKindError):
    """A rule's matcher has a kind that is not supported."""

    what = "matcher"


class UnknownThatError(_UnknownKindError):
    """A condition has a kind that is not supported."""

    what = "that"


class UnknownExceptError(_UnknownKindError):
    """An exception has a kind that is not supported."""

    what = "except"


class UnknownExpectError(_UnknownKindError):
    """An expectation has a kind that is not supported."""

    what = "expect"


class UnknownExpectOptionError(_UnknownKindError):
    """An expectation option has a kind that is not supported."""

    what = "expect' option"

    def __init__(self, kind: str) -> None:
        self.kind = kind
        ValueError.__init__(self, f"'{kind}': unknown 'expect' option")


@dataclass
class ExpectOptionSpec:
    kind: str = ""
    separator: str = ""


@dataclass
class ExpectSpec:
    kind: str = ""
    value: str = ""
    suffix: str = ""
    regex: str = ""
    permissions: str = ""
    glob: str = ""
    prefix: str = ""
    base_path: str = ""
    options: list[ExpectOptionSpec] = field(default_factory=list)


@dataclass
class ExceptSpec:
    kind: str = ""
    file_path: str = ""


@dataclass
class ThatSpec:
    kind: str = ""
    folder: str = ""
    recursive: bool = False
    suffix: str = ""
    value: str = ""


@dataclass
class MatcherSpec:
    kind: str = ""
    file_path: str = ""
    file_paths: list[str] = field(default_factory=list)


@dataclass
class RuleSpec:
    name: str = ""
    kind: str = ""
    matcher: MatcherSpec = field(default_factory=MatcherSpec)
    thats: list[ThatSpec] = field(default_factory=list)
    excepts: list[ExceptSpec] = field(default_factory=list)
    musts: list[ExpectSpec] = field(default_factory=list)
    shoulds: list[ExpectSpec] = field(default_factory=list)
    coulds: list[ExpectSpec] = field(default_factory=list)
    because: str = ""


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise ValueError(f"{what} must be a mapping")
    return data


def _text(data: Mapping[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def _items(data: Mapping[str, Any], key: str, parse: Callable[[Any], Any]) -> list[Any]:
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"'{key}' must be a list")
    return [parse(item) for item in value]


def _parse_option(data: Any) -> ExpectOptionSpec:
    d = _mapping(data, "option")
    return ExpectOptionSpec(kind=_text(d, "kind"), separator=_text(d, "separator"))


def _parse_expect(data: Any) -> ExpectSpec:
    d = _mapping(data, "expect")
    return ExpectSpec(
        kind=_text(d, "kind"),
        value=_text(d, "value"),
        suffix=_text(d, "suffix"),
        regex=_text(d, "regex"),
        permissions=_text(d, "permissions"),
        glob=_text(d, "glob"),
        prefix=_text(d, "prefix"),
        base_path=_text(d, "basePath"),
        options=_items(d, "options", _parse_option),
    )


def _parse_except(data: Any) -> ExceptSpec:
    d = _mapping(data, "except")
    return ExceptSpec(kind=_text(d, "kind"), file_path=_text(d, "filePath"))


def _parse_that(data: Any) -> ThatSpec:
    d = _mapping(data, "that")
    return ThatSpec(
        kind=_text(d, "kind"),
        folder=_text(d, "folder"),
        recursive=bool(d.get("recursive", False)),
        suffix=_text(d, "suffix"),
        value=_text(d, "value"),
    )


def _parse_matcher(data: Any) -> MatcherSpec:
    d = _mapping(data, "matcher")
    return MatcherSpec(
        kind=_text(d, "kind"),
        file_path=_text(d, "filePath"),
        file_paths=_items(d, "filePaths", str),
    )


def _parse_rule(data: Any) -> RuleSpec:
    d = _mapping(data, "rule")
    return RuleSpec(
        name=_text(d, "name"),
        kind=_text(d, "kind"),
        matcher=_parse_matcher(d.get("matcher")),
        thats=_items(d, "thats", _parse_that),
        excepts=_items(d, "excepts", _parse_except),
        musts=_items(d, "musts", _parse_expect),
        shoulds=_items(d, "shoulds", _parse_expect),
        coulds=_items(d, "coulds", _parse_expect),
        because=_text(d, "because"),
    )


@dataclass
class Root:
    """A whole configuration file: a list of rules."""

    rules: list[RuleSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> Root:
        """Build the configuration from decoded YAML or JSON data."""
        return cls(rules=_items(_mapping(data, "configuration"), "rules", _parse_rule))


@dataclass
class RuleExecutionResult:
    """Violations and errors produced by one rule."""

    rule_name: str
    violations: list[Violation] = field(default_factory=list)
    errors: list[Exception] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-ready mapping of the result."""
        return {
            "RuleName": self.rule_name,
            "Violations": [v.to_dict() for v in self.violations],
            "Errors": [str(e) for e in self.errors],
        }


def execute(conf: Root) -> list[RuleExecutionResult]:
    """Run every rule of the configuration and collect the results."""
    results = []
    for rule in conf.rules:
        if rule.kind == "file":
            violations, errors = execute_file_rule(rule)
        else:
            violations, errors = [], [UnknownRuleError(rule.kind)]
        results.append(RuleExecutionResult(rule.name, list(violations), list(errors)))
    return results


_MATCHERS: dict[str, Callable[[MatcherSpec], RuleBuilder]] = {
    "one": lambda m: one(m.file_path),
    "set": lambda m: set_of(*m.file_paths),
    "all": lambda m: all_files(),
}

_THATS: dict[str, Callable[[ThatSpec], Any]] = {
    "are_in_folder": lambda t: AreInFolder(t.folder, t.recursive),
    "end_with": lambda t: ThatEndWith(t.suffix),
    "contain_value": lambda t: ThatContainValue(t.value),
}

_EXCEPTS: dict[str, Callable[[ExceptSpec], Any]] = {
    "this": lambda e: This(e.file_path),
}

_EXPECTS: dict[str, Callable[[ExpectSpec, list[Any]], Expression]] = {
    "be_gitencrypted": lambda e, o: BeGitencrypted(*o),
    "be_gitignored": lambda e, o: BeGitignored(*o),
    "contain_value": lambda e, o: ContainValue(e.value.encode(), *o),
    "end_with": lambda e, o: EndWith(e.suffix, *o),
    "exist": lambda e, o: Exist(),
    "have_content_matching_regex": lambda e, o: HaveContentMatchingRegex(e.regex, *o),
    "have_content_matching": lambda e, o: HaveContentMatching(e.value.encode(), *o),
    "have_permissions": lambda e, o: HavePermissions(e.permissions, *o),
    "match_glob": lambda e, o: MatchGlob(e.glob, e.base_path, *o),
    "match_regex": lambda e, o: MatchRegex(e.regex, *o),
    "start_with": lambda e, o: StartWith(e.prefix, *o),
}

_OPTIONS: dict[str, Callable[[ExpectOptionSpec], Any]] = {
    "negated": lambda o: Negated(),
    "ignore_case": lambda o: IgnoreCase(),
    "ignore_new_lines_at_the_end_of_file": lambda o: IgnoreNewLinesAtTheEndOfFile(),
    "match_single_lines": lambda o: MatchSingleLines(o.separator),
}


def _options(spec: ExpectSpec) -> list[Any]:
    options = []
    for opt in spec.options:
        factory = _OPTIONS.get(opt.kind)
        if factory is None:
            raise UnknownExpectOptionError(opt.kind)
        options.append(factory(opt))
    return options


def _apply_expects(
    specs: list[ExpectSpec], add: Callable[[Any], Any], errors: list[Exception]
) -> None:
    for spec in specs:
        try:
            options = _options(spec)
        except UnknownExpectOptionError as exc:
            errors.append(exc)
            options = []
        factory = _EXPECTS.get(spec.kind)
        if factory is None:
            errors.append(UnknownExpectError(spec.kind))
            continue
        add(factory(spec, options))


def execute_file_rule(conf: RuleSpec) -> tuple[list[Violation], list[Exception]]:
    """Build a file rule from its configuration and evaluate it."""
    matcher = _MATCHERS.get(conf.matcher.kind)
    if matcher is None:
        return [], [UnknownMatcherError(conf.matcher.kind)]
    rb = matcher(conf.matcher)

    for that in conf.thats:
        factory = _THATS.get(that.kind)
        if factory is None:
            return [], [UnknownThatError(that.kind)]
        rb.that(factory(that))

    for exc in conf.excepts:
        factory = _EXCEPTS.get(exc.kind)
        if factory is None:
            return [], [UnknownExceptError(exc.kind)]
        rb.except_(factory(exc))

    errors: list[Exception] = []
    _apply_expects(conf.musts, rb.must, errors)
    _apply_expects(conf.shoulds, rb.should, errors)
    _apply_expects(conf.coulds, rb.could, errors)
    if errors:
        return [], errors

    return rb.because(conf.because)