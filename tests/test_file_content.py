import os

import pytest

from arkitect.file_content import (
    ContainValue,
    HaveContentMatching,
    HaveContentMatchingRegex,
    HavePermissions,
    InvalidPermissionsError,
)
from arkitect.file_expect import (
    IgnoreCase,
    IgnoreNewLinesAtTheEndOfFile,
    MatchSingleLines,
    Negated,
)
from arkitect.file_rule import InvalidRuleBuilderError, one
from arkitect.rule import CoreViolation


@pytest.fixture
def files(tmp_path):
    (tmp_path / "foobar.txt").write_bytes(b"foo bar baz quux\n")
    (tmp_path / "baz.txt").write_bytes(b"foo bar\nfoo baz\nfoo quux\n")
    perm_dir = tmp_path / "permissions"
    perm_dir.mkdir()
    perm_file = perm_dir / "0755.txt"
    perm_file.write_bytes(b"x")
    os.chmod(perm_file, 0o755)
    os.chmod(perm_dir, 0o755)
    return tmp_path


@pytest.mark.parametrize(
    "value, options, want",
    [
        (b"bar", [], []),
        (b"BAR", [IgnoreCase()], []),
        (
            b"something else",
            [],
            [CoreViolation("file 'foobar.txt' does not contain the value 'something else'")],
        ),
        (b"bar", [Negated()], [CoreViolation("file 'foobar.txt' does contain the value 'bar'")]),
        (
            b"BAR",
            [IgnoreCase(), Negated()],
            [CoreViolation("file 'foobar.txt' does contain the value 'BAR'")],
        ),
        (b"something else", [Negated()], []),
    ],
)
def test_contain_value(files, value, options, want):
    expr = ContainValue(value, *options)
    assert expr.evaluate(one(str(files / "foobar.txt"))) == want


def test_contain_value_accepts_text(files):
    assert ContainValue("quux").evaluate(one(str(files / "foobar.txt"))) == []


def test_contain_value_missing_file_reports_error(files):
    rb = one(str(files / "missing.txt"))
    got = ContainValue(b"bar").evaluate(rb)
    assert got == [CoreViolation("file 'missing.txt' does not contain the value 'bar'")]
    assert len(rb.errors) == 1
    assert isinstance(rb.errors[0], FileNotFoundError)


@pytest.mark.parametrize(
    "name, content, options, want",
    [
        ("foobar.txt", b"foo bar baz quux\n", [], []),
        ("foobar.txt", b"foo bar baz quux", [IgnoreNewLinesAtTheEndOfFile()], []),
        ("foobar.txt", b"FOO BAR BAZ QUUX\n", [IgnoreCase()], []),
        (
            "foobar.txt",
            b"something else",
            [],
            [CoreViolation("file 'foobar.txt' does not have content matching 'something else'")],
        ),
        (
            "foobar.txt",
            b"foo bar baz quux",
            [IgnoreNewLinesAtTheEndOfFile(), MatchSingleLines()],
            [],
        ),
        (
            "baz.txt",
            b"something else",
            [IgnoreNewLinesAtTheEndOfFile(), MatchSingleLines()],
            [CoreViolation("file 'baz.txt' does not have all lines matching 'something else'")],
        ),
        ("foobar.txt", b"something else\n", [Negated()], []),
    ],
)
def test_have_content_matching(files, name, content, options, want):
    expr = HaveContentMatching(content, *options)
    assert expr.evaluate(one(str(files / name))) == want


def test_have_content_matching_negated_single_lines_message(files):
    expr = HaveContentMatching(b"foo bar baz quux", Negated(), MatchSingleLines(), IgnoreNewLinesAtTheEndOfFile())
    got = expr.evaluate(one(str(files / "foobar.txt")))
    assert got == [CoreViolation("file 'foobar.txt' does have all lines matching 'foo bar baz quux'")]


@pytest.mark.parametrize(
    "name, regex, options, want",
    [
        ("foobar.txt", "^foo.+", [], []),
        ("foobar.txt", "^foo.+", [IgnoreNewLinesAtTheEndOfFile()], []),
        ("foobar.txt", "^foo.+", [IgnoreCase()], []),
        (
            "foobar.txt",
            "^something\\ else.+",
            [],
            [
                CoreViolation(
                    "file 'foobar.txt' does not have content matching regex '^something\\ else.+'"
                )
            ],
        ),
        ("baz.txt", "^foo.+", [IgnoreNewLinesAtTheEndOfFile(), MatchSingleLines()], []),
        (
            "baz.txt",
            "^bar.+",
            [IgnoreNewLinesAtTheEndOfFile(), MatchSingleLines()],
            [CoreViolation("file 'baz.txt' does not have all lines matching regex '^bar.+'")],
        ),
        ("foobar.txt", "^something\\ else.+", [Negated()], []),
    ],
)
def test_have_content_matching_regex(files, name, regex, options, want):
    expr = HaveContentMatchingRegex(regex, *options)
    assert expr.evaluate(one(str(files / name))) == want


def test_wrong_permissions_string(files):
    expr = HavePermissions("foobarbaz-")
    got = expr.evaluate(one(str(files / "permissions" / "0755.txt")))
    assert got == []
    assert len(expr.errors) == 1
    assert isinstance(expr.errors[0], InvalidPermissionsError)


@pytest.mark.parametrize(
    "target, permissions, options, want",
    [
        ("permissions", "drwxr-xr-x", [], []),
        ("permissions/0755.txt", "-rwxr-xr-x", [], []),
        (
            "permissions",
            "dr--r--r--",
            [],
            [
                CoreViolation(
                    "directory 'permissions' does not have permissions matching "
                    "'dr--r--r--', 'drwxr-xr-x' found"
                )
            ],
        ),
        (
            "permissions/0755.txt",
            "-rwxrwxrwx",
            [],
            [
                CoreViolation(
                    "file '0755.txt' does not have permissions matching "
                    "'-rwxrwxrwx', '-rwxr-xr-x' found"
                )
            ],
        ),
        (
            "permissions",
            "drwxr-xr-x",
            [Negated()],
            [
                CoreViolation(
                    "directory 'permissions' does have permissions matching "
                    "'drwxr-xr-x', 'drwxr-xr-x' found"
                )
            ],
        ),
        (
            "permissions/0755.txt",
            "-rwxr-xr-x",
            [Negated()],
            [
                CoreViolation(
                    "file '0755.txt' does have permissions matching "
                    "'-rwxr-xr-x', '-rwxr-xr-x' found"
                )
            ],
        ),
        ("permissions", "dr--r--r--", [Negated()], []),
        ("permissions/0755.txt", "-rw-r--r--", [Negated()], []),
    ],
)
def test_have_permissions(files, target, permissions, options, want):
    expr = HavePermissions(permissions, *options)
    got = expr.evaluate(one(str(files / target)))
    assert expr.errors == []
    assert got == want


def test_evaluate_rejects_other_builders():
    expr = ContainValue(b"foo")
    assert expr.evaluate(object()) == []
    assert isinstance(expr.errors[0], InvalidRuleBuilderError)