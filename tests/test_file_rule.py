from arkitect.file_except import This
from arkitect.file_rule import (
    RuleBuilder,
    RuleBuilderLockedError,
    all_files,
    one,
    set_of,
)
from arkitect.file_that import AreInFolder
from arkitect.rule import CoreViolation, Severity, Violation


class _NameEndsWith:
    def __init__(self, suffix, errors=None):
        self.suffix = suffix
        self.errors = list(errors or [])

    def evaluate(self, rb):
        return [
            CoreViolation(f"file '{f}' does not end with '{self.suffix}'")
            for f in rb.files
            if not f.endswith(self.suffix)
        ]


class _Broken:
    def __init__(self, err):
        self.errors = [err]

    def evaluate(self, rb):
        raise AssertionError("must not be evaluated")


def test_it_adds_locked_error_only_once():
    rb = RuleBuilder()
    rb.add_error(RuleBuilderLockedError())
    rb.add_error(RuleBuilderLockedError())
    assert len(rb.errors) == 1


def test_constructors_set_files():
    assert all_files().files == []
    assert one("./test/one/Testfile").files == ["./test/one/Testfile"]
    assert set_of("a", "b", "c").files == ["a", "b", "c"]


def test_one_file_matches_all_conditions():
    rb = one("./test/one/Testfile")
    rb.should(_NameEndsWith("file"))
    rb.and_should(_NameEndsWith("Testfile"))
    vs, errs = rb.because("I want to test all expressions together")
    assert vs == []
    assert errs == []


def test_set_of_files_matches_all_conditions():
    rb = set_of(
        "./test/set/Test1file",
        "./test/set/Test2file",
        "./test/set/Test3file",
    )
    rb.should(_NameEndsWith("file"))
    vs, errs = rb.because("reason")
    assert vs == []
    assert errs == []


def test_all_files_in_folder_except_one(tmp_path):
    for name in ("Test1file", "Test2file", "Test3file.bak"):
        (tmp_path / name).write_text("foo")
    rb = all_files()
    rb.that(AreInFolder(str(tmp_path), False))
    rb.except_(This(str(tmp_path / "Test3file.bak")))
    rb.should(_NameEndsWith("file"))
    vs, errs = rb.because("reason")
    assert vs == []
    assert errs == []
    assert rb.files == [str(tmp_path / "Test1file"), str(tmp_path / "Test2file")]


def test_severities_follow_must_should_could():
    rb = one("a.txt")
    rb.must(_NameEndsWith(".md"))
    rb.should(_NameEndsWith(".rst"))
    rb.could(_NameEndsWith(".doc"))
    vs, errs = rb.because("reason")
    assert errs == []
    assert vs == [
        Violation("file 'a.txt' does not end with '.md'", Severity.ERROR),
        Violation("file 'a.txt' does not end with '.rst'", Severity.WARNING),
        Violation("file 'a.txt' does not end with '.doc'", Severity.INFO),
    ]


def test_reuse_after_because_reports_lock_error():
    rb = one("a.txt")
    rb.must(_NameEndsWith(".txt"))
    assert rb.because("first") == ([], [])
    rb.must(_NameEndsWith(".md"))
    vs, errs = rb.because("second")
    assert vs == []
    assert len(errs) == 1
    assert isinstance(errs[0], RuleBuilderLockedError)
    assert len(rb.musts) == 1


def test_expectation_errors_stop_evaluation():
    boom = ValueError("boom")
    rb = one("a.txt")
    rb.must(_NameEndsWith(".md"))
    rb.should(_Broken(boom))
    vs, errs = rb.because("reason")
    assert vs == []
    assert errs == [boom]


def test_that_errors_stop_evaluation():
    boom = ValueError("bad that")
    rb = one("a.txt")
    rb.that(_Broken(boom))
    rb.must(_NameEndsWith(".md"))
    vs, errs = rb.because("r")
    assert vs == []
    assert errs == [boom]


def test_except_replaces_previous_excepts():
    rb = set_of("a.txt", "b.txt")
    rb.except_(This("a.txt"))
    rb.except_(This("b.txt"))
    rb.because("reason")
    assert rb.files == ["a.txt"]


def test_because_stores_reason():
    rb = one("a.txt")
    rb.because("it matters")
    assert rb.reason == "it matters"