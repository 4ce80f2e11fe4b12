import json

import pytest
import yaml

from arkitect.cmdutil import DEFAULT_CONFIG_FILE
from arkitect.commands import build_parser, main, run_validate, run_verify, run_version
from arkitect.console import UnknownOutputFormatError
from arkitect.reporting import RulesViolatedError, ValidationFailedError
from arkitect.schema import SchemaLoadError

VERSIONS = {"version": "1.2.3", "gitCommit": "abc"}

SCHEMA = {
    "type": "object",
    "required": ["rules"],
    "properties": {
        "rules": {
            "type": "array",
            "items": {"type": "object", "required": ["name", "kind"]},
        }
    },
}


def _config(path, target):
    doc = {
        "rules": [
            {
                "name": "exists",
                "kind": "file",
                "matcher": {"kind": "one", "filePath": str(target)},
                "musts": [{"kind": "exist"}],
                "because": "it is needed",
            }
        ]
    }
    path.write_text(yaml.safe_dump(doc))
    return str(path)


def _schema(base):
    (base / "api").mkdir()
    (base / "api" / "config_schema.json").write_text(json.dumps(SCHEMA))


def test_version_text(capsys):
    run_version("text", VERSIONS)
    assert capsys.readouterr().out.splitlines() == [
        f"{k}: {v}" for k, v in VERSIONS.items()
    ]


def test_version_json(capsys):
    run_version("json", VERSIONS)
    assert json.loads(capsys.readouterr().out) == VERSIONS


def test_version_unknown_format():
    with pytest.raises(UnknownOutputFormatError):
        run_version("xml", VERSIONS)


@pytest.mark.parametrize(
    "argv",
    [["--output", "json", "version"], ["version", "--output", "json"]],
)
def test_output_flag_before_or_after_command(argv, monkeypatch):
    monkeypatch.delenv("OUTPUT", raising=False)
    ns = build_parser(VERSIONS).parse_args(argv)
    assert ns.output == "json"
    assert ns.command == "version"


def test_output_defaults_to_text(monkeypatch):
    monkeypatch.delenv("OUTPUT", raising=False)
    assert build_parser(VERSIONS).parse_args(["version"]).output == "text"


def test_output_taken_from_environment(monkeypatch):
    monkeypatch.setenv("OUTPUT", "json")
    assert build_parser(VERSIONS).parse_args(["verify"]).output == "json"


def test_verify_passes_when_file_exists(tmp_path, capsys):
    target = tmp_path / "present.txt"
    target.write_text("x")
    conf = _config(tmp_path / "c.yaml", target)
    run_verify("text", [conf])
    out = capsys.readouterr().out
    assert f"CONFIG FILE {conf}" in out
    assert "RULE 'exists'" in out


def test_verify_fails_on_error_violation(tmp_path, capsys):
    conf = _config(tmp_path / "c.yaml", tmp_path / "absent.txt")
    with pytest.raises(RulesViolatedError):
        run_verify("json", [conf])
    data = json.loads(capsys.readouterr().out)
    assert data["configFile"] == conf
    assert data["results"][0]["Violations"][0]["message"] == (
        "file 'absent.txt' does not exist"
    )


def test_verify_default_config_missing(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(FileNotFoundError):
        run_verify("text")


def test_verify_uses_default_config_in_cwd(tmp_path, monkeypatch, capsys):
    target = tmp_path / "present.txt"
    target.write_text("x")
    _config(tmp_path / DEFAULT_CONFIG_FILE, target)
    monkeypatch.chdir(tmp_path)
    run_verify("text")
    assert "RULE 'exists'" in capsys.readouterr().out


def test_validate_succeeds(tmp_path, monkeypatch, capsys):
    _schema(tmp_path)
    conf = _config(tmp_path / "c.yaml", tmp_path / "x")
    monkeypatch.chdir(tmp_path)
    run_validate("text", [conf])
    assert capsys.readouterr().out == "Validation succeeded\n"


def test_validate_fails_on_invalid_config(tmp_path, monkeypatch, capsys):
    _schema(tmp_path)
    bad = tmp_path / "bad.yaml"
    bad.write_text(yaml.safe_dump({"rules": [{"name": "r"}]}))
    monkeypatch.chdir(tmp_path)
    with pytest.raises(ValidationFailedError):
        run_validate("text", [str(bad)])
    lines = capsys.readouterr().out.splitlines()
    assert lines[0] == f"CONFIG FILE {bad}"
    assert lines[-1] == "Validation failed"


def test_validate_without_schema(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SchemaLoadError, match="failed to load schema"):
        run_validate("text", [])


def test_main_version_json(capsys, monkeypatch):
    monkeypatch.delenv("OUTPUT", raising=False)
    assert main(["version", "--output", "json"]) == 0
    data = json.loads(capsys.readouterr().out)
    assert data["version"] == "unknown"


def test_main_exits_with_one_on_failure(tmp_path, capsys):
    conf = _config(tmp_path / "c.yaml", tmp_path / "absent.txt")
    with pytest.raises(SystemExit) as info:
        main(["verify", conf])
    assert info.value.code == 1
    assert "project does not respect defined rules" in capsys.readouterr().err