"""Console output of validation and verification results."""

from __future__ import annotations

from typing import Any, Iterable

from arkitect.config import RuleExecutionResult
from arkitect.console import UnknownOutputFormatError, marshal
from arkitect.rule import Severity
from arkitect.schema import get_ptr_paths, get_value_at_path, join_ptr_path


class ValidationFailedError(Exception):
    """At least one configuration file does not follow the schema."""

    def __init__(self, message: str = "schema has validation errors") -> None:
        super().__init__(message)


class RulesViolatedError(Exception):
    """The project breaks at least one rule with error severity."""

    def __init__(self, message: str = "project does not respect defined rules") -> None:
        super().__init__(message)


def _unknown_format(output: str) -> UnknownOutputFormatError:
    return UnknownOutputFormatError(
        f"'{output}': unknown output format, supported ones are: json, text"
    )


def _format_value(value: Any) -> str:
    if value is None:
        return "<nil>"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, dict):
        items = sorted(value.items(), key=lambda kv: str(kv[0]))
        return "map[" + " ".join(f"{k}:{_format_value(v)}" for k, v in items) + "]"
    if isinstance(value, (list, tuple)):
        return "[" + " ".join(_format_value(v) for v in value) + "]"
    return str(value)


def _message(error: Any) -> str:
    return str(getattr(error, "message", error))


def _error_text(error: Any) -> str:
    if isinstance(error, (list, tuple)):
        return "\n".join(_message(e) for e in error)
    return _message(error)


def _error_payload(error: Any) -> Any:
    if isinstance(error, (list, tuple)):
        return [_error_payload(e) for e in error]
    if not hasattr(error, "absolute_path"):
        return str(error)
    return {
        "Message": error.message,
        "InstancePtr": join_ptr_path(error.absolute_path),
        "SchemaPtr": join_ptr_path(error.absolute_schema_path),
        "Causes": [_error_payload(c) for c in error.context or ()],
    }


def print_validation_summary(output: str, has_errors: bool) -> None:
    """Print whether validation of all files succeeded."""
    result = "Validation failed" if has_errors else "Validation succeeded"
    if output == "text":
        print(result)
    elif output == "json":
        print(marshal({"result": result}))
    else:
        raise _unknown_format(output)


def print_validation_results(output: str, error: Any, conf: Any, config_file: str) -> None:
    """Print the invalid values of a configuration and the schema error."""
    if output not in ("text", "json"):
        raise _unknown_format(output)

    paths = get_ptr_paths(error)
    if output == "text":
        print(f"CONFIG FILE {config_file}")
        for path in paths:
            value = get_value_at_path(conf, path)
            print(
                f"path '{join_ptr_path(path)}' contains an invalid configuration "
                f"value: {_format_value(value)}"
            )
        print(_error_text(error))
        return

    for path in paths:
        print(
            marshal(
                {
                    "file": config_file,
                    "message": "path contains an invalid configuration value",
                    "path": join_ptr_path(path),
                    "value": get_value_at_path(conf, path),
                }
            )
        )
    print(marshal(_error_payload(error)))


def print_verify_results(
    output: str, config_file: str, results: Iterable[RuleExecutionResult]
) -> None:
    """Print the violations and errors of every rule of a configuration file."""
    results = list(results)
    if output == "text":
        print(f"CONFIG FILE {config_file}")
        for r in results:
            print(f"\nRULE '{r.rule_name}'")
            print("Violations:")
            for v in r.violations:
                print(f"- {v}")
            if not r.violations:
                print("- None")
            print("Errors:")
            for e in r.errors:
                print(f"- {e}")
            if not r.errors:
                print("- None")
    elif output == "json":
        print(marshal({"configFile": config_file, "results": results}))
    else:
        raise _unknown_format(output)


def has_errors(results: Iterable[RuleExecutionResult]) -> bool:
    """Tell whether any rule produced a violation of error severity."""
    return any(
        v.severity is Severity.ERROR for r in results for v in r.violations
    )