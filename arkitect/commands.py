"""Command-line entry point: validate, verify and version commands."""

from __future__ import annotations

import argparse
import os
import platform
import sys
from typing import Mapping, Sequence

from arkitect.cmdutil import (
    DEFAULT_CONFIG_FILE,
    NoConfigFileFoundError,
    list_config_files,
    load_config,
)
from arkitect.config import Root, execute
from arkitect.console import UnknownOutputFormatError, fatal, marshal
from arkitect.reporting import (
    RulesViolatedError,
    ValidationFailedError,
    has_errors,
    print_validation_results,
    print_validation_summary,
    print_verify_results,
)
from arkitect.schema import SchemaLoadError, load_schema

PROG = "arkitect"


def _versions() -> dict[str, str]:
    return {
        "version": "unknown",
        "gitCommit": "unknown",
        "buildTime": "unknown",
        "pythonVersion": platform.python_version(),
        "osArch": f"{sys.platform}/{platform.machine() or 'unknown'}",
    }


def _env_default(name: str, default: str) -> str:
    """Use the environment variable named after a flag when it is set."""
    value = os.environ.get(name.upper().replace("-", "_"))
    return value if value else default


def _config_paths(paths: Sequence[str] | None) -> list[str]:
    paths = list(paths or [])
    if not paths:
        paths = [os.path.join(os.getcwd(), DEFAULT_CONFIG_FILE)]
    files = list_config_files(paths)
    if not files:
        raise NoConfigFileFoundError()
    return files


def run_validate(output: str, paths: Sequence[str] | None = None) -> None:
    """Validate configuration files against the schema in the working folder."""
    try:
        schema = load_schema(os.getcwd())
    except SchemaLoadError as exc:
        raise SchemaLoadError(f"failed to load schema: {exc}") from exc

    failed = False
    for config_file in _config_paths(paths):
        conf = load_config(config_file)
        errors = list(schema.iter_errors(conf))
        if errors:
            print_validation_results(output, errors, conf, config_file)
            failed = True

    print_validation_summary(output, failed)
    if failed:
        raise ValidationFailedError()


def run_verify(output: str, paths: Sequence[str] | None = None) -> None:
    """Run the rules of configuration files against the project."""
    failed = False
    for config_file in _config_paths(paths):
        conf = Root.from_dict(load_config(config_file))
        results = execute(conf)
        print_verify_results(output, config_file, results)
        if has_errors(results):
            failed = True
    if failed:
        raise RulesViolatedError()


def run_version(output: str, versions: Mapping[str, str]) -> None:
    """Print version information as text lines or as JSON."""
    if output == "text":
        for key, value in versions.items():
            print(f"{key}: {value}")
    elif output == "json":
        print(marshal(dict(versions)))
    else:
        raise UnknownOutputFormatError(
            f"'{output}': unknown output format, supported ones are: json, text"
        )


def build_parser(versions: Mapping[str, str]) -> argparse.ArgumentParser:
    """Build the argument parser; ``--output`` is accepted before or after a command."""
    parser = argparse.ArgumentParser(prog=PROG)
    parser.add_argument(
        "--output",
        default=_env_default("output", "text"),
        help="format to use for logs and console outputs",
    )

    shared = argparse.ArgumentParser(add_help=False)
    shared.add_argument("--output", default=argparse.SUPPRESS, help=argparse.SUPPRESS)

    sub = parser.add_subparsers(dest="command")

    validate = sub.add_parser(
        "validate", parents=[shared], help="Validate the configuration file(s)"
    )
    validate.add_argument("paths", nargs="*")
    validate.set_defaults(handler=lambda ns: run_validate(ns.output, ns.paths))

    verify = sub.add_parser(
        "verify", parents=[shared], help="Verify the ruleset against a project"
    )
    verify.add_argument("paths", nargs="*")
    verify.set_defaults(handler=lambda ns: run_verify(ns.output, ns.paths))

    version = sub.add_parser(
        "version", parents=[shared], help=f"Display version information about {PROG}"
    )
    version.set_defaults(handler=lambda ns: run_version(ns.output, versions))

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line; failures are reported and exit with status 1."""
    parser = build_parser(_versions())
    ns = parser.parse_args(argv)
    handler = getattr(ns, "handler", None)
    if handler is None:
        parser.print_help()
        return 0
    try:
        handler(ns)
    except Exception as exc:
        print(f"Error: {exc}", file=sys.stderr)
        fatal(exc)
    return 0


if __name__ == "__main__":
    sys.exit(main())