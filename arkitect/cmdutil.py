"""Finding and loading configuration files."""

from __future__ import annotations

import os
import stat
from typing import Any, Iterable, Iterator

import yaml

DEFAULT_CONFIG_FILE = ".arkitect.yaml"
CONFIG_EXTENSION = ".yaml"


class NoConfigFileFoundError(FileNotFoundError):
    """None of the given paths holds a configuration file."""

    def __init__(self, message: str = "no config files found") -> None:
        super().__init__(message)


def _extension(path: str) -> str:
    name = os.path.basename(path)
    dot = name.rfind(".")
    return name[dot:] if dot >= 0 else ""


def _walk(path: str) -> Iterator[str]:
    info = os.lstat(path)
    if not stat.S_ISDIR(info.st_mode):
        yield path
        return
    for name in sorted(os.listdir(path)):
        yield from _walk(os.path.join(path, name))


def list_config_files(paths: Iterable[str]) -> list[str]:
    """Expand files and folders into a sorted list of distinct config files.

    Files are kept as given; folders are searched recursively for files with
    a ``.yaml`` extension. A path that does not exist raises ``OSError``.
    """
    found: list[str] = []
    for path in paths:
        if not os.path.isdir(path):
            os.stat(path)
            found.append(path)
            continue
        found.extend(p for p in _walk(path) if _extension(p) == CONFIG_EXTENSION)
    return sorted(set(found))


def load_config(path: str) -> Any:
    """Read a YAML configuration file and return the decoded document."""
    with open(path, "rb") as handle:
        return yaml.safe_load(handle)