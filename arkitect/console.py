"""JSON encoding for console output and fatal error reporting."""

from __future__ import annotations

import dataclasses
import enum
import json
import sys
import time
from datetime import datetime
from typing import Any, NoReturn

_FORMATS = ("text", "json")
_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}


class UnknownOutputFormatError(ValueError):
    """The requested output format is neither text nor json."""

    def __init__(
        self, message: str = "unknown output format, supported ones are: json, text"
    ) -> None:
        super().__init__(message)


class _Settings:
    format = "text"


_settings = _Settings()


def _default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    if isinstance(value, enum.Enum):
        return str(value)
    if isinstance(value, BaseException):
        return str(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _encode(value: Any) -> str:
    text = json.dumps(
        value,
        default=_default,
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
    )
    return "".join(_ESCAPES.get(char, char) for char in text)


def marshal(*args: Any) -> str:
    """Encode each value as compact JSON and join the results with spaces."""
    encoded = []
    for value in args:
        try:
            encoded.append(_encode(value))
        except (TypeError, ValueError) as exc:
            raise TypeError(f"cannot marshal value '{value!r}': {exc}") from exc
    return " ".join(encoded)


def set_format(fmt: str) -> None:
    """Choose how fatal errors are written: 'text' or 'json'."""
    if fmt not in _FORMATS:
        raise UnknownOutputFormatError(
            f"'{fmt}': unknown output format, supported ones are: json, text"
        )
    _settings.format = fmt


def _timestamp() -> str:
    stamp = datetime.now().astimezone().isoformat(timespec="seconds")
    return stamp[:-6] + "Z" if stamp.endswith("+00:00") else stamp


def _log(line: str) -> None:
    sys.stderr.write(f"{time.strftime('%Y/%m/%d %H:%M:%S')} {line}\n")
    sys.stderr.flush()


def fatal(error: BaseException | str) -> NoReturn:
    """Write the error to standard error in the current format and exit with 1."""
    if _settings.format == "json":
        _log(marshal({"time": _timestamp(), "level": "ERROR", "msg": str(error)}))
    else:
        _log(str(error))
    raise SystemExit(1)