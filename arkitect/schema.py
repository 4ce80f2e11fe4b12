"""Loading of the configuration schema and helpers for its validation errors."""

from __future__ import annotations

import json
import os
import re
from typing import Any, Iterable

import jsonschema
from jsonschema import validators
from jsonschema.exceptions import SchemaError, ValidationError

_INTEGER = re.compile(r"[+-]?[0-9]+")


class ObjTypeAssertionError(TypeError):
    """A path element does not fit the type of the object it is applied to."""

    def __init__(self, message: str = "obj type assertion failed") -> None:
        super().__init__(message)


class SchemaLoadError(Exception):
    """The schema file could not be read, parsed or compiled."""


def _is_int(key: Any) -> bool:
    return isinstance(key, int) and not isinstance(key, bool)


def join_ptr_path(path: Iterable[Any]) -> str:
    """Join path elements into a pointer string; only ints and strings count."""
    parts = [str(key) for key in path if _is_int(key) or isinstance(key, str)]
    return "#" + "".join(f"/{part}" for part in parts)


def get_value_at_path(obj: Any, path: Iterable[Any]) -> Any:
    """Follow a path of list indexes and mapping keys into a decoded document."""
    for key in path:
        if _is_int(key):
            if not isinstance(obj, list):
                raise ObjTypeAssertionError()
            obj = obj[key]
        elif isinstance(key, str):
            if not isinstance(obj, dict):
                raise ObjTypeAssertionError()
            obj = obj.get(key)
    return obj


def _pointer(err: ValidationError) -> str:
    return "#" + "".join(f"/{part}" for part in err.absolute_path)


def _extract_ptrs(err: ValidationError) -> list[str]:
    ptrs = [_pointer(err)]
    for cause in err.context or ():
        if cause.context:
            ptrs.extend(_extract_ptrs(cause))
        else:
            ptrs.append(_pointer(cause))
    return ptrs


def _explode_ptr(ptr: str) -> list[Any]:
    return [
        int(part) if _INTEGER.fullmatch(part) else part
        for part in ptr.lstrip("#/").split("/")
    ]


def get_ptr_paths(err: Any) -> list[list[Any]]:
    """Return the distinct instance paths named by a validation error.

    ``err`` may be one ValidationError or an iterable of them; anything else
    yields no paths.
    """
    if isinstance(err, ValidationError):
        errors = [err]
    elif isinstance(err, (list, tuple)) and all(isinstance(e, ValidationError) for e in err):
        errors = list(err)
    else:
        return []
    ptrs = sorted({ptr for e in errors for ptr in _extract_ptrs(e)})
    return [_explode_ptr(ptr) for ptr in ptrs]


def load_schema(base_path: str) -> Any:
    """Load and compile ``api/config_schema.json`` under ``base_path``."""
    schema_path = os.path.join(base_path, "api", "config_schema.json")
    try:
        with open(schema_path, "rb") as handle:
            data = handle.read()
    except OSError as exc:
        raise SchemaLoadError(f"failed to read schema file: {exc}") from exc

    try:
        schema = json.loads(data)
    except ValueError as exc:
        raise SchemaLoadError(
            f"failed to add resource to json schema compiler: {exc}"
        ) from exc

    try:
        cls = validators.validator_for(schema, default=jsonschema.Draft7Validator)
        cls.check_schema(schema)
        return cls(schema)
    except (SchemaError, TypeError, AttributeError) as exc:
        raise SchemaLoadError(f"failed to compile json schema: {exc}") from exc