"""
Helpers for untyped attribute trees.

An attribute tree is a plain nested structure of scalars, lists and dicts as
produced by the host framework or decoded from YAML/JSON. Leaves carry no type
information of their own; the coercion functions below apply the type declared
by a field specification and fail with ``ValidationError`` on mismatch.
"""

import math
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from .exceptions import ValidationError

AttributeTree = Any

_TRUE_STRINGS = {"true", "1", "yes"}
_FALSE_STRINGS = {"false", "0", "no"}


def is_set(block: Mapping[str, Any], key: str) -> bool:
    """
    Tell whether ``key`` was explicitly set in ``block``.

    ``None`` and empty collections mean "unset". Zero values such as ``0``,
    ``False`` and ``""`` are legitimate settings and count as present.
    """
    if key not in block:
        return False
    value = block[key]
    if value is None:
        return False
    if isinstance(value, (list, tuple, dict, set, frozenset)) and not value:
        return False
    return True


def join_path(parent: str, key: str | int) -> str:
    """Build a dotted key path such as ``tier.0.up_to``."""
    if parent == "":
        return str(key)
    return f"{parent}.{key}"


def get_path(tree: AttributeTree, path: str, default: Any = None) -> Any:
    """Read the value at a dotted key path, returning ``default`` if missing."""
    current = tree
    for part in path.split("."):
        if isinstance(current, Mapping):
            if part not in current:
                return default
            current = current[part]
        elif isinstance(current, (list, tuple)):
            try:
                current = current[int(part)]
            except (ValueError, IndexError):
                return default
        else:
            return default
    return current


# ---------------------------------------------------------------------------
# Scalar coercion
# ---------------------------------------------------------------------------


def as_string(value: Any, path: str) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    raise ValidationError(
        f"'{path}' must be a string",
        field_name=path,
        expected_type=str,
        actual_value=value,
    )


def as_int(value: Any, path: str) -> int:
    if isinstance(value, bool):
        raise ValidationError(
            f"'{path}' must be an integer, not a boolean",
            field_name=path,
            expected_type=int,
            actual_value=value,
        )
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str):
        try:
            return int(value.strip(), 10)
        except ValueError:
            raise ValidationError(
                f"'{path}' must be a string representing an int (e.g. \"52\")",
                field_name=path,
                expected_type=int,
                actual_value=value,
            ) from None
    raise ValidationError(
        f"'{path}' must be an integer",
        field_name=path,
        expected_type=int,
        actual_value=value,
    )


def as_float(value: Any, path: str) -> float:
    if isinstance(value, bool):
        raise ValidationError(
            f"'{path}' must be a number, not a boolean",
            field_name=path,
            expected_type=float,
            actual_value=value,
        )
    if isinstance(value, (int, float)):
        result = float(value)
    elif isinstance(value, str):
        try:
            result = float(value.strip())
        except ValueError:
            raise ValidationError(
                f"'{path}' must be a string representing a number (e.g. \"12.5\")",
                field_name=path,
                expected_type=float,
                actual_value=value,
            ) from None
    else:
        raise ValidationError(
            f"'{path}' must be a number",
            field_name=path,
            expected_type=float,
            actual_value=value,
        )
    if not math.isfinite(result):
        raise ValidationError(
            f"'{path}' must be a finite number",
            field_name=path,
            expected_type=float,
            actual_value=value,
        )
    return result


def as_bool(value: Any, path: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValidationError(
        f"'{path}' must be a boolean",
        field_name=path,
        expected_type=bool,
        actual_value=value,
    )


def as_timestamp(value: Any, path: str) -> int:
    """Convert an RFC 3339 string (or Unix seconds) to Unix seconds."""
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    if isinstance(value, str):
        try:
            parsed = datetime.fromisoformat(value.strip())
        except ValueError:
            raise ValidationError(
                f"can't convert time \"{value}\" to time. "
                "Please check if it's RFC3339-compliant",
                field_name=path,
                expected_type="RFC3339 timestamp",
                actual_value=value,
            ) from None
        if parsed.tzinfo is None:
            raise ValidationError(
                f"'{path}' must carry a timezone offset (e.g. \"Z\")",
                field_name=path,
                expected_type="RFC3339 timestamp",
                actual_value=value,
            )
        return int(parsed.timestamp())
    raise ValidationError(
        f"'{path}' must be an RFC3339 timestamp string",
        field_name=path,
        expected_type="RFC3339 timestamp",
        actual_value=value,
    )


def format_timestamp(value: Any, path: str) -> str:
    """Render Unix seconds as an RFC 3339 UTC string."""
    if isinstance(value, str):
        # Already textual, normalise it through a parse.
        value = as_timestamp(value, path)
    seconds = as_int(value, path)
    moment = datetime.fromtimestamp(seconds, tz=timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%SZ")


def as_list(value: Any, path: str) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    if isinstance(value, (set, frozenset)):
        return sorted(value, key=repr)
    raise ValidationError(
        f"'{path}' must be a list",
        field_name=path,
        expected_type=list,
        actual_value=value,
    )


def as_map(value: Any, path: str) -> dict[str, Any]:
    if isinstance(value, Mapping):
        result = {}
        for key, item in value.items():
            if not isinstance(key, str):
                raise ValidationError(
                    f"'{path}' keys must be strings",
                    field_name=path,
                    expected_type=dict,
                    actual_value=key,
                )
            result[key] = item
        return result
    raise ValidationError(
        f"'{path}' must be a map",
        field_name=path,
        expected_type=dict,
        actual_value=value,
    )
