"""
Shared validation routine for attribute blocks.

Every block of every resource kind, at any nesting depth, is checked by the
same functions: unknown keys, missing required keys, enumerated values and the
declarative constraints attached to the block.
"""

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from .exceptions import ValidationError
from .field_spec import FieldSpec
from .tree import is_set, join_path

logger = logging.getLogger(__name__)


def validate_block(
    fields: Iterable[FieldSpec],
    constraints: Iterable[Any],
    block: Mapping[str, Any],
    path: str = "",
) -> None:
    """
    Validate the keys of one block against its field specifications.

    Args:
        fields: Field specifications declared for the block
        constraints: Declarative constraints attached to the block
        block: The attribute mapping to check
        path: Key path of the block inside the resource tree

    Raises:
        ValidationError: On the first violation found
    """
    specs = {spec.key: spec for spec in fields}

    for key in block:
        if key not in specs:
            raise ValidationError(
                f"'{join_path(path, key)}' is not a supported attribute",
                field_name=join_path(path, key),
            )

    for spec in specs.values():
        if spec.required and spec.default is None and not is_set(block, spec.key):
            raise ValidationError(
                f"'{join_path(path, spec.key)}' is required",
                field_name=join_path(path, spec.key),
            )

    for constraint in constraints:
        violation = constraint.violation(block)
        if violation is not None:
            key, message = violation
            logger.debug(f"Constraint {constraint.kind} failed at '{path}': {message}")
            raise ValidationError(message, field_name=join_path(path, key))


def check_allowed_value(spec: FieldSpec, value: str, path: str) -> None:
    """Reject ``value`` if ``spec`` enumerates its allowed values and misses it."""
    if spec.allowed_values is None or value in spec.allowed_values:
        return
    formatted = "( " + " | ".join(sorted(spec.allowed_values)) + " )"
    raise ValidationError(
        f'"{value}" is not a valid value for "{path}", expected one of {formatted}',
        field_name=path,
        actual_value=value,
    )
