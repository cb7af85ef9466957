"""
Expansion and flattening of resource attribute trees.

``expand`` turns an untyped configuration tree into the parameter structure
the remote API expects, keyed by remote field names. ``flatten`` maps a remote
object back onto a configuration tree. ``expand_metadata`` and
``expand_update`` compute incremental updates from an explicit
``(previous, desired)`` pair of snapshots.

All functions are pure: they never mutate their inputs and either return a
complete result or raise ``ValidationError``.
"""

import copy
import logging
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from .exceptions import ValidationError
from .field_spec import FieldSpec, FieldType, MutuallyExclusive, ResourceSchema
from .tree import (
    AttributeTree,
    as_bool,
    as_float,
    as_int,
    as_list,
    as_map,
    as_string,
    as_timestamp,
    format_timestamp,
    is_set,
    join_path,
)
from .validation import check_allowed_value, validate_block

logger = logging.getLogger(__name__)

_EXPAND_SCALAR: dict[FieldType, Callable[[Any, str], Any]] = {
    FieldType.STRING: as_string,
    FieldType.INT: as_int,
    FieldType.FLOAT: as_float,
    FieldType.BOOL: as_bool,
    FieldType.TIMESTAMP: as_timestamp,
}

_FLATTEN_SCALAR: dict[FieldType, Callable[[Any, str], Any]] = {
    FieldType.STRING: as_string,
    FieldType.INT: as_int,
    FieldType.FLOAT: as_float,
    FieldType.BOOL: as_bool,
    FieldType.TIMESTAMP: format_timestamp,
}


# ---------------------------------------------------------------------------
# Expand
# ---------------------------------------------------------------------------


def expand(tree: AttributeTree, schema: ResourceSchema) -> dict[str, Any]:
    """
    Convert a configuration tree into remote request parameters.

    Only explicitly set keys (and keys with a declared default) reach the
    output. Computed-only keys are ignored. Nested block lists keep their
    order.

    Args:
        tree: The desired attributes of one resource instance
        schema: The static schema of the resource kind

    Returns:
        Request parameters keyed by remote field names

    Raises:
        ValidationError: If any value or field combination is invalid
    """
    block = as_map(tree if tree is not None else {}, schema.kind)
    params = _expand_block(schema.fields, schema.constraints, block, "")
    logger.debug(f"Expanded {schema.kind}: {sorted(params)}")
    return params


def _expand_block(
    fields: tuple[FieldSpec, ...],
    constraints: tuple[Any, ...],
    block: Mapping[str, Any],
    path: str,
) -> dict[str, Any]:
    validate_block(fields, constraints, block, path)

    out: dict[str, Any] = {}
    for spec in fields:
        if not spec.settable:
            continue
        if is_set(block, spec.key):
            value = block[spec.key]
        elif spec.default is not None:
            value = spec.default
        else:
            continue
        out[spec.remote] = _expand_value(spec, value, join_path(path, spec.key))
    return out


def _expand_value(spec: FieldSpec, value: Any, path: str) -> Any:
    if spec.type.is_scalar:
        return _expand_scalar(spec, spec.type, value, path)

    if spec.type is FieldType.MAP:
        mapping = as_map(value, path)
        if spec.is_typed_map:
            return _expand_block(spec.children, spec.constraints, mapping, path)
        return {
            key: _expand_scalar(spec, spec.elem_type, item, join_path(path, key))
            for key, item in mapping.items()
        }

    items = as_list(value, path)
    if spec.max_items is not None and len(items) > spec.max_items:
        raise ValidationError(
            f"'{path}' accepts at most {spec.max_items} element(s), got {len(items)}",
            field_name=path,
        )

    if spec.is_block:
        expanded = [
            _expand_block(
                spec.children,
                spec.constraints,
                as_map(item, join_path(path, index)),
                join_path(path, index),
            )
            for index, item in enumerate(items)
        ]
        if spec.single:
            return expanded[0]
        return _dedupe(expanded) if spec.type is FieldType.SET else expanded

    elements = [
        _expand_scalar(spec, spec.elem_type, item, join_path(path, index))
        for index, item in enumerate(items)
    ]
    return _dedupe(elements) if spec.type is FieldType.SET else elements


def _expand_scalar(
    spec: FieldSpec, field_type: FieldType | None, value: Any, path: str
) -> Any:
    if value is None:
        raise ValidationError(f"'{path}' must not be null", field_name=path)
    result = _EXPAND_SCALAR[field_type](value, path)
    if field_type is FieldType.STRING:
        check_allowed_value(spec, result, path)
    return result


def _dedupe(values: list[Any]) -> list[Any]:
    seen: set[str] = set()
    result = []
    for value in values:
        marker = repr(_canonical(value))
        if marker not in seen:
            seen.add(marker)
            result.append(value)
    return result


def _canonical(value: Any) -> Any:
    if isinstance(value, Mapping):
        return tuple(sorted((k, _canonical(v)) for k, v in value.items()))
    if isinstance(value, (list, tuple)):
        return tuple(_canonical(v) for v in value)
    return value


# ---------------------------------------------------------------------------
# Metadata
# ---------------------------------------------------------------------------


def expand_metadata(
    previous: Mapping[str, Any] | None,
    desired: Mapping[str, Any] | None,
    path: str = "metadata",
) -> dict[str, str]:
    """
    Compute the metadata update for a merge-by-key remote store.

    Keys dropped from ``desired`` are sent as empty-string tombstones; every
    key of ``desired`` is sent with its current value.

    Example:
        >>> expand_metadata({"a": "1", "b": "2"}, {"a": "1", "c": "3"})
        {'b': '', 'a': '1', 'c': '3'}
    """
    old = as_map(previous or {}, path)
    new = as_map(desired or {}, path)

    result = {key: "" for key in old if key not in new}
    for key, value in new.items():
        result[key] = "" if value is None else as_string(value, join_path(path, key))

    removed = [key for key in old if key not in new]
    if removed:
        logger.debug(f"Metadata keys tombstoned at '{path}': {sorted(removed)}")
    return result


# ---------------------------------------------------------------------------
# Flatten
# ---------------------------------------------------------------------------


def remote_to_dict(remote: Any) -> dict[str, Any]:
    """Turn a remote response (pydantic model or mapping) into a plain dict."""
    if isinstance(remote, BaseModel):
        return remote.model_dump(exclude_unset=True)
    if isinstance(remote, Mapping):
        return dict(remote)
    raise ValidationError(
        "Remote object must be a mapping or a model",
        expected_type=dict,
        actual_value=type(remote).__name__,
    )


def flatten(
    remote: Any,
    schema: ResourceSchema,
    previous: AttributeTree = None,
) -> dict[str, Any]:
    """
    Map a remote object back onto a configuration tree.

    The result starts from a copy of ``previous``. Fields the remote object
    does not carry leave their keys untouched, so write-only data such as a
    price's tier breakdown survives a read.

    Args:
        remote: The remote response object
        schema: The static schema of the resource kind
        previous: The last known attribute tree, if any

    Returns:
        A new attribute tree
    """
    data = remote_to_dict(remote)
    tree = copy.deepcopy(dict(as_map(previous, schema.kind))) if previous else {}
    _flatten_block(schema.fields, schema.constraints, data, tree, "")
    logger.debug(f"Flattened {schema.kind}: {sorted(tree)}")
    return tree


def _flatten_block(
    fields: tuple[FieldSpec, ...],
    constraints: tuple[Any, ...],
    data: Mapping[str, Any],
    target: dict[str, Any],
    path: str,
) -> None:
    previously_set = {spec.key for spec in fields if is_set(target, spec.key)}
    touched: list[str] = []

    for spec in fields:
        if spec.remote not in data:
            continue
        raw = data[spec.remote]
        key_path = join_path(path, spec.key)
        if raw is None:
            if spec.write_only:
                continue
            target[spec.key] = None
        else:
            target[spec.key] = _flatten_value(spec, raw, target.get(spec.key), key_path)
        touched.append(spec.key)

    _resolve_exclusive(constraints, target, previously_set, touched, path)


def _flatten_value(spec: FieldSpec, raw: Any, previous: Any, path: str) -> Any:
    if spec.type is FieldType.TIMESTAMP:
        return _flatten_timestamp(raw, previous, path)
    if spec.type.is_scalar:
        return _FLATTEN_SCALAR[spec.type](raw, path)

    if spec.type is FieldType.MAP:
        mapping = as_map(raw, path)
        if spec.is_typed_map:
            return _flatten_typed_map(spec, mapping, path)
        return {
            key: _FLATTEN_SCALAR[spec.elem_type](item, join_path(path, key))
            for key, item in mapping.items()
            if item is not None
        }

    if spec.is_block:
        if spec.single and isinstance(raw, Mapping):
            raw = [raw]
        items = as_list(raw, path)
        prior = previous if isinstance(previous, list) else []
        result = []
        for index, item in enumerate(items):
            prior_item = prior[index] if index < len(prior) else None
            target = dict(prior_item) if isinstance(prior_item, Mapping) else {}
            _flatten_block(
                spec.children,
                spec.constraints,
                as_map(item, join_path(path, index)),
                target,
                join_path(path, index),
            )
            result.append(target)
        return result

    return [
        _FLATTEN_SCALAR[spec.elem_type](item, join_path(path, index))
        for index, item in enumerate(as_list(raw, path))
        if item is not None
    ]


def _flatten_timestamp(raw: Any, previous: Any, path: str) -> str:
    """Render a remote instant, keeping the previous spelling of that instant."""
    seconds = as_timestamp(raw, path)
    if isinstance(previous, str):
        if _coerce_leaf(FieldType.TIMESTAMP, previous) == seconds:
            return previous
    return format_timestamp(seconds, path)


def _flatten_typed_map(
    spec: FieldSpec, mapping: Mapping[str, Any], path: str
) -> dict[str, str]:
    result = {}
    for child in spec.children or ():
        raw = mapping.get(child.remote)
        if raw is None:
            continue
        key_path = join_path(path, child.key)
        value = _flatten_value(child, raw, None, key_path)
        result[child.key] = as_string(value, key_path)
    return result


def _resolve_exclusive(
    constraints: tuple[Any, ...],
    target: dict[str, Any],
    previously_set: set[str],
    touched: list[str],
    path: str,
) -> None:
    """Keep a single member of each mutually exclusive group after a flatten."""
    for constraint in constraints:
        if not isinstance(constraint, MutuallyExclusive):
            continue
        present = [key for key in constraint.keys if is_set(target, key)]
        if len(present) < 2:
            continue
        preferred = (
            [key for key in present if key in touched and key in previously_set]
            or [key for key in present if key in touched]
            or present
        )
        keep = preferred[0]
        for key in present:
            if key != keep:
                target.pop(key, None)
        logger.debug(f"Kept '{join_path(path, keep)}' out of {present}")


# ---------------------------------------------------------------------------
# Update diffs
# ---------------------------------------------------------------------------


def values_equal(spec: FieldSpec, old: Any, new: Any) -> bool:
    """Compare two values of ``spec`` under presence and set semantics."""
    return _normalise(spec, old) == _normalise(spec, new)


def _normalise(spec: FieldSpec, value: Any) -> Any:
    if not is_set({"v": value}, "v"):
        return None
    if spec.type.is_scalar:
        return _coerce_leaf(spec.type, value)
    if spec.type is FieldType.MAP:
        if not isinstance(value, Mapping):
            return value
        if spec.is_typed_map:
            return _normalise_block(spec, value)
        return {
            k: _coerce_leaf(spec.elem_type, v)
            for k, v in value.items()
            if v is not None
        }
    if not isinstance(value, (list, tuple, set, frozenset)):
        return value

    items = list(value)
    if spec.is_block:
        items = [_normalise_block(spec, item) for item in items]
    else:
        items = [_coerce_leaf(spec.elem_type, item) for item in items]
    if spec.type is FieldType.SET:
        items = sorted(items, key=lambda item: repr(_canonical(item)))
    return items


def _coerce_leaf(field_type: FieldType, value: Any) -> Any:
    """Coerce a leaf for comparison; a value that does not coerce matches nothing."""
    try:
        return _EXPAND_SCALAR[field_type](value, "")
    except ValidationError:
        return object()


def _normalise_block(spec: FieldSpec, item: Any) -> Any:
    if not isinstance(item, Mapping):
        return item
    result = {}
    for child in spec.children or ():
        normalised = _normalise(child, item.get(child.key))
        if normalised is not None:
            result[child.key] = normalised
    return result


def changed_keys(
    previous: AttributeTree, desired: AttributeTree, schema: ResourceSchema
) -> list[str]:
    """
    List the settable top-level keys whose value differs between snapshots.

    An unset key counts as its declared default. An optional computed key
    left out of ``desired`` keeps whatever the remote side assigned.
    """
    old = as_map(previous or {}, schema.kind)
    new = as_map(desired or {}, schema.kind)
    changed = []
    for spec in schema.fields:
        if not spec.settable:
            continue
        if spec.computed and not is_set(new, spec.key):
            continue
        old_value = _with_default(spec, old)
        new_value = _with_default(spec, new)
        if not values_equal(spec, old_value, new_value):
            changed.append(spec.key)
    return changed


def _with_default(spec: FieldSpec, block: Mapping[str, Any]) -> Any:
    if is_set(block, spec.key):
        return block[spec.key]
    return spec.default


def replacement_keys(
    previous: AttributeTree, desired: AttributeTree, schema: ResourceSchema
) -> list[str]:
    """List the changed keys that cannot be updated in place."""
    forced = set(schema.force_new_keys())
    return [key for key in changed_keys(previous, desired, schema) if key in forced]


def expand_update(
    previous: AttributeTree, desired: AttributeTree, schema: ResourceSchema
) -> dict[str, Any]:
    """
    Build update parameters carrying only the updatable keys that changed.

    ``desired`` is validated in full first. Metadata-style string maps are
    diffed with ``expand_metadata``. A string key removed from ``desired`` is
    sent as ``""`` to clear it, unless it is enumerated; a removed key with a
    declared default is sent at its default.

    Raises:
        ValidationError: If ``desired`` is not a valid configuration
    """
    expand(desired, schema)

    old = as_map(previous or {}, schema.kind)
    new = as_map(desired or {}, schema.kind)

    out: dict[str, Any] = {}
    for key in changed_keys(old, new, schema):
        spec = schema.field(key)
        if spec is None or not spec.updatable:
            continue
        if spec.type is FieldType.MAP and not spec.is_typed_map:
            out[spec.remote] = expand_metadata(old.get(key), new.get(key), key)
        elif is_set(new, key):
            out[spec.remote] = _expand_value(spec, new[key], key)
        elif spec.default is not None:
            out[spec.remote] = _expand_value(spec, spec.default, key)
        elif spec.allowed_values is not None:
            logger.debug(f"Left '{key}' as is, an enumerated key cannot be cleared")
        elif spec.type is FieldType.STRING:
            out[spec.remote] = ""
    logger.debug(f"Update for {schema.kind} touches: {sorted(out)}")
    return out
