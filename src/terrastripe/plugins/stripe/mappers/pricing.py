"""
Attribute blocks and rewrites shared by the price and plan mappers.

Tiers are declared in configuration with an ``up_to``/``up_to_inf`` pair;
the API uses a single ``up_to`` that is either an integer or ``"inf"`` (and
comes back as ``null`` for the unbounded band).
"""

import logging
from typing import Any

from terrastripe.core.exceptions import ValidationError
from terrastripe.core.field_spec import (
    AllowedOnlyWhen,
    FieldSpec,
    FieldType,
    MutuallyExclusive,
    RequiredWhen,
)
from terrastripe.core.tree import as_bool

logger = logging.getLogger(__name__)

BILLING_SCHEMES = frozenset({"per_unit", "tiered"})
TIERS_MODES = frozenset({"graduated", "volume"})
INTERVALS = frozenset({"day", "week", "month", "year"})
USAGE_TYPES = frozenset({"licensed", "metered"})
AGGREGATE_USAGES = frozenset({"sum", "last_during_period", "last_ever", "max"})

TIER_FIELD = FieldSpec(
    key="tier",
    type=FieldType.LIST,
    remote_name="tiers",
    force_new=True,
    write_only=True,
    description="Pricing bands, in ascending order of their upper bound.",
    children=(
        FieldSpec(key="up_to", type=FieldType.INT),
        FieldSpec(key="up_to_inf", type=FieldType.BOOL),
        FieldSpec(key="flat_amount", type=FieldType.INT),
        FieldSpec(key="flat_amount_decimal", type=FieldType.FLOAT),
        FieldSpec(key="unit_amount", type=FieldType.INT),
        FieldSpec(key="unit_amount_decimal", type=FieldType.FLOAT),
    ),
    constraints=(
        MutuallyExclusive(keys=("up_to", "up_to_inf"), required=True),
        MutuallyExclusive(keys=("flat_amount", "flat_amount_decimal")),
        MutuallyExclusive(keys=("unit_amount", "unit_amount_decimal")),
    ),
)


def transform_field(key: str) -> FieldSpec:
    """The ``divide_by``/``round`` block of ``transform_quantity``/``_usage``."""
    return FieldSpec(
        key=key,
        type=FieldType.LIST,
        max_items=1,
        force_new=True,
        children=(
            FieldSpec(key="divide_by", type=FieldType.INT, required=True),
            FieldSpec(
                key="round",
                type=FieldType.STRING,
                required=True,
                allowed_values=frozenset({"up", "down"}),
            ),
        ),
    )


def tiered_constraints() -> tuple[Any, ...]:
    """Constraints tying the tier block to ``billing_scheme = "tiered"``."""
    tiered = ("tiered",)
    return (
        RequiredWhen(key="tier", when="billing_scheme", values=tiered),
        RequiredWhen(key="tiers_mode", when="billing_scheme", values=tiered),
        AllowedOnlyWhen(key="tier", when="billing_scheme", values=tiered),
        AllowedOnlyWhen(key="tiers_mode", when="billing_scheme", values=tiered),
    )


def drop_unbounded_false(tree: dict[str, Any]) -> dict[str, Any]:
    """Treat ``up_to_inf = false`` as not set, so it can sit next to ``up_to``."""
    tiers = tree.get("tier")
    if isinstance(tiers, list):
        for tier in tiers:
            if isinstance(tier, dict) and _is_false(tier.get("up_to_inf")):
                del tier["up_to_inf"]
    return tree


def _is_false(value: Any) -> bool:
    if value is None:
        return False
    try:
        return not as_bool(value, "up_to_inf")
    except ValidationError:
        return False


def expand_tiers(tiers: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """
    Rewrite expanded tiers into the API's ``up_to`` convention.

    Raises:
        ValidationError: If bounds do not ascend or an unbounded tier is
            not the last one
    """
    result = []
    last_bound: int | None = None
    for index, tier in enumerate(tiers):
        tier = dict(tier)
        path = f"tier.{index}.up_to"
        if tier.pop("up_to_inf", False):
            if index != len(tiers) - 1:
                raise ValidationError(
                    f"Only the last tier can be unbounded, found one at '{path}'",
                    field_name=path,
                )
            tier["up_to"] = "inf"
        else:
            bound = tier["up_to"]
            if last_bound is not None and bound <= last_bound:
                raise ValidationError(
                    f"'{path}' must be greater than {last_bound}",
                    field_name=path,
                    actual_value=bound,
                )
            last_bound = bound
        result.append(tier)
    return result


def flatten_tiers(tiers: list[Any]) -> list[Any]:
    """Rewrite tiers from a response into the ``up_to``/``up_to_inf`` pair."""
    result = []
    for tier in tiers:
        if isinstance(tier, dict) and tier.get("up_to", "inf") in (None, "inf"):
            tier = {k: v for k, v in tier.items() if k != "up_to"}
            tier["up_to_inf"] = True
        result.append(tier)
    return result


def apply_tiered_override(
    params: dict[str, Any], amount_keys: tuple[str, ...], resource_type: str
) -> dict[str, Any]:
    """
    Drop top-level unit amounts when billing is tiered.

    The tier breakdown replaces them; the API rejects both at once.
    """
    if params.get("billing_scheme") != "tiered":
        return params
    dropped = [key for key in amount_keys if key in params]
    if dropped:
        logger.warning(
            f"Ignoring {', '.join(dropped)} on tiered {resource_type}: "
            "amounts come from the tier breakdown"
        )
    return {k: v for k, v in params.items() if k not in dropped}
