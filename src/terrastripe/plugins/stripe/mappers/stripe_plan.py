from typing import Any

from terrastripe.core.field_spec import (
    AllowedOnlyWhen,
    FieldSpec,
    FieldType,
    MutuallyExclusive,
    ResourceSchema,
    computed_attribute,
)
from terrastripe.models.plan import Plan, PlanParams
from terrastripe.plugins.stripe.stripe_mapper_base import StripeSingleResourceMapper

from .pricing import (
    AGGREGATE_USAGES,
    BILLING_SCHEMES,
    INTERVALS,
    TIER_FIELD,
    TIERS_MODES,
    USAGE_TYPES,
    apply_tiered_override,
    drop_unbounded_false,
    expand_tiers,
    flatten_tiers,
    tiered_constraints,
    transform_field,
)

PLAN_SCHEMA = ResourceSchema(
    kind="stripe_plan",
    description="A legacy recurring plan.",
    fields=(
        FieldSpec(
            key="plan_id",
            type=FieldType.STRING,
            remote_name="id",
            computed=True,
            force_new=True,
        ),
        FieldSpec(key="nickname", type=FieldType.STRING),
        FieldSpec(key="active", type=FieldType.BOOL, default=True),
        FieldSpec(
            key="amount", type=FieldType.INT, force_new=True, write_only=True
        ),
        FieldSpec(
            key="amount_decimal",
            type=FieldType.FLOAT,
            force_new=True,
            write_only=True,
        ),
        FieldSpec(
            key="currency", type=FieldType.STRING, required=True, force_new=True
        ),
        FieldSpec(
            key="interval",
            type=FieldType.STRING,
            required=True,
            force_new=True,
            allowed_values=INTERVALS,
        ),
        FieldSpec(key="interval_count", type=FieldType.INT, force_new=True),
        FieldSpec(key="product", type=FieldType.STRING, required=True, force_new=True),
        FieldSpec(
            key="usage_type",
            type=FieldType.STRING,
            force_new=True,
            allowed_values=USAGE_TYPES,
        ),
        FieldSpec(
            key="aggregate_usage",
            type=FieldType.STRING,
            force_new=True,
            allowed_values=AGGREGATE_USAGES,
        ),
        FieldSpec(
            key="billing_scheme",
            type=FieldType.STRING,
            force_new=True,
            allowed_values=BILLING_SCHEMES,
        ),
        FieldSpec(
            key="tiers_mode",
            type=FieldType.STRING,
            force_new=True,
            allowed_values=TIERS_MODES,
        ),
        TIER_FIELD,
        transform_field("transform_usage"),
        FieldSpec(key="trial_period_days", type=FieldType.INT),
        FieldSpec(key="metadata", type=FieldType.MAP, elem_type=FieldType.STRING),
        computed_attribute("created", FieldType.INT),
        computed_attribute("livemode", FieldType.BOOL),
    ),
    constraints=(
        MutuallyExclusive(keys=("amount", "amount_decimal")),
        AllowedOnlyWhen(key="aggregate_usage", when="usage_type", values=("metered",)),
        *tiered_constraints(),
    ),
)


class StripePlanMapper(StripeSingleResourceMapper):
    """Map the 'stripe_plan' resource.

    Amounts are fixed once a plan exists; changing one requires a new plan.
    """

    resource_type = "stripe_plan"
    schema = PLAN_SCHEMA
    params_model = PlanParams
    object_model = Plan

    def _pre_expand(self, tree: dict[str, Any]) -> dict[str, Any]:
        return drop_unbounded_false(tree)

    def _post_expand(
        self, tree: dict[str, Any], params: dict[str, Any]
    ) -> dict[str, Any]:
        if "tiers" in params:
            params["tiers"] = expand_tiers(params["tiers"])
        return apply_tiered_override(
            params, ("amount", "amount_decimal"), self.resource_type
        )

    def _pre_flatten(self, data: dict[str, Any]) -> dict[str, Any]:
        if isinstance(data.get("tiers"), list):
            data["tiers"] = flatten_tiers(data["tiers"])
        return data
