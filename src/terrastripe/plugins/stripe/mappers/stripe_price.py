from typing import Any

from terrastripe.core.field_spec import (
    AllowedOnlyWhen,
    FieldSpec,
    FieldType,
    MutuallyExclusive,
    ResourceSchema,
    computed_attribute,
)
from terrastripe.models.price import Price, PriceParams
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

PRICE_SCHEMA = ResourceSchema(
    kind="stripe_price",
    description="A price attached to a product, one-off or recurring.",
    fields=(
        computed_attribute("price_id", FieldType.STRING, remote_name="id"),
        FieldSpec(key="active", type=FieldType.BOOL, default=True),
        FieldSpec(
            key="currency", type=FieldType.STRING, required=True, force_new=True
        ),
        FieldSpec(key="metadata", type=FieldType.MAP, elem_type=FieldType.STRING),
        FieldSpec(key="nickname", type=FieldType.STRING),
        FieldSpec(key="product", type=FieldType.STRING, required=True, force_new=True),
        FieldSpec(
            key="recurring",
            type=FieldType.MAP,
            force_new=True,
            description="String-valued map; interval_count is a numeric string.",
            children=(
                FieldSpec(
                    key="interval",
                    type=FieldType.STRING,
                    required=True,
                    allowed_values=INTERVALS,
                ),
                FieldSpec(key="interval_count", type=FieldType.INT),
                FieldSpec(
                    key="usage_type", type=FieldType.STRING, allowed_values=USAGE_TYPES
                ),
                FieldSpec(
                    key="aggregate_usage",
                    type=FieldType.STRING,
                    allowed_values=AGGREGATE_USAGES,
                ),
            ),
            constraints=(
                AllowedOnlyWhen(
                    key="aggregate_usage", when="usage_type", values=("metered",)
                ),
            ),
        ),
        FieldSpec(
            key="unit_amount", type=FieldType.INT, force_new=True, write_only=True
        ),
        FieldSpec(
            key="unit_amount_decimal",
            type=FieldType.FLOAT,
            force_new=True,
            write_only=True,
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
        transform_field("transform_quantity"),
        FieldSpec(
            key="tax_behavior",
            type=FieldType.STRING,
            computed=True,
            allowed_values=frozenset({"inclusive", "exclusive", "unspecified"}),
        ),
        FieldSpec(key="lookup_key", type=FieldType.STRING),
        computed_attribute("type", FieldType.STRING),
        computed_attribute("created", FieldType.INT),
        computed_attribute("livemode", FieldType.BOOL),
    ),
    constraints=(
        MutuallyExclusive(keys=("unit_amount", "unit_amount_decimal")),
        *tiered_constraints(),
    ),
)


class StripePriceMapper(StripeSingleResourceMapper):
    """Map the 'stripe_price' resource.

    Prices cannot be deleted through the API, only archived with
    ``active = false``. Tier breakdowns are not echoed back by a plain
    retrieve, so they are kept from the previous state.
    """

    resource_type = "stripe_price"
    schema = PRICE_SCHEMA
    params_model = PriceParams
    object_model = Price
    deletable = False

    def _pre_expand(self, tree: dict[str, Any]) -> dict[str, Any]:
        return drop_unbounded_false(tree)

    def _post_expand(
        self, tree: dict[str, Any], params: dict[str, Any]
    ) -> dict[str, Any]:
        if "tiers" in params:
            params["tiers"] = expand_tiers(params["tiers"])
        return apply_tiered_override(
            params, ("unit_amount", "unit_amount_decimal"), self.resource_type
        )

    def _pre_flatten(self, data: dict[str, Any]) -> dict[str, Any]:
        if isinstance(data.get("tiers"), list):
            data["tiers"] = flatten_tiers(data["tiers"])
        return data
