from terrastripe.core.field_spec import (
    AllowedOnlyWhen,
    FieldSpec,
    FieldType,
    MutuallyExclusive,
    RequiredWhen,
    ResourceSchema,
    computed_attribute,
)
from terrastripe.models.coupon import Coupon, CouponParams
from terrastripe.plugins.stripe.stripe_mapper_base import StripeSingleResourceMapper

COUPON_SCHEMA = ResourceSchema(
    kind="stripe_coupon",
    description="A discount applied to invoices or subscriptions.",
    fields=(
        FieldSpec(
            key="code",
            type=FieldType.STRING,
            remote_name="id",
            required=True,
            force_new=True,
            description="The code customers redeem; also the coupon ID.",
        ),
        FieldSpec(key="amount_off", type=FieldType.INT, force_new=True),
        FieldSpec(key="currency", type=FieldType.STRING, force_new=True),
        FieldSpec(
            key="duration",
            type=FieldType.STRING,
            required=True,
            force_new=True,
            allowed_values=frozenset({"forever", "once", "repeating"}),
        ),
        FieldSpec(key="duration_in_months", type=FieldType.INT, force_new=True),
        FieldSpec(key="max_redemptions", type=FieldType.INT, force_new=True),
        FieldSpec(key="metadata", type=FieldType.MAP, elem_type=FieldType.STRING),
        FieldSpec(key="name", type=FieldType.STRING),
        FieldSpec(key="percent_off", type=FieldType.FLOAT, force_new=True),
        FieldSpec(
            key="redeem_by",
            type=FieldType.TIMESTAMP,
            force_new=True,
            description="RFC 3339 date after which the coupon can't be redeemed.",
        ),
        computed_attribute("valid", FieldType.BOOL),
        computed_attribute("created", FieldType.INT),
        computed_attribute("livemode", FieldType.BOOL),
        computed_attribute("times_redeemed", FieldType.INT),
    ),
    constraints=(
        MutuallyExclusive(keys=("amount_off", "percent_off"), required=True),
        RequiredWhen(key="currency", when="amount_off"),
        AllowedOnlyWhen(key="currency", when="amount_off"),
        RequiredWhen(
            key="duration_in_months", when="duration", values=("repeating",)
        ),
        AllowedOnlyWhen(
            key="duration_in_months", when="duration", values=("repeating",)
        ),
    ),
)


class StripeCouponMapper(StripeSingleResourceMapper):
    """Map the 'stripe_coupon' resource.

    Only ``name`` and ``metadata`` can change after creation.
    """

    resource_type = "stripe_coupon"
    schema = COUPON_SCHEMA
    params_model = CouponParams
    object_model = Coupon
