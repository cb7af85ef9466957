from terrastripe.core.field_spec import (
    FieldSpec,
    FieldType,
    ResourceSchema,
    computed_attribute,
)
from terrastripe.models.billing_portal import (
    BillingPortalConfiguration,
    BillingPortalConfigurationParams,
)
from terrastripe.plugins.stripe.stripe_mapper_base import StripeSingleResourceMapper


def _block(key: str, *children: FieldSpec, required: bool = False) -> FieldSpec:
    """A nested object declared as a single-element block."""
    return FieldSpec(
        key=key,
        type=FieldType.LIST,
        max_items=1,
        required=required,
        children=children,
    )


def _enum_list(key: str, values: set[str], required: bool = True) -> FieldSpec:
    return FieldSpec(
        key=key,
        type=FieldType.LIST,
        elem_type=FieldType.STRING,
        allowed_values=frozenset(values),
        required=required,
    )


def _enabled(required: bool = True) -> FieldSpec:
    return FieldSpec(key="enabled", type=FieldType.BOOL, required=required)


CANCELLATION_REASONS = {
    "too_expensive",
    "missing_features",
    "switched_service",
    "unused",
    "customer_service",
    "too_complex",
    "low_quality",
    "other",
}

FEATURES = _block(
    "features",
    _block(
        "customer_update",
        _enum_list(
            "allowed_updates", {"email", "address", "shipping", "phone", "tax_id"}
        ),
        _enabled(),
    ),
    _block("invoice_history", _enabled()),
    _block("payment_method_update", _enabled()),
    _block(
        "subscription_cancel",
        _block(
            "cancellation_reason",
            _enabled(),
            _enum_list("options", CANCELLATION_REASONS),
        ),
        _enabled(),
        FieldSpec(
            key="mode",
            type=FieldType.STRING,
            allowed_values=frozenset({"immediately", "at_period_end"}),
        ),
        FieldSpec(
            key="proration_behavior",
            type=FieldType.STRING,
            allowed_values=frozenset({"none", "create_prorations"}),
        ),
    ),
    _block("subscription_pause", _enabled(required=False)),
    _block(
        "subscription_update",
        _enum_list("default_allowed_updates", {"price", "quantity", "promotion_code"}),
        _enabled(),
        FieldSpec(
            key="proration_behavior",
            type=FieldType.STRING,
            allowed_values=frozenset({"none", "create_prorations", "always_invoice"}),
        ),
        FieldSpec(
            key="product",
            type=FieldType.SET,
            remote_name="products",
            children=(
                FieldSpec(
                    key="id",
                    type=FieldType.STRING,
                    remote_name="product",
                    required=True,
                ),
                FieldSpec(
                    key="prices",
                    type=FieldType.LIST,
                    elem_type=FieldType.STRING,
                    required=True,
                ),
            ),
        ),
    ),
    required=True,
)

CUSTOMER_PORTAL_SCHEMA = ResourceSchema(
    kind="stripe_customer_portal",
    description="The configuration of the hosted customer portal.",
    fields=(
        _block(
            "business_profile",
            FieldSpec(key="privacy_policy_url", type=FieldType.STRING, required=True),
            FieldSpec(key="terms_of_service_url", type=FieldType.STRING, required=True),
            FieldSpec(key="headline", type=FieldType.STRING, required=True),
            required=True,
        ),
        FEATURES,
        FieldSpec(key="default_return_url", type=FieldType.STRING),
        FieldSpec(key="metadata", type=FieldType.MAP, elem_type=FieldType.STRING),
        computed_attribute("is_default", FieldType.BOOL),
        computed_attribute("created", FieldType.INT),
        computed_attribute("livemode", FieldType.BOOL),
    ),
)


class StripeCustomerPortalMapper(StripeSingleResourceMapper):
    """Map the 'stripe_customer_portal' resource.

    Portal configurations have no delete endpoint.
    """

    resource_type = "stripe_customer_portal"
    schema = CUSTOMER_PORTAL_SCHEMA
    params_model = BillingPortalConfigurationParams
    object_model = BillingPortalConfiguration
    deletable = False
