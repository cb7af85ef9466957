from terrastripe.core.field_spec import (
    FieldSpec,
    FieldType,
    ResourceSchema,
    computed_attribute,
)
from terrastripe.models.product import Product, ProductParams
from terrastripe.plugins.stripe.stripe_mapper_base import StripeSingleResourceMapper

PRODUCT_SCHEMA = ResourceSchema(
    kind="stripe_product",
    fields=(
        FieldSpec(
            key="product_id",
            type=FieldType.STRING,
            remote_name="id",
            computed=True,
            force_new=True,
        ),
        FieldSpec(key="name", type=FieldType.STRING, required=True),
        FieldSpec(
            key="type",
            type=FieldType.STRING,
            force_new=True,
            allowed_values=frozenset({"good", "service"}),
        ),
        FieldSpec(key="active", type=FieldType.BOOL, default=True),
        FieldSpec(key="description", type=FieldType.STRING),
        FieldSpec(key="statement_descriptor", type=FieldType.STRING),
        FieldSpec(key="unit_label", type=FieldType.STRING),
        FieldSpec(key="attributes", type=FieldType.SET, elem_type=FieldType.STRING),
        FieldSpec(key="metadata", type=FieldType.MAP, elem_type=FieldType.STRING),
        computed_attribute("created", FieldType.INT),
        computed_attribute("updated", FieldType.INT),
        computed_attribute("livemode", FieldType.BOOL),
    ),
)


class StripeProductMapper(StripeSingleResourceMapper):
    """Map the 'stripe_product' resource."""

    resource_type = "stripe_product"
    schema = PRODUCT_SCHEMA
    params_model = ProductParams
    object_model = Product
