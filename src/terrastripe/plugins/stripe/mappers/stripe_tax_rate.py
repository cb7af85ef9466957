from terrastripe.core.field_spec import (
    FieldSpec,
    FieldType,
    ResourceSchema,
    computed_attribute,
)
from terrastripe.models.tax_rate import TaxRate, TaxRateParams
from terrastripe.plugins.stripe.stripe_mapper_base import StripeSingleResourceMapper

TAX_RATE_SCHEMA = ResourceSchema(
    kind="stripe_tax_rate",
    fields=(
        FieldSpec(key="display_name", type=FieldType.STRING, required=True),
        FieldSpec(
            key="percentage", type=FieldType.FLOAT, required=True, force_new=True
        ),
        FieldSpec(key="inclusive", type=FieldType.BOOL, required=True, force_new=True),
        FieldSpec(key="active", type=FieldType.BOOL, default=True),
        FieldSpec(key="description", type=FieldType.STRING),
        FieldSpec(key="jurisdiction", type=FieldType.STRING),
        FieldSpec(key="country", type=FieldType.STRING),
        FieldSpec(key="state", type=FieldType.STRING),
        FieldSpec(key="metadata", type=FieldType.MAP, elem_type=FieldType.STRING),
        computed_attribute("created", FieldType.INT),
        computed_attribute("livemode", FieldType.BOOL),
    ),
)


class StripeTaxRateMapper(StripeSingleResourceMapper):
    """Map the 'stripe_tax_rate' resource.

    Tax rates can only be archived (``active = false``), never deleted.
    """

    resource_type = "stripe_tax_rate"
    schema = TAX_RATE_SCHEMA
    params_model = TaxRateParams
    object_model = TaxRate
    deletable = False
