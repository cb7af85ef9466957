from typing import Any

from terrastripe.core.field_spec import (
    FieldSpec,
    FieldType,
    ResourceSchema,
    computed_attribute,
)
from terrastripe.models.webhook_endpoint import WebhookEndpoint, WebhookEndpointParams
from terrastripe.plugins.stripe.stripe_mapper_base import StripeSingleResourceMapper

WEBHOOK_ENDPOINT_SCHEMA = ResourceSchema(
    kind="stripe_webhook_endpoint",
    fields=(
        FieldSpec(key="url", type=FieldType.STRING, required=True),
        FieldSpec(
            key="enabled_events",
            type=FieldType.LIST,
            elem_type=FieldType.STRING,
            required=True,
        ),
        FieldSpec(key="description", type=FieldType.STRING),
        FieldSpec(key="disabled", type=FieldType.BOOL),
        FieldSpec(key="metadata", type=FieldType.MAP, elem_type=FieldType.STRING),
        FieldSpec(key="connect", type=FieldType.BOOL, force_new=True),
        FieldSpec(key="api_version", type=FieldType.STRING, force_new=True),
        FieldSpec(
            key="secret",
            type=FieldType.STRING,
            optional=False,
            computed=True,
            write_only=True,
            description="Signing secret, only returned when the endpoint is created.",
        ),
        computed_attribute("status", FieldType.STRING),
        computed_attribute("created", FieldType.INT),
        computed_attribute("livemode", FieldType.BOOL),
    ),
)


class StripeWebhookEndpointMapper(StripeSingleResourceMapper):
    """Map the 'stripe_webhook_endpoint' resource.

    The API reports ``status`` instead of echoing ``disabled``; the flag is
    derived from it on every read.
    """

    resource_type = "stripe_webhook_endpoint"
    schema = WEBHOOK_ENDPOINT_SCHEMA
    params_model = WebhookEndpointParams
    object_model = WebhookEndpoint

    def _post_expand(
        self, tree: dict[str, Any], params: dict[str, Any]
    ) -> dict[str, Any]:
        # The create call has no "disabled" parameter; endpoints start enabled.
        if params.pop("disabled", None):
            self._logger.warning(
                "Webhook endpoints are created enabled; "
                "'disabled' takes effect on the next update"
            )
        return params

    def _post_flatten(
        self, data: dict[str, Any], tree: dict[str, Any]
    ) -> dict[str, Any]:
        status = data.get("status")
        if status is not None:
            tree["disabled"] = status == "disabled"
        return tree
