from pydantic import Field, field_validator

from .base import StripeObject, StripeParams


class WebhookEndpointParams(StripeParams):
    """Parameters for creating or updating a webhook endpoint."""

    api_version: str | None = None
    connect: bool | None = None
    description: str | None = None
    disabled: bool | None = None
    enabled_events: list[str] | None = Field(default=None, min_length=1)
    metadata: dict[str, str] | None = None
    url: str | None = None

    @field_validator("url")
    @classmethod
    def _check_scheme(cls, v: str | None) -> str | None:
        if v is not None and not v.startswith(("https://", "http://")):
            raise ValueError("url must be an http(s) URL")
        return v


class WebhookEndpoint(StripeObject):
    """
    A webhook endpoint as returned by the API.

    ``secret`` is only included in the response to the create call.
    """

    api_version: str | None = None
    application: str | None = None
    connect: bool | None = None
    description: str | None = None
    enabled_events: list[str] | None = None
    secret: str | None = None
    status: str | None = None
    url: str | None = None
