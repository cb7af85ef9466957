from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class StripeParams(BaseModel):
    """
    Base class for request parameters sent to the billing API.

    Unknown fields are rejected. Only fields that were explicitly assigned are
    serialised, so a zero value set on purpose is kept apart from "unset".
    """

    model_config = ConfigDict(extra="forbid")

    def to_request(self) -> dict[str, Any]:
        """Serialise the explicitly set fields, nested models included."""
        return self.model_dump(exclude_unset=True)


class StripeNested(BaseModel):
    """Base class for nested objects inside API responses."""

    model_config = ConfigDict(extra="ignore")


class StripeObject(StripeNested):
    """
    Base class for objects returned by the billing API.

    Response fields that are not modelled are ignored.
    """

    id: str | None = Field(default=None, description="Unique identifier.")
    object: str | None = Field(
        default=None, description="String representing the object's type."
    )
    created: int | None = Field(
        default=None,
        description="Time at which the object was created (Unix seconds).",
    )
    livemode: bool | None = Field(
        default=None,
        description="True in live mode, false in test mode.",
    )
    metadata: dict[str, str] | None = Field(default=None)


def expandable_id(value: Any) -> Any:
    """Reduce an expanded related object to its ID."""
    if isinstance(value, dict):
        return value.get("id")
    return value


class HasProductReference(StripeNested):
    """Mixin for responses whose ``product`` field may come back expanded."""

    product: str | None = Field(default=None)

    @field_validator("product", mode="before")
    @classmethod
    def _collapse_product(cls, v: Any) -> Any:
        return expandable_id(v)
