from pydantic import Field

from .base import StripeObject, StripeParams


class TaxRateParams(StripeParams):
    """Parameters for creating or updating a tax rate."""

    active: bool | None = None
    country: str | None = Field(default=None, min_length=2, max_length=2)
    description: str | None = None
    display_name: str | None = Field(default=None, max_length=50)
    inclusive: bool | None = None
    jurisdiction: str | None = Field(default=None, max_length=50)
    metadata: dict[str, str] | None = None
    percentage: float | None = Field(default=None, ge=0, le=100)
    state: str | None = None


class TaxRate(StripeObject):
    """A tax rate as returned by the API."""

    active: bool | None = None
    country: str | None = None
    description: str | None = None
    display_name: str | None = None
    inclusive: bool | None = None
    jurisdiction: str | None = None
    percentage: float | None = None
    state: str | None = None
