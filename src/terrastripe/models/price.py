from typing import Literal

from pydantic import Field, model_validator

from .base import HasProductReference, StripeNested, StripeObject, StripeParams

Interval = Literal["day", "week", "month", "year"]
UsageType = Literal["licensed", "metered"]
AggregateUsage = Literal["sum", "last_during_period", "last_ever", "max"]
BillingScheme = Literal["per_unit", "tiered"]
TiersMode = Literal["graduated", "volume"]


# ---------------------------------------------------------------------------
# Shared pricing blocks
# ---------------------------------------------------------------------------


class PriceTierParams(StripeParams):
    """One band of a tiered pricing schedule."""

    up_to: int | Literal["inf"] = Field(
        ...,
        description="Upper bound of the band, or 'inf' for the last band.",
    )
    flat_amount: int | None = Field(default=None, ge=0)
    flat_amount_decimal: float | None = Field(default=None, ge=0)
    unit_amount: int | None = Field(default=None, ge=0)
    unit_amount_decimal: float | None = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_amount_pairs(self) -> "PriceTierParams":
        if self.flat_amount is not None and self.flat_amount_decimal is not None:
            raise ValueError("flat_amount and flat_amount_decimal are exclusive")
        if self.unit_amount is not None and self.unit_amount_decimal is not None:
            raise ValueError("unit_amount and unit_amount_decimal are exclusive")
        return self


class PriceTier(StripeNested):
    up_to: int | None = None
    flat_amount: int | None = None
    flat_amount_decimal: float | None = None
    unit_amount: int | None = None
    unit_amount_decimal: float | None = None


class TransformParams(StripeParams):
    """Divide the reported quantity (or usage) before billing."""

    divide_by: int = Field(..., gt=0)
    round: Literal["up", "down"] = Field(...)


class Transform(StripeNested):
    divide_by: int | None = None
    round: str | None = None


# ---------------------------------------------------------------------------
# Price
# ---------------------------------------------------------------------------


class PriceRecurringParams(StripeParams):
    aggregate_usage: AggregateUsage | None = None
    interval: Interval | None = None
    interval_count: int | None = Field(default=None, gt=0)
    usage_type: UsageType | None = None


class PriceRecurring(StripeNested):
    aggregate_usage: str | None = None
    interval: str | None = None
    interval_count: int | None = None
    usage_type: str | None = None


class PriceParams(StripeParams):
    """Parameters for creating or updating a price."""

    active: bool | None = None
    billing_scheme: BillingScheme | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    lookup_key: str | None = None
    metadata: dict[str, str] | None = None
    nickname: str | None = None
    product: str | None = None
    recurring: PriceRecurringParams | None = None
    tax_behavior: Literal["inclusive", "exclusive", "unspecified"] | None = None
    tiers: list[PriceTierParams] | None = None
    tiers_mode: TiersMode | None = None
    transform_quantity: TransformParams | None = None
    unit_amount: int | None = Field(default=None, ge=0)
    unit_amount_decimal: float | None = Field(default=None, ge=0)


class Price(StripeObject, HasProductReference):
    """A price as returned by the API. Tiers are only present when expanded."""

    active: bool | None = None
    billing_scheme: str | None = None
    currency: str | None = None
    lookup_key: str | None = None
    nickname: str | None = None
    recurring: PriceRecurring | None = None
    tax_behavior: str | None = None
    tiers: list[PriceTier] | None = None
    tiers_mode: str | None = None
    transform_quantity: Transform | None = None
    type: str | None = None
    unit_amount: int | None = None
    unit_amount_decimal: float | None = None
