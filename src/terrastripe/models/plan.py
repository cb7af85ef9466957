from pydantic import Field

from .base import HasProductReference, StripeObject, StripeParams
from .price import (
    AggregateUsage,
    BillingScheme,
    Interval,
    PriceTier,
    PriceTierParams,
    TiersMode,
    Transform,
    TransformParams,
    UsageType,
)


class PlanParams(StripeParams):
    """Parameters for creating or updating a plan."""

    id: str | None = None
    active: bool | None = None
    aggregate_usage: AggregateUsage | None = None
    amount: int | None = Field(default=None, ge=0)
    amount_decimal: float | None = Field(default=None, ge=0)
    billing_scheme: BillingScheme | None = None
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    interval: Interval | None = None
    interval_count: int | None = Field(default=None, gt=0)
    metadata: dict[str, str] | None = None
    nickname: str | None = None
    product: str | None = None
    tiers: list[PriceTierParams] | None = None
    tiers_mode: TiersMode | None = None
    transform_usage: TransformParams | None = None
    trial_period_days: int | None = Field(default=None, ge=0)
    usage_type: UsageType | None = None


class Plan(StripeObject, HasProductReference):
    """A plan as returned by the API."""

    active: bool | None = None
    aggregate_usage: str | None = None
    amount: int | None = None
    amount_decimal: float | None = None
    billing_scheme: str | None = None
    currency: str | None = None
    interval: str | None = None
    interval_count: int | None = None
    nickname: str | None = None
    tiers: list[PriceTier] | None = None
    tiers_mode: str | None = None
    transform_usage: Transform | None = None
    trial_period_days: int | None = None
    usage_type: str | None = None
