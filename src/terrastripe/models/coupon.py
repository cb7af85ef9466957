from typing import Literal

from pydantic import Field

from .base import StripeObject, StripeParams

CouponDuration = Literal["forever", "once", "repeating"]


class CouponParams(StripeParams):
    """Parameters for creating or updating a coupon."""

    id: str | None = Field(default=None, description="The coupon code.")
    amount_off: int | None = Field(default=None, gt=0)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    duration: CouponDuration | None = Field(default=None)
    duration_in_months: int | None = Field(default=None, gt=0)
    max_redemptions: int | None = Field(default=None, gt=0)
    metadata: dict[str, str] | None = Field(default=None)
    name: str | None = Field(default=None)
    percent_off: float | None = Field(default=None, gt=0, le=100)
    redeem_by: int | None = Field(
        default=None, description="Last redemption time (Unix seconds)."
    )


class Coupon(StripeObject):
    """A coupon as returned by the API."""

    amount_off: int | None = None
    currency: str | None = None
    duration: str | None = None
    duration_in_months: int | None = None
    max_redemptions: int | None = None
    name: str | None = None
    percent_off: float | None = None
    redeem_by: int | None = None
    times_redeemed: int | None = None
    valid: bool | None = None
