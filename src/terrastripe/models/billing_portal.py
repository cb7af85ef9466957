"""Request and response models of the customer portal configuration."""

from typing import Literal

from pydantic import Field

from .base import StripeNested, StripeObject, StripeParams

CustomerField = Literal["email", "address", "shipping", "phone", "tax_id"]
CancellationReason = Literal[
    "too_expensive",
    "missing_features",
    "switched_service",
    "unused",
    "customer_service",
    "too_complex",
    "low_quality",
    "other",
]
SubscriptionChange = Literal["price", "quantity", "promotion_code"]


# ---------------------------------------------------------------------------
# Parameters
# ---------------------------------------------------------------------------


class BusinessProfileParams(StripeParams):
    headline: str | None = Field(default=None, max_length=60)
    privacy_policy_url: str | None = None
    terms_of_service_url: str | None = None


class FeatureToggleParams(StripeParams):
    enabled: bool | None = None


class CustomerUpdateParams(FeatureToggleParams):
    allowed_updates: list[CustomerField] | None = None


class CancellationReasonParams(FeatureToggleParams):
    options: list[CancellationReason] | None = None


class SubscriptionCancelParams(FeatureToggleParams):
    cancellation_reason: CancellationReasonParams | None = None
    mode: Literal["immediately", "at_period_end"] | None = None
    proration_behavior: Literal["none", "create_prorations"] | None = None


class SubscriptionUpdateProductParams(StripeParams):
    product: str = Field(..., description="Product ID.")
    prices: list[str] = Field(..., min_length=1)


class SubscriptionUpdateParams(FeatureToggleParams):
    default_allowed_updates: list[SubscriptionChange] | None = None
    products: list[SubscriptionUpdateProductParams] | None = None
    proration_behavior: (
        Literal["none", "create_prorations", "always_invoice"] | None
    ) = None


class FeaturesParams(StripeParams):
    customer_update: CustomerUpdateParams | None = None
    invoice_history: FeatureToggleParams | None = None
    payment_method_update: FeatureToggleParams | None = None
    subscription_cancel: SubscriptionCancelParams | None = None
    subscription_pause: FeatureToggleParams | None = None
    subscription_update: SubscriptionUpdateParams | None = None


class BillingPortalConfigurationParams(StripeParams):
    """Parameters for creating or updating a portal configuration."""

    business_profile: BusinessProfileParams | None = None
    default_return_url: str | None = None
    features: FeaturesParams | None = None
    metadata: dict[str, str] | None = None


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class BusinessProfile(StripeNested):
    headline: str | None = None
    privacy_policy_url: str | None = None
    terms_of_service_url: str | None = None


class FeatureToggle(StripeNested):
    enabled: bool | None = None


class CustomerUpdate(FeatureToggle):
    allowed_updates: list[str] | None = None


class CancellationReasonSettings(FeatureToggle):
    options: list[str] | None = None


class SubscriptionCancel(FeatureToggle):
    cancellation_reason: CancellationReasonSettings | None = None
    mode: str | None = None
    proration_behavior: str | None = None


class SubscriptionUpdateProduct(StripeNested):
    product: str | None = None
    prices: list[str] | None = None


class SubscriptionUpdate(FeatureToggle):
    default_allowed_updates: list[str] | None = None
    products: list[SubscriptionUpdateProduct] | None = None
    proration_behavior: str | None = None


class Features(StripeNested):
    customer_update: CustomerUpdate | None = None
    invoice_history: FeatureToggle | None = None
    payment_method_update: FeatureToggle | None = None
    subscription_cancel: SubscriptionCancel | None = None
    subscription_pause: FeatureToggle | None = None
    subscription_update: SubscriptionUpdate | None = None


class BillingPortalConfiguration(StripeObject):
    """A customer portal configuration as returned by the API."""

    active: bool | None = None
    application: str | None = None
    business_profile: BusinessProfile | None = None
    default_return_url: str | None = None
    features: Features | None = None
    is_default: bool | None = None
    updated: int | None = None
