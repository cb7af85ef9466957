from .base import StripeNested, StripeObject, StripeParams
from .billing_portal import BillingPortalConfiguration, BillingPortalConfigurationParams
from .coupon import Coupon, CouponParams
from .plan import Plan, PlanParams
from .price import Price, PriceParams, PriceTier, PriceTierParams
from .product import Product, ProductParams
from .tax_rate import TaxRate, TaxRateParams
from .webhook_endpoint import WebhookEndpoint, WebhookEndpointParams

__all__ = [
    "StripeParams",
    "StripeObject",
    "StripeNested",
    "BillingPortalConfiguration",
    "BillingPortalConfigurationParams",
    "Coupon",
    "CouponParams",
    "Plan",
    "PlanParams",
    "Price",
    "PriceParams",
    "PriceTier",
    "PriceTierParams",
    "Product",
    "ProductParams",
    "TaxRate",
    "TaxRateParams",
    "WebhookEndpoint",
    "WebhookEndpointParams",
]
