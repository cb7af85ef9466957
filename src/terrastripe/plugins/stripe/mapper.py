from collections.abc import Iterable

from terrastripe.core.common.base_mapper import BaseMapperRegistry
from terrastripe.core.protocols import AttributeMapper

from .mappers.stripe_coupon import StripeCouponMapper
from .mappers.stripe_customer_portal import StripeCustomerPortalMapper
from .mappers.stripe_plan import StripePlanMapper
from .mappers.stripe_price import StripePriceMapper
from .mappers.stripe_product import StripeProductMapper
from .mappers.stripe_tax_rate import StripeTaxRateMapper
from .mappers.stripe_webhook_endpoint import StripeWebhookEndpointMapper


class StripeMapper(BaseMapperRegistry):
    """
    Stripe-specific mapper registry.

    Knows every resource kind the provider supports and dispatches expand,
    flatten and update requests to the matching single-resource mapper.
    """

    def _default_mappers(self) -> Iterable[AttributeMapper]:
        """Central place to enable support for individual resources."""
        self._logger.info("Registering Stripe resource mappers...")

        # Catalogue
        yield StripeProductMapper()
        yield StripePriceMapper()
        yield StripePlanMapper()

        # Discounts and taxes
        yield StripeCouponMapper()
        yield StripeTaxRateMapper()

        # Account configuration
        yield StripeWebhookEndpointMapper()
        yield StripeCustomerPortalMapper()
