"""Stripe plugin: attribute mappers and CRUD glue for Stripe resources."""

from .context import ResourceData
from .mapper import StripeMapper
from .orchestrator import StripeResourceOrchestrator

__all__ = ["StripeMapper", "StripeResourceOrchestrator", "ResourceData"]
