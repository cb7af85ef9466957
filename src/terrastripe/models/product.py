from typing import Literal

from pydantic import Field

from .base import StripeObject, StripeParams


class ProductParams(StripeParams):
    """Parameters for creating or updating a product."""

    id: str | None = None
    active: bool | None = None
    attributes: list[str] | None = Field(default=None, max_length=5)
    description: str | None = None
    metadata: dict[str, str] | None = None
    name: str | None = None
    statement_descriptor: str | None = Field(default=None, max_length=22)
    type: Literal["good", "service"] | None = None
    unit_label: str | None = Field(default=None, max_length=12)


class Product(StripeObject):
    """A product as returned by the API."""

    active: bool | None = None
    attributes: list[str] | None = None
    description: str | None = None
    name: str | None = None
    statement_descriptor: str | None = None
    type: str | None = None
    unit_label: str | None = None
    updated: int | None = None
