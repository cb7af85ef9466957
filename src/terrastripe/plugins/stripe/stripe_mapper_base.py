"""
Stripe-specific base class for attribute mappers.

A concrete mapper only declares its static ``ResourceSchema`` and the pydantic
models of its request and response payloads. The generic expand/flatten
algorithms in ``terrastripe.core.attributes`` do the walking; the hooks below
exist for the few kind-specific rewrites (tiers, tiered billing) that cannot
be expressed declaratively.
"""

import copy
import logging
from abc import ABC
from collections.abc import Mapping
from typing import Any, ClassVar

from pydantic import ValidationError as PydanticValidationError

from terrastripe.core import attributes
from terrastripe.core.exceptions import ValidationError
from terrastripe.core.field_spec import ResourceSchema
from terrastripe.core.protocols import AttributeMapper
from terrastripe.models.base import StripeObject, StripeParams

logger = logging.getLogger(__name__)


class StripeSingleResourceMapper(AttributeMapper, ABC):
    """
    Base class for mapping one Stripe resource kind.

    Subclasses set the class attributes; the default hooks are no-ops.
    """

    resource_type: ClassVar[str]
    schema: ClassVar[ResourceSchema]
    params_model: ClassVar[type[StripeParams]]
    object_model: ClassVar[type[StripeObject]]
    deletable: ClassVar[bool] = True

    def __init__(self) -> None:
        """Initialize the mapper."""
        self._logger = logger.getChild(self.__class__.__name__)

    def can_map(self, resource_type: str) -> bool:
        return resource_type == self.resource_type

    # --- Expand ---

    def expand(self, tree: dict[str, Any]) -> StripeParams:
        """
        Convert a desired attribute tree into typed create parameters.

        Raises:
            ValidationError: If the tree or the resulting payload is invalid
        """
        tree = self._pre_expand(copy.deepcopy(tree) if tree else {})
        params = attributes.expand(tree, self.schema)
        params = self._post_expand(tree, params)
        return self._build_params(params)

    def expand_update(
        self, previous: dict[str, Any], desired: dict[str, Any]
    ) -> StripeParams:
        """Build typed update parameters from two attribute snapshots."""
        previous = self._pre_expand(copy.deepcopy(previous) if previous else {})
        desired = self._pre_expand(copy.deepcopy(desired) if desired else {})
        params = attributes.expand_update(previous, desired, self.schema)
        return self._build_params(params)

    def replacement_keys(
        self, previous: dict[str, Any], desired: dict[str, Any]
    ) -> list[str]:
        return attributes.replacement_keys(previous, desired, self.schema)

    def _pre_expand(self, tree: dict[str, Any]) -> dict[str, Any]:
        """Normalise a private copy of the tree before validation."""
        return tree

    def _post_expand(
        self, tree: dict[str, Any], params: dict[str, Any]
    ) -> dict[str, Any]:
        """Rewrite generic create parameters into the API's shape."""
        return params

    def _build_params(self, params: dict[str, Any]) -> StripeParams:
        try:
            return self.params_model.model_validate(params)
        except PydanticValidationError as e:
            error = e.errors()[0]
            location = ".".join(str(part) for part in error["loc"])
            raise ValidationError(
                f"Invalid {self.resource_type} parameter '{location}': "
                f"{error['msg']}",
                field_name=location or None,
                actual_value=error.get("input"),
            ) from e

    # --- Flatten ---

    def flatten(
        self, remote: Any, previous: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """
        Map a remote object back onto an attribute tree.

        Args:
            remote: A response model or the raw response mapping
            previous: The last known attribute tree, if any

        Returns:
            A new attribute tree; ``previous`` is left untouched
        """
        if isinstance(remote, Mapping):
            remote = self.object_model.model_validate(dict(remote))
        data = self._pre_flatten(attributes.remote_to_dict(remote))
        tree = attributes.flatten(data, self.schema, previous)
        return self._post_flatten(data, tree)

    def _pre_flatten(self, data: dict[str, Any]) -> dict[str, Any]:
        """Rewrite the response into the shape the schema expects."""
        return data

    def _post_flatten(
        self, data: dict[str, Any], tree: dict[str, Any]
    ) -> dict[str, Any]:
        return tree

    # --- Introspection ---

    def describe(self) -> dict[str, Any]:
        """Summarise the schema of this resource kind."""
        return {
            "resource_type": self.resource_type,
            "deletable": self.deletable,
            "keys": self.schema.keys(),
            "force_new": self.schema.force_new_keys(),
        }
