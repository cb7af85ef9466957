import copy
import logging
from typing import Any

from terrastripe.core.attributes import remote_to_dict
from terrastripe.core.exceptions import (
    DeletionNotSupportedError,
    ReplacementRequiredError,
)
from terrastripe.core.field_spec import ResourceSchema
from terrastripe.core.protocols import RemoteClient, ResourceAccessor

from .mapper import StripeMapper

logger = logging.getLogger(__name__)


class StripeResourceOrchestrator:
    """
    CRUD glue for Stripe resources.

    Connects the StripeMapper with a remote API client. Every operation works
    on a caller-owned ``ResourceAccessor`` and records the resulting state in
    it. Errors raised by the client are passed through unchanged.
    """

    def __init__(self, client: RemoteClient, mapper: StripeMapper | None = None):
        self._logger = logger.getChild(self.__class__.__name__)
        self._client = client
        self._mapper = mapper or StripeMapper()

    def get_mapper(self) -> StripeMapper:
        """Return the mapper registry instance."""
        return self._mapper

    def create(self, resource_type: str, data: ResourceAccessor) -> dict[str, Any]:
        """
        Create the remote resource described by ``data.desired``.

        The response is flattened on top of the desired tree so values the
        API does not echo back (tiers, for instance) are kept.
        """
        mapper = self._mapper.get_mapper(resource_type)
        params = mapper.expand(data.desired)

        self._logger.info(f"Creating {resource_type}")
        remote = self._client.create(resource_type, params.to_request())

        resource_id = remote_to_dict(remote).get("id") or ""
        data.set_id(resource_id)
        tree = mapper.flatten(remote, data.desired)
        data.commit(tree)
        self._logger.info(f"Created {resource_type}: {resource_id}")
        return tree

    def read(self, resource_type: str, data: ResourceAccessor) -> dict[str, Any]:
        """
        Refresh the recorded state from the remote API.

        If the resource cannot be retrieved its ID is cleared, dropping it
        from state, and the client error is re-raised.
        """
        mapper = self._mapper.get_mapper(resource_type)
        try:
            remote = self._client.retrieve(resource_type, data.id)
        except Exception:
            self._logger.warning(
                f"Could not read {resource_type} '{data.id}', removing it from state"
            )
            data.set_id("")
            raise

        tree = mapper.flatten(remote, data.previous)
        data.commit(tree)
        self._logger.debug(f"Read {resource_type} '{data.id}'")
        return tree

    def update(self, resource_type: str, data: ResourceAccessor) -> dict[str, Any]:
        """
        Send the changed, updatable fields and refresh the state.

        Raises:
            ReplacementRequiredError: If a changed field can't be updated
                in place
        """
        mapper = self._mapper.get_mapper(resource_type)
        forced = mapper.replacement_keys(data.previous, data.desired)
        if forced:
            raise ReplacementRequiredError(resource_type, forced)

        params = mapper.expand_update(data.previous, data.desired).to_request()
        if params:
            self._logger.info(
                f"Updating {resource_type} '{data.id}': {', '.join(sorted(params))}"
            )
            self._client.update(resource_type, data.id, params)
        else:
            self._logger.info(f"No updatable changes for {resource_type} '{data.id}'")

        data.commit(self._merge_desired(mapper.schema, data.previous, data.desired))
        return self.read(resource_type, data)

    def delete(self, resource_type: str, data: ResourceAccessor) -> None:
        """
        Delete the remote resource.

        Raises:
            DeletionNotSupportedError: If the API has no delete for this kind
        """
        mapper = self._mapper.get_mapper(resource_type)
        if not mapper.deletable:
            raise DeletionNotSupportedError(resource_type, data.id)

        self._logger.info(f"Deleting {resource_type} '{data.id}'")
        self._client.delete(resource_type, data.id)
        data.set_id("")

    @staticmethod
    def _merge_desired(
        schema: ResourceSchema, previous: dict[str, Any], desired: dict[str, Any]
    ) -> dict[str, Any]:
        """Desired settable values on top of the computed values of ``previous``."""
        merged = copy.deepcopy(previous or {})
        for spec in schema.fields:
            if not spec.settable:
                continue
            if spec.key in (desired or {}):
                merged[spec.key] = copy.deepcopy(desired[spec.key])
            else:
                merged.pop(spec.key, None)
        return merged
