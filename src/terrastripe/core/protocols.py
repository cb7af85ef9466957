from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from pydantic import BaseModel

    from .field_spec import ResourceSchema


class AttributeMapper(Protocol):
    """Defines the contract for mapping one resource kind to and from the API."""

    resource_type: str
    schema: "ResourceSchema"
    deletable: bool

    def can_map(self, resource_type: str) -> bool:
        """
        Checks whether this mapper can handle the given resource kind.

        Args:
            resource_type: Resource kind (e.g., "stripe_price").

        Returns:
            True if the resource kind is supported, False otherwise.
        """

        ...

    def expand(self, tree: dict[str, Any]) -> "BaseModel":
        """Convert a desired attribute tree into typed request parameters."""
        ...

    def expand_update(
        self, previous: dict[str, Any], desired: dict[str, Any]
    ) -> "BaseModel":
        """
        Build typed update parameters from two attribute snapshots.

        Args:
            previous: The attribute tree currently recorded in state
            desired: The attribute tree requested by the configuration
        """
        ...

    def flatten(
        self, remote: Any, previous: dict[str, Any] | None = None
    ) -> dict[str, Any]:
        """Map a remote object back onto an attribute tree."""
        ...

    def replacement_keys(
        self, previous: dict[str, Any], desired: dict[str, Any]
    ) -> list[str]:
        """List the changed keys that cannot be updated in place."""
        ...


class ResourceAccessor(Protocol):
    """
    Defines the contract of the host framework's per-resource state handle.

    The accessor exposes the attribute tree of one resource instance, the
    previous/desired pair for changed keys and the instance ID.
    """

    @property
    def id(self) -> str:
        ...

    def set_id(self, resource_id: str) -> None:
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Get the desired value at a dotted key path."""
        ...

    def get_ok(self, key: str) -> tuple[Any, bool]:
        """Get the desired value together with a presence flag."""
        ...

    def get_change(self, key: str) -> tuple[Any, Any]:
        """Get the ``(previous, desired)`` pair for a key."""
        ...

    def has_change(self, key: str) -> bool:
        ...

    def set(self, key: str, value: Any) -> None:
        ...

    @property
    def previous(self) -> dict[str, Any]:
        ...

    @property
    def desired(self) -> dict[str, Any]:
        ...

    def commit(self, tree: dict[str, Any]) -> None:
        """Record ``tree`` as the new state of the resource."""
        ...


class RemoteClient(Protocol):
    """
    Defines the contract of the billing API client.

    Errors raised by implementations are propagated to callers unchanged.
    """

    def create(self, resource_type: str, params: dict[str, Any]) -> Any:
        ...

    def retrieve(self, resource_type: str, resource_id: str) -> Any:
        ...

    def update(
        self, resource_type: str, resource_id: str, params: dict[str, Any]
    ) -> Any:
        ...

    def delete(self, resource_type: str, resource_id: str) -> Any:
        ...


class MapperRegistry(Protocol):
    """Defines the contract for looking up mappers by resource kind."""

    def register_mapper(self, resource_type: str, mapper: AttributeMapper) -> None:
        """
        Register a single resource mapper for a specific resource kind.

        Args:
            resource_type: The resource kind to handle (e.g., 'stripe_coupon')
            mapper: The mapper instance that can handle this resource kind
        """
        ...

    def get_mapper(self, resource_type: str) -> AttributeMapper:
        ...

    def get_registered_mappers(self) -> dict[str, AttributeMapper]:
        """
        Get all registered mappers.

        Returns:
            Dictionary mapping resource kinds to their mappers
        """
        ...
