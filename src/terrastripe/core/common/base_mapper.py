import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from ..exceptions import ResourceMappingError
from ..protocols import AttributeMapper, MapperRegistry

if TYPE_CHECKING:
    from pydantic import BaseModel

logger = logging.getLogger(__name__)


class BaseMapperRegistry(MapperRegistry, ABC):
    """
    Base class for mapper registries acting as a dispatcher.

    Provides common logic for registering and delegating to "AttributeMapper"
    instances, keeping the vendor-specific list of supported resource kinds
    abstracted.

    Subclasses must implement:
    - _default_mappers(): The mappers enabled out of the box.
    """

    def __init__(self, register_defaults: bool = True):
        """Initializes the registry and, optionally, the built-in mappers."""
        self._logger = logger.getChild(self.__class__.__name__)
        self._mappers: dict[str, AttributeMapper] = {}
        if register_defaults:
            for mapper in self._default_mappers():
                self.register_mapper(mapper.resource_type, mapper)

    # --- Protocol Implementation (Common Logic) ---

    def register_mapper(self, resource_type: str, mapper: AttributeMapper) -> None:
        """
        Registers a specific mapper for a resource kind.
        This is the common logic of the Registry pattern.
        """
        if resource_type in self._mappers:
            self._logger.warning(
                f"Overwriting mapper for resource type: '{resource_type}'"
            )
        self._logger.info(
            f"Registering mapper '{mapper.__class__.__name__}' "
            f"for type '{resource_type}'"
        )

        self._mappers[resource_type] = mapper

    def get_registered_mappers(self) -> dict[str, AttributeMapper]:
        """Returns the dictionary of registered mappers."""
        return self._mappers

    def get_available_types(self) -> list[str]:
        """Returns the sorted list of supported resource kinds."""
        return sorted(self._mappers)

    def get_mapper(self, resource_type: str) -> AttributeMapper:
        """
        Looks up the mapper for a resource kind.

        Raises:
            ResourceMappingError: If no registered mapper accepts the kind
        """
        mapper = self._mappers.get(resource_type)
        if mapper is None:
            available = ", ".join(self.get_available_types()) or "none"
            raise ResourceMappingError(
                f"No mapper registered for resource type: '{resource_type}'. "
                f"Available types: {available}",
                resource_type=resource_type,
            )
        if not mapper.can_map(resource_type):
            raise ResourceMappingError(
                f"The mapper for '{resource_type}' cannot handle this resource type",
                resource_type=resource_type,
            )
        return mapper

    # --- Dispatch helpers ---

    def expand(self, resource_type: str, tree: dict[str, Any]) -> "BaseModel":
        self._logger.debug(f"Expanding '{resource_type}'")
        return self.get_mapper(resource_type).expand(tree)

    def expand_update(
        self,
        resource_type: str,
        previous: dict[str, Any],
        desired: dict[str, Any],
    ) -> "BaseModel":
        self._logger.debug(f"Computing update for '{resource_type}'")
        return self.get_mapper(resource_type).expand_update(previous, desired)

    def flatten(
        self,
        resource_type: str,
        remote: Any,
        previous: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        self._logger.debug(f"Flattening '{resource_type}'")
        return self.get_mapper(resource_type).flatten(remote, previous)

    # --- Abstract Method (Vendor-Specific Logic) ---

    @abstractmethod
    def _default_mappers(self) -> Iterable[AttributeMapper]:
        """
        Vendor-specific list of built-in mappers.

        Must be implemented by every subclass.

        Returns:
            The mapper instances to register on construction
        """
        pass
