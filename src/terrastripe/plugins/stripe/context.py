"""
Stripe Resource Context

This module provides the per-resource state handle passed to the CRUD glue.
It stands in for the host framework's accessor: it holds the recorded state
of one resource instance, the desired configuration and the instance ID.
"""

import copy
from dataclasses import dataclass, field
from typing import Any

from terrastripe.core.tree import get_path


@dataclass
class ResourceData:
    """
    Attribute snapshots of one resource instance.

    ``state`` is what was last recorded (the previous snapshot) and ``config``
    is what the configuration asks for (the desired snapshot). An empty
    ``resource_id`` means the resource does not exist remotely.
    """

    resource_type: str
    config: dict[str, Any] = field(default_factory=dict)
    state: dict[str, Any] = field(default_factory=dict)
    resource_id: str = ""

    @property
    def id(self) -> str:
        return self.resource_id

    def set_id(self, resource_id: str) -> None:
        self.resource_id = resource_id or ""

    @property
    def previous(self) -> dict[str, Any]:
        return self.state

    @property
    def desired(self) -> dict[str, Any]:
        return self.config

    def get(self, key: str, default: Any = None) -> Any:
        """Get the desired value at a dotted key path."""
        value = get_path(self.config, key)
        return default if value is None else value

    def get_ok(self, key: str) -> tuple[Any, bool]:
        value = get_path(self.config, key)
        if isinstance(value, (list, dict)) and not value:
            return value, False
        return value, value is not None

    def get_change(self, key: str) -> tuple[Any, Any]:
        """Get the ``(previous, desired)`` pair for a key."""
        return get_path(self.state, key), get_path(self.config, key)

    def has_change(self, key: str) -> bool:
        old, new = self.get_change(key)
        return old != new

    def set(self, key: str, value: Any) -> None:
        """Record a top-level value in the state."""
        if "." in key:
            raise KeyError(f"Only top-level keys can be set, got '{key}'")
        self.state[key] = value

    def commit(self, tree: dict[str, Any]) -> None:
        """Record ``tree`` as the new state of the resource."""
        self.state = copy.deepcopy(tree)
