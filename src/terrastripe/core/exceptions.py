"""
Terrastripe Exception Classes

Custom exceptions for the attribute mapping layer and the resource glue built
on top of it. Errors raised by the remote API client are never wrapped here:
they propagate to the caller unchanged.
"""

from typing import Any


class TerrastripeError(Exception):
    """Base exception for all terrastripe errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.context = context or {}

    def __str__(self) -> str:
        base_msg = super().__str__()
        if self.error_code:
            base_msg = f"[{self.error_code}] {base_msg}"
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            base_msg = f"{base_msg} (Context: {context_str})"
        return base_msg


class ValidationError(TerrastripeError):
    """Raised when an attribute value or field combination violates the schema."""

    def __init__(
        self,
        message: str,
        field_name: str | None = None,
        expected_type: type | str | None = None,
        actual_value: Any = None,
    ) -> None:
        context = {}
        if field_name:
            context["field_name"] = field_name
        if expected_type:
            context["expected_type"] = (
                expected_type
                if isinstance(expected_type, str)
                else expected_type.__name__
            )
        if actual_value is not None:
            context["actual_value"] = str(actual_value)
        super().__init__(message, "VALIDATION_ERROR", context)
        self.field_name = field_name

    def get_recovery_hint(self) -> str:
        """Provide a helpful hint for fixing the validation error."""
        if "field_name" in self.context and "expected_type" in self.context:
            field = self.context["field_name"]
            expected = self.context["expected_type"]
            return f"Ensure '{field}' is of type {expected}"
        if "field_name" in self.context:
            return f"Check the value of '{self.context['field_name']}'"
        return "Check the resource configuration for invalid or conflicting fields"


class SchemaError(TerrastripeError):
    """Raised when a field specification is declared inconsistently."""

    def __init__(self, message: str, field_name: str | None = None) -> None:
        context = {}
        if field_name:
            context["field_name"] = field_name
        super().__init__(message, "SCHEMA_ERROR", context)


class ResourceMappingError(TerrastripeError):
    """Raised when no mapper can handle a resource kind."""

    def __init__(
        self,
        message: str,
        resource_type: str | None = None,
        resource_id: str | None = None,
    ) -> None:
        context = {}
        if resource_type:
            context["resource_type"] = resource_type
        if resource_id:
            context["resource_id"] = resource_id
        super().__init__(message, "RESOURCE_MAPPING_ERROR", context)


class DeletionNotSupportedError(TerrastripeError):
    """Raised when the remote API does not allow deleting a resource kind."""

    def __init__(self, resource_type: str, resource_id: str | None = None) -> None:
        context = {"resource_type": resource_type}
        if resource_id:
            context["resource_id"] = resource_id
        super().__init__(
            f"Stripe doesn't allow deleting {resource_type} resources via the API. "
            "Remove it from the state and archive it manually.",
            "DELETION_NOT_SUPPORTED",
            context,
        )

    def get_recovery_hint(self) -> str:
        return "Set 'active' to false or remove the resource from state manually"


class ReplacementRequiredError(TerrastripeError):
    """Raised when an in-place update touches fields that force a new resource."""

    def __init__(self, resource_type: str, keys: list[str]) -> None:
        super().__init__(
            f"Changing {', '.join(keys)} is not possible with the Stripe API",
            "REPLACEMENT_REQUIRED",
            {"resource_type": resource_type, "keys": ",".join(keys)},
        )
        self.keys = keys

    def get_recovery_hint(self) -> str:
        return "Destroy and re-create the resource to apply these changes"


class TreeLoadError(TerrastripeError):
    """Raised when an attribute tree file cannot be read or parsed."""

    def __init__(self, message: str, file_path: str | None = None) -> None:
        context = {}
        if file_path:
            context["file_path"] = file_path
        super().__init__(message, "LOAD_ERROR", context)
