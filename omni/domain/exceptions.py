"""Domain exceptions for the Omni back office.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. The HTTP
shell maps them to responses in omni.core.exception_handlers.
"""

from typing import Any


class OmniException(Exception):
    """Base exception for all Omni application errors.

    All custom exceptions inherit from this class to allow consistent
    error handling and logging. The HTTP shell maps these to responses
    using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable error body."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(OmniException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(OmniException):
    """Raised when a requested resource is absent from the relational store.

    Distinct from a cache miss, which is internal and never surfaced.
    """

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'account', 'session').
            resource_id: The id or lookup value that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class ConstraintViolationException(OmniException):
    """Raised when a tenant-scoped uniqueness rule is broken.

    Never retried automatically; surfaced to the caller as a conflict.
    """

    def __init__(
        self,
        resource_type: str,
        fields: dict[str, Any],
        tenant_id: str | None = None,
    ) -> None:
        """Initialize with the entity type and the conflicting field values.

        Args:
            resource_type: Type of resource (e.g. 'account', 'product').
            fields: Field names and values that collided (e.g. {"email": ...}).
            tenant_id: Tenant in which the collision happened, if any.
        """
        names = ", ".join(sorted(fields))
        super().__init__(
            f"{resource_type} already exists with the same {names}",
            "CONSTRAINT_VIOLATION",
            {"resource_type": resource_type, "fields": fields, "tenant_id": tenant_id},
        )
