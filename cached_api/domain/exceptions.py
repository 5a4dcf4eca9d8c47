"""Domain exceptions for the cached API.

Defines domain-level exceptions that represent business rule violations
and cache-layer failures. Presentation layer maps the domain ones to HTTP
responses in exception handlers; the cache layer catches its own and never
lets them reach a client.
"""

from typing import Any


class CachedApiException(Exception):
    """Base exception for all application errors.

    Presentation layer maps these to HTTP responses using message,
    error_code, and details.

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
        """Return the JSON error body (error, message, details)."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(CachedApiException):
    """Raised when input validation fails (e.g. invalid format or range)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
        """
        details = {"field": field} if field else {}
        super().__init__(message, "VALIDATION_ERROR", details)


class ResourceNotFoundException(CachedApiException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'ticket', 'blog').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class InvalidStateTransitionException(CachedApiException):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, resource_type: str, current: str, requested: str) -> None:
        super().__init__(
            f"Cannot change {resource_type} status from {current} to {requested}",
            "INVALID_STATE_TRANSITION",
            {"resource_type": resource_type, "current": current, "requested": requested},
        )


class CacheSerializationError(CachedApiException):
    """Raised inside the cache layer when a value cannot be stored.

    Never propagated to clients: the cache layer logs it and skips caching.
    """

    def __init__(self, key: str, reason: str) -> None:
        super().__init__(
            f"Cannot serialize value for cache key {key}: {reason}",
            "CACHE_SERIALIZATION_ERROR",
            {"key": key},
        )
