"""Tests for domain exceptions (error_code, message, details)."""

from cached_api.domain.exceptions import (
    CachedApiException,
    CacheSerializationError,
    InvalidStateTransitionException,
    ResourceNotFoundException,
    ValidationException,
)


def test_base_exception_default_error_code() -> None:
    """Base exception uses class name as error_code when not provided."""
    exc = CachedApiException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "CachedApiException"
    assert exc.details == {}


def test_to_dict_shape() -> None:
    exc = CachedApiException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {"error": "CUSTOM", "message": "Oops", "details": {"key": "value"}}


def test_resource_not_found() -> None:
    exc = ResourceNotFoundException("ticket", "t1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.details == {"resource_type": "ticket", "resource_id": "t1"}
    assert "t1" in str(exc)


def test_validation_exception_field_optional() -> None:
    assert ValidationException("bad").details == {}
    assert ValidationException("bad", field="tags").details == {"field": "tags"}


def test_invalid_state_transition() -> None:
    exc = InvalidStateTransitionException("payment", "failed", "refunded")
    assert exc.error_code == "INVALID_STATE_TRANSITION"
    assert exc.details["current"] == "failed"


def test_cache_serialization_error_carries_key() -> None:
    exc = CacheSerializationError("tickets:t1", "not JSON serializable")
    assert exc.error_code == "CACHE_SERIALIZATION_ERROR"
    assert exc.details == {"key": "tickets:t1"}
