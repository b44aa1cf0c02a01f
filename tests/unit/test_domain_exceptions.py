"""Tests for domain and infrastructure exceptions (error_code, message, details)."""

from omni.domain.exceptions import (
    ConstraintViolationException,
    OmniException,
    ResourceNotFoundException,
    ValidationException,
)
from omni.infrastructure.exceptions import CacheSerializationError, TransportException


def test_omni_exception_default_error_code() -> None:
    """Base OmniException uses class name as error_code when not provided."""
    exc = OmniException("Something failed")
    assert exc.message == "Something failed"
    assert exc.error_code == "OmniException"
    assert exc.details == {}


def test_omni_exception_to_dict() -> None:
    exc = OmniException("Oops", error_code="CUSTOM", details={"key": "value"})
    assert exc.to_dict() == {
        "error": "CUSTOM",
        "message": "Oops",
        "details": {"key": "value"},
    }


def test_validation_exception() -> None:
    """ValidationException sets VALIDATION_ERROR and optional field in details."""
    exc = ValidationException("Invalid quantity", field="quantity")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "quantity"}
    assert ValidationException("Invalid").details == {}


def test_resource_not_found_exception() -> None:
    exc = ResourceNotFoundException("account", "acc-1")
    assert exc.error_code == "RESOURCE_NOT_FOUND"
    assert exc.message == "account not found: acc-1"
    assert exc.details == {"resource_type": "account", "resource_id": "acc-1"}


def test_constraint_violation_exception() -> None:
    """ConstraintViolationException names the entity, fields and tenant."""
    exc = ConstraintViolationException("account", {"email": "a@x.com"}, "t1")
    assert exc.error_code == "CONSTRAINT_VIOLATION"
    assert "email" in exc.message
    assert exc.details == {
        "resource_type": "account",
        "fields": {"email": "a@x.com"},
        "tenant_id": "t1",
    }


def test_infrastructure_exceptions_share_base() -> None:
    transport = TransportException("get_account", "timed out")
    assert isinstance(transport, OmniException)
    assert transport.error_code == "TRANSPORT_ERROR"
    assert transport.details == {"operation": "get_account", "reason": "timed out"}

    serialization = CacheSerializationError("ProductResult", "bad price")
    assert serialization.error_code == "CACHE_SERIALIZATION_ERROR"
