"""Tests for the cache JSON codec (dataclass read-models to JSON and back)."""

import json
from datetime import UTC, datetime
from decimal import Decimal

import pytest

from omni.application.dtos import (
    AccountResult,
    AccountWithSessions,
    CategoryResult,
    ProductResult,
    SessionResult,
)
from omni.domain.enums import AccountRole, AccountStatus, ProductStatus
from omni.infrastructure.cache.codec import decode, encode
from omni.infrastructure.exceptions import CacheSerializationError

NOW = datetime(2026, 3, 1, 12, 30, 15, 123456, tzinfo=UTC)


def test_product_survives_json() -> None:
    """Decimal price, enum status and aware datetimes come back unchanged."""
    product = ProductResult(
        id="p1",
        tenant_id="t1",
        sku="SKU-1",
        name="Widget",
        description=None,
        price=Decimal("19.90"),
        status=ProductStatus.DISCONTINUED,
        category_id="c1",
        created_at=NOW,
        updated_at=NOW,
    )
    data = json.loads(json.dumps(encode(product)))
    assert data["price"] == "19.90"
    assert data["status"] == "DISCONTINUED"
    restored = decode(ProductResult, data)
    assert restored == product
    assert isinstance(restored.price, Decimal)
    assert restored.created_at.tzinfo is not None


def test_nested_view_with_tuple_of_sessions() -> None:
    account = AccountResult(
        id="a1",
        tenant_id=None,
        email="a@x.com",
        display_name="A",
        role=AccountRole.SUPPORT,
        status=AccountStatus.SUSPENDED,
        created_at=NOW,
        updated_at=NOW,
    )
    session = SessionResult(
        id="s1", tenant_id=None, account_id="a1", token="tok", expires_at=NOW, created_at=NOW
    )
    view = AccountWithSessions(account=account, sessions=(session,))
    restored = decode(AccountWithSessions, json.loads(json.dumps(encode(view))))
    assert restored == view
    assert isinstance(restored.sessions, tuple)


def test_list_of_dataclasses() -> None:
    categories = [
        CategoryResult(id="c1", tenant_id="t1", name="Tools", description=None, created_at=NOW)
    ]
    assert decode(list[CategoryResult], encode(categories)) == categories


def test_encode_unsupported_type_raises() -> None:
    with pytest.raises(CacheSerializationError):
        encode({"when": object()})


def test_decode_mismatch_raises_serialization_error() -> None:
    """Shape errors surface as CacheSerializationError, never as TypeError/KeyError."""
    with pytest.raises(CacheSerializationError):
        decode(CategoryResult, {"id": "c1"})
    with pytest.raises(CacheSerializationError):
        decode(ProductResult, ["not", "an", "object"])
    with pytest.raises(CacheSerializationError):
        decode(AccountResult, {
            "id": "a1",
            "tenant_id": "t1",
            "email": "a@x.com",
            "display_name": None,
            "role": "OWNER",
            "status": "ACTIVE",
            "created_at": NOW.isoformat(),
            "updated_at": NOW.isoformat(),
        })
