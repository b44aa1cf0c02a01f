"""Session repository integration tests: token uniqueness and lazy expiry."""

from datetime import timedelta

import pytest

from omni.application.dtos import AccountCreate, SessionCreate
from omni.domain.exceptions import ConstraintViolationException, ResourceNotFoundException
from omni.infrastructure.persistence.repositories import AccountRepository, SessionRepository
from omni.shared.utils import utc_now

pytestmark = pytest.mark.integration


@pytest.fixture
async def account(database):
    return await AccountRepository(database).create_account(
        "t1", AccountCreate(email="a@x.com")
    )


async def test_create_and_get_live_session(database, account) -> None:
    repo = SessionRepository(database)
    now = utc_now()
    created = await repo.create_session(
        "t1", SessionCreate(account.id, "tok", now + timedelta(hours=1))
    )
    assert created.account_id == account.id
    assert created.expires_at.tzinfo is not None
    assert await repo.get_session_by_token("tok", now) == created


async def test_duplicate_token_is_constraint_violation_without_leaking_token(
    database, account
) -> None:
    repo = SessionRepository(database)
    expires = utc_now() + timedelta(hours=1)
    await repo.create_session("t1", SessionCreate(account.id, "secret-tok", expires))
    with pytest.raises(ConstraintViolationException) as exc_info:
        await repo.create_session("t1", SessionCreate(account.id, "secret-tok", expires))
    assert "secret-tok" not in str(exc_info.value.to_dict())


async def test_session_requires_account_in_same_tenant(database, account) -> None:
    repo = SessionRepository(database)
    expires = utc_now() + timedelta(hours=1)
    with pytest.raises(ResourceNotFoundException):
        await repo.create_session("t2", SessionCreate(account.id, "tok", expires))


async def test_expired_session_is_deleted_on_read(database, account) -> None:
    """Reading an expired session removes it; a second read is still just not-found."""
    repo = SessionRepository(database)
    now = utc_now()
    await repo.create_session("t1", SessionCreate(account.id, "tok", now + timedelta(seconds=5)))

    later = now + timedelta(seconds=5)
    assert await repo.get_session_by_token("tok", later) is None
    assert await repo.get_session_by_token("tok", now) is None
    assert await repo.delete_session_by_token("tok") is None


async def test_delete_session_by_token(database, account) -> None:
    repo = SessionRepository(database)
    now = utc_now()
    created = await repo.create_session(
        "t1", SessionCreate(account.id, "tok", now + timedelta(hours=1))
    )
    assert await repo.delete_session_by_token("tok") == created
    assert await repo.get_session_by_token("tok", now) is None
