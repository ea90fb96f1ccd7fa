import asyncio
from datetime import datetime, timedelta

import pytest

from expense_tracker.core.errors import InternalError
from expense_tracker.core.security import get_password_hash
from expense_tracker.core.sessions import (
    DatabaseSessionStore,
    MemorySessionStore,
    Session,
    SessionManager,
    SessionSubject,
)
from expense_tracker.crud.user import create_user

from conftest import TEST_SECRET, make_settings


def make_manager(store=None, **kwargs) -> SessionManager:
    return SessionManager(store if store is not None else MemorySessionStore(), TEST_SECRET, **kwargs)


async def test_create_then_resolve_returns_subject():
    manager = make_manager()
    handle = await manager.create(7, "alice")

    session = await manager.resolve(handle)

    assert session.is_authenticated
    assert session.subject == SessionSubject(user_id=7, username="alice")


async def test_handle_is_opaque_and_unique():
    manager = make_manager()
    first = await manager.create(7, "alice")
    second = await manager.create(7, "alice")
    assert first != second
    assert "alice" not in first


@pytest.mark.parametrize("handle", [None, "", "garbage", "a.b.c"])
async def test_missing_or_invalid_handle_is_anonymous(handle):
    session = await make_manager().resolve(handle)
    assert session == Session.anonymous()
    assert not session.is_authenticated


async def test_handle_signed_with_other_key_is_anonymous():
    store = MemorySessionStore()
    forged = await SessionManager(store, "another-secret-key-9876543210").create(1, "mallory")

    session = await make_manager(store).resolve(forged)

    assert not session.is_authenticated


async def test_destroy_invalidates_handle():
    manager = make_manager()
    handle = await manager.create(7, "alice")
    session = await manager.resolve(handle)

    await manager.destroy(session)

    assert not (await manager.resolve(handle)).is_authenticated
    assert len(manager.store) == 0


async def test_destroy_anonymous_is_a_no_op():
    await make_manager().destroy(Session.anonymous())


async def test_expired_session_is_anonymous():
    store = MemorySessionStore()
    manager = make_manager(store)
    handle = await manager.create(7, "alice")
    session_id = manager._serializer.loads(handle)
    await store.save(session_id, SessionSubject(7, "alice"), datetime.utcnow() - timedelta(seconds=1))

    assert not (await manager.resolve(handle)).is_authenticated
    assert len(store) == 0


async def test_destroy_failure_surfaces_internal_error(monkeypatch):
    store = MemorySessionStore()
    manager = make_manager(store)
    session = await manager.resolve(await manager.create(7, "alice"))

    async def broken_delete(session_id):
        raise RuntimeError("store unavailable")

    monkeypatch.setattr(store, "delete", broken_delete)

    with pytest.raises(InternalError):
        await manager.destroy(session)


async def test_slow_store_times_out():
    class SlowStore(MemorySessionStore):
        async def load(self, session_id):
            await asyncio.sleep(1)

    manager = make_manager(SlowStore(), timeout=0.05)
    handle = await manager.create(7, "alice")

    with pytest.raises(InternalError):
        await manager.resolve(handle)


async def test_database_store_round_trip(tmp_path):
    from expense_tracker.core.context import AppContext

    ctx = AppContext(make_settings(tmp_path, SESSION_BACKEND="database"))
    await ctx.startup()
    try:
        assert isinstance(ctx.sessions.store, DatabaseSessionStore)
        async with ctx.database.sessionmaker() as db:
            user_id = await create_user("alice", "a@x.com", get_password_hash("secret1", rounds=4), db)

        handle = await ctx.sessions.create(user_id, "alice")
        session = await ctx.sessions.resolve(handle)
        assert session.subject == SessionSubject(user_id=user_id, username="alice")

        await ctx.sessions.destroy(session)
        assert not (await ctx.sessions.resolve(handle)).is_authenticated
    finally:
        await ctx.shutdown()


async def test_create_purges_expired_sessions():
    store = MemorySessionStore()
    expired = datetime.utcnow() - timedelta(seconds=1)
    for n in range(100):
        await store.save(f"stale-{n}", SessionSubject(n, f"user{n}"), expired)

    await make_manager(store).create(7, "alice")

    assert len(store) == 1


async def test_database_store_purges_expired_rows(tmp_path):
    from sqlalchemy import func, select

    from expense_tracker.core.context import AppContext
    from expense_tracker.models.session import UserSession

    ctx = AppContext(make_settings(tmp_path, SESSION_BACKEND="database"))
    await ctx.startup()
    try:
        async with ctx.database.sessionmaker() as db:
            user_id = await create_user("alice", "a@x.com", get_password_hash("secret1", rounds=4), db)
            expired = datetime.utcnow() - timedelta(seconds=1)
            db.add_all([
                UserSession(id=f"stale-{n}", user_id=user_id, username="alice", expires_at=expired)
                for n in range(20)
            ])
            await db.commit()

        await ctx.sessions.create(user_id, "alice")

        async with ctx.database.sessionmaker() as db:
            remaining = (await db.execute(select(func.count()).select_from(UserSession))).scalar_one()
        assert remaining == 1
    finally:
        await ctx.shutdown()
