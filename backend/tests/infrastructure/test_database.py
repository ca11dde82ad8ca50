"""Session manager — rollback-and-reraise sessions and the readiness check.

Invariants:
    - session() rolls back and re-raises the caller's exception unchanged
    - health_check() reports connectivity as a bool, never raises
"""

import pytest
from sqlalchemy import text

from library_api.infrastructure.database import DatabaseSessionManager


@pytest.fixture
async def manager():
    mgr = DatabaseSessionManager("sqlite+aiosqlite:///:memory:")
    yield mgr
    await mgr.close()


async def test_session_reraises_caller_error_unchanged(manager):
    with pytest.raises(LookupError):
        async with manager.session() as db:
            await db.execute(text("SELECT 1"))
            raise LookupError("not a database problem")


async def test_session_runs_queries_with_foreign_keys_on(manager):
    async with manager.session() as db:
        result = await db.execute(text("PRAGMA foreign_keys"))
        assert result.scalar_one() == 1


async def test_health_check_ok(manager):
    assert await manager.health_check() is True


async def test_health_check_reports_failure():
    mgr = DatabaseSessionManager("sqlite+aiosqlite:////nonexistent-dir/library.db")
    try:
        assert await mgr.health_check() is False
    finally:
        await mgr.close()
