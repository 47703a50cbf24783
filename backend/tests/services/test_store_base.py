"""Store Base — the bounded() unit of work.

Invariants:
    - Deadline expiry → PersistenceError (no retry)
    - Domain errors raised inside bounded() propagate unchanged
    - Driver errors → PersistenceError
    - The session is usable again after any of the above
"""

import asyncio

import pytest
from sqlalchemy import text

from dotareplays.core.errors import PersistenceError, RecordNotFoundError
from dotareplays.services.replay_store import ReplayStore
from dotareplays.services.store_base import Store


async def test_timeout_raises_persistence_error(test_db):
    store = Store(test_db, timeout=0.01)
    with pytest.raises(PersistenceError) as exc_info:
        async with store.bounded("slow"):
            await asyncio.sleep(1)
    assert exc_info.value.operation == "slow"
    assert exc_info.value.http_status == 500


async def test_domain_error_passes_through(test_db):
    store = Store(test_db)
    with pytest.raises(RecordNotFoundError):
        async with store.bounded("lookup"):
            raise RecordNotFoundError("replay")


async def test_driver_error_becomes_persistence_error(test_db):
    store = Store(test_db)
    with pytest.raises(PersistenceError):
        async with store.bounded("broken"):
            await test_db.execute(text("SELECT * FROM no_such_table"))


async def test_session_usable_after_failure(test_db, new_replay):
    store = Store(test_db)
    with pytest.raises(PersistenceError):
        async with store.bounded("broken"):
            await test_db.execute(text("SELECT * FROM no_such_table"))

    replay = await ReplayStore(test_db).insert(new_replay())
    assert replay.id >= 1


def test_default_timeout_from_settings(test_db):
    assert Store(test_db).timeout == 3.0


def test_dialect_name(test_db):
    assert Store(test_db).dialect == "sqlite"
