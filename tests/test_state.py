"""Tests for the staged state store and its storage backends."""

import pytest
from sqlalchemy.exc import OperationalError

from tablebot.database import create_db_engine, create_session_factory, init_db
from tablebot.errors import StoreUnavailableError
from tablebot.schemas import ActiveDialog, DialogStackRecord, ReservationState, ReservationStatus
from tablebot.state import StateStore, state_key
from tablebot.storage import MemoryStorage, SqlStorage


@pytest.fixture
def sql_storage() -> SqlStorage:
    engine = create_db_engine("sqlite://")
    init_db(engine)
    return SqlStorage(create_session_factory(engine))


class TestStateStore:
    @pytest.mark.asyncio
    async def test_get_defaults_and_caches(self, state) -> None:
        first = await state.get("c1", "reservation", ReservationState)
        assert first == ReservationState()
        first.party_size = 3
        again = await state.get("c1", "reservation", ReservationState)
        assert again is first

    @pytest.mark.asyncio
    async def test_writes_are_staged_until_flush(self, state, storage) -> None:
        state.set("c1", "reservation", ReservationState(party_size=2))
        assert state.pending("c1") == {"reservation"}
        assert len(storage) == 0

        await state.flush("c1")
        assert state.pending("c1") == set()
        assert state_key("c1", "reservation") in storage

        fresh = StateStore(storage)
        loaded = await fresh.get("c1", "reservation", ReservationState)
        assert loaded.party_size == 2

    @pytest.mark.asyncio
    async def test_flush_only_touches_one_conversation(self, state, storage) -> None:
        state.set("c1", "reservation", ReservationState(party_size=2))
        state.set("c2", "reservation", ReservationState(party_size=5))

        await state.flush("c1")
        assert state_key("c2", "reservation") not in storage
        assert state.pending("c2") == {"reservation"}

    @pytest.mark.asyncio
    async def test_discard_drops_staged_values(self, state, storage) -> None:
        state.set("c1", "reservation", ReservationState(party_size=2))
        state.discard("c1")
        await state.flush("c1")
        assert len(storage) == 0
        assert (await state.get("c1", "reservation", ReservationState)).party_size is None

    @pytest.mark.asyncio
    async def test_sum_type_round_trip(self, storage) -> None:
        store = StateStore(storage)
        record = DialogStackRecord(entry=ActiveDialog(dialog_id="ReservationDialog", state={"step": "awaiting_time"}))
        store.set("c1", "dialog_stack", record)
        await store.flush("c1")

        loaded = await StateStore(storage).get("c1", "dialog_stack", DialogStackRecord)
        assert loaded.active == ActiveDialog(dialog_id="ReservationDialog", state={"step": "awaiting_time"})


class TestMemoryStorage:
    @pytest.mark.asyncio
    async def test_read_returns_copies(self) -> None:
        storage = MemoryStorage()
        await storage.write({"k": {"a": [1]}})
        doc = (await storage.read(["k", "missing"]))["k"]
        doc["a"].append(2)
        assert (await storage.read(["k"])) == {"k": {"a": [1]}}


class TestSqlStorage:
    @pytest.mark.asyncio
    async def test_write_then_read(self, sql_storage) -> None:
        await sql_storage.write({"a": {"x": 1}, "b": {"y": [1, 2]}})
        assert await sql_storage.read(["a", "b", "c"]) == {"a": {"x": 1}, "b": {"y": [1, 2]}}

    @pytest.mark.asyncio
    async def test_overwrite(self, sql_storage) -> None:
        await sql_storage.write({"a": {"x": 1}})
        await sql_storage.write({"a": {"x": 2}})
        assert await sql_storage.read(["a"]) == {"a": {"x": 2}}

    @pytest.mark.asyncio
    async def test_state_store_over_sql(self, sql_storage) -> None:
        store = StateStore(sql_storage)
        store.set("c1", "reservation", ReservationState(party_size=4, time="t", status=ReservationStatus.COMPLETE))
        await store.flush("c1")

        loaded = await StateStore(sql_storage).get("c1", "reservation", ReservationState)
        assert loaded.status is ReservationStatus.COMPLETE

    @pytest.mark.asyncio
    async def test_database_errors_become_store_unavailable(self) -> None:
        engine = create_db_engine("sqlite://")  # no tables created
        storage = SqlStorage(create_session_factory(engine))
        with pytest.raises(StoreUnavailableError) as exc:
            await storage.read(["a"])
        assert isinstance(exc.value.__cause__, OperationalError)
        with pytest.raises(StoreUnavailableError):
            await storage.write({"a": {"x": 1}})
