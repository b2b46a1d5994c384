from datetime import timezone

import pytest

from db import database
from db.database import SQLiteKeyValueStore, get_conn, get_schema_version, init_db
from db.schema import SCHEMA_VERSION
from utils.errors import StorageUnavailableError, UnreadableRecordError
from utils.srs import SpacedRepetitionScheduler

from conftest import make_card, put_card


@pytest.fixture
def sqlite_store(tmp_path):
    db_path = tmp_path / "codereels.db"
    init_db(db_path)
    return SQLiteKeyValueStore(db_path)


def test_init_db_sets_schema_version(tmp_path):
    db_path = tmp_path / "nested" / "codereels.db"
    init_db(db_path)
    with get_conn(db_path) as conn:
        assert get_schema_version(conn) == SCHEMA_VERSION


def test_get_set_delete(sqlite_store):
    assert sqlite_store.get("srs:card:a") is None
    sqlite_store.set("srs:card:a", {"question_id": "a", "tags": ["x"]})
    assert sqlite_store.get("srs:card:a") == {"question_id": "a", "tags": ["x"]}
    sqlite_store.delete("srs:card:a")
    assert sqlite_store.get("srs:card:a") is None


def test_keys_use_literal_prefix_and_keep_insertion_order(sqlite_store):
    sqlite_store.set("srs:card:b_1", {"n": 1})
    sqlite_store.set("srs:cardXb", {"n": 2})
    sqlite_store.set("srs:card:a%", {"n": 3})
    sqlite_store.set("srs:card:b_1", {"n": 4})
    assert sqlite_store.keys("srs:card:") == ["srs:card:b_1", "srs:card:a%"]
    assert len(sqlite_store.keys()) == 3


def test_set_many_writes_all_records(sqlite_store):
    sqlite_store.set_many({"srs:card:a": {"n": 1}, "srs:stats": {"review_streak": 2}})
    assert sqlite_store.get("srs:stats") == {"review_streak": 2}
    assert sqlite_store.keys("srs:card:") == ["srs:card:a"]


def test_unopenable_database_raises_storage_error(tmp_path):
    store = SQLiteKeyValueStore(tmp_path)
    with pytest.raises(StorageUnavailableError):
        store.get("srs:stats")
    with pytest.raises(StorageUnavailableError):
        store.set("srs:stats", {})


def test_missing_table_raises_storage_error(tmp_path):
    store = SQLiteKeyValueStore(tmp_path / "empty.db")
    with pytest.raises(StorageUnavailableError):
        store.keys("srs:card:")


def test_init_db_reports_unwritable_location(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory", encoding="utf-8")
    with pytest.raises(StorageUnavailableError):
        init_db(blocker / "codereels.db")


def test_scheduler_round_trip_through_sqlite(sqlite_store, clock):
    scheduler = SpacedRepetitionScheduler(sqlite_store, clock=clock, tz=timezone.utc)
    reviewed = scheduler.record_review("q-1", "kubernetes", "advanced", "easy")
    assert scheduler.get_card("q-1") == reviewed
    assert scheduler.get_srs_stats().review_streak == 1


def test_get_store_uses_module_path(tmp_path, monkeypatch):
    monkeypatch.setattr(database, "DB_PATH", tmp_path / "patched.db")
    store = next(database.get_store())
    assert store.db_path == tmp_path / "patched.db"


def insert_raw(db_path, key, value):
    with get_conn(db_path) as conn:
        conn.execute("INSERT INTO kv_store (key, value) VALUES (?, ?)", (key, value))
        conn.commit()


def test_corrupt_row_raises_unreadable_record(sqlite_store):
    insert_raw(sqlite_store.db_path, "srs:card:bad", "{not json")
    with pytest.raises(UnreadableRecordError) as excinfo:
        sqlite_store.get("srs:card:bad")
    assert excinfo.value.key == "srs:card:bad"


def test_scheduler_skips_corrupt_rows(sqlite_store, clock):
    scheduler = SpacedRepetitionScheduler(sqlite_store, clock=clock, tz=timezone.utc)
    put_card(sqlite_store, make_card("ok"))
    insert_raw(sqlite_store.db_path, "srs:card:bad", "{not json")
    insert_raw(sqlite_store.db_path, "srs:stats", "{not json")

    assert [card.question_id for card in scheduler.get_all_cards()] == ["ok"]
    assert scheduler.get_card("bad") is None
    assert scheduler.is_in_srs("bad")
    assert [card.question_id for card in scheduler.get_due_cards()] == ["ok"]
    stats = scheduler.get_srs_stats()
    assert stats.total_cards == 1
    assert stats.review_streak == 0


def test_delete_many_removes_all_keys_in_one_call(sqlite_store):
    sqlite_store.set_many({"srs:card:a": {"n": 1}, "srs:card:b": {"n": 2}, "srs:stats": {"n": 3}})
    sqlite_store.delete_many(["srs:card:a", "srs:stats", "srs:card:missing"])
    assert sqlite_store.keys() == ["srs:card:b"]


def test_reset_progress_through_sqlite(sqlite_store, clock):
    scheduler = SpacedRepetitionScheduler(sqlite_store, clock=clock, tz=timezone.utc)
    scheduler.record_review("q-1", "kubernetes", "advanced", "good")
    scheduler.add_card("q-2", "kubernetes", "advanced")
    assert scheduler.reset_progress() == 2
    assert sqlite_store.keys() == []
