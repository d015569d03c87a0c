from unittest.mock import MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from gilead.sm2.errors import StorageUnavailable
from gilead.sm2.storage import (
    MemoryStore,
    MongoStore,
    SqlStore,
    get_database_url,
    get_store,
)


# ---- MemoryStore ----

def test_memory_store_last_write_wins():
    store = MemoryStore()
    assert store.get_text("k") is None
    store.put_text("k", "one")
    store.put_text("k", "two")
    assert store.get_text("k") == "two"


def test_memory_store_initial_entries_are_copied():
    initial = {"k": "v"}
    store = MemoryStore(initial)
    store.put_text("k", "changed")
    assert initial == {"k": "v"}


# ---- SqlStore ----

def test_sql_store_round_trip(sql_store):
    assert sql_store.get_text("sm2:abc") is None
    sql_store.put_text("sm2:abc", '{"repetition": 1}')
    assert sql_store.get_text("sm2:abc") == '{"repetition": 1}'


def test_sql_store_overwrites(sql_store):
    sql_store.put_text("review_progress", '{"1": 1}')
    sql_store.put_text("review_progress", '{"1": 2}')
    assert sql_store.get_text("review_progress") == '{"1": 2}'


def test_sql_store_survives_reopen(tmp_path):
    url = f"sqlite:///{tmp_path / 'state.db'}"
    first = SqlStore(url=url)
    first.put_text("sm2:abc", "persisted")
    first.dispose()

    second = SqlStore(url=url)
    assert second.get_text("sm2:abc") == "persisted"
    second.dispose()


def test_sql_store_unreachable_raises_storage_unavailable(tmp_path):
    store = SqlStore(url=f"sqlite:///{tmp_path / 'missing' / 'dir' / 'state.db'}")
    with pytest.raises(StorageUnavailable):
        store.get_text("sm2:abc")
    with pytest.raises(StorageUnavailable):
        store.put_text("sm2:abc", "x")


# ---- MongoStore ----

def test_mongo_store_reads_value():
    collection = MagicMock()
    collection.find_one.return_value = {"_id": "sm2:abc", "value": "stored"}
    store = MongoStore(collection=collection)

    assert store.get_text("sm2:abc") == "stored"
    collection.find_one.assert_called_once_with({"_id": "sm2:abc"})


def test_mongo_store_missing_key():
    collection = MagicMock()
    collection.find_one.return_value = None
    assert MongoStore(collection=collection).get_text("sm2:abc") is None


def test_mongo_store_upserts():
    collection = MagicMock()
    MongoStore(collection=collection).put_text("sm2:abc", "text")

    args, kwargs = collection.replace_one.call_args
    assert args[0] == {"_id": "sm2:abc"}
    assert args[1]["value"] == "text"
    assert kwargs == {"upsert": True}


def test_mongo_store_errors_become_storage_unavailable():
    collection = MagicMock()
    collection.find_one.side_effect = ServerSelectionTimeoutError("no servers")
    collection.replace_one.side_effect = ServerSelectionTimeoutError("no servers")
    store = MongoStore(collection=collection)

    with pytest.raises(StorageUnavailable):
        store.get_text("sm2:abc")
    with pytest.raises(StorageUnavailable):
        store.put_text("sm2:abc", "x")


def test_mongo_store_requires_uri(monkeypatch):
    monkeypatch.delenv("MONGO_URI", raising=False)
    with pytest.raises(ValueError):
        MongoStore().get_collection()


# ---- Configuration ----

def test_default_database_url_is_local_sqlite(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("TEST_MODE", raising=False)

    assert get_database_url() == "sqlite:///logs/review_state.db"
    assert (tmp_path / "logs").is_dir()


def test_test_mode_switches_database(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TEST_MODE", "true")
    monkeypatch.delenv("DATABASE_URL", raising=False)
    assert get_database_url() == "sqlite:///logs/test_review_state.db"

    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/review_state")
    assert get_database_url() == "postgresql://u:p@db:5432/test_review_state"


def test_explicit_database_url_used_outside_test_mode(monkeypatch):
    monkeypatch.delenv("TEST_MODE", raising=False)
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db:5432/review_state")
    assert get_database_url() == "postgresql://u:p@db:5432/review_state"


def test_get_store_backends(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "sqlite://")
    assert isinstance(get_store("memory"), MemoryStore)
    assert isinstance(get_store("MONGO"), MongoStore)
    assert isinstance(get_store("sql"), SqlStore)

    monkeypatch.setenv("REVIEW_STORE_BACKEND", "memory")
    assert isinstance(get_store(), MemoryStore)


def test_get_store_unknown_backend():
    with pytest.raises(ValueError):
        get_store("redis")
