from datetime import datetime, timezone
from typing import Optional

import pytest

from gilead.sm2.errors import StorageUnavailable
from gilead.sm2.storage import KeyValueStore, MemoryStore, SqlStore


NOW = datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)


class FailingStore(KeyValueStore):
    """Store whose medium is broken for reads, writes, or both."""

    def __init__(self, fail_reads: bool = True, fail_writes: bool = True):
        self.fail_reads = fail_reads
        self.fail_writes = fail_writes
        self.entries: dict[str, str] = {}

    def get_text(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise StorageUnavailable("disk on fire")
        return self.entries.get(key)

    def put_text(self, key: str, value: str) -> None:
        if self.fail_writes:
            raise StorageUnavailable("disk full")
        self.entries[key] = value


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def sql_store(tmp_path):
    store = SqlStore(url=f"sqlite:///{tmp_path / 'review_state.db'}")
    yield store
    store.dispose()


@pytest.fixture
def failing_store():
    return FailingStore()


@pytest.fixture
def write_failing_store():
    return FailingStore(fail_reads=False, fail_writes=True)


@pytest.fixture
def read_failing_store():
    return FailingStore(fail_reads=True, fail_writes=False)
