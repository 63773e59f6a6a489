"""Tests for the SQLite log store."""

import sqlite3
from datetime import datetime, timezone

import pytest

from logvault.models import LogRecord, MetadataEntry
from logvault.store import LogStore

NOW = datetime(2025, 1, 15, 12, 0, 0, 250000, tzinfo=timezone.utc)


def _record(text="hello", **overrides) -> LogRecord:
    fields = dict(
        created_at=NOW,
        level=20,
        label="auth-api",
        session="S1",
        text=text,
    )
    fields.update(overrides)
    return LogRecord(**fields)


class TestSchema:
    def test_creates_database_and_parent_dirs(self, tmp_path):
        path = tmp_path / "nested" / "dir" / "logs.db"
        LogStore(path)
        assert path.exists()

    def test_reopening_keeps_records(self, tmp_path):
        path = tmp_path / "logs.db"
        LogStore(path).save(_record("first"))
        assert LogStore(path).count() == 1

    def test_tables_exist(self, tmp_path):
        path = tmp_path / "logs.db"
        LogStore(path)
        conn = sqlite3.connect(str(path))
        names = {r[0] for r in conn.execute("SELECT name FROM sqlite_master WHERE type='table'")}
        conn.close()
        assert {"messages", "metadata"} <= names


class TestSave:
    def test_round_trip_fields(self, store):
        record = _record(
            metadata=[MetadataEntry("a", "1"), MetadataEntry("b", "2")],
            file="app/views.py",
            function="index",
            line=42,
        )
        store.save(record)

        [stored] = store.fetch_messages()
        assert stored.created_at == NOW
        assert stored.level == 20
        assert stored.label == "auth-api"
        assert stored.session == "S1"
        assert stored.text == "hello"
        assert stored.metadata_dict() == {"a": "1", "b": "2"}
        assert (stored.file, stored.function, stored.line) == ("app/views.py", "index", 42)

    def test_optional_call_site(self, store):
        store.save(_record())
        [stored] = store.fetch_messages()
        assert stored.file is None
        assert stored.function is None
        assert stored.line is None
        assert stored.metadata == []

    def test_metadata_owned_per_record(self, store):
        store.save(_record("one", metadata=[MetadataEntry("k", "v")]))
        store.save(_record("two", metadata=[MetadataEntry("k", "v")]))
        first, second = store.fetch_messages()
        assert first.metadata_dict() == {"k": "v"}
        assert second.metadata_dict() == {"k": "v"}

    def test_returns_increasing_ids(self, store):
        assert store.save(_record("a")) < store.save(_record("b"))

    def test_failed_metadata_insert_rolls_back_message(self, store):
        duplicate = [MetadataEntry("k", "1"), MetadataEntry("k", "2")]
        with pytest.raises(sqlite3.IntegrityError):
            store.save(_record("dup", metadata=duplicate))
        assert store.count() == 0

    def test_naive_datetime_preserved(self, store):
        naive = datetime(2020, 2, 29, 23, 59, 59, 999999)
        store.save(_record(created_at=naive))
        assert store.fetch_messages()[0].created_at == naive


class TestFetch:
    def test_insertion_order(self, store):
        for i in range(5):
            store.save(_record(f"msg-{i}"))
        assert [r.text for r in store.fetch_messages()] == [f"msg-{i}" for i in range(5)]

    def test_count(self, store):
        assert store.count() == 0
        store.save(_record())
        store.save(_record())
        assert store.count() == 2


class TestWriterOwnership:
    def test_single_writer_per_store(self, store):
        assert store.writer is store.writer

    def test_close_keeps_closed_writer(self, store):
        writer = store.writer
        store.close()
        assert store.writer is writer
        assert writer.enqueue(_record()) is False


class TestDefaultStore:
    def test_default_uses_env_path(self, tmp_path, monkeypatch):
        import logvault.store as store_module

        monkeypatch.setattr(store_module, "_default_store", None)
        monkeypatch.setenv("LOGVAULT_DB_PATH", str(tmp_path / "default.db"))
        monkeypatch.delenv("LOGVAULT_CONFIG", raising=False)

        default = LogStore.default()
        try:
            assert default is LogStore.default()
            assert default.db_path == tmp_path / "default.db"
        finally:
            default.close()
