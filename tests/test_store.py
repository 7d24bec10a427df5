"""
Unit tests for VolumeStore.
"""

import sqlite3
import threading
from datetime import datetime, timezone

import pytest

from obsdisk.errors import DuplicateNameError, StoreUnavailableError
from obsdisk.storage import VolumeStore


class TestVolumeStoreBasics:
    """Tests for exists/create/list_all."""

    def test_exists_false_for_unknown_name(self, store):
        assert store.exists("missing") is False

    def test_create_returns_record(self, store):
        before = datetime.now(timezone.utc)

        record = store.create("d1", "oss")

        assert record.name == "d1"
        assert record.provider_type == "oss"
        assert record.created_at.tzinfo is not None
        assert before.replace(microsecond=0) <= record.created_at
        assert store.exists("d1") is True

    def test_create_duplicate_rejected(self, store):
        store.create("d1", "oss")

        with pytest.raises(DuplicateNameError) as exc_info:
            store.create("d1", "cos")

        assert exc_info.value.name == "d1"
        assert [r.provider_type for r in store.list_all()] == ["oss"]

    def test_list_all_empty(self, store):
        assert store.list_all() == []

    def test_list_all_returns_every_record(self, store):
        store.create("d1", "oss")
        store.create("d2", "obs")
        store.create("d3", "cos")

        records = store.list_all()

        assert {r.name for r in records} == {"d1", "d2", "d3"}
        assert {r.name: r.provider_type for r in records}["d2"] == "obs"

    def test_created_at_round_trips(self, store):
        created = store.create("d1", "oss")

        (listed,) = store.list_all()

        assert listed == created


class TestVolumeStoreDurability:
    """Tests for persistence and schema handling."""

    def test_records_survive_reopen(self, config):
        first = VolumeStore(config.registry_path)
        first.create("d1", "oss")
        first.close()

        second = VolumeStore(config.registry_path)
        try:
            assert second.exists("d1")
            assert [r.name for r in second.list_all()] == ["d1"]
        finally:
            second.close()

    def test_older_schema_is_migrated(self, config):
        conn = sqlite3.connect(str(config.registry_path))
        conn.execute(
            "CREATE TABLE vols (id INTEGER PRIMARY KEY, created_at DATETIME, "
            "name TEXT, obs_type TEXT)"
        )
        conn.execute(
            "INSERT INTO vols (created_at, name, obs_type) "
            "VALUES ('2024-01-02 03:04:05.000000', 'legacy', 'obs')"
        )
        conn.commit()
        conn.close()

        store = VolumeStore(config.registry_path)
        try:
            (record,) = store.list_all()
            assert record.name == "legacy"
            assert record.provider_type == "obs"
            assert record.created_at == datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc)

            store.create("d2", "oss")
            assert store.exists("d2")
        finally:
            store.close()

        conn = sqlite3.connect(str(config.registry_path))
        columns = {row[1] for row in conn.execute("PRAGMA table_info(vols)")}
        conn.close()
        assert {"updated_at", "deleted_at"} <= columns

    def test_schema_missing_required_column(self, config):
        conn = sqlite3.connect(str(config.registry_path))
        conn.execute("CREATE TABLE vols (id INTEGER PRIMARY KEY, name TEXT)")
        conn.commit()
        conn.close()

        with pytest.raises(StoreUnavailableError, match="obs_type"):
            VolumeStore(config.registry_path)

    def test_unopenable_path(self, temp_dir):
        with pytest.raises(StoreUnavailableError) as exc_info:
            VolumeStore(temp_dir / "no-such-dir" / "disks")

        assert exc_info.value.error_code == "STORE_UNAVAILABLE"

    def test_not_a_database(self, config):
        config.registry_path.write_bytes(b"this is not sqlite" * 100)

        with pytest.raises(StoreUnavailableError):
            VolumeStore(config.registry_path)


class TestVolumeStoreConcurrency:
    """Reads from another thread during writes."""

    def test_reader_thread_sees_whole_records(self, store):
        errors = []
        stop = threading.Event()

        def reader():
            try:
                while not stop.is_set():
                    for record in store.list_all():
                        assert record.name.startswith("d")
                        assert record.provider_type == "oss"
            except Exception as e:
                errors.append(e)

        thread = threading.Thread(target=reader)
        thread.start()
        try:
            for i in range(30):
                store.create(f"d{i}", "oss")
        finally:
            stop.set()
            thread.join(timeout=5)

        assert errors == []
        assert len(store.list_all()) == 30
