"""
Unit tests for ObsDiskManager.
"""

import threading

from obsdisk.config import ObsDiskConfig
from obsdisk.manager import ObsDiskManager


class TestManagerInit:

    def test_bootstraps_work_dir(self, temp_dir, fake_runner):
        config = ObsDiskConfig(work_dir=str(temp_dir / "fresh"))

        manager = ObsDiskManager(config=config, runner=fake_runner)
        try:
            assert config.registry_path.exists()
            assert config.metas_dir.is_dir()
            assert config.vols_dir.is_dir()
        finally:
            manager.close()

    def test_tool_uses_config(self, temp_dir, fake_runner):
        config = ObsDiskConfig(
            work_dir=str(temp_dir),
            juicefs_bin="/opt/juicefs",
            command_timeout_sec=12,
            mount_background=False,
        )

        manager = ObsDiskManager(config=config, runner=fake_runner)
        try:
            manager.mount("d1")
        finally:
            manager.close()

        assert fake_runner.calls == [["/opt/juicefs", "mount", f"sqlite3://{temp_dir / 'metas' / 'd1'}", str(temp_dir / "vols" / "d1")]]
        assert fake_runner.timeouts == [12]


class TestManagerOperations:

    def test_create_then_refresh(self, manager):
        record = manager.create_volume("d1", "A", "B", "bucket.aliyuncs.com")

        assert manager.refresh() == [record]
        assert manager.refresh() == []
        assert manager.list_volumes() == [record]

    def test_new_observer_starts_empty(self, manager):
        manager.create_volume("d1", "A", "B", "bucket.aliyuncs.com")
        manager.refresh()

        assert [r.name for r in manager.new_observer().refresh()] == ["d1"]

    def test_refresh_loop_uses_configured_interval(self, manager):
        got = threading.Event()
        loop = manager.refresh_loop(lambda records: got.set())

        assert loop.interval_sec == manager.config.refresh_interval_sec
        manager.create_volume("d1", "A", "B", "bucket.aliyuncs.com")
        loop.start()
        try:
            assert got.wait(timeout=5)
        finally:
            loop.stop()

    def test_registry_persists_across_managers(self, config, fake_runner):
        first = ObsDiskManager(config=config, runner=fake_runner)
        first.create_volume("d1", "A", "B", "bucket.aliyuncs.com")
        first.close()

        second = ObsDiskManager(config=config, runner=fake_runner)
        try:
            assert [r.name for r in second.refresh()] == ["d1"]
        finally:
            second.close()
