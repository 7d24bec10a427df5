"""
Pytest configuration and fixtures for obsdisk tests.

This module provides shared fixtures and configuration for all tests.
"""

import sys
import tempfile
from pathlib import Path
from typing import Callable, Dict, Generator, List, Optional

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from obsdisk.config import ObsDiskConfig  # noqa: E402
from obsdisk.mount import CommandResult, JuiceFSTool, MountOrchestrator  # noqa: E402
from obsdisk.storage import VolumeStore  # noqa: E402


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, isolated)"
    )
    config.addinivalue_line(
        "markers", "api: API endpoint tests"
    )
    config.addinivalue_line(
        "markers", "slow: Slow running tests"
    )


# =============================================================================
# Fake mount tool
# =============================================================================

class FakeRunner:
    """
    Stands in for the juicefs binary.

    Records every command line. ``format`` creates the metadata file named in
    its sqlite3:// URL, as juicefs does even when it later fails, then calls
    ``on_format`` if one is set.
    """

    def __init__(self):
        self.calls: List[List[str]] = []
        self.timeouts: List[Optional[float]] = []
        self.results: Dict[str, CommandResult] = {}
        self.on_format: Optional[Callable[[], None]] = None

    def fail(self, subcommand: str, stderr: str, exit_code: int = 1) -> None:
        self.results[subcommand] = CommandResult(exit_code=exit_code, stderr=stderr)

    def count(self, subcommand: str) -> int:
        return sum(1 for call in self.calls if call[1] == subcommand)

    def __call__(self, args: List[str], timeout: Optional[float] = None) -> CommandResult:
        self.calls.append(list(args))
        self.timeouts.append(timeout)
        subcommand = args[1]
        if subcommand == "format":
            meta = Path(args[-2][len("sqlite3://"):])
            meta.write_text("meta")
            if self.on_format is not None:
                self.on_format()
        return self.results.get(subcommand, CommandResult(exit_code=0))


# =============================================================================
# Temporary Directories
# =============================================================================

@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def config(temp_dir) -> ObsDiskConfig:
    """Config rooted in a temporary working directory, with directories created."""
    cfg = ObsDiskConfig(work_dir=str(temp_dir / "ObsDisk"), refresh_interval_sec=0.05)
    cfg.ensure_dirs()
    return cfg


# =============================================================================
# Core Fixtures
# =============================================================================

@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()


@pytest.fixture
def store(config) -> Generator[VolumeStore, None, None]:
    volume_store = VolumeStore(config.registry_path)
    yield volume_store
    volume_store.close()


@pytest.fixture
def tool(config, fake_runner) -> JuiceFSTool:
    return JuiceFSTool(
        metas_dir=config.metas_dir,
        vols_dir=config.vols_dir,
        runner=fake_runner,
    )


@pytest.fixture
def orchestrator(store, tool) -> MountOrchestrator:
    return MountOrchestrator(store, tool)


@pytest.fixture
def manager(config, fake_runner):
    from obsdisk.manager import ObsDiskManager

    obsdisk_manager = ObsDiskManager(config=config, runner=fake_runner)
    yield obsdisk_manager
    obsdisk_manager.close()
