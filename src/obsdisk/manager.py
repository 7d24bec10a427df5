"""
obsdisk manager

Wires configuration, the volume registry, the mount tool and registry
observation together for the CLI and API front ends.
"""

import logging
from typing import Callable, List, Optional

from obsdisk.config import ObsDiskConfig
from obsdisk.mount import CommandRunner, JuiceFSTool, MountOrchestrator
from obsdisk.registry import RefreshLoop, RegistryObserver
from obsdisk.storage import VolumeStore
from obsdisk.types import Credentials, VolumeRecord

logger = logging.getLogger(__name__)


class ObsDiskManager:
    """
    Entry point for volume operations.

    Owns one VolumeStore and one default RegistryObserver. Additional
    observers can be created with new_observer(); they share nothing.
    """

    def __init__(
        self,
        config: Optional[ObsDiskConfig] = None,
        runner: Optional[CommandRunner] = None,
    ):
        """
        Initialize the manager.

        Args:
            config: Runtime configuration (loaded from environment if None)
            runner: Command runner for the mount tool (subprocess if None)

        Raises:
            ObsDiskError: If the working directory cannot be prepared
            StoreUnavailableError: If the registry cannot be opened
        """
        self.config = config or ObsDiskConfig.from_env()
        self.config.ensure_dirs()

        self.store = VolumeStore(self.config.registry_path)
        self.tool = JuiceFSTool(
            metas_dir=self.config.metas_dir,
            vols_dir=self.config.vols_dir,
            binary=self.config.juicefs_bin,
            trash_days=self.config.trash_days,
            background=self.config.mount_background,
            timeout_sec=self.config.command_timeout_sec,
            runner=runner,
        )
        self.orchestrator = MountOrchestrator(self.store, self.tool)
        self.observer = RegistryObserver(self.store)

        logger.info(f"ObsDiskManager initialized at {self.config.work_dir}")

    def create_volume(self, name: str, access_key: str, secret_key: str, bucket: str) -> VolumeRecord:
        """Classify the bucket, format the volume and register it."""
        credentials = Credentials(access_key=access_key, secret_key=secret_key)
        return self.orchestrator.create_volume(name, credentials, bucket)

    def mount(self, name: str) -> str:
        return self.orchestrator.mount(name)

    def unmount(self, name: str) -> str:
        return self.orchestrator.unmount(name)

    def list_volumes(self) -> List[VolumeRecord]:
        return self.store.list_all()

    def refresh(self) -> List[VolumeRecord]:
        """New volumes since the default observer last looked."""
        return self.observer.refresh()

    def new_observer(self) -> RegistryObserver:
        return RegistryObserver(self.store)

    def refresh_loop(
        self,
        on_records: Callable[[List[VolumeRecord]], None],
        on_error: Optional[Callable[[Exception], None]] = None,
        observer: Optional[RegistryObserver] = None,
    ) -> RefreshLoop:
        """Build (but do not start) a polling loop at the configured interval."""
        return RefreshLoop(
            observer or self.observer,
            on_records,
            interval_sec=self.config.refresh_interval_sec,
            on_error=on_error,
        )

    def close(self) -> None:
        self.store.close()
