import os
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from obsdisk.errors import ObsDiskError


class ObsDiskConfig(BaseModel):
    """
    Runtime configuration for obsdisk.

    This configuration is loaded from:
    1. Environment variables (OBSDISK_*)
    2. Configuration file (if provided)
    3. Default values (hardcoded)

    Priority in load(): Environment variables > Config file > Defaults.
    from_env() and from_file() each read a single source.
    """

    # Local layout
    work_dir: str = Field(
        default_factory=lambda: os.path.join(os.path.expanduser("~"), "ObsDisk"),
        description="Per-user working directory holding the registry, metadata and mount points"
    )

    # External tool
    juicefs_bin: str = Field(
        default="juicefs",
        description="Path to the juicefs executable"
    )

    trash_days: int = Field(
        default=0,
        ge=0,
        description="Trash retention passed to format (0 disables the trash)"
    )

    mount_background: bool = Field(
        default=True,
        description="Run mounts as a background daemon (-d)"
    )

    command_timeout_sec: Optional[float] = Field(
        default=None,
        gt=0,
        description="Optional timeout for external commands. Unset means wait indefinitely."
    )

    # Registry observation
    refresh_interval_sec: float = Field(
        default=1.0,
        gt=0,
        le=3600,
        description="Interval between registry polls"
    )

    # Safety
    allow_root: bool = Field(
        default=False,
        description="Allow the CLI to run as root"
    )

    # API server
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host"
    )

    api_port: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="API server port"
    )

    @property
    def ini_dir(self) -> Path:
        return Path(self.work_dir) / "ini"

    @property
    def vols_dir(self) -> Path:
        """Parent directory of all mount points"""
        return Path(self.work_dir) / "vols"

    @property
    def metas_dir(self) -> Path:
        """Parent directory of per-volume metadata databases"""
        return Path(self.work_dir) / "metas"

    @property
    def registry_path(self) -> Path:
        return self.ini_dir / "disks"

    def ensure_dirs(self) -> None:
        """
        Create the working directory layout if missing.

        Raises:
            ObsDiskError: If a required path exists but is not a directory
        """
        for path in (Path(self.work_dir), self.ini_dir, self.vols_dir, self.metas_dir):
            if path.exists() and not path.is_dir():
                raise ObsDiskError(
                    f"Path exists but is not a directory: {path}",
                    error_code="BAD_WORK_DIR",
                    details={"path": str(path)}
                )
            try:
                path.mkdir(mode=0o755, parents=True, exist_ok=True)
            except OSError as e:
                raise ObsDiskError(
                    f"Failed to create directory {path}: {e}",
                    error_code="BAD_WORK_DIR",
                    details={"path": str(path)}
                )

    @staticmethod
    def _env_overrides() -> Dict[str, Any]:
        """Collect settings from OBSDISK_* environment variables."""
        kwargs: Dict[str, Any] = {}

        if "OBSDISK_WORK_DIR" in os.environ:
            kwargs["work_dir"] = os.environ["OBSDISK_WORK_DIR"]
        if "OBSDISK_JUICEFS" in os.environ:
            kwargs["juicefs_bin"] = os.environ["OBSDISK_JUICEFS"]
        if "OBSDISK_TRASH_DAYS" in os.environ:
            kwargs["trash_days"] = int(os.environ["OBSDISK_TRASH_DAYS"])
        if "OBSDISK_MOUNT_BACKGROUND" in os.environ:
            kwargs["mount_background"] = os.environ["OBSDISK_MOUNT_BACKGROUND"].lower() == "true"
        if "OBSDISK_TIMEOUT" in os.environ:
            kwargs["command_timeout_sec"] = float(os.environ["OBSDISK_TIMEOUT"])
        if "OBSDISK_REFRESH_INTERVAL" in os.environ:
            kwargs["refresh_interval_sec"] = float(os.environ["OBSDISK_REFRESH_INTERVAL"])
        if "OBSDISK_ALLOW_ROOT" in os.environ:
            kwargs["allow_root"] = os.environ["OBSDISK_ALLOW_ROOT"].lower() == "true"
        if "OBSDISK_API_HOST" in os.environ:
            kwargs["api_host"] = os.environ["OBSDISK_API_HOST"]
        if "OBSDISK_API_PORT" in os.environ:
            kwargs["api_port"] = int(os.environ["OBSDISK_API_PORT"])

        return kwargs

    @staticmethod
    def _read_file(config_path: str) -> Dict[str, Any]:
        import yaml

        with open(config_path, "r") as f:
            if config_path.endswith((".yaml", ".yml")):
                data = yaml.safe_load(f)
            elif config_path.endswith(".json"):
                import json
                data = json.load(f)
            else:
                raise ValueError(f"Unsupported config format: {config_path}")

        return data or {}

    @classmethod
    def from_env(cls) -> "ObsDiskConfig":
        """
        Load configuration from environment variables.

        Environment variables (OBSDISK_*) override defaults:

        - OBSDISK_WORK_DIR: Working directory
        - OBSDISK_JUICEFS: juicefs executable
        - OBSDISK_TRASH_DAYS: Trash retention for new volumes
        - OBSDISK_MOUNT_BACKGROUND: Mount as daemon (true/false)
        - OBSDISK_TIMEOUT: External command timeout in seconds
        - OBSDISK_REFRESH_INTERVAL: Registry poll interval in seconds
        - OBSDISK_ALLOW_ROOT: Allow running as root (true/false)
        - OBSDISK_API_HOST / OBSDISK_API_PORT: API bind address
        """
        return cls(**cls._env_overrides())

    @classmethod
    def from_file(cls, config_path: str) -> "ObsDiskConfig":
        """
        Load configuration from a YAML or JSON file only.

        Supported formats: .yaml, .yml, .json
        """
        return cls(**cls._read_file(config_path))

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> "ObsDiskConfig":
        """
        Load configuration with the documented priority.

        Values from ``config_path`` (if given) are applied first, then any
        OBSDISK_* environment variables replace them.

        Raises:
            OSError: If the file cannot be read
            ValueError: On an unsupported format or invalid values
            yaml.YAMLError: If a YAML file cannot be parsed
        """
        data = cls._read_file(config_path) if config_path else {}
        data.update(cls._env_overrides())
        return cls(**data)
