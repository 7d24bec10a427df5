"""
obsdisk: object-storage-backed disks

Keeps a local registry of named volumes whose data lives in a cloud bucket,
and formats, mounts and unmounts them through juicefs.
"""

__version__ = "1.0.0"

from obsdisk.config import ObsDiskConfig
from obsdisk.types import VolumeRecord, Credentials
from obsdisk.classifier import classify_bucket
from obsdisk.storage import VolumeStore
from obsdisk.mount import MountOrchestrator, JuiceFSTool, extract_fatal_detail
from obsdisk.registry import RegistryObserver, RefreshLoop
from obsdisk.manager import ObsDiskManager

from obsdisk.errors import (
    ObsDiskError,
    InvalidInputError,
    UnsupportedProviderError,
    DuplicateNameError,
    ToolInvocationError,
    ProvisionFailedError,
    MountFailedError,
    UnmountFailedError,
    StoreUnavailableError,
)

__all__ = [
    "ObsDiskConfig",
    "VolumeRecord",
    "Credentials",
    "classify_bucket",
    "VolumeStore",
    "MountOrchestrator",
    "JuiceFSTool",
    "extract_fatal_detail",
    "RegistryObserver",
    "RefreshLoop",
    "ObsDiskManager",
    # Exception classes
    "ObsDiskError",
    "InvalidInputError",
    "UnsupportedProviderError",
    "DuplicateNameError",
    "ToolInvocationError",
    "ProvisionFailedError",
    "MountFailedError",
    "UnmountFailedError",
    "StoreUnavailableError",
]
