"""
obsdisk API module

REST front end.
"""

from obsdisk.api.rest import (
    create_app,
    CreateVolumeRequest,
    MountStatus,
    HealthStatus,
    ObsDiskErrorResponse,
)

__all__ = [
    "create_app",
    "CreateVolumeRequest",
    "MountStatus",
    "HealthStatus",
    "ObsDiskErrorResponse",
]
