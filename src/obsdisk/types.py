"""
obsdisk type definitions

Common types used across the obsdisk project.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

__all__ = [
    "VolumeRecord",
    "Credentials",
]


class VolumeRecord(BaseModel):
    """A registered object-storage-backed volume"""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Unique volume name")

    provider_type: str = Field(
        ...,
        description="Storage driver code (oss/obs/cos)"
    )

    created_at: datetime = Field(..., description="Registration timestamp")


class Credentials(BaseModel):
    """Object-storage access key pair"""

    model_config = ConfigDict(frozen=True)

    access_key: str = Field(..., description="Access key ID")

    secret_key: str = Field(..., repr=False, description="Access key secret")
