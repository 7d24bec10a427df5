"""
Persistent volume registry for obsdisk

SQLite-backed table of registered volumes.
"""

from .models import Base, VolumeRow
from .store import VolumeStore

__all__ = [
    "Base",
    "VolumeRow",
    "VolumeStore",
]
