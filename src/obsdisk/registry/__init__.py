"""
Registry observation for obsdisk
"""

from .observer import RefreshLoop, RegistryObserver

__all__ = [
    "RefreshLoop",
    "RegistryObserver",
]
