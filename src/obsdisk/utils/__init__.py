"""
obsdisk utilities

Logging and path helpers.
"""

from obsdisk.utils.logger import (
    configure_logging,
    DEFAULT_FORMAT,
)
from obsdisk.utils.paths import validate_volume_name

__all__ = [
    "configure_logging",
    "DEFAULT_FORMAT",
    "validate_volume_name",
]
