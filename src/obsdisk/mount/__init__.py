"""
Mount lifecycle for obsdisk

Wraps the juicefs binary and coordinates it with the volume registry.
"""

from .orchestrator import MountOrchestrator
from .tool import (
    CommandResult,
    CommandRunner,
    JuiceFSTool,
    extract_fatal_detail,
    run_command,
)

__all__ = [
    "MountOrchestrator",
    "CommandResult",
    "CommandRunner",
    "JuiceFSTool",
    "extract_fatal_detail",
    "run_command",
]
