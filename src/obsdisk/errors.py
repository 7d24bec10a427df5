"""
obsdisk error definitions

Standard exceptions used across the obsdisk project.
"""

from typing import Optional, Dict, Any


class ObsDiskError(Exception):
    """Base exception for all obsdisk errors"""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "UNKNOWN"
        self.details = details or {}

    def __str__(self) -> str:
        return f"[{self.error_code}] {self.message}"


class InvalidInputError(ObsDiskError):
    """Blank or malformed request field"""

    def __init__(self, field: str, reason: str, error_code: str = "INVALID_INPUT"):
        super().__init__(
            message=f"Invalid field '{field}': {reason}",
            error_code=error_code,
            details={"field": field}
        )
        self.field = field
        self.reason = reason


class UnsupportedProviderError(InvalidInputError):
    """Bucket does not name a known object-storage provider"""

    def __init__(self, bucket: str):
        super().__init__(
            field="bucket",
            reason=f"unsupported bucket {bucket}",
            error_code="UNSUPPORTED_PROVIDER"
        )
        self.bucket = bucket


class DuplicateNameError(ObsDiskError):
    """A volume with this name is already registered"""

    def __init__(self, name: str):
        super().__init__(
            message=f"Volume '{name}' already exists",
            error_code="DUPLICATE_NAME",
            details={"name": name}
        )
        self.name = name


class ToolInvocationError(ObsDiskError):
    """
    External mount tool exited unsuccessfully.

    The message is the detail extracted from the tool's stderr, nothing else.
    """

    def __init__(self, name: str, detail: str, error_code: str, exit_code: Optional[int] = None):
        super().__init__(
            message=detail,
            error_code=error_code,
            details={"name": name, "exit_code": exit_code}
        )
        self.name = name
        self.detail = detail
        self.exit_code = exit_code


class ProvisionFailedError(ToolInvocationError):
    """Formatting a new volume failed"""

    def __init__(self, name: str, detail: str, exit_code: Optional[int] = None):
        super().__init__(name, detail, "PROVISION_FAILED", exit_code)


class MountFailedError(ToolInvocationError):
    """Mounting a volume failed"""

    def __init__(self, name: str, detail: str, exit_code: Optional[int] = None):
        super().__init__(name, detail, "MOUNT_FAILED", exit_code)


class UnmountFailedError(ToolInvocationError):
    """Unmounting a volume failed"""

    def __init__(self, name: str, detail: str, exit_code: Optional[int] = None):
        super().__init__(name, detail, "UNMOUNT_FAILED", exit_code)


class StoreUnavailableError(ObsDiskError):
    """Volume registry could not be read or written"""

    def __init__(self, reason: str, path: Optional[str] = None):
        super().__init__(
            message=f"Volume registry unavailable: {reason}",
            error_code="STORE_UNAVAILABLE",
            details={"path": path} if path else {}
        )
        self.reason = reason
        self.path = path


# Error codes
ERROR_CODES = {
    # Request errors
    "INVALID_INPUT": "Invalid request field",
    "UNSUPPORTED_PROVIDER": "Unsupported object-storage provider",
    "DUPLICATE_NAME": "Volume name already registered",

    # External tool errors
    "PROVISION_FAILED": "Volume format failed",
    "MOUNT_FAILED": "Volume mount failed",
    "UNMOUNT_FAILED": "Volume unmount failed",

    # Registry errors
    "STORE_UNAVAILABLE": "Volume registry unavailable",
}
