"""
FastAPI REST API Server for obsdisk

Thin HTTP front end over ObsDiskManager.
"""

import logging
import sys
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from obsdisk import __version__
from obsdisk.config import ObsDiskConfig
from obsdisk.errors import (
    ObsDiskError,
    InvalidInputError,
    DuplicateNameError,
    ToolInvocationError,
    StoreUnavailableError,
)
from obsdisk.manager import ObsDiskManager
from obsdisk.types import VolumeRecord

logger = logging.getLogger(__name__)

# =============================================================================
# Request/Response Models
# =============================================================================

class CreateVolumeRequest(BaseModel):
    """Request to create a new volume"""
    name: str = Field(..., description="Unique volume name")
    access_key: str = Field(..., description="Bucket access key")
    secret_key: str = Field(..., description="Bucket access key secret")
    bucket: str = Field(..., description="Bucket endpoint URL")


class MountStatus(BaseModel):
    """Mount or unmount response"""
    name: str = Field(..., description="Volume name")
    mount_point: str = Field(..., description="Local mount point")
    status: str = Field(..., description="mounted/unmounted")


class HealthStatus(BaseModel):
    """Health check response"""
    status: str = Field(..., description="Overall health status")
    version: str = Field(..., description="API version")
    volumes: int = Field(default=0, description="Registered volume count")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Response timestamp"
    )


class ObsDiskErrorResponse(BaseModel):
    """Error response body"""
    error_code: str = Field(..., description="Error code")
    message: str = Field(..., description="Human-readable error description")
    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Additional error details"
    )
    request_id: str = Field(..., description="Request tracking ID")
    timestamp: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Error timestamp (ISO 8601)"
    )


# =============================================================================
# Error Code Mapping
# =============================================================================

# Checked in order, so subclasses map through their base
ERROR_STATUS_MAP = [
    (InvalidInputError, 400),
    (DuplicateNameError, 409),
    (ToolInvocationError, 502),
    (StoreUnavailableError, 503),
]


def status_for(exc: ObsDiskError) -> int:
    for error_type, status_code in ERROR_STATUS_MAP:
        if isinstance(exc, error_type):
            return status_code
    return 500


# =============================================================================
# FastAPI Application
# =============================================================================

def create_app(
    config: Optional[ObsDiskConfig] = None,
    manager: Optional[ObsDiskManager] = None,
) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        config: Optional obsdisk configuration
        manager: Optional pre-built ObsDiskManager (built from config otherwise)

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = manager.config if manager is not None else ObsDiskConfig.from_env()

    app = FastAPI(
        title="obsdisk API",
        version=__version__,
        description="Registry and mount lifecycle for object-storage-backed disks",
    )

    app.state.config = config
    app.state.manager = manager if manager is not None else ObsDiskManager(config)

    register_exception_handlers(app)
    register_routes(app)

    logger.info(f"FastAPI application created for work dir {config.work_dir}")
    return app


def register_exception_handlers(app: FastAPI) -> None:
    """Register global exception handlers"""

    @app.exception_handler(ObsDiskError)
    async def obsdisk_error_handler(request: Request, exc: ObsDiskError):
        status_code = status_for(exc)
        request_id = getattr(request.state, "request_id", str(uuid.uuid4()))

        error_response = ObsDiskErrorResponse(
            error_code=exc.error_code,
            message=exc.message,
            details=exc.details,
            request_id=request_id,
        )

        logger.error(
            f"ObsDiskError: {exc.error_code} - {exc.message}",
            extra={"request_id": request_id}
        )

        return JSONResponse(
            status_code=status_code,
            content=error_response.model_dump(),
        )


def register_routes(app: FastAPI) -> None:
    """Register all API routes"""

    def get_manager() -> ObsDiskManager:
        return app.state.manager

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        request.state.request_id = str(uuid.uuid4())
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    @app.get("/v1/health", response_model=HealthStatus, tags=["System"])
    def health_check(manager=Depends(get_manager)):
        """
        System health check endpoint

        Reports degraded when the registry cannot be read.
        """
        try:
            count = len(manager.list_volumes())
        except StoreUnavailableError as e:
            logger.error(f"Health check failed: {e}")
            return HealthStatus(status="degraded", version=__version__)
        return HealthStatus(status="healthy", version=__version__, volumes=count)

    # =========================================================================
    # Volumes
    # =========================================================================

    @app.get("/v1/volumes", response_model=List[VolumeRecord], tags=["Volumes"])
    def list_volumes(manager=Depends(get_manager)):
        """List every registered volume"""
        return manager.list_volumes()

    @app.get("/v1/volumes/updates", response_model=List[VolumeRecord], tags=["Volumes"])
    def volume_updates(manager=Depends(get_manager)):
        """
        Volumes registered since the previous call

        Each volume is returned by this endpoint at most once per server process.
        """
        return manager.refresh()

    @app.post(
        "/v1/volumes",
        response_model=VolumeRecord,
        status_code=201,
        tags=["Volumes"]
    )
    def create_volume(request: CreateVolumeRequest, manager=Depends(get_manager)):
        """
        Create a new volume

        Formats the volume against the bucket and registers it.
        """
        logger.info(f"Creating volume: {request.name}")
        return manager.create_volume(
            request.name,
            request.access_key,
            request.secret_key,
            request.bucket,
        )

    @app.post("/v1/volumes/{name}/mount", response_model=MountStatus, tags=["Volumes"])
    def mount_volume(name: str, manager=Depends(get_manager)):
        """Mount a volume at its local mount point"""
        mount_point = manager.mount(name)
        return MountStatus(name=name, mount_point=mount_point, status="mounted")

    @app.post("/v1/volumes/{name}/unmount", response_model=MountStatus, tags=["Volumes"])
    def unmount_volume(name: str, manager=Depends(get_manager)):
        """Unmount a volume"""
        mount_point = manager.unmount(name)
        return MountStatus(name=name, mount_point=mount_point, status="unmounted")

    @app.get("/", tags=["Root"])
    async def root():
        return {
            "name": "obsdisk API",
            "version": __version__,
            "docs": "/docs",
            "health": "/v1/health",
        }


# =============================================================================
# Entry Point
# =============================================================================

def main():
    """CLI entry point for obsdisk-api command."""
    from obsdisk.cli import main as cli_main

    return cli_main(["serve"] + sys.argv[1:])


if __name__ == "__main__":
    sys.exit(main())
