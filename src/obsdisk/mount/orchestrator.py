"""
Volume provisioning and mount coordination.

The external format always runs before the registry insert, and a failed
insert removes the metadata file again. An interrupted create leaves at most
an unregistered metadata file, never a registered volume that was not
formatted.

Creates are serialized per orchestrator. A duplicate reported by the insert
itself means another writer registered the name first, and the metadata file
then belongs to that volume, so it is left in place.
"""

import logging
import threading
from typing import Optional

from ..errors import (
    DuplicateNameError,
    InvalidInputError,
    MountFailedError,
    ProvisionFailedError,
    UnmountFailedError,
)
from ..classifier import classify_bucket
from ..storage import VolumeStore
from ..types import Credentials, VolumeRecord
from ..utils.paths import validate_volume_name
from .tool import JuiceFSTool, extract_fatal_detail

logger = logging.getLogger(__name__)


class MountOrchestrator:
    """
    Sequences mount tool invocations against the volume registry.

    Holds no volume state of its own; one lock serializes creates. Every
    operation blocks until the external command finishes and nothing is
    retried.
    """

    def __init__(self, store: VolumeStore, tool: JuiceFSTool):
        self.store = store
        self.tool = tool
        self._create_lock = threading.Lock()

    def _discard_metadata(self, name: str) -> None:
        """Best-effort removal of a volume's metadata file."""
        try:
            self.tool.remove_metadata(name)
            logger.info(f"Removed metadata for {name}")
        except OSError as e:
            logger.warning(f"Failed to remove metadata for {name}: {e}")

    @staticmethod
    def _require(value: Optional[str], field: str) -> str:
        value = (value or "").strip()
        if not value:
            raise InvalidInputError(field, f"{field} cannot be empty")
        return value

    def create_volume(self, name: str, credentials: Credentials, bucket: str) -> VolumeRecord:
        """
        Classify the bucket, then provision and register the volume.

        Raises:
            InvalidInputError: Blank field or unsupported bucket
            DuplicateNameError, ProvisionFailedError, StoreUnavailableError:
                As for provision_and_register()
        """
        validate_volume_name(name)
        self._require(credentials.access_key, "access_key")
        self._require(credentials.secret_key, "secret_key")
        provider_type = classify_bucket(bucket)
        return self.provision_and_register(name, provider_type, credentials, bucket)

    def provision_and_register(
        self,
        name: str,
        provider_type: Optional[str],
        credentials: Credentials,
        bucket: str,
    ) -> VolumeRecord:
        """
        Format a new volume and record it in the registry.

        Args:
            name: Volume name
            provider_type: Storage driver code from bucket classification
            credentials: Bucket access keys
            bucket: Bucket endpoint

        Returns:
            The registered VolumeRecord

        Raises:
            InvalidInputError: If any field is blank
            DuplicateNameError: If the name is already registered
            ProvisionFailedError: If the format command fails
            StoreUnavailableError: If the registry cannot be read or written
        """
        name = validate_volume_name(name)
        access_key = self._require(credentials.access_key, "access_key")
        secret_key = self._require(credentials.secret_key, "secret_key")
        bucket = self._require(bucket, "bucket")
        provider_type = self._require(provider_type, "provider_type")
        credentials = Credentials(access_key=access_key, secret_key=secret_key)

        with self._create_lock:
            if self.store.exists(name):
                raise DuplicateNameError(name)

            logger.info(f"Formatting volume {name} on {provider_type} bucket {bucket}")
            result = self.tool.format(name, provider_type, credentials, bucket)
            if not result.success:
                self._discard_metadata(name)
                detail = extract_fatal_detail(result.stderr)
                logger.error(f"Format of {name} failed: {detail}")
                raise ProvisionFailedError(name, detail, result.exit_code)

            try:
                record = self.store.create(name, provider_type)
            except DuplicateNameError:
                logger.error(f"Volume {name} was registered by another writer, keeping its metadata")
                raise
            except Exception:
                logger.error(f"Registering {name} failed, rolling back metadata")
                self._discard_metadata(name)
                raise

        logger.info(f"Volume {name} created")
        return record

    def mount(self, name: str) -> str:
        """
        Mount a volume at its mount point.

        The registry is not consulted, so a volume formatted outside this
        registry can still be attached.

        Returns:
            The mount point path

        Raises:
            MountFailedError: If the mount command fails
        """
        name = validate_volume_name(name)
        mount_point = str(self.tool.mount_point(name))
        result = self.tool.mount(name)
        if not result.success:
            detail = extract_fatal_detail(result.stderr)
            logger.error(f"Mount of {name} failed: {detail}")
            raise MountFailedError(name, detail, result.exit_code)
        logger.info(f"Mounted {name} at {mount_point}")
        return mount_point

    def unmount(self, name: str) -> str:
        """
        Unmount a volume from its mount point.

        Whether anything is mounted there is left to the tool to decide.

        Returns:
            The mount point path

        Raises:
            UnmountFailedError: If the umount command fails
        """
        name = validate_volume_name(name)
        mount_point = str(self.tool.mount_point(name))
        result = self.tool.unmount(name)
        if not result.success:
            detail = extract_fatal_detail(result.stderr)
            logger.error(f"Unmount of {name} failed: {detail}")
            raise UnmountFailedError(name, detail, result.exit_code)
        logger.info(f"Unmounted {name} from {mount_point}")
        return mount_point
