"""
Bucket classification.

Maps a bucket endpoint to the storage driver code understood by the mount
tool, by looking for the provider's domain keyword.
"""

import logging

from obsdisk.errors import InvalidInputError, UnsupportedProviderError

logger = logging.getLogger(__name__)

# bucket URL keyword -> storage driver
PROVIDER_KEYWORDS = {
    "aliyuncs": "oss",
    "myhuaweicloud": "obs",
    "myqcloud": "cos",
}


def classify_bucket(bucket: str) -> str:
    """
    Determine the storage driver for a bucket URL.

    Args:
        bucket: Bucket endpoint, e.g. ``https://demo.oss-cn-hangzhou.aliyuncs.com``

    Returns:
        Storage driver code (oss/obs/cos)

    Raises:
        InvalidInputError: If the bucket is blank
        UnsupportedProviderError: If no known provider keyword is present
    """
    bucket = (bucket or "").strip()
    if not bucket:
        raise InvalidInputError("bucket", "bucket cannot be empty")

    for keyword, provider_type in PROVIDER_KEYWORDS.items():
        if keyword in bucket:
            logger.debug(f"Bucket {bucket} classified as {provider_type}")
            return provider_type

    raise UnsupportedProviderError(bucket)
