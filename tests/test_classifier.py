"""
Unit tests for bucket classification.
"""

import pytest

from obsdisk.classifier import PROVIDER_KEYWORDS, classify_bucket
from obsdisk.errors import InvalidInputError, UnsupportedProviderError


class TestClassifyBucket:

    @pytest.mark.parametrize("bucket,expected", [
        ("https://demo.oss-cn-hangzhou.aliyuncs.com", "oss"),
        ("bucket.aliyuncs.com", "oss"),
        ("https://demo.obs.cn-north-4.myhuaweicloud.com", "obs"),
        ("https://demo-1250000000.cos.ap-guangzhou.myqcloud.com", "cos"),
    ])
    def test_known_providers(self, bucket, expected):
        assert classify_bucket(bucket) == expected

    def test_surrounding_whitespace(self):
        assert classify_bucket("  bucket.aliyuncs.com\n") == "oss"

    def test_unknown_provider(self):
        with pytest.raises(UnsupportedProviderError) as exc_info:
            classify_bucket("https://demo.s3.amazonaws.com")

        assert exc_info.value.bucket == "https://demo.s3.amazonaws.com"
        assert exc_info.value.error_code == "UNSUPPORTED_PROVIDER"
        assert isinstance(exc_info.value, InvalidInputError)

    @pytest.mark.parametrize("bucket", ["", "   "])
    def test_blank(self, bucket):
        with pytest.raises(InvalidInputError) as exc_info:
            classify_bucket(bucket)

        assert not isinstance(exc_info.value, UnsupportedProviderError)

    def test_codes_are_three_letters(self):
        assert all(len(code) == 3 for code in PROVIDER_KEYWORDS.values())
