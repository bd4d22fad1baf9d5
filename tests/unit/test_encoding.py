"""
Unit tests for content negotiation and gzip compression.
"""

import gzip

import pytest

from minihttpd.http.encoding import gzip_compress, supports_gzip


class TestSupportsGzip:
    """Tests for Accept-Encoding matching."""

    @pytest.mark.parametrize("value", [
        "gzip",
        "deflate, gzip",
        "gzip, br",
        "deflate, gzip, br",
    ])
    def test_gzip_listed(self, value: str):
        assert supports_gzip(value) is True

    @pytest.mark.parametrize("value", [
        None,
        "invalid",
        "",
        "deflate, br",
        "GZIP",
        "gzip;q=1.0",
        "gzip,deflate",
        "*",
        "x-gzip",
    ])
    def test_gzip_not_listed(self, value):
        """Matching is exact: no case folding, wildcards or q-values."""
        assert supports_gzip(value) is False


class TestGzipCompress:
    """Tests for gzip_compress."""

    def test_round_trip(self):
        assert gzip.decompress(gzip_compress(b"abc")) == b"abc"

    def test_gzip_magic(self):
        assert gzip_compress(b"abc")[:2] == b"\x1f\x8b"

    def test_deterministic(self):
        """The gzip header timestamp is fixed, so output is repeatable."""
        assert gzip_compress(b"hello world") == gzip_compress(b"hello world")

    def test_empty_input(self):
        assert gzip.decompress(gzip_compress(b"")) == b""
