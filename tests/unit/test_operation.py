"""Tests for operation descriptors."""

from __future__ import annotations

import pytest

from strois.errors import ConfigurationError
from strois.operation import Operation, validate_object_key


class TestOperation:
    """Test cases for Operation."""

    def test_bucket_level(self):
        """Test a bucket-level operation has no key."""
        operation = Operation.bucket_level("GET", query=[("list-type", "2"), ("prefix", "")])
        assert operation.key is None
        assert operation.query == (("list-type", "2"), ("prefix", ""))
        assert operation.body is None

    def test_object_level(self):
        """Test an object-level operation keeps its logical key and body."""
        operation = Operation.object_level("PUT", "dir/a b.txt", headers={"Content-Type": "text/plain"}, body=b"v")
        assert operation.key == "dir/a b.txt"
        assert operation.headers["Content-Type"] == "text/plain"
        assert operation.body == b"v"

    def test_headers_are_read_only(self):
        """Test that headers cannot be changed after construction."""
        operation = Operation.object_level("GET", "k", headers={"Range": "bytes=0-1"})
        with pytest.raises(TypeError):
            operation.headers["Range"] = "bytes=0-2"

    def test_unsupported_method(self):
        """Test that unknown verbs are rejected."""
        with pytest.raises(ConfigurationError):
            Operation.bucket_level("PATCH")

    def test_empty_key(self):
        """Test that empty keys are rejected."""
        with pytest.raises(ConfigurationError):
            Operation.object_level("GET", "")


class TestValidateObjectKey:
    """Test cases for object key validation."""

    def test_max_length(self):
        """Test that a 1024-byte key is accepted and 1025 bytes is not."""
        assert validate_object_key("a" * 1024)
        with pytest.raises(ConfigurationError):
            validate_object_key("a" * 1025)

    def test_length_counts_utf8_bytes(self):
        """Test that multi-byte characters count by encoded length."""
        with pytest.raises(ConfigurationError):
            validate_object_key("é" * 513)
