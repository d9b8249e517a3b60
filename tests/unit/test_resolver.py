"""Tests for response resolution."""

from __future__ import annotations

import pytest

from strois.errors import DecodeError, S3Error, S3ErrorCode, UnexpectedResponseError
from strois.resolver import as_bytes, as_json, as_listing, as_text, is_success, no_content, resolve
from strois.transport import RawResponse

NO_SUCH_KEY = (
    b"<Error><Code>NoSuchKey</Code><Message>The specified key does not exist.</Message>"
    b"<Key>kero</Key><BucketName>tamo</BucketName><Resource>/tamo/kero</Resource></Error>"
)


class TestResolve:
    """Test cases for resolve."""

    @pytest.mark.parametrize("status", [200, 204, 206, 299])
    def test_success_range(self, status):
        """Test that every 2xx status is a success."""
        assert is_success(status)

    @pytest.mark.parametrize("status", [199, 301, 304, 404, 500])
    def test_failure_range(self, status):
        """Test that statuses outside 2xx are failures."""
        assert not is_success(status)

    def test_raw_success(self):
        """Test a byte operation returns the body as is, whatever its shape."""
        assert resolve(RawResponse(200, body=b"hello"), as_bytes) == b"hello"

    def test_listing_with_non_xml_body(self):
        """Test a listing operation fails on a non-XML success body."""
        with pytest.raises(DecodeError):
            resolve(RawResponse(200, body=b"hello"), as_listing)

    def test_no_content(self):
        """Test that operations without a payload return None."""
        assert resolve(RawResponse(204), no_content) is None

    def test_fault(self):
        """Test that a fault envelope becomes an S3Error."""
        with pytest.raises(S3Error) as exc_info:
            resolve(RawResponse(404, body=NO_SUCH_KEY), as_bytes)
        error = exc_info.value
        assert error.code is S3ErrorCode.NoSuchKey
        assert error.status_code == 404
        assert error.key == "kero"
        assert str(error) == "NoSuchKey: The specified key does not exist. on tamo"

    def test_plain_text_failure(self):
        """Test that a failure without a fault envelope keeps status and text."""
        with pytest.raises(UnexpectedResponseError) as exc_info:
            resolve(RawResponse(403, body=b"Forbidden"), as_bytes)
        assert exc_info.value.status_code == 403
        assert exc_info.value.text == "Forbidden"

    def test_blank_fault_code(self):
        """Test an envelope with a blank code falls back to the opaque error."""
        body = b"<Error><Code> </Code><Message>proxy</Message></Error>"
        with pytest.raises(UnexpectedResponseError) as exc_info:
            resolve(RawResponse(500, body=body), as_bytes)
        assert exc_info.value.status_code == 500
        assert "proxy" in exc_info.value.text

    def test_redirect_is_a_failure(self):
        """Test that a redirect with a fault envelope is reported as such."""
        body = b"<Error><Code>PermanentRedirect</Code><Message>Use the right endpoint</Message></Error>"
        with pytest.raises(S3Error) as exc_info:
            resolve(RawResponse(301, body=body), as_bytes)
        assert exc_info.value.code is S3ErrorCode.PermanentRedirect

    def test_decoder_not_called_on_failure(self):
        """Test that the decoding strategy only sees successful responses."""
        calls = []
        with pytest.raises(UnexpectedResponseError):
            resolve(RawResponse(500), calls.append)
        assert calls == []


class TestDecoders:
    """Test cases for the decoding strategies."""

    def test_as_text(self):
        """Test UTF-8 decoding."""
        assert as_text(RawResponse(200, body="été".encode("utf-8"))) == "été"

    def test_as_text_invalid_utf8(self):
        """Test that invalid UTF-8 is a decode error carrying the body."""
        with pytest.raises(DecodeError) as exc_info:
            as_text(RawResponse(200, body=b"\xff\xfe"))
        assert exc_info.value.body == b"\xff\xfe"
        assert not isinstance(exc_info.value, UnexpectedResponseError)

    def test_as_json(self):
        """Test JSON decoding."""
        assert as_json(RawResponse(200, body=b'{"a": [1, 2]}')) == {"a": [1, 2]}

    def test_as_json_invalid(self):
        """Test that invalid JSON is a decode error."""
        with pytest.raises(DecodeError, match="JSON"):
            as_json(RawResponse(200, body=b"{"))
