"""Tests for structured logging helpers."""

from __future__ import annotations

import io
import json
import logging

import pytest

from strois.errors import S3Error
from strois.logging import level_from_verbosity, log_request_event
from strois.utils.errors import REDACTED


class TestLevelFromVerbosity:
    """Test cases for level_from_verbosity."""

    @pytest.mark.parametrize(
        ("verbosity", "level"),
        [(0, "ERROR"), (1, "WARNING"), (2, "INFO"), (3, "DEBUG"), (7, "DEBUG")],
    )
    def test_levels(self, verbosity, level):
        """Test each -v raises the level by one step."""
        assert level_from_verbosity(verbosity) == level


class TestLogRequestEvent:
    """Test cases for log_request_event."""

    def test_event_is_json(self, caplog):
        """Test the event is one JSON object with credentials redacted."""
        logger = logging.getLogger("strois.test")
        with caplog.at_level(logging.DEBUG, logger="strois.test"):
            log_request_event(
                logger,
                operation="get_object",
                method="GET",
                url="http://localhost:9000/tamo/k?X-Amz-Signature=deadbeef",
                bucket="tamo",
                key="k",
                status=200,
                duration=0.1234567,
                request_id="req-1",
                session_token="secret-token",
            )

        event = json.loads(caplog.records[-1].getMessage())
        assert event["operation"] == "get_object"
        assert event["status"] == 200
        assert event["duration_seconds"] == 0.123457
        assert event["url"] == f"http://localhost:9000/tamo/k?X-Amz-Signature={REDACTED}"
        assert event["request_id"] == "req-1"
        assert event["session_token"] == REDACTED

    def test_client_logs_requests(self, client, caplog):
        """Test the client logs one event per request."""
        with caplog.at_level(logging.DEBUG, logger="strois.client"):
            client.bucket("tamo").create()

        events = [json.loads(record.getMessage()) for record in caplog.records if record.name == "strois.client"]
        assert len(events) == 1
        assert events[0]["operation"] == "create_bucket"
        assert events[0]["method"] == "PUT"
        assert events[0]["status"] == 200

    def test_client_logs_streamed_requests(self, client, caplog):
        """Test streamed downloads are logged once their status is known."""
        bucket = client.bucket("tamo").create()
        bucket.put_object("k", b"v")
        with caplog.at_level(logging.DEBUG, logger="strois.client"):
            bucket.get_object_to_writer("k", io.BytesIO())
            with pytest.raises(S3Error):
                bucket.get_object_to_writer("missing", io.BytesIO())

        events = [json.loads(record.getMessage()) for record in caplog.records if record.name == "strois.client"]
        assert [(event["operation"], event["key"], event["status"]) for event in events] == [
            ("get_object", "k", 200),
            ("get_object", "missing", 404),
        ]

    def test_request_headers_redacted(self, client, caplog):
        """Test signed headers are logged without their credentials."""
        with caplog.at_level(logging.DEBUG, logger="strois.client"):
            client.bucket("tamo").create()

        message = [record.getMessage() for record in caplog.records if record.name == "strois.client"][-1]
        event = json.loads(message)
        assert event["headers"]["Authorization"] == REDACTED
        assert event["headers"]["X-Amz-Date"]
        assert "minioadmin/" not in message
