"""
Tests for logging middleware and the JSON formatter.
Tests field masking, PII substitution in free text and request logging.
"""

import pytest
import json
import logging
import sys
from unittest.mock import Mock
from fastapi import FastAPI
from fastapi.testclient import TestClient

from core.middleware.logging import (
    is_sensitive_field,
    mask_text,
    mask_sensitive_data,
    mask_headers,
    should_log_request,
    get_client_ip,
    StructuredLoggingMiddleware,
    StructuredFormatter,
    setup_logging,
    get_logger,
)


class TestSensitiveFieldDetection:
    """Test sensitive field name detection."""

    @pytest.mark.parametrize("field_name,expected", [
        ("password", True),
        ("PASSWORD", True),
        ("access_token", True),
        ("api_key", True),
        ("apiKey", True),
        ("client_secret", True),
        ("Authorization", True),
        ("cookie", True),
        ("session_id", True),
        ("name", False),
        ("resume_summary", False),
        ("job_id", False),
        ("skills", False),
    ])
    def test_field_detection(self, field_name, expected):
        assert is_sensitive_field(field_name) is expected


class TestMasking:
    """Test value masking."""

    def test_email_in_free_text(self):
        assert mask_text("Contact ada@acme.io today") == "Contact [EMAIL] today"

    @pytest.mark.parametrize("text", ["Call 555-123-4567", "Call +1 555 123 4567"])
    def test_phone_in_free_text(self, text):
        assert "[PHONE]" in mask_text(text)

    def test_plain_text_untouched(self):
        assert mask_text("Five years of Python") == "Five years of Python"

    def test_nested_structures(self):
        data = {
            "token": "abc",
            "profile": {"bio": "Email me at ada@acme.io", "experience_years": 5},
            "items": [{"password": "x"}, "call 555-123-4567"],
        }

        masked = mask_sensitive_data(data)

        assert masked["token"] == "[REDACTED]"
        assert masked["profile"]["bio"] == "Email me at [EMAIL]"
        assert masked["profile"]["experience_years"] == 5
        assert masked["items"][0]["password"] == "[REDACTED]"
        assert masked["items"][1] == "call [PHONE]"

    def test_max_depth(self):
        data = {"a": {"a": {"a": "deep"}}}

        assert mask_sensitive_data(data, max_depth=1) == {"a": {"a": "[MAX_DEPTH_EXCEEDED]"}}

    def test_headers_keep_auth_scheme(self):
        masked = mask_headers({
            "authorization": "Bearer eyJhbGciOi",
            "cookie": "sid=1",
            "content-type": "application/json",
        })

        assert masked["authorization"] == "Bearer [REDACTED]"
        assert masked["cookie"] == "[REDACTED]"
        assert masked["content-type"] == "application/json"


class TestRequestHelpers:
    @pytest.mark.parametrize("path,expected", [
        ("/health", False),
        ("/ready", False),
        ("/api/v1/jobs", True),
    ])
    def test_should_log_request(self, path, expected):
        assert should_log_request(path) is expected

    def test_client_ip_masked(self):
        request = Mock()
        request.headers = {}
        request.client.host = "10.1.2.3"

        assert get_client_ip(request) == "10.1.2.xxx"

    def test_forwarded_for_preferred(self):
        request = Mock()
        request.headers = {"x-forwarded-for": "203.0.113.9, 10.0.0.1"}

        assert get_client_ip(request) == "203.0.113.xxx"

    def test_non_ipv4(self):
        request = Mock()
        request.headers = {}
        request.client.host = "::1"

        assert get_client_ip(request) == "unknown"


class TestStructuredFormatter:
    """Test JSON log lines."""

    def _record(self, **extra):
        record = logging.LogRecord("api.test", logging.INFO, __file__, 1, "Job %s created", (7,), None)
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_fields(self):
        line = json.loads(StructuredFormatter().format(self._record()))

        assert line["level"] == "INFO"
        assert line["logger"] == "api.test"
        assert line["message"] == "Job 7 created"
        assert "timestamp" in line

    def test_extra_fields_emitted(self):
        line = json.loads(StructuredFormatter().format(self._record(job_id=7, vendor_id="v-1")))

        assert line["job_id"] == 7
        assert line["vendor_id"] == "v-1"
        assert "lineno" not in line

    def test_exception_info(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), None)
            record.exc_info = sys.exc_info()

        line = json.loads(StructuredFormatter().format(record))

        assert line["exception"]["type"] == "ValueError"
        assert line["exception"]["message"] == "bad"


class TestStructuredLoggingMiddleware:
    """Test request logging."""

    @pytest.fixture
    def app(self):
        app = FastAPI()
        app.add_middleware(StructuredLoggingMiddleware, log_request_body=True, max_body_size=200)

        @app.post("/echo")
        async def echo(payload: dict):
            return payload

        @app.get("/health")
        async def health():
            return {"status": "healthy"}

        return app

    @pytest.fixture
    def client(self, app):
        return TestClient(app)

    def _logged(self, caplog):
        return [json.loads(r.getMessage()) for r in caplog.records if r.name == "core.middleware.logging"]

    def test_request_id_generated(self, client):
        response = client.post("/echo", json={"a": 1})

        assert response.status_code == 200
        assert response.headers["x-request-id"]

    def test_request_id_propagated(self, client):
        response = client.post("/echo", json={}, headers={"x-request-id": "abc-1"})

        assert response.headers["x-request-id"] == "abc-1"

    def test_body_logged_masked(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            client.post("/echo", json={"password": "hunter2", "bio": "mail ada@acme.io"})

        started = [entry for entry in self._logged(caplog) if entry["event"] == "request_started"][0]
        assert started["body"] == {"password": "[REDACTED]", "bio": "mail [EMAIL]"}

    def test_large_body_truncated(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            client.post("/echo", json={"bio": "x" * 500})

        started = [entry for entry in self._logged(caplog) if entry["event"] == "request_started"][0]
        assert started["body"]["_truncated"] is True

    def test_completion_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            client.post("/echo", json={})

        completed = [entry for entry in self._logged(caplog) if entry["event"] == "request_completed"][0]
        assert completed["status_code"] == 200
        assert completed["method"] == "POST"

    def test_health_not_logged(self, client, caplog):
        with caplog.at_level(logging.INFO, logger="core.middleware.logging"):
            response = client.get("/health")

        assert response.headers["x-request-id"]
        assert self._logged(caplog) == []


class TestSetupLogging:
    def test_json_handler_installed(self):
        setup_logging(log_level="DEBUG", json_logs=True)

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers)

    def test_plain_handler(self):
        setup_logging(log_level="INFO", json_logs=False)

        root = logging.getLogger()
        assert not any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers)
        setup_logging(log_level="INFO", json_logs=True)

    def test_get_logger(self):
        assert get_logger("api.jobs").name == "api.jobs"
