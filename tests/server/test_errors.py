"""Tests for remote_gateway.server.errors module."""

from __future__ import annotations

import json
import logging

import pytest

from remote_gateway.server.errors import (
    INVALID_PARAMS,
    ErrorCode,
    error_response,
    internal_error,
    jsonrpc_error,
    missing_field_error,
    no_stream_error,
    payload_too_large_error,
    session_not_found_error,
)


def _body(response) -> dict:
    return json.loads(response.body)


class TestErrorCodes:
    @pytest.mark.parametrize(
        "code, status",
        [
            (ErrorCode.INVALID_JSON, 400),
            (ErrorCode.MISSING_TOKEN, 401),
            (ErrorCode.INVALID_TOKEN, 401),
            (ErrorCode.UNKNOWN_SESSION, 404),
            (ErrorCode.PAYLOAD_TOO_LARGE, 413),
            (ErrorCode.INTERNAL, 500),
            (ErrorCode.NO_STREAM, 503),
        ],
    )
    def test_default_status(self, code, status):
        assert error_response(code, "x").status_code == status

    def test_every_code_has_a_status(self):
        assert all(code.status_code >= 400 for code in ErrorCode)


class TestRestErrors:
    def test_error_response_shape(self):
        response = error_response(ErrorCode.INVALID_TOKEN, "Invalid token", status_code=403)
        assert response.status_code == 403
        assert _body(response) == {
            "success": False,
            "error": {"code": "AUTH_INVALID_TOKEN", "message": "Invalid token"},
        }

    def test_missing_field(self):
        response = missing_field_error("text")
        assert response.status_code == 400
        assert _body(response)["error"] == {"code": "VALIDATION_MISSING_FIELD", "message": "text required"}

    def test_no_stream(self):
        response = no_stream_error()
        assert response.status_code == 503
        assert _body(response)["error"] == {"code": "SERVICE_UNAVAILABLE", "message": "SSE not established"}

    def test_session_not_found(self):
        response = session_not_found_error("abc")
        assert response.status_code == 404
        assert _body(response)["error"]["message"] == "Session abc not found or expired"

    def test_payload_too_large(self):
        assert _body(payload_too_large_error(16))["error"]["message"] == "Request body exceeds 16 bytes"

    def test_internal_error_id_matches_log(self, caplog):
        with caplog.at_level(logging.ERROR, logger="remote_gateway.server.errors"):
            response = internal_error("messages error", RuntimeError("boom"))

        error = _body(response)["error"]
        assert response.status_code == 500
        assert error["message"] == "messages error"
        assert len(error["error_id"]) == 12
        assert f"error_id={error['error_id']} RuntimeError: boom" in caplog.text
        assert "boom" not in json.dumps(error)


class TestJsonRpcError:
    def test_without_data(self):
        assert jsonrpc_error(1, -32601, "Method not found: x") == {
            "jsonrpc": "2.0",
            "error": {"code": -32601, "message": "Method not found: x"},
            "id": 1,
        }

    def test_with_data(self):
        error = jsonrpc_error("a", INVALID_PARAMS, "bad", {"errors": []})
        assert error["error"]["data"] == {"errors": []}
        assert error["id"] == "a"
