"""Tests for remote_gateway.server.auth module."""

from __future__ import annotations

import pytest

from remote_gateway.core.exceptions import AuthError
from remote_gateway.server.auth import extract_token, verify_api_key


class TestExtractToken:
    def test_bearer(self):
        assert extract_token({"authorization": "Bearer abc"}) == "abc"

    def test_api_key_header(self):
        assert extract_token({"x-api-key": "abc"}) == "abc"

    def test_authorization_wins(self):
        assert extract_token({"authorization": "Bearer one", "x-api-key": "two"}) == "one"

    def test_raw_authorization(self):
        assert extract_token({"authorization": "abc"}) == "abc"

    def test_none(self):
        assert extract_token({}) == ""


class TestVerifyApiKey:
    def test_disabled_when_no_key(self):
        verify_api_key({}, "")

    def test_valid(self):
        verify_api_key({"authorization": "Bearer secret"}, "secret")
        verify_api_key({"x-api-key": "secret"}, "secret")

    def test_missing(self):
        with pytest.raises(AuthError) as exc_info:
            verify_api_key({}, "secret")
        assert exc_info.value.missing is True

    def test_mismatch(self):
        with pytest.raises(AuthError) as exc_info:
            verify_api_key({"authorization": "Bearer wrong"}, "secret")
        assert exc_info.value.missing is False

    def test_prefix_of_key_rejected(self):
        with pytest.raises(AuthError):
            verify_api_key({"x-api-key": "sec"}, "secret")
