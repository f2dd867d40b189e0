# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Shared-secret authentication for the HTTP boundary.

Clients send the configured secret either as ``Authorization: Bearer <token>``
or as ``X-API-Key: <token>``. An empty configured secret disables the check.
"""

from __future__ import annotations

import logging
import secrets
from collections.abc import Mapping

from starlette.requests import Request
from starlette.responses import JSONResponse

from remote_gateway.core.exceptions import AuthError

from .errors import ErrorCode, error_response

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def extract_token(headers: Mapping[str, str]) -> str:
    """Pull the presented credential out of the request headers.

    ``Authorization`` takes precedence over ``X-API-Key``. A ``Bearer ``
    prefix is stripped; anything else is taken verbatim.
    """
    raw = str(headers.get("authorization") or headers.get("x-api-key") or "")
    if raw.startswith(BEARER_PREFIX):
        return raw[len(BEARER_PREFIX) :].strip()
    return raw.strip()


def verify_api_key(headers: Mapping[str, str], api_key: str) -> None:
    """Check the presented credential against ``api_key``.

    Raises:
        AuthError: ``missing=True`` when no credential was sent, otherwise
            when it does not match.
    """
    if not api_key:
        return
    token = extract_token(headers)
    if not token:
        raise AuthError("Missing token", missing=True)
    if not secrets.compare_digest(token.encode("utf-8"), api_key.encode("utf-8")):
        raise AuthError("Invalid token")


def authenticate(request: Request, api_key: str, forbid_invalid: bool = False) -> JSONResponse | None:
    """Authenticate a request. Returns None on success, an error response otherwise.

    Missing credentials always give 401. Wrong credentials give 401, or 403
    when ``forbid_invalid`` is set.

    Usage in endpoints::

        rejection = authenticate(request, settings.api_key)
        if rejection is not None:
            return rejection
    """
    try:
        verify_api_key(request.headers, api_key)
    except AuthError as e:
        client = request.client.host if request.client else "unknown"
        logger.warning(f"Rejected {request.method} {request.url.path} from {client}: {e.message}")
        if e.missing:
            return error_response(ErrorCode.MISSING_TOKEN, e.message)
        if forbid_invalid:
            return error_response(ErrorCode.INVALID_TOKEN, e.message, status_code=403)
        return error_response(ErrorCode.INVALID_TOKEN, "Unauthorized")
    return None
