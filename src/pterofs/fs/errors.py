"""Translate panel responses into filesystem exceptions.

``classify`` is a pure function from ``(status, body)`` to an exception
instance (or ``None`` on success).  The rules are checked in order:

1. not configured           -> NotConfiguredError
2. 401                      -> AuthenticationError
3. 403                      -> NoPermissionError
4. 404 / DaemonConnection   -> PathNotFoundError
5. 422 with a JSON body     -> RemoteUnavailableError(detail)
6. 429                      -> RateLimitedError
7. 500                      -> RemoteUnavailableError(generic)
8. any other non-2xx        -> RemoteUnavailableError("unknown error ...")
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from .exceptions import (
    AuthenticationError,
    NoPermissionError,
    NotConfiguredError,
    PathNotFoundError,
    PteroFSError,
    RateLimitedError,
    RemoteUnavailableError,
)
from .types import RemoteError
from .utils import truncate

if TYPE_CHECKING:
    import httpx

logger = logging.getLogger(__name__)

DAEMON_CONNECTION_CODE = "DaemonConnectionException"

NOT_CONFIGURED_MESSAGE = "No server API URL or API key set, connect to a panel first"
RATE_LIMITED_MESSAGE = "rate limited by remote panel"
SERVER_ERROR_MESSAGE = (
    "The server (or a proxy) was unable to handle the request, check the logs for details"
)


def _decode(body: bytes | str | None) -> str:
    if body is None:
        return ""
    if isinstance(body, bytes):
        return body.decode("utf-8", errors="replace")
    return body


def parse_remote_error(status: int, body: bytes | str | None = None) -> RemoteError:
    """Parse an ``{"errors": [{"code", "detail"}]}`` envelope.

    Falls back to keeping only the raw text when the body is not JSON.
    """
    text = _decode(body)
    try:
        document: Any = json.loads(text)
    except ValueError:
        return RemoteError(status=status, body=text)

    code = detail = None
    errors = document.get("errors") if isinstance(document, dict) else None
    if isinstance(errors, list) and errors and isinstance(errors[0], dict):
        first = errors[0]
        if first.get("code") is not None:
            code = str(first["code"])
        if first.get("detail") is not None:
            detail = str(first["detail"])
    return RemoteError(status=status, code=code, detail=detail, body=text, is_json=True)


def classify(
    status: int,
    body: bytes | str | None = None,
    *,
    configured: bool = True,
    path: str | None = None,
) -> PteroFSError | None:
    """Map a response to the exception it should raise, ``None`` on 2xx."""
    if not configured:
        return NotConfiguredError(NOT_CONFIGURED_MESSAGE, path=path)
    if 200 <= status < 300:
        return None

    remote = parse_remote_error(status, body)

    if status == 401:
        return AuthenticationError(
            remote.detail or "Authentication failed", path=path, remote=remote
        )
    if status == 403:
        return NoPermissionError(remote.detail or "Permission denied", path=path, remote=remote)
    if status == 404 or remote.code == DAEMON_CONNECTION_CODE:
        return PathNotFoundError(remote.detail or "Not found", path=path, remote=remote)
    if status == 422 and remote.is_json:
        return RemoteUnavailableError(
            remote.detail or "The panel rejected the request", path=path, remote=remote
        )
    if status == 429:
        return RateLimitedError(RATE_LIMITED_MESSAGE, path=path, remote=remote)
    if status == 500:
        return RemoteUnavailableError(SERVER_ERROR_MESSAGE, path=path, remote=remote)

    message = f"unknown error {status}"
    reason = remote.detail or truncate(remote.body.strip())
    if reason:
        message = f"{message}: {reason}"
    return RemoteUnavailableError(message, path=path, remote=remote)


def check_response(operation: str, response: httpx.Response, *, path: str | None = None) -> None:
    """Log the outcome of *operation* and raise the classified exception."""
    logger.debug("%s: %d %s", operation, response.status_code, response.reason_phrase)
    error = classify(response.status_code, response.content, path=path)
    if error is None:
        return
    if response.status_code == 500:
        logger.warning("%s -> response: %s", operation, error.remote.body if error.remote else "")
    else:
        logger.info("%s failed: %s", operation, error)
    raise error
