"""FileManagerClient — the seven file-manager calls of the panel client API."""

from __future__ import annotations

import asyncio
import inspect
import logging
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from .errors import NOT_CONFIGURED_MESSAGE, check_response
from .exceptions import AuthenticationError, NotConfiguredError, RemoteUnavailableError
from .types import FileEntry

if TYPE_CHECKING:
    from collections.abc import Callable

    from .session import SessionConfig, SessionStore

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class FileManagerClient:
    """Thin async wrapper over ``/api/client/servers/{id}/files``.

    The session is read on every request, never captured at construction,
    so credential rotation and server switches take effect on the next
    call.  Non-2xx responses are raised as ``PteroFSError`` subclasses; the
    client never retries.

    Parameters
    ----------
    session:
        Store holding the current ``SessionConfig``.
    timeout:
        Request timeout in seconds.
    on_auth_failure:
        Called with the panel authority once for every 401 response.  It
        is not awaited; coroutine results are scheduled on the running
        loop.  Errors it raises are logged and dropped.
    transport:
        Optional ``httpx`` transport, mainly for tests.
    """

    def __init__(
        self,
        session: SessionStore,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        on_auth_failure: Callable[[str], object] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._session = session
        self._timeout = timeout
        self._on_auth_failure = on_auth_failure
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._background: set[asyncio.Future[Any]] = set()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily create the httpx client on first use."""
        if self._client is None:
            kwargs: dict[str, Any] = {"timeout": self._timeout}
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> FileManagerClient:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    # ------------------------------------------------------------------
    # Request plumbing
    # ------------------------------------------------------------------

    @staticmethod
    def build_url(
        config: SessionConfig, endpoint: str, params: dict[str, str] | None = None
    ) -> str:
        """Absolute URL for *endpoint*, routed through the proxy when one is set."""
        url = str(httpx.URL(config.files_root + endpoint, params=params))
        if config.proxy_url:
            return config.proxy_url + quote(url, safe="")
        return url

    async def _send(
        self,
        operation: str,
        method: str,
        endpoint: str,
        *,
        path: str,
        params: dict[str, str] | None = None,
        json: Any = None,
        content: bytes | None = None,
        accept_json: bool = False,
    ) -> httpx.Response:
        config = self._session.current
        if not config.is_configured:
            raise NotConfiguredError(NOT_CONFIGURED_MESSAGE, path=path)

        headers = {"Authorization": f"Bearer {config.credential}"}
        if accept_json:
            headers["Accept"] = "application/json"

        url = self.build_url(config, endpoint, params)
        logger.debug("%s %s", method, url)
        try:
            response = await self._get_client().request(
                method, url, headers=headers, json=json, content=content
            )
        except httpx.HTTPError as e:
            logger.warning("%s: request failed: %s", operation, e)
            raise RemoteUnavailableError(
                f"Failed to connect to {httpx.URL(config.base_url).host}: {e}", path=path
            ) from e

        try:
            check_response(operation, response, path=path)
        except AuthenticationError:
            self._notify_auth_failure(config)
            raise
        return response

    def _notify_auth_failure(self, config: SessionConfig) -> None:
        if self._on_auth_failure is None:
            return
        authority = httpx.URL(config.base_url).netloc.decode("ascii") if config.base_url else ""
        try:
            result = self._on_auth_failure(authority)
            if inspect.isawaitable(result):
                future = asyncio.ensure_future(result)
                self._background.add(future)
                future.add_done_callback(self._background.discard)
        except Exception:
            logger.warning("Re-authentication callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # Remote primitives
    # ------------------------------------------------------------------

    async def list_directory(self, path: str) -> list[FileEntry]:
        response = await self._send(
            f"list: {path}",
            "GET",
            "/list",
            path=path,
            params={"directory": path},
            accept_json=True,
        )
        try:
            document = response.json()
        except ValueError as e:
            raise RemoteUnavailableError(
                f"Malformed directory listing for {path}", path=path
            ) from e
        data = (document.get("data") or []) if isinstance(document, dict) else []
        # Rows without an attributes object are skipped
        return [
            FileEntry.from_attributes(item["attributes"])
            for item in data
            if isinstance(item, dict) and isinstance(item.get("attributes"), dict)
        ]

    async def read_contents(self, path: str) -> bytes:
        response = await self._send(
            f"contents: {path}", "GET", "/contents", path=path, params={"file": path}
        )
        return response.content

    async def write_contents(self, path: str, data: bytes) -> None:
        await self._send(
            f"write: {path}",
            "POST",
            "/write",
            path=path,
            params={"file": path},
            content=bytes(data),
        )

    async def rename(self, from_: str, to: str) -> None:
        """Rename root-relative *from_* to root-relative *to*."""
        await self._send(
            f"rename: {from_} -> {to}",
            "PUT",
            "/rename",
            path=from_,
            json={"root": "/", "files": [{"from": from_, "to": to}]},
        )

    async def copy(self, location: str) -> None:
        """Duplicate *location* next to itself as ``"<name> copy.<ext>"``."""
        await self._send(
            f"copy: {location}", "POST", "/copy", path=location, json={"location": location}
        )

    async def create_folder(self, path: str) -> None:
        await self._send(
            f"create-folder: {path}",
            "POST",
            "/create-folder",
            path=path,
            json={"root": "/", "name": path},
        )

    async def delete(self, paths: list[str]) -> None:
        """Delete root-relative *paths*."""
        await self._send(
            f"delete: {', '.join(paths)}",
            "POST",
            "/delete",
            path=paths[0] if paths else "/",
            json={"root": "/", "files": list(paths)},
        )
