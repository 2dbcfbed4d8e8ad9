"""Panel helpers — validate credentials, list servers, select one.

These are the non-interactive building blocks of connecting to a panel.
Prompting the user is left to the host application.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any
from urllib.parse import quote

import httpx

from pterofs.fs.client import DEFAULT_TIMEOUT
from pterofs.fs.errors import check_response
from pterofs.fs.exceptions import RemoteUnavailableError

if TYPE_CHECKING:
    from pterofs.fs.session import SessionConfig, SessionStore

logger = logging.getLogger(__name__)

API_KEY_LENGTH = 48


@dataclass
class ServerInfo:
    """A server the API key can access."""

    name: str
    identifier: str
    description: str = ""


def validate_panel_url(value: str | None) -> str | None:
    """Return an error message for an unusable panel URL, ``None`` if fine."""
    if not value or not value.strip():
        return "Enter a valid URL"
    try:
        url = httpx.URL(value.strip())
    except httpx.InvalidURL:
        return "Enter a valid URL"
    if not url.scheme:
        return "Enter a valid URL"
    if url.scheme not in ("http", "https"):
        return f"Unsupported protocol: {url.scheme}"
    if not url.host:
        return "Enter a valid URL"
    return None


def validate_api_key(value: str | None) -> str | None:
    """Return an error message for a malformed client API key, ``None`` if fine."""
    if not value:
        return "Enter a valid API key"
    if len(value) != API_KEY_LENGTH:
        return f"API keys are {API_KEY_LENGTH} characters long"
    return None


def panel_origin(value: str) -> str:
    """Reduce a panel URL to ``scheme://authority``.

    Examples:
        panel_origin("https://panel.example.com/server/1a7ce997") -> "https://panel.example.com"
        panel_origin(" http://10.0.0.2:8080/ ") -> "http://10.0.0.2:8080"
    """
    error = validate_panel_url(value)
    if error:
        raise ValueError(error)
    url = httpx.URL(value.strip())
    return f"{url.scheme}://{url.netloc.decode('ascii')}"


def _parse_servers(document: Any) -> list[ServerInfo]:
    data = document.get("data", []) if isinstance(document, dict) else []
    servers: list[ServerInfo] = []
    for item in data:
        attributes = item.get("attributes", {}) if isinstance(item, dict) else {}
        identifier = attributes.get("identifier")
        if not identifier:
            continue
        servers.append(
            ServerInfo(
                name=str(attributes.get("name") or identifier),
                identifier=str(identifier),
                description=str(attributes.get("description") or ""),
            )
        )
    return servers


async def list_servers(
    panel_url: str,
    api_key: str,
    *,
    proxy_url: str = "",
    timeout: float = DEFAULT_TIMEOUT,
    transport: httpx.AsyncBaseTransport | None = None,
) -> list[ServerInfo]:
    """Connect to the panel and list the servers *api_key* can access.

    Raises the same ``PteroFSError`` subclasses as file operations; a bad
    key surfaces as ``AuthenticationError``.
    """
    origin = panel_origin(panel_url)
    url = origin + "/api/client/"
    if proxy_url:
        url = proxy_url + quote(url, safe="")

    logger.info("Connecting to %s...", origin)
    kwargs: dict[str, Any] = {"timeout": timeout}
    if transport is not None:
        kwargs["transport"] = transport
    async with httpx.AsyncClient(**kwargs) as client:
        try:
            response = await client.get(
                url,
                headers={"Accept": "application/json", "Authorization": f"Bearer {api_key}"},
            )
        except httpx.HTTPError as e:
            logger.warning("Failed to connect to %s: %s", origin, e)
            raise RemoteUnavailableError(
                f"Failed to connect to the provided address: {e}"
            ) from e

    check_response("connect", response)
    try:
        servers = _parse_servers(response.json())
    except ValueError as e:
        raise RemoteUnavailableError("The panel returned an unreadable server list") from e
    logger.info("Connected successfully, %d servers found", len(servers))
    return servers


def select_server(
    store: SessionStore,
    panel_url: str,
    api_key: str,
    server: ServerInfo | str,
) -> SessionConfig:
    """Point *store* at *server* on *panel_url* using *api_key*."""
    server_id = server.identifier if isinstance(server, ServerInfo) else server
    config = store.update(
        base_url=panel_origin(panel_url),
        server_id=server_id,
        credential=api_key,
    )
    logger.info("Server files root set to %s", config.files_root)
    return config
