"""SessionConfig and SessionStore — which panel, server and key to use."""

from __future__ import annotations

import dataclasses
import logging
import os
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

logger = logging.getLogger(__name__)

ENV_PANEL_URL = "PTERODACTYL_PANEL_URL"
ENV_SERVER_ID = "PTERODACTYL_SERVER_ID"
ENV_API_KEY = "PTERODACTYL_API_KEY"
ENV_PROXY_URL = "PTERODACTYL_PROXY_URL"


@dataclass(frozen=True)
class SessionConfig:
    """Immutable snapshot of the connection settings."""

    base_url: str = ""
    """Panel origin, ``scheme://authority`` without a trailing slash."""

    server_id: str = ""
    """Short server identifier, e.g. ``"1a7ce997"``."""

    credential: str = ""
    """Client API key sent as a bearer token."""

    proxy_url: str = ""
    """Optional forwarding proxy; the encoded target URL is appended to it."""

    def __post_init__(self) -> None:
        object.__setattr__(self, "base_url", self.base_url.strip().rstrip("/"))
        object.__setattr__(self, "server_id", self.server_id.strip())

    @property
    def files_root(self) -> str:
        if not self.base_url or not self.server_id:
            return ""
        return f"{self.base_url}/api/client/servers/{self.server_id}/files"

    @property
    def is_configured(self) -> bool:
        return bool(self.files_root and self.credential)

    def __repr__(self) -> str:
        masked = "***" if self.credential else ""
        return (
            f"SessionConfig(base_url={self.base_url!r}, server_id={self.server_id!r}, "
            f"credential={masked!r}, proxy_url={self.proxy_url!r})"
        )


class SessionStore:
    """Holds the current ``SessionConfig`` and notifies listeners on change.

    The snapshot is replaced, never edited, so a reader that grabbed
    ``current`` keeps a consistent view while an update happens.
    """

    def __init__(self, config: SessionConfig | None = None) -> None:
        self._config = config or SessionConfig()
        self._listeners: list[Callable[[SessionConfig, SessionConfig], object]] = []
        self._lock = threading.Lock()

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> SessionStore:
        """Build a store from ``PTERODACTYL_*`` environment variables."""
        env = os.environ if environ is None else environ
        return cls(
            SessionConfig(
                base_url=env.get(ENV_PANEL_URL, ""),
                server_id=env.get(ENV_SERVER_ID, ""),
                credential=env.get(ENV_API_KEY, ""),
                proxy_url=env.get(ENV_PROXY_URL, ""),
            )
        )

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    @property
    def current(self) -> SessionConfig:
        return self._config

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def credential(self) -> str:
        return self._config.credential

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def update(self, **changes: str) -> SessionConfig:
        """Replace the snapshot with *changes* applied and notify listeners."""
        with self._lock:
            old = self._config
            new = dataclasses.replace(old, **changes)
            self._config = new
            listeners = list(self._listeners)
        if new != old:
            logger.info("Session updated: %r", new)
            for listener in listeners:
                try:
                    listener(old, new)
                except Exception:
                    logger.warning("Session listener %r failed", listener, exc_info=True)
        return new

    def reset(self) -> SessionConfig:
        """Forget panel, server, key and proxy."""
        return self.update(base_url="", server_id="", credential="", proxy_url="")

    def on_change(
        self, callback: Callable[[SessionConfig, SessionConfig], object]
    ) -> Callable[[], None]:
        """Register *callback(old, new)*; returns a function that unregisters it."""
        with self._lock:
            self._listeners.append(callback)

        def unsubscribe() -> None:
            with self._lock:
                try:
                    self._listeners.remove(callback)
                except ValueError:
                    pass

        return unsubscribe
