"""PteroFS — synchronous facade over PanelFileSystem."""

from __future__ import annotations

import asyncio
import threading
from typing import TYPE_CHECKING, Any

from pterofs.fs.exceptions import PathNotFoundError
from pterofs.fs.provider import PanelFileSystem
from pterofs.fs.session import SessionConfig, SessionStore

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    import httpx

    from pterofs.fs.types import Disposable, FileStat, FileType


class PteroFS:
    """Blocking API over one server's remote file tree.

    Runs a ``PanelFileSystem`` on a private event loop in a daemon thread,
    so callers can use it from plain scripts, notebooks, or from inside an
    unrelated event loop.

    Usage::

        with PteroFS("https://panel.example.com", "1a7ce997", api_key) as fs:
            fs.write_file("/server.properties", b"motd=hello\\n")
            print(fs.read_directory("/"))
    """

    def __init__(
        self,
        panel_url: str = "",
        server_id: str = "",
        api_key: str = "",
        *,
        session: SessionStore | None = None,
        cache_ttl: float | None = None,
        timeout: float | None = None,
        on_auth_failure: Callable[[str], object] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._closed = False
        if session is None:
            session = SessionStore(
                SessionConfig(base_url=panel_url, server_id=server_id, credential=api_key)
            )
        self.session = session

        # Private event loop in a daemon thread
        self._loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._loop.run_forever, daemon=True)
        self._thread.start()

        kwargs: dict[str, Any] = {"on_auth_failure": on_auth_failure, "transport": transport}
        if cache_ttl is not None:
            kwargs["cache_ttl"] = cache_ttl
        if timeout is not None:
            kwargs["timeout"] = timeout
        self._fs = PanelFileSystem(session, **kwargs)

    def _run(self, coro: Any) -> Any:
        """Submit *coro* to the private loop and block for the result."""
        future = asyncio.run_coroutine_threadsafe(coro, self._loop)
        return future.result()

    @property
    def fs(self) -> PanelFileSystem:
        return self._fs

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP client, stop the event loop and join the thread."""
        if self._closed:
            return
        self._closed = True

        try:
            self._run(self._fs.aclose())
        finally:
            self._loop.call_soon_threadsafe(self._loop.stop)
            self._thread.join(timeout=5)
            self._loop.close()

    def __enter__(self) -> PteroFS:
        return self

    def __exit__(self, exc_type: object, exc_val: object, exc_tb: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Filesystem operations
    # ------------------------------------------------------------------

    def stat(self, path: str) -> FileStat:
        return self._run(self._fs.stat(path))

    def exists(self, path: str) -> bool:
        """True when ``stat`` finds *path*."""
        try:
            self.stat(path)
        except PathNotFoundError:
            return False
        return True

    def read_directory(self, path: str = "/") -> list[tuple[str, FileType]]:
        return self._run(self._fs.read_directory(path))

    def read_file(self, path: str) -> bytes:
        return self._run(self._fs.read_file(path))

    def write_file(
        self, path: str, content: bytes, *, create: bool = True, overwrite: bool = True
    ) -> None:
        self._run(self._fs.write_file(path, content, create=create, overwrite=overwrite))

    def create_directory(self, path: str) -> None:
        self._run(self._fs.create_directory(path))

    def delete(self, path: str, *, recursive: bool = True) -> None:
        self._run(self._fs.delete(path, recursive=recursive))

    def rename(self, old_path: str, new_path: str, *, overwrite: bool = False) -> None:
        self._run(self._fs.rename(old_path, new_path, overwrite=overwrite))

    def copy(self, source: str, destination: str, *, overwrite: bool = False) -> None:
        self._run(self._fs.copy(source, destination, overwrite=overwrite))

    def watch(
        self, path: str, *, recursive: bool = False, excludes: Sequence[str] = ()
    ) -> Disposable:
        return self._fs.watch(path, recursive=recursive, excludes=excludes)
