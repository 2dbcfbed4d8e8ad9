"""PanelFileSystem — a server's remote file tree as a filesystem provider."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .cache import DEFAULT_TTL, MetadataCache
from .client import DEFAULT_TIMEOUT, FileManagerClient
from .errors import NOT_CONFIGURED_MESSAGE
from .exceptions import (
    DirectoryNotEmptyError,
    FileIsADirectoryError,
    NoPermissionError,
    NotConfiguredError,
    PartialFailureError,
    PathExistsError,
    PathNotFoundError,
    PteroFSError,
    RemoteUnavailableError,
)
from .types import Disposable, FileStat, FileType
from .utils import (
    copied_name,
    join_path,
    normalize_path,
    parent_path,
    split_path,
    strip_leading_slash,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    import httpx

    from .session import SessionConfig, SessionStore

logger = logging.getLogger(__name__)


class PanelFileSystem:
    """Async filesystem provider backed by the panel's file-manager API.

    The panel has no single-file stat, no native cross-directory copy and
    no change notifications.  This class fills those gaps:

    - ``stat`` lists the parent directory and picks the matching entry,
      caching the result for a few seconds.
    - ``copy`` copies in place and then renames the generated sibling.
    - ``watch`` is inert; only mutations made through this object
      invalidate the cache.

    Checks that precede a mutation (existence before ``write_file``,
    emptiness before a non-recursive ``delete``) are best-effort; another
    client can change the tree between the check and the call.

    Implements the ``FileSystemProvider`` protocol.
    """

    def __init__(
        self,
        session: SessionStore,
        *,
        cache_ttl: float = DEFAULT_TTL,
        timeout: float = DEFAULT_TIMEOUT,
        on_auth_failure: Callable[[str], object] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        cache: MetadataCache | None = None,
        client: FileManagerClient | None = None,
    ) -> None:
        self._session = session
        self.cache = cache if cache is not None else MetadataCache(ttl=cache_ttl)
        self.client = client or FileManagerClient(
            session,
            timeout=timeout,
            on_auth_failure=on_auth_failure,
            transport=transport,
        )
        self._unsubscribe = session.on_change(self._on_session_change)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        self._unsubscribe()
        await self.client.aclose()

    async def __aenter__(self) -> PanelFileSystem:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    def _on_session_change(self, old: SessionConfig, new: SessionConfig) -> None:
        # A different server (or key) means a different tree
        logger.debug("Session changed, dropping %d cached stats", len(self.cache))
        self.cache.clear()

    def _require_session(self, path: str | None = None) -> None:
        if not self._session.current.is_configured:
            raise NotConfiguredError(NOT_CONFIGURED_MESSAGE, path=path)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def stat(self, path: str) -> FileStat:
        """Metadata for *path*, synthesized from its parent directory listing."""
        self._require_session(path)
        path = normalize_path(path)
        if path == "/":
            return FileStat.root()

        cached = self.cache.get(path)
        if cached is not None:
            return cached

        parent, name = split_path(path)
        # Read before listing so a concurrent mutation makes the result stale
        generation = self.cache.generation
        try:
            entries = await self.client.list_directory(parent)
        except PathNotFoundError as e:
            raise PathNotFoundError(f"No such file or directory: {path}", path=path) from e

        entry = next((e for e in entries if e.name == name), None)
        if entry is None:
            raise PathNotFoundError(f"No such file or directory: {path}", path=path)

        stat = FileStat.from_entry(entry)
        self.cache.put(path, stat, generation=generation)
        return stat

    async def read_directory(self, path: str) -> list[tuple[str, FileType]]:
        """``(name, type)`` pairs in the order the panel returns them."""
        self._require_session(path)
        path = normalize_path(path)
        entries = await self.client.list_directory(path)
        return [(entry.name, entry.type) for entry in entries]

    async def read_file(self, path: str) -> bytes:
        self._require_session(path)
        return await self.client.read_contents(normalize_path(path))

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    async def write_file(
        self,
        path: str,
        content: bytes,
        *,
        create: bool = True,
        overwrite: bool = True,
    ) -> None:
        """Write *content* to *path*.

        Raises ``FileIsADirectoryError`` for directories,
        ``PathExistsError`` for existing files unless *overwrite*, and
        ``PathNotFoundError`` for missing files unless *create*.
        """
        self._require_session(path)
        path = normalize_path(path)

        try:
            stat = await self.stat(path)
        except PathNotFoundError:
            if not create:
                raise PathNotFoundError(f"No such file: {path}", path=path) from None
        else:
            if stat.is_directory:
                raise FileIsADirectoryError(f"Is a directory: {path}", path=path)
            if not overwrite:
                raise PathExistsError(f"File exists: {path}", path=path)

        try:
            await self.client.write_contents(path, content)
        finally:
            self._invalidate(path)

    async def create_directory(self, path: str) -> None:
        self._require_session(path)
        path = normalize_path(path)
        try:
            await self.client.create_folder(path)
        finally:
            self._invalidate(path)

    async def delete(self, path: str, *, recursive: bool = True) -> None:
        """Delete *path*.

        Without *recursive*, a directory that lists any entries is refused
        with ``DirectoryNotEmptyError`` and nothing is sent to the panel.  A
        listing that fails for any reason other than the path being missing
        or not a directory is raised, since the panel delete is recursive.
        """
        self._require_session(path)
        path = normalize_path(path)

        if not recursive:
            try:
                entries = await self.read_directory(path)
            except PteroFSError as e:
                if not _not_a_directory(e):
                    raise
                entries = []
            if entries:
                raise DirectoryNotEmptyError("Directory not empty", path=path)

        try:
            await self.client.delete([strip_leading_slash(path)])
        finally:
            self._invalidate(path, tree=True)

    async def rename(self, old_path: str, new_path: str, *, overwrite: bool = False) -> None:
        self._require_session(old_path)
        old_path = normalize_path(old_path)
        new_path = normalize_path(new_path)

        if overwrite:
            await self._clear_destination(new_path)

        try:
            await self.client.rename(strip_leading_slash(old_path), strip_leading_slash(new_path))
        finally:
            self._invalidate(old_path, tree=True)
            self._invalidate(new_path, tree=True)

    async def copy(self, source: str, destination: str, *, overwrite: bool = False) -> None:
        """Copy *source* to *destination*.

        The panel only copies in place, producing ``"<name> copy.<ext>"``
        next to the source.  When *destination* is in another directory
        that sibling is then renamed into place.  If that rename fails the
        sibling is left behind and ``PartialFailureError`` is raised with
        its path, so the caller can retry just the move.

        A same-directory copy keeps the panel's generated name.
        """
        self._require_session(source)
        source = normalize_path(source)
        destination = normalize_path(destination)

        if overwrite:
            await self._clear_destination(destination)

        source_dir, source_name = split_path(source)
        dest_dir = parent_path(destination)
        sibling = join_path(source_dir, copied_name(source_name))

        try:
            await self.client.copy(source)
        finally:
            self._invalidate(source)
            self._invalidate(sibling)

        if source_dir == dest_dir:
            logger.debug("copy: not moving %s, already in %s", sibling, dest_dir)
            return

        logger.debug("copy: %s -> %s", sibling, destination)
        try:
            await self.client.rename(
                strip_leading_slash(sibling), strip_leading_slash(destination)
            )
        except PteroFSError as e:
            raise PartialFailureError(
                f"Copied {source} but could not move the copy to {destination}: {e}",
                path=source,
                orphan_path=sibling,
                destination=destination,
                cause=e,
            ) from e
        finally:
            self._invalidate(sibling)
            self._invalidate(destination, tree=True)

    # ------------------------------------------------------------------
    # Watch
    # ------------------------------------------------------------------

    def watch(
        self,
        path: str,
        *,
        recursive: bool = False,
        excludes: Sequence[str] = (),
    ) -> Disposable:
        """The panel pushes no change events; returns an inert subscription."""
        return Disposable()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _clear_destination(self, path: str) -> None:
        """Best-effort delete before an overwrite.  Permission failures end the call."""
        try:
            await self.delete(path)
        except NoPermissionError:
            raise
        except PteroFSError:
            logger.debug("Could not clear %s before overwrite", path, exc_info=True)

    def _invalidate(self, path: str, *, tree: bool = False) -> None:
        """Drop cached stats for *path* (and descendants) and its parent."""
        if tree:
            self.cache.invalidate_tree(path)
        else:
            self.cache.invalidate(path)
        self.cache.invalidate(parent_path(path))


def _not_a_directory(error: PteroFSError) -> bool:
    """True when a failed listing means the path is missing or is a file.

    Permission, rate-limit, server and transport failures say nothing
    about the directory's contents.
    """
    if isinstance(error, PathNotFoundError):
        return True
    remote = error.remote
    return type(error) is RemoteUnavailableError and remote is not None and remote.status < 500
