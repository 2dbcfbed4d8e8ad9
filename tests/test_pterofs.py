"""Tests for the PteroFS synchronous facade."""

from __future__ import annotations

from typing import TYPE_CHECKING

import httpx
import pytest

import pterofs
from pterofs import PteroFS
from pterofs.fs.exceptions import NotConfiguredError, PartialFailureError, PathNotFoundError
from pterofs.fs.types import FileType

from .conftest import API_KEY, PANEL_URL, SERVER_ID

if TYPE_CHECKING:
    from collections.abc import Iterator

    from .conftest import FakePanel


@pytest.fixture
def ptero(panel: FakePanel) -> Iterator[PteroFS]:
    client = PteroFS(PANEL_URL, SERVER_ID, API_KEY, transport=panel.transport)
    yield client
    client.close()


class TestFacade:
    def test_write_read_roundtrip(self, ptero: PteroFS, panel: FakePanel):
        ptero.create_directory("/plugins")
        ptero.write_file("/plugins/config.yml", b"debug: true\n")
        assert ptero.read_file("/plugins/config.yml") == b"debug: true\n"
        assert ptero.read_directory("/plugins") == [("config.yml", FileType.FILE)]

    def test_stat_and_exists(self, ptero: PteroFS, panel: FakePanel):
        panel.add_file("/eula.txt", b"eula=true")
        assert ptero.stat("/eula.txt").size == 9
        assert ptero.exists("/eula.txt") is True
        assert ptero.exists("/missing.txt") is False
        assert ptero.exists("/") is True

    def test_errors_cross_the_thread(self, ptero: PteroFS):
        with pytest.raises(PathNotFoundError):
            ptero.read_file("/nope.txt")

    def test_copy_rename_delete(self, ptero: PteroFS, panel: FakePanel):
        panel.add_file("/src/a.txt", b"x")
        panel.add_dir("/dst")
        ptero.copy("/src/a.txt", "/dst/a.txt")
        ptero.rename("/dst/a.txt", "/dst/b.txt")
        ptero.delete("/src")
        assert sorted(panel.nodes) == ["/", "/dst", "/dst/b.txt"]

    def test_partial_failure(self, ptero: PteroFS, panel: FakePanel):
        panel.add_file("/src/a.txt")
        panel.fail("/rename", httpx.Response(500, text="Whoops"))
        with pytest.raises(PartialFailureError) as exc_info:
            ptero.copy("/src/a.txt", "/dst/a.txt")
        assert exc_info.value.orphan_path == "/src/a copy.txt"

    def test_watch(self, ptero: PteroFS):
        handle = ptero.watch("/", recursive=True, excludes=["**/node_modules"])
        handle.dispose()
        assert handle.disposed

    def test_session_switch_clears_cache(self, ptero: PteroFS, panel: FakePanel):
        panel.add_file("/a.txt")
        ptero.stat("/a.txt")
        ptero.session.update(server_id="ffff0000")
        assert len(ptero.fs.cache) == 0


class TestLifecycle:
    def test_context_manager(self, panel: FakePanel):
        with PteroFS(PANEL_URL, SERVER_ID, API_KEY, transport=panel.transport) as client:
            client.create_directory("/logs")
        assert not client._thread.is_alive()
        assert "/logs" in panel.nodes

    def test_close_is_idempotent(self, panel: FakePanel):
        client = PteroFS(PANEL_URL, SERVER_ID, API_KEY, transport=panel.transport)
        client.close()
        client.close()

    def test_unconfigured(self, panel: FakePanel):
        with PteroFS(transport=panel.transport) as client:
            with pytest.raises(NotConfiguredError):
                client.read_directory("/")
        assert panel.requests == []


class TestPublicApi:
    def test_exports(self):
        for name in (
            "PteroFS",
            "PanelFileSystem",
            "FileSystemProvider",
            "SessionStore",
            "FileStat",
            "FileType",
            "PteroFSError",
            "PartialFailureError",
            "list_servers",
            "select_server",
        ):
            assert hasattr(pterofs, name), name

    def test_version(self):
        assert pterofs.__version__ == "0.1.0"
