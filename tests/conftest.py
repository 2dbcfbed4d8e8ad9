"""Shared fixtures for pterofs tests: an in-memory panel behind httpx.MockTransport."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

import httpx
import pytest

from pterofs.fs.cache import MetadataCache
from pterofs.fs.provider import PanelFileSystem
from pterofs.fs.session import SessionConfig, SessionStore
from pterofs.fs.utils import (
    copied_name,
    is_ancestor,
    join_path,
    leaf_name,
    normalize_path,
    split_path,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

API_KEY = "ptlc_" + "a" * 43
PANEL_URL = "https://panel.example.com"
SERVER_ID = "1a7ce997"
FILES_PATH = f"/api/client/servers/{SERVER_ID}/files"
TIMESTAMP = "2024-01-02T03:04:05+00:00"


def _error(status: int, code: str, detail: str) -> httpx.Response:
    errors = [{"code": code, "status": str(status), "detail": detail}]
    return httpx.Response(status, json={"errors": errors})


@dataclass
class FakeNode:
    is_file: bool
    content: bytes = b""
    mode: str = "-rw-r--r--"
    is_symlink: bool = False


@dataclass
class FakeClock:
    """Manually advanced monotonic clock."""

    now: float = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@dataclass
class FakePanel:
    """In-memory file-manager API with request recording and fault injection."""

    api_key: str = API_KEY
    nodes: dict[str, FakeNode] = field(
        default_factory=lambda: {"/": FakeNode(is_file=False, mode="drwxr-xr-x")}
    )
    requests: list[httpx.Request] = field(default_factory=list)
    faults: dict[str, list[httpx.Response]] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def add_dir(self, path: str) -> None:
        path = normalize_path(path)
        parent = split_path(path)[0]
        if parent not in self.nodes:
            self.add_dir(parent)
        self.nodes.setdefault(path, FakeNode(is_file=False, mode="drwxr-xr-x"))

    def add_file(
        self, path: str, content: bytes = b"", *, mode: str = "-rw-r--r--", symlink: bool = False
    ) -> None:
        path = normalize_path(path)
        self.add_dir(split_path(path)[0])
        self.nodes[path] = FakeNode(is_file=True, content=content, mode=mode, is_symlink=symlink)

    def fail(self, endpoint: str, response: httpx.Response, times: int = 1) -> None:
        """Answer the next *times* requests to *endpoint* with *response*."""
        self.faults.setdefault(endpoint, []).extend([response] * times)

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    @property
    def calls(self) -> list[tuple[str, str]]:
        return [(r.method, self._endpoint(r)) for r in self.requests]

    def bodies(self, endpoint: str) -> list[Any]:
        return [json.loads(r.content) for r in self.requests if self._endpoint(r) == endpoint]

    def children(self, directory: str) -> list[str]:
        directory = normalize_path(directory)
        return [
            split_path(p)[1]
            for p in self.nodes
            if p != "/" and split_path(p)[0] == directory
        ]

    # ------------------------------------------------------------------
    # Request handling
    # ------------------------------------------------------------------

    @staticmethod
    def _endpoint(request: httpx.Request) -> str:
        return request.url.path.removeprefix(FILES_PATH)

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.headers.get("Authorization") != f"Bearer {self.api_key}":
            return _error(401, "AuthenticationException", "Unauthenticated.")

        endpoint = self._endpoint(request)
        queued = self.faults.get(endpoint)
        if queued:
            return queued.pop(0)

        route = {
            ("GET", "/list"): self._list,
            ("GET", "/contents"): self._contents,
            ("POST", "/write"): self._write,
            ("PUT", "/rename"): self._rename,
            ("POST", "/copy"): self._copy,
            ("POST", "/create-folder"): self._create_folder,
            ("POST", "/delete"): self._delete,
        }.get((request.method, endpoint))
        if route is None:
            return _error(404, "NotFoundHttpException", "The requested resource does not exist.")
        return route(request)

    def _not_found(self) -> httpx.Response:
        return _error(404, "NotFoundHttpException", "The requested resource was not found.")

    def _attributes(self, path: str) -> dict[str, Any]:
        node = self.nodes[path]
        return {
            "name": leaf_name(path),
            "mode": node.mode,
            "mode_bits": "644" if node.is_file else "755",
            "size": len(node.content) if node.is_file else 4096,
            "is_file": node.is_file,
            "is_symlink": node.is_symlink,
            "mimetype": "text/plain" if node.is_file else "inode/directory",
            "created_at": TIMESTAMP,
            "modified_at": TIMESTAMP,
        }

    def _list(self, request: httpx.Request) -> httpx.Response:
        directory = normalize_path(request.url.params.get("directory", "/"))
        node = self.nodes.get(directory)
        if node is None or node.is_file:
            return self._not_found()
        data = [
            {"object": "file_object", "attributes": self._attributes(join_path(directory, name))}
            for name in self.children(directory)
        ]
        return httpx.Response(200, json={"object": "list", "data": data})

    def _contents(self, request: httpx.Request) -> httpx.Response:
        path = normalize_path(request.url.params.get("file", ""))
        node = self.nodes.get(path)
        if node is None or not node.is_file:
            return self._not_found()
        return httpx.Response(200, content=node.content)

    def _write(self, request: httpx.Request) -> httpx.Response:
        path = normalize_path(request.url.params.get("file", ""))
        existing = self.nodes.get(path)
        if existing is not None and not existing.is_file:
            return _error(400, "BadRequestHttpException", "Cannot write to a directory.")
        self.add_file(path, request.content)
        return httpx.Response(204)

    def _move(self, old: str, new: str) -> None:
        for path in [p for p in self.nodes if p == old or is_ancestor(old, p)]:
            self.nodes[new + path[len(old):]] = self.nodes.pop(path)

    def _rename(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        for item in payload["files"]:
            old = join_path(payload["root"], item["from"])
            new = join_path(payload["root"], item["to"])
            if old not in self.nodes:
                return self._not_found()
            if new in self.nodes:
                return _error(
                    400, "FileExistsException", "Cannot move or rename file, destination exists."
                )
            self.add_dir(split_path(new)[0])
            self._move(old, new)
        return httpx.Response(204)

    def _copy(self, request: httpx.Request) -> httpx.Response:
        location = normalize_path(json.loads(request.content)["location"])
        node = self.nodes.get(location)
        if node is None:
            return self._not_found()
        if not node.is_file:
            return _error(400, "BadRequestHttpException", "Cannot copy a directory.")
        directory, name = split_path(location)
        self.nodes[join_path(directory, copied_name(name))] = FakeNode(
            is_file=True, content=node.content, mode=node.mode
        )
        return httpx.Response(204)

    def _create_folder(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        self.add_dir(join_path(payload["root"], payload["name"]))
        return httpx.Response(204)

    def _delete(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        for name in payload["files"]:
            path = join_path(payload["root"], name)
            if path not in self.nodes:
                return self._not_found()
            for doomed in [p for p in self.nodes if p == path or is_ancestor(path, p)]:
                del self.nodes[doomed]
        return httpx.Response(204)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def panel() -> FakePanel:
    return FakePanel()


@pytest.fixture
def session() -> SessionStore:
    return SessionStore(
        SessionConfig(base_url=PANEL_URL, server_id=SERVER_ID, credential=API_KEY)
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def auth_failures() -> list[str]:
    return []


@pytest.fixture
async def fs(
    panel: FakePanel, session: SessionStore, clock: FakeClock, auth_failures: list[str]
) -> AsyncIterator[PanelFileSystem]:
    provider = PanelFileSystem(
        session,
        cache=MetadataCache(clock=clock),
        on_auth_failure=auth_failures.append,
        transport=panel.transport,
    )
    yield provider
    await provider.aclose()
