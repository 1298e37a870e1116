"""
Root Pytest Fixtures.

Shared fixtures available to all test types.

Remote API:
    Tests never reach a real server. FakeNotesApi is an in-memory
    implementation of the notes API mounted on httpx.MockTransport, with
    switches for going offline, signing out and injecting error statuses.
"""

import json
from collections.abc import AsyncGenerator
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx
import pytest

from webnotes.storage.backends import MemoryKeyValueBackend
from webnotes.storage.hybrid import HybridCoordinator
from webnotes.storage.local import LocalStore
from webnotes.storage.remote import RemoteStore

BASE_URL = "http://notes.test/api"


# =============================================================================
# Time
# =============================================================================


class FakeClock:
    """Clock that advances by a fixed step on every read."""

    def __init__(
        self,
        start: datetime = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc),
        step: timedelta = timedelta(seconds=1),
    ) -> None:
        self.now = start
        self.step = step

    def __call__(self) -> datetime:
        self.now = self.now + self.step
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


# =============================================================================
# Fake Remote API
# =============================================================================


class FakeNotesApi:
    """
    In-memory notes API.

    Usage:
        api = FakeNotesApi()
        api.offline = True                      # every request raises ConnectError
        api.signed_in = False                   # session empty, data routes 401
        api.fail("POST /notes", 500, times=1)   # next matching request answers 500
        api.count("POST /folders")              # requests seen for a route
    """

    def __init__(self, signed_in: bool = True) -> None:
        self.notes: dict[str, dict[str, Any]] = {}
        self.folders: dict[str, dict[str, Any]] = {}
        self.signed_in = signed_in
        self.offline = False
        self.requests: list[str] = []
        self._faults: list[list[Any]] = []
        self._seq = 0
        self._now = datetime(2024, 6, 1, tzinfo=timezone.utc)

    # --- Test controls ---

    def fail(self, match: str, status: int = 500, times: int | None = None) -> None:
        """Answer requests whose "METHOD /path" contains match with status."""
        self._faults.append([match, status, times])

    def clear_faults(self) -> None:
        self._faults.clear()

    def count(self, match: str) -> int:
        return sum(1 for r in self.requests if match in r)

    def data_requests(self) -> list[str]:
        """Requests other than session checks."""
        return [r for r in self.requests if "/auth/session" not in r]

    def seed_note(self, **fields: Any) -> dict[str, Any]:
        note = self._new_note(fields)
        self.notes[note["id"]] = note
        return note

    def seed_folder(self, name: str) -> dict[str, Any]:
        folder = {
            "id": self._next_id("folder"),
            "name": name,
            "userId": "user-1",
            "createdAt": self._tick(),
        }
        self.folders[folder["id"]] = folder
        return folder

    # --- Internals ---

    def _next_id(self, kind: str) -> str:
        self._seq += 1
        return f"remote-{kind}-{self._seq}"

    def _tick(self) -> str:
        self._now = self._now + timedelta(seconds=1)
        return self._now.isoformat().replace("+00:00", "Z")

    def _new_note(self, body: dict[str, Any]) -> dict[str, Any]:
        now = self._tick()
        return {
            "id": self._next_id("note"),
            "title": body.get("title") or "Untitled",
            "content": body.get("content") or "",
            "folderId": body.get("folderId"),
            "userId": "user-1",
            "isPinned": False,
            "pinnedAt": None,
            "createdAt": now,
            "updatedAt": now,
        }

    @staticmethod
    def _body(request: httpx.Request) -> dict[str, Any]:
        return json.loads(request.content) if request.content else {}

    def handle(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path.removeprefix("/api")
        key = f"{request.method} {path}"
        self.requests.append(key)

        if self.offline:
            raise httpx.ConnectError("Connection refused", request=request)

        for fault in self._faults:
            match, status, remaining = fault
            if match in key and remaining != 0:
                if remaining is not None:
                    fault[2] = remaining - 1
                return httpx.Response(status, json={"error": "injected failure"})

        if path == "/auth/session":
            session = {"user": {"id": "user-1", "email": "user@example.com"}}
            return httpx.Response(200, json=session if self.signed_in else {})

        if not self.signed_in:
            return httpx.Response(401, json={"error": "Unauthorized"})

        parts = path.strip("/").split("/")
        if parts[0] == "notes":
            return self._notes(request, parts[1:])
        if parts[0] == "folders":
            return self._folders(request, parts[1:])
        return httpx.Response(404, json={"error": "Not found"})

    def _notes(self, request: httpx.Request, parts: list[str]) -> httpx.Response:
        method = request.method

        if not parts:
            if method == "GET":
                folder = request.url.params.get("folderId")
                notes = list(self.notes.values())
                if folder == "null":
                    notes = [n for n in notes if n["folderId"] is None]
                elif folder is not None:
                    notes = [n for n in notes if n["folderId"] == folder]
                return httpx.Response(200, json=notes)
            if method == "POST":
                note = self._new_note(self._body(request))
                self.notes[note["id"]] = note
                return httpx.Response(201, json=note)

        note = self.notes.get(parts[0])
        if note is None:
            return httpx.Response(404, json={"error": "Note not found"})

        if len(parts) == 1:
            if method == "GET":
                return httpx.Response(200, json=note)
            if method == "PUT":
                body = self._body(request)
                for field in ("title", "content"):
                    if field in body:
                        note[field] = body[field]
                note["updatedAt"] = self._tick()
                return httpx.Response(200, json=note)
            if method == "DELETE":
                del self.notes[note["id"]]
                return httpx.Response(200, json={"message": "Note deleted"})

        if parts[1:] == ["move"] and method == "PATCH":
            note["folderId"] = self._body(request).get("folderId")
            note["updatedAt"] = self._tick()
            return httpx.Response(200, json=note)

        if parts[1:] == ["pin"] and method == "PATCH":
            note["isPinned"] = not note["isPinned"]
            note["pinnedAt"] = self._tick() if note["isPinned"] else None
            note["updatedAt"] = self._tick()
            return httpx.Response(200, json=note)

        return httpx.Response(405, json={"error": "Method not allowed"})

    def _folders(self, request: httpx.Request, parts: list[str]) -> httpx.Response:
        method = request.method

        if not parts:
            if method == "GET":
                return httpx.Response(200, json={"folders": list(self.folders.values())})
            if method == "POST":
                folder = self.seed_folder(self._body(request)["name"])
                return httpx.Response(201, json={"folder": folder})

        folder = self.folders.get(parts[0])
        if folder is None:
            return httpx.Response(404, json={"error": "Folder not found"})

        if parts[1:] == ["rename"] and method == "PATCH":
            folder["name"] = self._body(request)["newName"]
            return httpx.Response(200, json={"message": "Folder renamed"})

        if len(parts) == 1 and method == "DELETE":
            del self.folders[folder["id"]]
            for note in self.notes.values():
                if note["folderId"] == folder["id"]:
                    note["folderId"] = None
            return httpx.Response(200, json={"message": "Folder deleted"})

        return httpx.Response(405, json={"error": "Method not allowed"})


@pytest.fixture
def notes_api() -> FakeNotesApi:
    return FakeNotesApi()


# =============================================================================
# Stores
# =============================================================================


@pytest.fixture
def memory_backend() -> MemoryKeyValueBackend:
    return MemoryKeyValueBackend()


@pytest.fixture
def local_store(memory_backend: MemoryKeyValueBackend, clock: FakeClock) -> LocalStore:
    return LocalStore(memory_backend, clock=clock)


@pytest.fixture
async def remote_store(notes_api: FakeNotesApi) -> AsyncGenerator[RemoteStore, None]:
    store = RemoteStore(base_url=BASE_URL, transport=httpx.MockTransport(notes_api.handle))
    yield store
    await store.close()


@pytest.fixture
def coordinator(local_store: LocalStore, remote_store: RemoteStore) -> HybridCoordinator:
    """Coordinator that starts online and signed out."""
    return HybridCoordinator(local=local_store, remote=remote_store)


@pytest.fixture
def no_sleep():
    """Sleep replacement for retry policies, recording requested delays."""
    delays: list[float] = []

    async def sleep(seconds: float) -> None:
        delays.append(seconds)

    sleep.delays = delays
    return sleep
