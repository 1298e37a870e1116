"""
Remote Store.

Thin async client over the remote notes API. One HTTP request per operation
(two for an update that also moves the note). The store is stateless apart
from the pooled httpx client and never falls back on its own: every failure
is raised to the caller, which decides the fallback policy.

Error mapping:
    transport error / non-2xx / undecodable body  -> RemoteFailure
    404 on an id-targeted call                    -> NotFoundError

Usage:
    remote = RemoteStore(base_url="https://notes.example.com/api")
    notes = await remote.list_notes()
    await remote.close()
"""

from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError as PydanticValidationError

from webnotes.core.exceptions import NotFoundError, RemoteFailure
from webnotes.storage.base import StorageAdapter
from webnotes.storage.schemas import (
    ALL_FOLDERS,
    FOLDER_LIST,
    NOTE_LIST,
    Folder,
    FolderSelector,
    Note,
    NoteCreate,
    NoteUpdate,
    SettingsUpdate,
    SyncStatus,
    UserSettings,
)


def _segment(value: str) -> str:
    return quote(value, safe="")


class RemoteStore(StorageAdapter):
    """
    Storage adapter over the remote REST API.

    Features:
    - Lazily created, pooled httpx.AsyncClient
    - Session cookie for the authenticated user
    - Structured logging of requests and failures
    - Settings are local-only: reads return a fixed "synced" default
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        session_path: str = "/auth/session",
        cookies: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize the remote store.

        Args:
            base_url: API base URL including any prefix, e.g. https://host/api
            timeout: Request timeout in seconds
            session_path: Path of the session endpoint relative to base_url
            cookies: Session cookies sent with every request
            transport: Optional httpx transport, used by tests
        """
        super().__init__()
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session_path = session_path
        self._cookies = dict(cookies or {})
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                cookies=self._cookies,
                headers={"Content-Type": "application/json", "X-Frontend-ID": "cli"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        not_found: str | None = None,
        **kwargs: Any,
    ) -> httpx.Response:
        """
        Issue one request and map failures.

        Args:
            method: HTTP method
            path: Path relative to base_url
            not_found: Message for NotFoundError when the server answers 404.
                When None a 404 is a RemoteFailure like any other status.
            **kwargs: Additional arguments for httpx

        Raises:
            NotFoundError: On 404 when not_found is given
            RemoteFailure: On transport errors and other non-2xx responses
        """
        client = await self._get_client()
        self._log_debug("Remote request", method=method, path=path)

        try:
            response = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            self._logger.warning(
                "Remote request failed",
                extra={"method": method, "path": path, "error": str(e)},
            )
            raise RemoteFailure(
                f"{method} {path} failed: {e.__class__.__name__}",
                cause=str(e),
            ) from e

        self._log_debug(
            "Remote response", method=method, path=path, status_code=response.status_code,
        )

        if response.status_code == 404 and not_found is not None:
            raise NotFoundError(not_found)

        if not response.is_success:
            self._logger.warning(
                "Remote request rejected",
                extra={"method": method, "path": path, "status_code": response.status_code},
            )
            raise RemoteFailure(
                f"HTTP {response.status_code}: {method} {path}",
                status_code=response.status_code,
                cause=response.text[:500],
            )

        return response

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as e:
            raise RemoteFailure(
                "Remote response is not valid JSON",
                status_code=response.status_code,
                cause=str(e),
            ) from e

    @classmethod
    def _parse(cls, validator: Any, data: Any) -> Any:
        try:
            return validator(data)
        except PydanticValidationError as e:
            raise RemoteFailure("Remote response has an unexpected shape", cause=str(e)) from e

    # --- Session ---

    async def is_authenticated(self) -> bool:
        """Ask the session endpoint whether a user is signed in."""
        try:
            response = await self._request("GET", self.session_path)
            session = self._json(response)
        except RemoteFailure as e:
            self._log_debug("Session check failed", error=e.message)
            return False
        return bool(isinstance(session, dict) and session.get("user"))

    # --- Notes ---

    async def list_notes(self, folder_id: FolderSelector = ALL_FOLDERS) -> list[Note]:
        params: dict[str, str] = {}
        if folder_id is None:
            params["folderId"] = "null"
        elif folder_id is not ALL_FOLDERS:
            params["folderId"] = folder_id
        response = await self._request("GET", "/notes", params=params)
        return self._parse(NOTE_LIST.validate_python, self._json(response))

    async def get_note(self, note_id: str) -> Note | None:
        try:
            response = await self._request(
                "GET", f"/notes/{_segment(note_id)}", not_found="Note not found",
            )
        except NotFoundError:
            return None
        return self._parse(Note.model_validate, self._json(response))

    async def create_note(self, data: NoteCreate | None = None) -> Note:
        data = data or NoteCreate()
        response = await self._request(
            "POST", "/notes", json=data.model_dump(by_alias=True, exclude_none=True),
        )
        return self._parse(Note.model_validate, self._json(response))

    async def update_note(self, note_id: str, data: NoteUpdate) -> Note:
        changes = data.changes()
        body = {k: v for k, v in changes.items() if k in ("title", "content")}
        note: Note | None = None

        if body:
            response = await self._request(
                "PUT", f"/notes/{_segment(note_id)}", not_found="Note not found", json=body,
            )
            note = self._parse(Note.model_validate, self._json(response))

        if "folder_id" in changes:
            note = await self.move_note(note_id, changes["folder_id"])

        if note is None:
            note = await self.get_note(note_id)
            if note is None:
                raise NotFoundError("Note not found")
        return note

    async def delete_note(self, note_id: str) -> None:
        await self._request("DELETE", f"/notes/{_segment(note_id)}", not_found="Note not found")

    async def move_note(self, note_id: str, folder_id: str | None) -> Note:
        response = await self._request(
            "PATCH",
            f"/notes/{_segment(note_id)}/move",
            not_found="Note not found",
            json={"folderId": folder_id},
        )
        return self._parse(Note.model_validate, self._json(response))

    async def pin_note(self, note_id: str) -> Note:
        response = await self._request(
            "PATCH", f"/notes/{_segment(note_id)}/pin", not_found="Note not found",
        )
        return self._parse(Note.model_validate, self._json(response))

    # --- Folders ---

    async def list_folders(self) -> list[Folder]:
        response = await self._request("GET", "/folders")
        data = self._json(response)
        folders = data.get("folders") if isinstance(data, dict) else None
        return self._parse(FOLDER_LIST.validate_python, folders or [])

    async def get_folder(self, folder_id: str) -> Folder | None:
        # The API has no single-folder read.
        return next((f for f in await self.list_folders() if f.id == folder_id), None)

    async def create_folder(self, name: str) -> Folder:
        self._validate_required({"name": name}, ["name"])
        response = await self._request("POST", "/folders", json={"name": name.strip()})
        data = self._json(response)
        folder = data.get("folder") if isinstance(data, dict) else None
        return self._parse(Folder.model_validate, folder)

    async def rename_folder(self, folder_id: str, name: str) -> Folder:
        self._validate_required({"name": name}, ["name"])
        await self._request(
            "PATCH",
            f"/folders/{_segment(folder_id)}/rename",
            not_found="Folder not found",
            json={"newName": name.strip()},
        )
        # Rename answers with a message only.
        folder = await self.get_folder(folder_id)
        if folder is None:
            raise NotFoundError("Folder not found")
        return folder

    async def delete_folder(self, folder_id: str) -> None:
        await self._request(
            "DELETE", f"/folders/{_segment(folder_id)}", not_found="Folder not found",
        )

    # --- Settings ---

    async def get_settings(self) -> UserSettings:
        return UserSettings(sync_status=SyncStatus.SYNCED)

    async def update_settings(self, data: SettingsUpdate) -> UserSettings:
        self._log_debug("Remote settings update ignored", fields=list(data.changes()))
        return UserSettings(sync_status=SyncStatus.SYNCED)
