"""
Local Store.

Durable storage confined to this client, used when no account is attached
or the network is unavailable. Three independent collections live under
their own keys in a KeyValueBackend:

    notes     - JSON array of Note documents, newest first
    folders   - JSON array of Folder documents, newest first
    settings  - JSON object of UserSettings (sync_status excluded)

plus the boolean migration-completion flag.

Every write re-serializes the whole collection. Per-client volumes are small;
larger volumes would call for an indexed backend behind the same contract.

The methods are async for interchangeability with RemoteStore, but none of
them awaits, so a read-modify-write cycle cannot interleave with another
operation on the same event loop.
"""

from collections.abc import Callable, Iterable
from datetime import datetime

from pydantic import ValidationError as PydanticValidationError

from webnotes.core.config_schema import StorageKeysSchema
from webnotes.core.exceptions import NotFoundError, ValidationError
from webnotes.core.utils import new_id, utc_now
from webnotes.storage.backends import KeyValueBackend
from webnotes.storage.base import StorageAdapter
from webnotes.storage.schemas import (
    ALL_FOLDERS,
    FOLDER_LIST,
    NOTE_LIST,
    UNTITLED,
    Folder,
    FolderSelector,
    Note,
    NoteCreate,
    NoteUpdate,
    SettingsUpdate,
    UserSettings,
)


class LocalStore(StorageAdapter):
    """
    Storage adapter over a durable key-value backend.

    Reads that find nothing persisted return an empty collection or default
    settings. A document that no longer parses is logged and read as empty.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        keys: StorageKeysSchema | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        super().__init__()
        self.backend = backend
        self.keys = keys or StorageKeysSchema()
        self._clock = clock

    # --- Persistence ---

    def _load_notes(self) -> list[Note]:
        raw = self.backend.get(self.keys.notes)
        if raw is None:
            return []
        try:
            return NOTE_LIST.validate_json(raw)
        except PydanticValidationError as e:
            self._logger.warning(
                "Discarding unreadable notes collection",
                extra={"key": self.keys.notes, "error": str(e)},
            )
            return []

    def _save_notes(self, notes: list[Note]) -> None:
        self.backend.set(self.keys.notes, NOTE_LIST.dump_json(notes, by_alias=True).decode())

    def _load_folders(self) -> list[Folder]:
        raw = self.backend.get(self.keys.folders)
        if raw is None:
            return []
        try:
            return FOLDER_LIST.validate_json(raw)
        except PydanticValidationError as e:
            self._logger.warning(
                "Discarding unreadable folders collection",
                extra={"key": self.keys.folders, "error": str(e)},
            )
            return []

    def _save_folders(self, folders: list[Folder]) -> None:
        self.backend.set(self.keys.folders, FOLDER_LIST.dump_json(folders, by_alias=True).decode())

    def _require_folder(self, folder_id: str) -> None:
        if not any(f.id == folder_id for f in self._load_folders()):
            raise ValidationError(
                "Folder does not exist",
                details={"folder_id": folder_id},
            )

    @staticmethod
    def _index_of(items: list, item_id: str) -> int:
        for i, item in enumerate(items):
            if item.id == item_id:
                return i
        return -1

    def _replace_note(self, note_id: str, **changes) -> Note:
        notes = self._load_notes()
        i = self._index_of(notes, note_id)
        if i < 0:
            raise NotFoundError("Note not found")
        notes[i] = notes[i].model_copy(update={**changes, "updated_at": self._clock()})
        self._save_notes(notes)
        return notes[i]

    # --- Notes ---

    async def list_notes(self, folder_id: FolderSelector = ALL_FOLDERS) -> list[Note]:
        notes = self._load_notes()
        if folder_id is ALL_FOLDERS:
            return notes
        return [n for n in notes if n.folder_id == folder_id]

    async def get_note(self, note_id: str) -> Note | None:
        return next((n for n in self._load_notes() if n.id == note_id), None)

    async def create_note(self, data: NoteCreate | None = None) -> Note:
        data = data or NoteCreate()
        if data.folder_id is not None:
            self._require_folder(data.folder_id)

        now = self._clock()
        note = Note(
            id=new_id(),
            title=data.title or UNTITLED,
            content=data.content or "",
            folder_id=data.folder_id,
            created_at=now,
            updated_at=now,
            is_pinned=False,
            pinned_at=None,
        )
        self._save_notes([note, *self._load_notes()])
        self._log_debug("Note created", note_id=note.id)
        return note

    async def update_note(self, note_id: str, data: NoteUpdate) -> Note:
        changes = data.changes()
        if not changes:
            note = await self.get_note(note_id)
            if note is None:
                raise NotFoundError("Note not found")
            return note

        if changes.get("folder_id") is not None:
            self._require_folder(changes["folder_id"])

        note = self._replace_note(note_id, **changes)
        self._log_debug("Note updated", note_id=note_id, fields=list(changes))
        return note

    async def delete_note(self, note_id: str) -> None:
        notes = self._load_notes()
        remaining = [n for n in notes if n.id != note_id]
        if len(remaining) == len(notes):
            raise NotFoundError("Note not found")
        self._save_notes(remaining)
        self._log_debug("Note deleted", note_id=note_id)

    async def move_note(self, note_id: str, folder_id: str | None) -> Note:
        return await self.update_note(note_id, NoteUpdate(folder_id=folder_id))

    async def pin_note(self, note_id: str) -> Note:
        note = await self.get_note(note_id)
        if note is None:
            raise NotFoundError("Note not found")

        pinned = not note.is_pinned
        now = self._clock()
        return self._replace_note(
            note_id,
            is_pinned=pinned,
            pinned_at=now if pinned else None,
        )

    # --- Folders ---

    async def list_folders(self) -> list[Folder]:
        return self._load_folders()

    async def get_folder(self, folder_id: str) -> Folder | None:
        return next((f for f in self._load_folders() if f.id == folder_id), None)

    async def create_folder(self, name: str) -> Folder:
        self._validate_required({"name": name}, ["name"])
        folder = Folder(id=new_id(), name=name.strip(), created_at=self._clock())
        self._save_folders([folder, *self._load_folders()])
        self._log_debug("Folder created", folder_id=folder.id)
        return folder

    async def rename_folder(self, folder_id: str, name: str) -> Folder:
        self._validate_required({"name": name}, ["name"])
        folders = self._load_folders()
        i = self._index_of(folders, folder_id)
        if i < 0:
            raise NotFoundError("Folder not found")
        folders[i] = folders[i].model_copy(update={"name": name.strip()})
        self._save_folders(folders)
        return folders[i]

    async def delete_folder(self, folder_id: str) -> None:
        folders = self._load_folders()
        remaining = [f for f in folders if f.id != folder_id]
        if len(remaining) == len(folders):
            raise NotFoundError("Folder not found")
        self._save_folders(remaining)

        notes = self._load_notes()
        if any(n.folder_id == folder_id for n in notes):
            self._save_notes([
                n.model_copy(update={"folder_id": None}) if n.folder_id == folder_id else n
                for n in notes
            ])
        self._log_debug("Folder deleted", folder_id=folder_id)

    # --- Settings ---

    async def get_settings(self) -> UserSettings:
        raw = self.backend.get(self.keys.settings)
        if raw is None:
            return UserSettings()
        try:
            return UserSettings.model_validate_json(raw)
        except PydanticValidationError as e:
            self._logger.warning(
                "Discarding unreadable settings",
                extra={"key": self.keys.settings, "error": str(e)},
            )
            return UserSettings()

    async def update_settings(self, data: SettingsUpdate) -> UserSettings:
        current = await self.get_settings()
        updated = UserSettings.model_validate({**current.model_dump(), **data.changes()})
        self.backend.set(self.keys.settings, updated.model_dump_json(by_alias=True))
        return updated

    # --- Migration bookkeeping ---

    def migration_completed(self) -> bool:
        return self.backend.get(self.keys.migrated) == "true"

    def set_migration_completed(self, completed: bool) -> None:
        if completed:
            self.backend.set(self.keys.migrated, "true")
        else:
            self.backend.delete(self.keys.migrated)

    def discard(self, note_ids: Iterable[str] = (), folder_ids: Iterable[str] = ()) -> None:
        """
        Drop entities that now live in the remote store.

        A collection left empty is removed from the backend entirely. Notes
        that stay local but pointed at a discarded folder become unfiled.
        """
        note_ids = set(note_ids)
        folder_ids = set(folder_ids)

        if note_ids or folder_ids:
            notes = [
                n.model_copy(update={"folder_id": None}) if n.folder_id in folder_ids else n
                for n in self._load_notes()
                if n.id not in note_ids
            ]
            if notes:
                self._save_notes(notes)
            else:
                self.backend.delete(self.keys.notes)

        if folder_ids:
            folders = [f for f in self._load_folders() if f.id not in folder_ids]
            if folders:
                self._save_folders(folders)
            else:
                self.backend.delete(self.keys.folders)
