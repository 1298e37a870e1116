"""
Storage Schemas.

Pydantic models for notes, folders and user settings. The same models are
used for the local JSON documents and the remote API payloads, both of which
use camelCase keys (folderId, isPinned, ...).

Entities are frozen: a changed note is a new Note produced by a store.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator, model_validator
from pydantic.alias_generators import to_camel

from webnotes.core.utils import ensure_utc

UNTITLED = "Untitled"


class FolderFilter(Enum):
    """Folder selector for list_notes when no filtering is wanted."""

    ALL = "all"


ALL_FOLDERS = FolderFilter.ALL

FolderSelector = str | None | FolderFilter


class SyncStatus(str, Enum):
    """Which backing store is currently authoritative, as shown to the user."""

    SYNCED = "synced"
    SYNCING = "syncing"
    UNSYNCED = "unsynced"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class _Entity(_CamelModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )


class Note(_Entity):
    """A note as held by one backing store."""

    id: str
    title: str | None = None
    content: str | None = None
    folder_id: str | None = None
    created_at: datetime
    updated_at: datetime
    is_pinned: bool = False
    pinned_at: datetime | None = None
    user_id: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _couple_pin_state(cls, data: Any) -> Any:
        """Keep pinned_at set exactly when is_pinned is true."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        pinned_key = "isPinned" if "isPinned" in data else "is_pinned"
        pinned_at_key = "pinnedAt" if "pinnedAt" in data else "pinned_at"
        updated_key = "updatedAt" if "updatedAt" in data else "updated_at"

        pinned = bool(data.get(pinned_key))
        data[pinned_key] = pinned
        if not pinned:
            data[pinned_at_key] = None
        elif data.get(pinned_at_key) is None:
            data[pinned_at_key] = data.get(updated_key)
        return data

    @field_validator("created_at", "updated_at", "pinned_at")
    @classmethod
    def _as_utc(cls, value: datetime | None) -> datetime | None:
        return ensure_utc(value) if value is not None else None

    def __repr__(self) -> str:
        return f"<Note(id={self.id}, title={self.title!r}, pinned={self.is_pinned})>"


class Folder(_Entity):
    """A folder grouping notes."""

    id: str
    name: str
    created_at: datetime
    user_id: str | None = None

    @field_validator("created_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    def __repr__(self) -> str:
        return f"<Folder(id={self.id}, name={self.name!r})>"


class NoteCreate(_CamelModel):
    """Schema for creating a new note. Every field is optional."""

    title: str | None = Field(
        default=None,
        description="Note title, defaults to 'Untitled'",
        examples=["My First Note"],
    )
    content: str | None = Field(
        default=None,
        description="Serialized rich text or markdown, defaults to empty",
    )
    folder_id: str | None = Field(
        default=None,
        description="Folder to file the note in, None for unfiled",
    )


class NoteUpdate(_CamelModel):
    """
    Schema for updating an existing note.

    Only fields explicitly set are applied, so folder_id=None (unfile)
    is distinguishable from folder_id not given.
    """

    title: str | None = Field(default=None, description="Note title")
    content: str | None = Field(default=None, description="Note content")
    folder_id: str | None = Field(default=None, description="Target folder, None for unfiled")

    def changes(self) -> dict[str, Any]:
        """Return only the explicitly set fields, keyed by field name."""
        return self.model_dump(exclude_unset=True)


class UserSettings(_CamelModel):
    """Client preferences. sync_status is derived and never persisted."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    theme: Literal["dark", "light", "system"] = "dark"
    font_size: Literal["small", "medium", "large"] = "medium"
    show_line_numbers: bool = False
    sync_status: SyncStatus = Field(default=SyncStatus.UNSYNCED, exclude=True)


class SettingsUpdate(_CamelModel):
    """Partial settings update. A sync_status key is ignored."""

    theme: Literal["dark", "light", "system"] | None = None
    font_size: Literal["small", "medium", "large"] | None = None
    show_line_numbers: bool | None = None

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True, exclude_none=True)


NOTE_LIST = TypeAdapter(list[Note])
FOLDER_LIST = TypeAdapter(list[Folder])
