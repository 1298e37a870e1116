"""
Storage Layer.

Offline-first note storage: a LocalStore on this client, a RemoteStore over
the notes API, and the HybridCoordinator that routes between them.
"""

from webnotes.storage.base import StorageAdapter
from webnotes.storage.hybrid import CoordinatorState, HybridCoordinator, MigrationResult
from webnotes.storage.local import LocalStore
from webnotes.storage.remote import RemoteStore
from webnotes.storage.schemas import (
    ALL_FOLDERS,
    Folder,
    Note,
    NoteCreate,
    NoteUpdate,
    SettingsUpdate,
    SyncStatus,
    UserSettings,
)

__all__ = [
    "ALL_FOLDERS",
    "CoordinatorState",
    "Folder",
    "HybridCoordinator",
    "LocalStore",
    "MigrationResult",
    "Note",
    "NoteCreate",
    "NoteUpdate",
    "RemoteStore",
    "SettingsUpdate",
    "StorageAdapter",
    "SyncStatus",
    "UserSettings",
]
