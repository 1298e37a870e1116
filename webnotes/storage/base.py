"""
Storage Adapter Contract.

Base class for every backing store and for the coordinator that wraps them.
Callers depend only on this interface, so a LocalStore, a RemoteStore and
the HybridCoordinator are interchangeable.

Usage:
    from webnotes.storage.base import StorageAdapter

    class MemoryStore(StorageAdapter):
        async def list_notes(self, folder_id=ALL_FOLDERS) -> list[Note]:
            ...
"""

from abc import ABC, abstractmethod
from typing import Any

from webnotes.core.exceptions import ValidationError
from webnotes.core.logging import get_logger
from webnotes.storage.schemas import (
    ALL_FOLDERS,
    Folder,
    FolderSelector,
    Note,
    NoteCreate,
    NoteUpdate,
    SettingsUpdate,
    UserSettings,
)


class StorageAdapter(ABC):
    """
    Capability contract shared by all stores.

    Provides:
    - The async note, folder and settings operations
    - Logging context
    - Common validation patterns

    Subclasses must implement every abstract operation with the same
    semantics regardless of where the data lives.
    """

    def __init__(self) -> None:
        self._logger = get_logger(self.__class__.__module__, store=self.__class__.__name__)

    # --- Notes ---

    @abstractmethod
    async def list_notes(self, folder_id: FolderSelector = ALL_FOLDERS) -> list[Note]:
        """
        List notes.

        Args:
            folder_id: ALL_FOLDERS for every note, None for unfiled notes,
                or a folder id for that folder's notes.
        """

    @abstractmethod
    async def get_note(self, note_id: str) -> Note | None:
        """Return the note, or None if this store has no such note."""

    @abstractmethod
    async def create_note(self, data: NoteCreate | None = None) -> Note:
        """Create a note. Missing fields take their defaults, is_pinned starts False."""

    @abstractmethod
    async def update_note(self, note_id: str, data: NoteUpdate) -> Note:
        """
        Apply the explicitly set fields of data to a note.

        Raises:
            NotFoundError: If the note does not exist
        """

    @abstractmethod
    async def delete_note(self, note_id: str) -> None:
        """
        Delete a note.

        Raises:
            NotFoundError: If the note does not exist
        """

    @abstractmethod
    async def move_note(self, note_id: str, folder_id: str | None) -> Note:
        """Move a note into a folder, or out of any folder with None."""

    @abstractmethod
    async def pin_note(self, note_id: str) -> Note:
        """
        Toggle the pinned state of a note.

        Raises:
            NotFoundError: If the note does not exist
        """

    # --- Folders ---

    @abstractmethod
    async def list_folders(self) -> list[Folder]:
        """List all folders."""

    @abstractmethod
    async def get_folder(self, folder_id: str) -> Folder | None:
        """Return the folder, or None if this store has no such folder."""

    @abstractmethod
    async def create_folder(self, name: str) -> Folder:
        """Create a folder with a non-empty name."""

    @abstractmethod
    async def rename_folder(self, folder_id: str, name: str) -> Folder:
        """
        Rename a folder.

        Raises:
            NotFoundError: If the folder does not exist
        """

    @abstractmethod
    async def delete_folder(self, folder_id: str) -> None:
        """
        Delete a folder. Its notes become unfiled, they are never deleted.

        Raises:
            NotFoundError: If the folder does not exist
        """

    # --- Settings ---

    @abstractmethod
    async def get_settings(self) -> UserSettings:
        """Return the user settings."""

    @abstractmethod
    async def update_settings(self, data: SettingsUpdate) -> UserSettings:
        """Merge a partial update into the user settings."""

    # --- Helpers ---

    def _validate_required(
        self,
        fields: dict[str, Any],
        field_names: list[str],
    ) -> None:
        """
        Validate that required fields are present and not empty.

        Args:
            fields: Dictionary of field names to values
            field_names: List of required field names

        Raises:
            ValidationError: If any required field is missing or empty
        """
        missing = []
        for name in field_names:
            value = fields.get(name)
            if value is None or (isinstance(value, str) and not value.strip()):
                missing.append(name)

        if missing:
            raise ValidationError(
                "Required fields missing",
                details={"missing_fields": missing},
            )

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a storage operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra=context,
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in log
        """
        self._logger.debug(
            message,
            extra=context,
        )
