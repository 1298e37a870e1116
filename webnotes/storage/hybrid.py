"""
Hybrid Coordinator.

The storage adapter callers actually use. Wraps a LocalStore and a
RemoteStore behind the StorageAdapter contract and decides, per call, which
backing store serves it:

    authenticated and online  -> RemoteStore (through the retry policy)
                                 on RemoteFailure: LocalStore for that call only
    otherwise                 -> LocalStore

States:
    LOCAL      no session, or session present but offline
    REMOTE     authenticated and online
    MIGRATING  one-time local -> remote transfer in progress
    FALLBACK   a remote call failed and this call is being served locally

Transitions are driven by handle_online(), handle_offline() and
set_authenticated() / refresh_auth(). The coordinator never stays degraded:
after a fallback the next call goes to the remote store again.

Migration copies every local folder and note to the remote store once per
client, guarded by a persisted flag. Remote ids are freshly minted, so folder
references are rewritten through an old-id -> new-id map. Migration is
at-least-once: a run that aborts leaves the flag unset and the next run starts
over, which can create duplicate remote entities.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
from typing import TypeVar

from webnotes.core.exceptions import ApplicationError, NotFoundError, RemoteFailure
from webnotes.core.logging import log_with_source
from webnotes.core.resilience import RetryPolicy
from webnotes.storage.base import StorageAdapter
from webnotes.storage.local import LocalStore
from webnotes.storage.ordering import sort_for_display
from webnotes.storage.remote import RemoteStore
from webnotes.storage.schemas import (
    ALL_FOLDERS,
    Folder,
    FolderSelector,
    Note,
    NoteCreate,
    NoteUpdate,
    SettingsUpdate,
    SyncStatus,
    UserSettings,
)

T = TypeVar("T")


class CoordinatorState(str, Enum):
    LOCAL = "local"
    REMOTE = "remote"
    MIGRATING = "migrating"
    FALLBACK = "fallback"


@dataclass
class MigrationResult:
    """Outcome of one migrate() call."""

    completed: bool = False
    attempted: bool = True
    folders_migrated: int = 0
    notes_migrated: int = 0
    failed_folder_ids: list[str] = field(default_factory=list)
    failed_note_ids: list[str] = field(default_factory=list)
    error: str | None = None


class HybridCoordinator(StorageAdapter):
    """
    Routes storage operations between the local and remote stores.

    Construct one per client in the composition root and pass it to every
    consumer. Tests build it directly with fake stores.
    """

    def __init__(
        self,
        local: LocalStore,
        remote: RemoteStore,
        retry_policy: RetryPolicy | None = None,
        session_provider: Callable[[], Awaitable[bool]] | None = None,
        online: bool = True,
        authenticated: bool = False,
        match_existing: bool = False,
    ) -> None:
        """
        Args:
            local: Store used when offline or signed out, and for settings
            remote: Store used when signed in and online
            retry_policy: Policy wrapped around every remote call.
                Defaults to a single attempt.
            session_provider: Returns whether a user is signed in.
                Defaults to remote.is_authenticated.
            online: Initial network state
            authenticated: Initial session state
            match_existing: During migration, reuse remote folders with the
                same name and skip notes that already exist remotely
        """
        super().__init__()
        self.local = local
        self.remote = remote
        self.retry_policy = retry_policy or RetryPolicy()
        self._session_provider = session_provider or remote.is_authenticated
        self._online = online
        self._authenticated = authenticated
        self._migrating = False
        self._fallback_active = False
        self.match_existing = match_existing

    # --- State ---

    @property
    def is_online(self) -> bool:
        return self._online

    @property
    def is_authenticated(self) -> bool:
        return self._authenticated

    @property
    def uses_remote(self) -> bool:
        """True when note and folder calls go to the remote store."""
        return self._authenticated and self._online

    @property
    def state(self) -> CoordinatorState:
        if self._migrating:
            return CoordinatorState.MIGRATING
        if self._fallback_active:
            return CoordinatorState.FALLBACK
        if self.uses_remote:
            return CoordinatorState.REMOTE
        return CoordinatorState.LOCAL

    @property
    def sync_status(self) -> SyncStatus:
        """Derived from session and network state, not from call outcomes."""
        if self._migrating:
            return SyncStatus.SYNCING
        if self.uses_remote:
            return SyncStatus.SYNCED
        return SyncStatus.UNSYNCED

    @property
    def migration_completed(self) -> bool:
        return self.local.migration_completed()

    def _log_transition(self, previous: CoordinatorState, reason: str) -> None:
        current = self.state
        if current != previous:
            self._logger.info(
                f"Storage state {previous.value} → {current.value}",
                extra={"reason": reason, "from_state": previous.value, "to_state": current.value},
            )

    # --- Events ---

    async def handle_online(self) -> None:
        """Network came back. Migrate if signed in and not yet migrated."""
        previous = self.state
        self._online = True
        self._log_transition(previous, "online")
        if self._authenticated and not self.local.migration_completed():
            await self.migrate()

    def handle_offline(self) -> None:
        """Network went away. Everything is served locally until it returns."""
        previous = self.state
        self._online = False
        self._log_transition(previous, "offline")

    async def set_authenticated(self, authenticated: bool) -> None:
        """Apply an observed session state."""
        previous = self.state
        was_authenticated = self._authenticated
        self._authenticated = authenticated
        self._log_transition(previous, "signed in" if authenticated else "signed out")

        if authenticated and not was_authenticated and not self.local.migration_completed():
            log_with_source(
                self._logger, "migration", "info",
                "User signed in, migrating local data",
            )
            await self.migrate()

    async def refresh_auth(self) -> bool:
        """Poll the session provider and apply the result."""
        if not self._online:
            self._log_debug("Offline, keeping last known session state")
            return self._authenticated
        authenticated = await self._session_provider()
        await self.set_authenticated(authenticated)
        return authenticated

    # --- Routing ---

    async def _route(
        self,
        operation: str,
        remote_call: Callable[[], Awaitable[T]],
        local_call: Callable[[], Awaitable[T]],
        fallback_call: Callable[[], Awaitable[T]] | None = None,
    ) -> T:
        """
        Serve one operation.

        local_call runs when the remote store is not in use. After a
        RemoteFailure, fallback_call runs instead when given, otherwise
        local_call.
        """
        if not self.uses_remote:
            return await local_call()

        try:
            return await self.retry_policy.call(remote_call)
        except RemoteFailure as e:
            self._logger.warning(
                "Remote call failed, serving from local store",
                extra={
                    "operation": operation,
                    "status_code": e.status_code,
                    "error": e.message,
                },
            )
            self._fallback_active = True
            try:
                return await (fallback_call or local_call)()
            finally:
                self._fallback_active = False

    # --- Notes ---

    async def list_notes(self, folder_id: FolderSelector = ALL_FOLDERS) -> list[Note]:
        notes = await self._route(
            "list_notes",
            partial(self.remote.list_notes, folder_id),
            partial(self.local.list_notes, folder_id),
        )
        return sort_for_display(notes)

    async def get_note(self, note_id: str) -> Note | None:
        return await self._route(
            "get_note",
            partial(self.remote.get_note, note_id),
            partial(self.local.get_note, note_id),
        )

    async def create_note(self, data: NoteCreate | None = None) -> Note:
        data = data or NoteCreate()
        self._log_operation("Creating note", folder_id=data.folder_id)
        return await self._route(
            "create_note",
            partial(self.remote.create_note, data),
            partial(self.local.create_note, data),
            partial(self._fallback_create, data),
        )

    async def update_note(self, note_id: str, data: NoteUpdate) -> Note:
        """
        Update a note.

        A folder change is routed as a separate move after the title and
        content change, so a failed move never re-runs the applied part.
        """
        changes = data.changes()
        self._log_debug("Updating note", note_id=note_id, fields=list(changes))
        if "folder_id" not in changes:
            return await self._route(
                "update_note",
                partial(self.remote.update_note, note_id, data),
                partial(self.local.update_note, note_id, data),
            )

        folder_id = changes.pop("folder_id")
        if not changes:
            return await self._move(note_id, folder_id)
        if not self.uses_remote:
            return await self.local.update_note(note_id, data)

        updated = await self.update_note(note_id, NoteUpdate(**changes))
        return await self._move(note_id, folder_id, current=updated)

    async def delete_note(self, note_id: str) -> None:
        self._log_operation("Deleting note", note_id=note_id)
        await self._route(
            "delete_note",
            partial(self.remote.delete_note, note_id),
            partial(self.local.delete_note, note_id),
        )

    async def move_note(self, note_id: str, folder_id: str | None) -> Note:
        return await self._move(note_id, folder_id)

    async def _move(self, note_id: str, folder_id: str | None, current: Note | None = None) -> Note:
        self._log_operation("Moving note", note_id=note_id, folder_id=folder_id)
        return await self._route(
            "move_note",
            partial(self.remote.move_note, note_id, folder_id),
            partial(self.local.move_note, note_id, folder_id),
            partial(self._fallback_move, note_id, folder_id, current),
        )

    # --- Fallback ---

    async def _local_folder(self, folder_id: str | None) -> str | None:
        """Folder id usable in the local store, None when it only exists remotely."""
        if folder_id is None or await self.local.get_folder(folder_id) is not None:
            return folder_id
        self._logger.warning(
            "Folder is not stored locally, keeping note unfiled",
            extra={"folder_id": folder_id},
        )
        return None

    async def _fallback_create(self, data: NoteCreate) -> Note:
        folder_id = await self._local_folder(data.folder_id)
        if folder_id != data.folder_id:
            data = data.model_copy(update={"folder_id": folder_id})
        return await self.local.create_note(data)

    async def _fallback_move(self, note_id: str, folder_id: str | None, current: Note | None) -> Note:
        """
        Move a note in the local store after the remote move failed.

        When the note only exists remotely and an earlier step of the same
        update already returned it, that note is returned with its folder
        unchanged.
        """
        if await self.local.get_note(note_id) is None:
            if current is None:
                raise NotFoundError("Note not found")
            self._logger.warning(
                "Folder change not applied, note is not stored locally",
                extra={"note_id": note_id, "folder_id": folder_id},
            )
            return current
        return await self.local.move_note(note_id, await self._local_folder(folder_id))

    async def pin_note(self, note_id: str) -> Note:
        self._log_operation("Toggling pin", note_id=note_id)
        return await self._route(
            "pin_note",
            partial(self.remote.pin_note, note_id),
            partial(self.local.pin_note, note_id),
        )

    # --- Folders ---

    async def list_folders(self) -> list[Folder]:
        return await self._route(
            "list_folders",
            self.remote.list_folders,
            self.local.list_folders,
        )

    async def get_folder(self, folder_id: str) -> Folder | None:
        return await self._route(
            "get_folder",
            partial(self.remote.get_folder, folder_id),
            partial(self.local.get_folder, folder_id),
        )

    async def create_folder(self, name: str) -> Folder:
        self._validate_required({"name": name}, ["name"])
        self._log_operation("Creating folder", name=name)
        return await self._route(
            "create_folder",
            partial(self.remote.create_folder, name),
            partial(self.local.create_folder, name),
        )

    async def rename_folder(self, folder_id: str, name: str) -> Folder:
        self._validate_required({"name": name}, ["name"])
        self._log_operation("Renaming folder", folder_id=folder_id)
        return await self._route(
            "rename_folder",
            partial(self.remote.rename_folder, folder_id, name),
            partial(self.local.rename_folder, folder_id, name),
        )

    async def delete_folder(self, folder_id: str) -> None:
        self._log_operation("Deleting folder", folder_id=folder_id)
        await self._route(
            "delete_folder",
            partial(self.remote.delete_folder, folder_id),
            partial(self.local.delete_folder, folder_id),
        )

    # --- Settings (always local) ---

    async def get_settings(self) -> UserSettings:
        settings = await self.local.get_settings()
        return settings.model_copy(update={"sync_status": self.sync_status})

    async def update_settings(self, data: SettingsUpdate) -> UserSettings:
        settings = await self.local.update_settings(data)
        return settings.model_copy(update={"sync_status": self.sync_status})

    # --- Migration ---

    def reset_migration(self) -> None:
        """Forget that migration ran, so the next sign-in migrates again."""
        self.local.set_migration_completed(False)
        log_with_source(self._logger, "migration", "info", "Migration flag reset")

    async def migrate(self) -> MigrationResult:
        """
        Copy local folders and notes to the remote store, once per client.

        Per-entity failures are logged and skipped. Transport and
        authentication failures abort the run with the completion flag left
        unset so the next authenticated session retries. Nothing is raised.

        Returns:
            MigrationResult describing what happened
        """
        if self._migrating:
            return MigrationResult(attempted=False)
        if self.local.migration_completed():
            return MigrationResult(completed=True, attempted=False)
        if not self.uses_remote:
            self._log_debug("Migration deferred until signed in and online")
            return MigrationResult(attempted=False)

        previous = self.state
        self._migrating = True
        self._log_transition(previous, "migration started")
        result = MigrationResult()
        try:
            await self._run_migration(result)
        except ApplicationError as e:
            result.completed = False
            result.error = e.message
            log_with_source(
                self._logger, "migration", "error",
                "Migration failed",
                error=e.message,
                folders_migrated=result.folders_migrated,
                notes_migrated=result.notes_migrated,
            )
        finally:
            self._migrating = False
            self._log_transition(CoordinatorState.MIGRATING, "migration finished")
        return result

    @staticmethod
    def _is_fatal(error: RemoteFailure) -> bool:
        """A lost connection or session dooms every remaining call."""
        return error.is_transport_error or error.is_auth_failure

    async def _run_migration(self, result: MigrationResult) -> None:
        folders = await self.local.list_folders()
        notes = await self.local.list_notes()

        log_with_source(
            self._logger, "migration", "info",
            f"Found {len(notes)} local notes and {len(folders)} local folders to migrate",
        )

        if not folders and not notes:
            self.local.set_migration_completed(True)
            result.completed = True
            return

        existing_folders: dict[str, str] = {}
        existing_notes: set[tuple[str | None, str | None, str | None]] = set()
        if self.match_existing:
            existing_folders = {
                f.name: f.id for f in await self.retry_policy.call(self.remote.list_folders)
            }
            existing_notes = {
                (n.title, n.content, n.folder_id)
                for n in await self.retry_policy.call(self.remote.list_notes)
            }

        folder_map: dict[str, str] = {}
        for folder in sorted(folders, key=lambda f: f.created_at):
            try:
                if folder.name in existing_folders:
                    folder_map[folder.id] = existing_folders[folder.name]
                else:
                    created = await self.retry_policy.call(self.remote.create_folder, folder.name)
                    folder_map[folder.id] = created.id
                result.folders_migrated += 1
            except RemoteFailure as e:
                if self._is_fatal(e):
                    raise
                result.failed_folder_ids.append(folder.id)
                log_with_source(
                    self._logger, "migration", "error",
                    "Failed to migrate folder",
                    folder_id=folder.id, name=folder.name, error=e.message,
                )

        migrated_note_ids: list[str] = []
        for note in sorted(notes, key=lambda n: n.updated_at):
            target = folder_map.get(note.folder_id) if note.folder_id else None
            try:
                if (note.title, note.content, target) not in existing_notes:
                    created = await self.retry_policy.call(
                        self.remote.create_note,
                        NoteCreate(title=note.title, content=note.content, folder_id=target),
                    )
                    if note.is_pinned:
                        await self._restore_pin(created)
                migrated_note_ids.append(note.id)
                result.notes_migrated += 1
            except RemoteFailure as e:
                if self._is_fatal(e):
                    raise
                result.failed_note_ids.append(note.id)
                log_with_source(
                    self._logger, "migration", "error",
                    "Failed to migrate note",
                    note_id=note.id, title=note.title, error=e.message,
                )

        self.local.discard(note_ids=migrated_note_ids, folder_ids=folder_map.keys())
        self.local.set_migration_completed(True)
        result.completed = True

        log_with_source(
            self._logger, "migration", "info",
            "Migration complete",
            folders_migrated=result.folders_migrated,
            notes_migrated=result.notes_migrated,
            folders_failed=len(result.failed_folder_ids),
            notes_failed=len(result.failed_note_ids),
        )

    async def _restore_pin(self, note: Note) -> None:
        """Pin a freshly migrated note. A non-fatal failure leaves it unpinned."""
        try:
            await self.retry_policy.call(self.remote.pin_note, note.id)
        except (RemoteFailure, NotFoundError) as e:
            if isinstance(e, RemoteFailure) and self._is_fatal(e):
                raise
            log_with_source(
                self._logger, "migration", "warning",
                "Migrated note could not be pinned",
                note_id=note.id, error=e.message,
            )

    async def close(self) -> None:
        """Release the remote client."""
        await self.remote.close()
