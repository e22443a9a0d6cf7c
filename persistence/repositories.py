from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Mapping

from pydantic import BaseModel, ValidationError

from .collection_accessor import CollectionAccessor, new_id, owned_by
from .errors import Conflict, InvalidCredentials, InvalidRequest
from .goals_sync import GoalsSync
from .interfaces import DocumentStore
from .passwords import hash_password, is_hashed, verify_password
from .records import (
    ENTRIES,
    GOALS,
    INVITATIONS,
    SETTINGS,
    USERS,
    EntryRecord,
    InvitationRecord,
    UserRecord,
    public_user,
)
from .reset_tokens import Clock, ResetTokenLedger

logger = logging.getLogger(__name__)

Record = dict[str, Any]


def _validated(model: type[BaseModel], data: Mapping[str, Any]) -> Record:
    try:
        return model.model_validate(data).to_disk_doc()
    except ValidationError as e:
        raise InvalidRequest(f"invalid {model.__name__}: {e.error_count()} error(s)") from e


class DygoRepository:
    """
    One method per API operation. Each mutating method is exactly one
    load -> mutate -> save cycle through DocumentStore.transaction(); reads
    load the document fresh every time.
    """

    def __init__(self, store: DocumentStore, *, clock: Clock = time.time):
        self._store = store
        self._reset_tokens = ResetTokenLedger(store, clock=clock)
        self._goals = GoalsSync(store)

    @property
    def store(self) -> DocumentStore:
        return self._store

    def _read(self, name: str, label: str) -> CollectionAccessor:
        return CollectionAccessor(self._store.load(), name, label=label)

    # Users -----------------------------------------------------------------

    def register_user(self, *, name: str, email: str, password: str, role: str | None = None) -> Record:
        if not name or not email or not password:
            raise InvalidRequest("name, email and password are required")

        with self._store.transaction() as doc:
            users = CollectionAccessor(doc, USERS, label="User")
            if users.list(lambda u: u.get("email") == email):
                raise Conflict("Email already registered")
            user = UserRecord(
                id=new_id(),
                name=name,
                email=email,
                password=hash_password(password),
                role=role or "PATIENT",
                accessList=[],
            )
            stored = users.insert(user.to_disk_doc())
        logger.info("USER: registered %s", stored["id"])
        return public_user(stored)

    def authenticate(self, *, email: str, password: str) -> Record:
        if not email or not password:
            raise InvalidRequest("email and password are required")

        candidates = self._read(USERS, "User").list(lambda u: u.get("email") == email)
        user = next(
            (u for u in candidates if verify_password(password, str(u.get("password") or ""))),
            None,
        )
        if user is None:
            raise InvalidCredentials()
        if not is_hashed(str(user.get("password") or "")):
            logger.info("USER: upgrading cleartext password for %s", user.get("id"))
            with self._store.transaction() as doc:
                users = CollectionAccessor(doc, USERS, label="User")
                user = users.update_by_id(user["id"], {"password": hash_password(password)})
        return public_user(user)

    def get_user(self, user_id: str) -> Record:
        return public_user(self._read(USERS, "User").get_by_id(user_id))

    def list_users(self) -> list[Record]:
        return [public_user(u) for u in self._read(USERS, "User").list()]

    def update_user(self, user_id: str, patch: Mapping[str, Any]) -> Record:
        changes = dict(patch)
        if "password" in changes:
            if not changes["password"]:
                raise InvalidRequest("password must not be empty")
            changes["password"] = hash_password(str(changes["password"]))
        with self._store.transaction() as doc:
            merged = CollectionAccessor(doc, USERS, label="User").update_by_id(user_id, changes)
        return public_user(merged)

    # Entries ---------------------------------------------------------------

    def list_entries(self, user_id: str | None = None) -> list[Record]:
        return self._read(ENTRIES, "Entry").list(owned_by(user_id))

    def create_entry(self, entry: Mapping[str, Any]) -> Record:
        record = _validated(EntryRecord, entry)
        with self._store.transaction() as doc:
            return CollectionAccessor(doc, ENTRIES, label="Entry").insert(record)

    def update_entry(self, entry_id: str, patch: Mapping[str, Any]) -> Record:
        with self._store.transaction() as doc:
            return CollectionAccessor(doc, ENTRIES, label="Entry").update_by_id(entry_id, patch)

    def delete_entry(self, entry_id: str) -> None:
        with self._store.transaction() as doc:
            CollectionAccessor(doc, ENTRIES, label="Entry").delete_by_id(entry_id)

    # Goals -----------------------------------------------------------------

    def list_goals(self, user_id: str | None = None) -> list[Record]:
        return self._read(GOALS, "Goal").list(owned_by(user_id))

    def sync_goals(self, user_id: Any, goals: Any) -> list[Record]:
        return self._goals.replace_for_owner(user_id, goals)

    # Invitations -----------------------------------------------------------

    def list_invitations(self) -> list[Record]:
        return self._read(INVITATIONS, "Invitation").list()

    def create_invitation(self, invitation: Mapping[str, Any]) -> Record:
        record = _validated(InvitationRecord, invitation)
        with self._store.transaction() as doc:
            return CollectionAccessor(doc, INVITATIONS, label="Invitation").insert(record)

    def update_invitation(self, invitation_id: str, patch: Mapping[str, Any]) -> Record:
        with self._store.transaction() as doc:
            return CollectionAccessor(doc, INVITATIONS, label="Invitation").update_by_id(invitation_id, patch)

    def delete_invitation(self, invitation_id: str) -> None:
        with self._store.transaction() as doc:
            CollectionAccessor(doc, INVITATIONS, label="Invitation").delete_by_id(invitation_id)

    # Settings --------------------------------------------------------------

    def get_settings(self, user_id: str) -> Record:
        settings = self._store.load().get(SETTINGS)
        value = settings.get(user_id) if isinstance(settings, dict) else None
        return value if isinstance(value, dict) else {}

    def put_settings(self, user_id: str, value: Mapping[str, Any]) -> None:
        with self._store.transaction() as doc:
            settings = doc.get(SETTINGS)
            if not isinstance(settings, dict):
                settings = {}
                doc[SETTINGS] = settings
            settings[user_id] = dict(value)

    # Password reset --------------------------------------------------------

    def request_password_reset(self, email: str, *, ttl: float) -> str | None:
        """Issue a reset token for the user with this email; None if there is no such user."""
        matches = self._read(USERS, "User").list(lambda u: u.get("email") == email)
        if not matches:
            logger.info("RESET: no user for requested email")
            return None
        return self._reset_tokens.issue(str(matches[0]["id"]), ttl).token

    def reset_password(self, token: str, new_password: str) -> None:
        if not token or not new_password:
            raise InvalidRequest("token and newPassword are required")
        self._reset_tokens.consume(token, new_password)

    def drop_expired_reset_tokens(self) -> int:
        return self._reset_tokens.drop_expired()


class AsyncDygoRepository:
    """
    Async wrapper around DygoRepository.
    Uses asyncio.to_thread to avoid blocking the event loop on file I/O; the
    store's per-path lock serializes the worker threads.
    """

    def __init__(self, repo: DygoRepository) -> None:
        self._repo = repo

    @property
    def sync(self) -> DygoRepository:
        return self._repo

    async def register_user(self, *, name: str, email: str, password: str, role: str | None = None) -> Record:
        return await asyncio.to_thread(
            lambda: self._repo.register_user(name=name, email=email, password=password, role=role)
        )

    async def authenticate(self, *, email: str, password: str) -> Record:
        return await asyncio.to_thread(lambda: self._repo.authenticate(email=email, password=password))

    async def get_user(self, user_id: str) -> Record:
        return await asyncio.to_thread(self._repo.get_user, user_id)

    async def list_users(self) -> list[Record]:
        return await asyncio.to_thread(self._repo.list_users)

    async def update_user(self, user_id: str, patch: Mapping[str, Any]) -> Record:
        return await asyncio.to_thread(self._repo.update_user, user_id, patch)

    async def list_entries(self, user_id: str | None = None) -> list[Record]:
        return await asyncio.to_thread(self._repo.list_entries, user_id)

    async def create_entry(self, entry: Mapping[str, Any]) -> Record:
        return await asyncio.to_thread(self._repo.create_entry, entry)

    async def update_entry(self, entry_id: str, patch: Mapping[str, Any]) -> Record:
        return await asyncio.to_thread(self._repo.update_entry, entry_id, patch)

    async def delete_entry(self, entry_id: str) -> None:
        await asyncio.to_thread(self._repo.delete_entry, entry_id)

    async def list_goals(self, user_id: str | None = None) -> list[Record]:
        return await asyncio.to_thread(self._repo.list_goals, user_id)

    async def sync_goals(self, user_id: Any, goals: Any) -> list[Record]:
        return await asyncio.to_thread(self._repo.sync_goals, user_id, goals)

    async def list_invitations(self) -> list[Record]:
        return await asyncio.to_thread(self._repo.list_invitations)

    async def create_invitation(self, invitation: Mapping[str, Any]) -> Record:
        return await asyncio.to_thread(self._repo.create_invitation, invitation)

    async def update_invitation(self, invitation_id: str, patch: Mapping[str, Any]) -> Record:
        return await asyncio.to_thread(self._repo.update_invitation, invitation_id, patch)

    async def delete_invitation(self, invitation_id: str) -> None:
        await asyncio.to_thread(self._repo.delete_invitation, invitation_id)

    async def get_settings(self, user_id: str) -> Record:
        return await asyncio.to_thread(self._repo.get_settings, user_id)

    async def put_settings(self, user_id: str, value: Mapping[str, Any]) -> None:
        await asyncio.to_thread(self._repo.put_settings, user_id, value)

    async def request_password_reset(self, email: str, *, ttl: float) -> str | None:
        return await asyncio.to_thread(lambda: self._repo.request_password_reset(email, ttl=ttl))

    async def reset_password(self, token: str, new_password: str) -> None:
        await asyncio.to_thread(self._repo.reset_password, token, new_password)

    async def drop_expired_reset_tokens(self) -> int:
        return await asyncio.to_thread(self._repo.drop_expired_reset_tokens)
