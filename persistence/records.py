from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

USERS = "users"
ENTRIES = "entries"
GOALS = "goals"
RESET_TOKENS = "resetTokens"
INVITATIONS = "invitations"
SETTINGS = "settings"

COLLECTIONS = (USERS, ENTRIES, GOALS, RESET_TOKENS, INVITATIONS)


class DygoDocument(BaseModel):
    """
    Mirrors the on-disk db.json schema:
      {
        "users": [...], "entries": [...], "goals": [...],
        "resetTokens": [...], "invitations": [...],
        "settings": { "<user_id>": {...} }
      }
    """

    users: list[dict[str, Any]] = Field(default_factory=list)
    entries: list[dict[str, Any]] = Field(default_factory=list)
    goals: list[dict[str, Any]] = Field(default_factory=list)
    resetTokens: list[dict[str, Any]] = Field(default_factory=list)
    invitations: list[dict[str, Any]] = Field(default_factory=list)
    settings: dict[str, Any] = Field(default_factory=dict)

    def to_disk_doc(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


def empty_document() -> dict[str, Any]:
    return DygoDocument().to_disk_doc()


class OpenRecord(BaseModel):
    # Unknown keys are kept so merge-updates never drop data.
    model_config = ConfigDict(extra="allow")

    def to_disk_doc(self) -> dict[str, Any]:
        doc = self.model_dump(mode="json")
        # unset optional fields are omitted; extra keys are kept as given
        for name in type(self).model_fields:
            if doc.get(name) is None:
                doc.pop(name, None)
        return doc


class UserRecord(OpenRecord):
    id: str
    name: str
    email: str
    password: str = ""
    role: str = "PATIENT"
    accessList: list[str] = Field(default_factory=list)


class EntryRecord(OpenRecord):
    id: str | None = None
    userId: str | None = None


class GoalRecord(OpenRecord):
    id: str | None = None
    userId: str | None = None


class InvitationRecord(OpenRecord):
    id: str | None = None


class ResetTokenRecord(OpenRecord):
    token: str
    userId: str
    expires: int  # epoch milliseconds


def public_user(record: dict[str, Any]) -> dict[str, Any]:
    """User record as returned by the API: everything except the password hash."""
    out = dict(record)
    out.pop("password", None)
    return out
