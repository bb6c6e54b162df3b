"""Chat session data models and remote session identities."""

import time
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from agentchat.config import DEFAULT_TITLE


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class Message(BaseModel):
    """One conversational turn from either side."""

    role: Role
    content: str


class Session(BaseModel):
    """A persisted conversation: identity, title and message history."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    title: str = DEFAULT_TITLE
    messages: list[Message] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utcnow, alias="createdAt")
    updated_at: datetime = Field(default_factory=utcnow, alias="updatedAt")

    def to_record(self) -> dict:
        """Serialize for the storage area (camelCase keys, ISO-8601 timestamps)."""
        return self.model_dump(mode="json", by_alias=True)


# ── Remote identities ────────────────────────────────────────────

ID_SEPARATOR = ":"
LOCAL_SESSION_PREFIX = "session"


@dataclass(frozen=True)
class BoundIdentity:
    """A user/session pair the remote agent service knows about."""

    user_id: str
    session_id: str

    is_bound = True

    @property
    def record_id(self) -> str:
        return f"{self.user_id}{ID_SEPARATOR}{self.session_id}"


@dataclass(frozen=True)
class UnboundIdentity:
    """A locally synthesized or legacy pair that still needs a remote session."""

    user_id: str
    session_id: str

    is_bound = False

    @property
    def record_id(self) -> str:
        return self.session_id


Identity = BoundIdentity | UnboundIdentity


def local_identity(now: float | None = None) -> UnboundIdentity:
    """Synthesize a time-derived identity for when the service is unreachable."""
    stamp = int((time.time() if now is None else now) * 1000)
    return UnboundIdentity(
        user_id=f"user-{stamp}",
        session_id=f"{LOCAL_SESSION_PREFIX}-{stamp}",
    )


def user_hint(record_id: str) -> str:
    """Best-effort user fragment of a legacy record id ("" if there is none)."""
    head = record_id.split("-")[0]
    if head == LOCAL_SESSION_PREFIX:
        return ""
    return head


def parse_identity(record_id: str) -> Identity:
    """Recover the identity encoded in a stored session id.

    Only ``user:session`` ids are bound. Everything else (local fallbacks,
    records written before remote sessions existed) comes back unbound with
    whatever user fragment can be salvaged, possibly empty.
    """
    user_id, sep, session_id = record_id.partition(ID_SEPARATOR)
    if sep and user_id and session_id:
        return BoundIdentity(user_id=user_id, session_id=session_id)
    return UnboundIdentity(user_id=user_hint(record_id), session_id=record_id)
