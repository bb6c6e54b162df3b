"""The active chat session and how it is created, loaded and reconciled."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime

from loguru import logger

from agentchat import config
from agentchat.client import AgentClient
from agentchat.errors import AgentServiceError
from agentchat.sessions.models import (
    BoundIdentity,
    Identity,
    Message,
    Session,
    UnboundIdentity,
    local_identity,
    parse_identity,
    utcnow,
)
from agentchat.sessions.store import SessionStore


@dataclass
class ActiveSession:
    """The conversation currently bound to the interface.

    It stays transient (``durable`` is False) until its first turn has been
    persisted. Until then nothing about it exists in the store.
    """

    identity: Identity
    messages: list[Message] = field(default_factory=list)
    title: str = config.DEFAULT_TITLE
    created_at: datetime = field(default_factory=utcnow)
    durable: bool = False
    busy: bool = False

    @property
    def record_id(self) -> str:
        return self.identity.record_id

    @property
    def user_id(self) -> str:
        return self.identity.user_id

    @property
    def session_id(self) -> str:
        return self.identity.session_id

    def to_session(self, updated_at: datetime | None = None) -> Session:
        return Session(
            id=self.record_id,
            title=self.title,
            messages=list(self.messages),
            created_at=self.created_at,
            updated_at=updated_at or utcnow(),
        )

    @classmethod
    def from_session(cls, session: Session, identity: Identity) -> "ActiveSession":
        return cls(
            identity=identity,
            messages=list(session.messages),
            title=session.title,
            created_at=session.created_at,
            durable=True,
        )


class SessionManager:
    """Owns the active session and keeps it in step with the agent service."""

    def __init__(self, store: SessionStore, client: AgentClient):
        self.store = store
        self.client = client
        self.current: ActiveSession | None = None

    async def _mint_remote(self) -> BoundIdentity:
        user_id = str(uuid.uuid4())
        session_id = str(uuid.uuid4())
        await self.client.create_session(user_id, session_id)
        return BoundIdentity(user_id=user_id, session_id=session_id)

    async def create_session(self) -> Identity:
        """Start a fresh, unpersisted session.

        When the service can't create one, a local identity is used so the
        conversation can still go ahead without the backend knowing about it.
        """
        try:
            identity: Identity = await self._mint_remote()
        except AgentServiceError as e:
            logger.warning(f"Error creating new session, continuing locally: {e}")
            identity = local_identity()

        self.current = ActiveSession(identity=identity)
        return identity

    new_chat = create_session

    async def load_session(self, session_id: str) -> ActiveSession | None:
        """Make a stored session active, binding it to the service if needed."""
        session = self.store.get_session(session_id)
        if session is None:
            logger.warning(f"Session {session_id} not found")
            return None

        identity = parse_identity(session.id)
        if isinstance(identity, UnboundIdentity):
            identity = await self._reconcile(session, identity)

        self.current = ActiveSession.from_session(session, identity)
        return self.current

    async def _reconcile(self, session: Session, identity: UnboundIdentity) -> Identity:
        offline = UnboundIdentity(
            user_id=identity.user_id or local_identity().user_id,
            session_id=identity.session_id,
        )
        try:
            bound = await self._mint_remote()
        except AgentServiceError as e:
            logger.warning(f"Error creating backend session for {session.id}: {e}")
            return offline

        migrated = session.model_copy(update={"id": bound.record_id})
        # The old record goes only once the new one is on disk
        if not self.store.save_session(migrated):
            logger.warning(f"Could not store rebound session {bound.record_id}, keeping {session.id}")
            return offline
        self.store.delete_session(session.id)
        logger.info(f"Rebound session {session.id} as {bound.record_id}")
        return bound

    def delete_session(self, session_id: str) -> None:
        self.store.delete_session(session_id)
        if self.current is not None and self.current.record_id == session_id:
            self.current = None

    def close(self) -> None:
        self.current = None
