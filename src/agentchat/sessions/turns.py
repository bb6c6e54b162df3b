"""Run one user/assistant exchange and persist the result."""

from loguru import logger

from agentchat import config
from agentchat.client import AgentClient
from agentchat.errors import AgentServiceError
from agentchat.sessions.lifecycle import ActiveSession
from agentchat.sessions.models import Message, Role, utcnow
from agentchat.sessions.store import SessionStore


class TurnOrchestrator:
    def __init__(self, store: SessionStore, client: AgentClient):
        self.store = store
        self.client = client

    async def send_turn(self, active: ActiveSession | None, text: str) -> Message | None:
        """Send ``text`` and append both sides of the exchange to ``active``.

        Returns the assistant message, or None when the send was refused
        (blank input, no active session, or a turn already in flight).
        Service failures never propagate: they become an error reply that is
        stored like any other.
        """
        if not text.strip() or active is None or not active.record_id or active.busy:
            return None

        active.busy = True
        try:
            first_turn = not active.durable
            active.messages.append(Message(role=Role.USER, content=text))

            try:
                reply = await self.client.run(
                    active.user_id,
                    active.session_id,
                    text,
                    list(active.messages),
                )
                content = reply or config.EMPTY_REPLY
            except AgentServiceError as e:
                logger.error(f"Error sending message: {e}")
                content = config.ERROR_REPLY

            assistant = Message(role=Role.ASSISTANT, content=content)
            active.messages.append(assistant)

            if first_turn:
                active.title = self.store.generate_title(active.messages)
            self.store.save_session(active.to_session(updated_at=utcnow()))
            active.durable = True
            return assistant
        finally:
            active.busy = False
