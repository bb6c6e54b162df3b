"""Durable chat session records kept in the local key-value area."""

import asyncio
import json
from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Callable

from loguru import logger
from pydantic import ValidationError

from agentchat import config
from agentchat.errors import StorageError
from agentchat.sessions.models import Message, Role, Session
from agentchat.sessions.storage import LocalStorage

SessionListener = Callable[[list[Session]], None]


def generate_title(messages: list[Message]) -> str:
    """Title a conversation after its first user message."""
    first = next((m for m in messages if m.role == Role.USER), None)
    if first is None:
        return config.DEFAULT_TITLE

    content = first.content
    if len(content) > config.TITLE_MAX_LENGTH:
        return content[: config.TITLE_MAX_LENGTH] + "..."
    return content


def day_label(updated_at: datetime, today: date | None = None) -> str:
    """Label the local update day as Today, Yesterday or "Month day"."""
    today = today or date.today()
    day = updated_at.astimezone().date()
    if day == today:
        return "Today"
    if day == today - timedelta(days=1):
        return "Yesterday"
    return f"{day.strftime('%B')} {day.day}"


def group_by_day(sessions: list[Session], today: date | None = None) -> dict[str, list[Session]]:
    """Group sessions under day labels, keeping their order."""
    groups: dict[str, list[Session]] = {}
    for session in sessions:
        groups.setdefault(day_label(session.updated_at, today), []).append(session)
    return groups


class SessionStore:
    """Session records stored as one JSON list under a single storage key.

    Persistence is best-effort: read failures look like an empty store and
    write failures are logged and dropped, never raised to the caller.
    """

    def __init__(self, path: Path | None = None, storage: LocalStorage | None = None):
        self.storage = storage or LocalStorage(path or config.STORE_PATH)
        self._listeners: list[SessionListener] = []

    def _read(self) -> list[Session]:
        raw = self.storage.get_item(config.STORAGE_KEY)
        if not raw:
            return []
        records = json.loads(raw)
        return [Session.model_validate(r) for r in records]

    def _write(self, sessions: list[Session]) -> None:
        payload = json.dumps([s.to_record() for s in sessions])
        self.storage.set_item(config.STORAGE_KEY, payload)

    def list_sessions(self) -> list[Session]:
        """All sessions with at least one message, newest first."""
        try:
            sessions = self._read()
        except (StorageError, ValueError, TypeError, ValidationError) as e:
            logger.error(f"Error loading sessions: {e}")
            return []
        return [s for s in sessions if s.messages]

    def get_session(self, session_id: str) -> Session | None:
        for session in self.list_sessions():
            if session.id == session_id:
                return session
        return None

    def search_sessions(self, query: str) -> list[Session]:
        """Sessions whose title contains ``query``, ignoring case."""
        needle = query.lower()
        return [s for s in self.list_sessions() if needle in s.title.lower()]

    def save_session(self, session: Session) -> bool:
        """Insert or replace a session by id. Returns False if nothing was written."""
        if not session.messages:
            logger.warning(f"Refusing to persist empty session {session.id}")
            return False

        sessions = self.list_sessions()
        for i, existing in enumerate(sessions):
            if existing.id == session.id:
                sessions[i] = session
                break
        else:
            sessions.insert(0, session)

        try:
            self._write(sessions)
        except StorageError as e:
            logger.error(f"Error saving session: {e}")
            return False
        self._notify(sessions)
        return True

    def delete_session(self, session_id: str) -> None:
        sessions = self.list_sessions()
        remaining = [s for s in sessions if s.id != session_id]
        if len(remaining) == len(sessions):
            return

        try:
            self._write(remaining)
        except StorageError as e:
            logger.error(f"Error deleting session: {e}")
            return
        self._notify(remaining)

    generate_title = staticmethod(generate_title)

    # ── Change notification ──────────────────────────────────────

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Call ``listener`` with the fresh session list after every change.

        Returns a function that removes the listener again.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, sessions: list[Session]) -> None:
        for listener in list(self._listeners):
            try:
                listener(sessions)
            except Exception:
                logger.exception("Session listener failed")

    def _mtime(self) -> int | None:
        try:
            return self.storage.mtime()
        except StorageError:
            return None

    async def watch(self, interval: float | None = None) -> None:
        """Poll for writes made by other processes and notify listeners.

        Runs until cancelled. Changes show up within one ``interval``.
        """
        interval = config.POLL_INTERVAL if interval is None else interval
        last = self._mtime()
        while True:
            await asyncio.sleep(interval)
            current = self._mtime()
            if current != last:
                last = current
                logger.debug("Session storage changed on disk, reloading")
                self._notify(self.list_sessions())
