"""HTTP client for the remote agent service (session creation and turn runs)."""

from typing import Any

import httpx
from loguru import logger

from agentchat import config
from agentchat.errors import BackendError, MalformedResponseError, TransportError
from agentchat.sessions.models import Message


def collect_reply(events: Any, author: str) -> str:
    """Join the text the agent produced across a list of run events.

    Only the first part of each agent-authored event counts, and fragments
    are concatenated in order with no separator. Events from other authors
    and agent events without text are skipped.
    """
    if not isinstance(events, list):
        raise MalformedResponseError(f"expected a list of events, got {type(events).__name__}")

    fragments = []
    for event in events:
        if not isinstance(event, dict):
            raise MalformedResponseError(f"expected an event object, got {type(event).__name__}")
        if event.get("author") != author:
            continue
        content = event.get("content")
        if content is None:
            continue
        if not isinstance(content, dict):
            raise MalformedResponseError(f"malformed content in event from {author}")
        parts = content.get("parts") or []
        if not isinstance(parts, list):
            raise MalformedResponseError(f"malformed parts in event from {author}")
        first = parts[0] if parts else None
        text = first.get("text") if isinstance(first, dict) else None
        if text:
            fragments.append(str(text))
    return "".join(fragments)


class AgentClient:
    """Talks to the agent service's session and run endpoints."""

    def __init__(
        self,
        base_url: str | None = None,
        app_name: str | None = None,
        author: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = (base_url or config.BACKEND_URL).rstrip("/")
        self.app_name = app_name or config.APP_NAME
        self.author = author or config.AGENT_AUTHOR
        self.timeout = timeout or config.REQUEST_TIMEOUT
        self._transport = transport
        self._http: httpx.AsyncClient | None = None

    async def _client(self) -> httpx.AsyncClient:
        if self._http is None or self._http.is_closed:
            self._http = httpx.AsyncClient(timeout=self.timeout, transport=self._transport)
        return self._http

    async def close(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def __aenter__(self) -> "AgentClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    async def _post(self, path: str, payload: dict) -> httpx.Response:
        client = await self._client()
        url = f"{self.base_url}{path}"
        try:
            resp = await client.post(url, json=payload)
        except httpx.HTTPError as e:
            logger.warning(f"Agent service unreachable ({path}): {e!r}")
            raise TransportError(str(e) or type(e).__name__) from e

        if resp.is_error:
            logger.error(f"Agent service returned {resp.status_code} for {path}: {resp.text[:200]}")
            raise BackendError(resp.status_code, resp.text)
        return resp

    async def create_session(self, user_id: str, session_id: str) -> None:
        """Register a new user/session pair with the service."""
        path = f"/apps/{self.app_name}/users/{user_id}/sessions/{session_id}"
        await self._post(path, {"state": {}})
        logger.info(f"Created remote session {session_id} for {user_id}")

    async def run(
        self,
        user_id: str,
        session_id: str,
        message: str,
        history: list[Message],
    ) -> str:
        """Run one turn and return the agent's reply text ("" if it said nothing)."""
        payload = {
            "app_name": self.app_name,
            "user_id": user_id,
            "session_id": session_id,
            "history": [m.model_dump(mode="json") for m in history],
            "new_message": {"role": "user", "parts": [{"text": message}]},
        }
        logger.debug(f">>> run request for {session_id}: {payload}")

        resp = await self._post("/run", payload)
        try:
            events = resp.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from agent service: {resp.text[:100]}")
            raise MalformedResponseError("response body is not JSON") from e

        logger.debug(f"<<< run response for {session_id}: {events}")
        try:
            return collect_reply(events, self.author)
        except MalformedResponseError as e:
            logger.error(f"Invalid response from agent service: {e}")
            raise
