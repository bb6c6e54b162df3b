"""Shared fixtures: a temp session store and a fake agent service."""

import asyncio
import json

import httpx
import pytest

from agentchat.client import AgentClient
from agentchat.sessions.store import SessionStore

AGENT = "ce_agent"


class FakeAgentService:
    """In-process stand-in for the agent service, served through MockTransport."""

    def __init__(self, events=None, run_status=200, create_status=200, down=False):
        self.events = events if events is not None else []
        self.run_status = run_status
        self.create_status = create_status
        self.down = down
        self.requests: list[tuple[str, dict]] = []

    @property
    def run_calls(self) -> list[dict]:
        return [body for path, body in self.requests if path == "/run"]

    @property
    def create_calls(self) -> list[str]:
        return [path for path, _ in self.requests if "/sessions/" in path]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        # Yield once so concurrent callers can interleave like a real request
        await asyncio.sleep(0)
        body = json.loads(request.content) if request.content else {}
        self.requests.append((request.url.path, body))
        if self.down:
            raise httpx.ConnectError("connection refused", request=request)
        if request.url.path == "/run":
            if isinstance(self.events, (bytes, str)):
                return httpx.Response(self.run_status, content=self.events)
            return httpx.Response(self.run_status, json=self.events)
        return httpx.Response(self.create_status, json={})

    def client(self) -> AgentClient:
        return AgentClient(
            base_url="http://agent.test",
            app_name=AGENT,
            author=AGENT,
            transport=httpx.MockTransport(self.handler),
        )


def agent_event(text: str, author: str = AGENT) -> dict:
    return {"author": author, "content": {"parts": [{"text": text}]}}


@pytest.fixture
def store(tmp_path, monkeypatch):
    """Create a SessionStore backed by a temp file."""
    import agentchat.config as config

    monkeypatch.setattr(config, "AGENTCHAT_DIR", tmp_path)
    monkeypatch.setattr(config, "STORE_PATH", tmp_path / "storage.json")
    return SessionStore(path=tmp_path / "storage.json")


@pytest.fixture
def service():
    return FakeAgentService(events=[agent_event("Hi there")])
