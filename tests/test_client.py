"""Tests for the agent service client."""

import asyncio

import pytest

from agentchat.client import collect_reply
from agentchat.errors import BackendError, MalformedResponseError, TransportError
from agentchat.sessions.models import Message, Role
from conftest import AGENT, FakeAgentService, agent_event


def run_turn(service: FakeAgentService, text: str = "Hello", history=None) -> str:
    async def go():
        async with service.client() as client:
            return await client.run("u1", "s1", text, history or [])

    return asyncio.run(go())


class TestCollectReply:
    def test_joins_agent_fragments_in_order(self):
        events = [agent_event("Hi"), agent_event(" there"), agent_event("!")]
        assert collect_reply(events, AGENT) == "Hi there!"

    def test_skips_other_authors_and_empty_events(self):
        events = [
            agent_event("ignored", author="user"),
            {"author": AGENT},
            {"author": AGENT, "content": {"parts": []}},
            {"author": AGENT, "content": {"parts": [{"function_call": {}}]}},
            agent_event("kept"),
        ]
        assert collect_reply(events, AGENT) == "kept"

    def test_only_first_part_counts(self):
        event = {"author": AGENT, "content": {"parts": [{"text": "a"}, {"text": "b"}]}}
        assert collect_reply([event], AGENT) == "a"

    def test_null_parts_are_skipped(self):
        events = [{"author": AGENT, "content": {"parts": None}}, agent_event("ok")]
        assert collect_reply(events, AGENT) == "ok"

    def test_no_agent_text_is_empty_reply(self):
        assert collect_reply([], AGENT) == ""

    @pytest.mark.parametrize("payload", [{"events": []}, "text", None])
    def test_non_list_payload_is_malformed(self, payload):
        with pytest.raises(MalformedResponseError):
            collect_reply(payload, AGENT)

    def test_non_object_event_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            collect_reply(["oops"], AGENT)

    def test_malformed_agent_content(self):
        with pytest.raises(MalformedResponseError):
            collect_reply([{"author": AGENT, "content": "text"}], AGENT)


class TestAgentClient:
    def test_run_sends_history_and_new_message(self, service):
        history = [Message(role=Role.USER, content="Hello")]
        reply = run_turn(service, "Hello", history)

        assert reply == "Hi there"
        body = service.run_calls[0]
        assert body == {
            "app_name": AGENT,
            "user_id": "u1",
            "session_id": "s1",
            "history": [{"role": "user", "content": "Hello"}],
            "new_message": {"role": "user", "parts": [{"text": "Hello"}]},
        }

    def test_create_session_posts_empty_state(self, service):
        async def go():
            async with service.client() as client:
                await client.create_session("u1", "s1")

        asyncio.run(go())
        assert service.requests == [(f"/apps/{AGENT}/users/u1/sessions/s1", {"state": {}})]

    def test_backend_error_status(self):
        service = FakeAgentService(run_status=500)
        with pytest.raises(BackendError) as exc_info:
            run_turn(service)
        assert exc_info.value.status == 500

    def test_create_session_error_status(self):
        service = FakeAgentService(create_status=404)

        async def go():
            async with service.client() as client:
                await client.create_session("u1", "s1")

        with pytest.raises(BackendError):
            asyncio.run(go())

    def test_unreachable_service(self):
        with pytest.raises(TransportError):
            run_turn(FakeAgentService(down=True))

    def test_invalid_json(self):
        with pytest.raises(MalformedResponseError):
            run_turn(FakeAgentService(events=b"<html>oops</html>"))

    def test_non_list_response(self):
        with pytest.raises(MalformedResponseError):
            run_turn(FakeAgentService(events={"error": "nope"}))
