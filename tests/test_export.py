"""Tests for session export formats."""

import json
from datetime import date, datetime, timezone

import pytest

from agentchat.export import (
    copy_to_clipboard,
    export_filename,
    export_session,
    from_json,
    slugify,
    to_clipboard_text,
    to_json,
    to_markdown,
    to_text,
)
from agentchat.sessions.models import Message, Role, Session


@pytest.fixture
def session():
    return Session(
        id="u1:s1",
        title="Trip to Paris",
        messages=[
            Message(role=Role.USER, content="Plan a trip to Paris"),
            Message(role=Role.ASSISTANT, content="Day 1:\n- Louvre\n- Seine walk"),
        ],
        created_at=datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc),
        updated_at=datetime(2026, 3, 1, 10, 0, tzinfo=timezone.utc),
    )


class TestRenderers:
    def test_json_round_trip(self, session):
        restored = from_json(to_json(session))
        assert restored.messages == session.messages
        assert restored.id == session.id
        assert restored.created_at == session.created_at

    def test_json_layout(self, session):
        data = json.loads(to_json(session))
        assert data["session"] == {
            "id": "u1:s1",
            "title": "Trip to Paris",
            "createdAt": "2026-03-01T09:30:00+00:00",
            "updatedAt": "2026-03-01T10:00:00+00:00",
        }
        assert data["messages"][0] == {"role": "user", "content": "Plan a trip to Paris"}

    def test_markdown(self, session):
        md = to_markdown(session)
        assert md.startswith("# Trip to Paris\n")
        assert "**Created:** 2026-03-01 09:30:00" in md
        assert "### **You**\n\nPlan a trip to Paris\n" in md
        assert "### **Assistant**\n\nDay 1:\n- Louvre\n- Seine walk\n" in md

    def test_plain_text(self, session):
        text = to_text(session)
        lines = text.splitlines()
        assert lines[0] == "Chat: Trip to Paris"
        assert lines[3] == "=" * 50
        assert "[You]: Plan a trip to Paris" in text
        assert "[Assistant]: Day 1:" in text

    def test_clipboard_text(self, session):
        text = to_clipboard_text(session)
        assert text.startswith("Chat: Trip to Paris\nCreated: 2026-03-01 09:30:00\n\n")
        assert "Updated" not in text
        assert "You: Plan a trip to Paris\n\n" in text

    def test_renderers_do_not_mutate(self, session):
        before = session.model_dump()
        to_json(session)
        to_markdown(session)
        to_text(session)
        assert session.model_dump() == before


class TestFiles:
    def test_slugify(self):
        assert slugify("Trip  to\tParis") == "trip-to-paris"
        assert slugify("a/b") == "a-b"

    def test_filename(self, session):
        assert export_filename(session, "md", on=date(2026, 3, 2)) == "chat-trip-to-paris-2026-03-02.md"

    @pytest.mark.parametrize("fmt,ext", [("json", "json"), ("md", "md"), ("txt", "txt")])
    def test_export_session_writes_file(self, session, tmp_path, fmt, ext):
        path = export_session(session, fmt, tmp_path, on=date(2026, 3, 2))
        assert path == tmp_path / f"chat-trip-to-paris-2026-03-02.{ext}"
        assert "Plan a trip to Paris" in path.read_text()

    def test_unknown_format(self, session, tmp_path):
        with pytest.raises(ValueError):
            export_session(session, "pdf", tmp_path)

    def test_copy_to_clipboard(self, session):
        copied = []
        text = copy_to_clipboard(session, copy=copied.append)
        assert copied == [text]
        assert text == to_clipboard_text(session)
