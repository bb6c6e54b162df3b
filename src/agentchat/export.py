"""Render chat sessions as JSON, Markdown or plain text transcripts."""

import json
import re
from datetime import date, datetime
from pathlib import Path
from typing import Callable

import pyperclip

from agentchat.sessions.models import Message, Role, Session

FORMATS = {"json": "json", "md": "md", "markdown": "md", "txt": "txt", "text": "txt"}

TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def _stamp(value: datetime) -> str:
    return value.strftime(TIME_FORMAT)


def _speaker(message: Message) -> str:
    return "You" if message.role == Role.USER else "Assistant"


def to_json(session: Session) -> str:
    data = {
        "session": {
            "id": session.id,
            "title": session.title,
            "createdAt": session.created_at.isoformat(),
            "updatedAt": session.updated_at.isoformat(),
        },
        "messages": [m.model_dump(mode="json") for m in session.messages],
    }
    return json.dumps(data, indent=2)


def from_json(text: str) -> Session:
    """Parse a JSON export back into a session."""
    data = json.loads(text)
    return Session.model_validate({**data["session"], "messages": data["messages"]})


def to_markdown(session: Session) -> str:
    lines = [
        f"# {session.title}",
        "",
        f"**Created:** {_stamp(session.created_at)}",
        f"**Updated:** {_stamp(session.updated_at)}",
        "",
        "---",
        "",
    ]
    for message in session.messages:
        lines += [f"### **{_speaker(message)}**", "", message.content, "", "---", ""]
    return "\n".join(lines)


def to_text(session: Session) -> str:
    text = f"Chat: {session.title}\n"
    text += f"Created: {_stamp(session.created_at)}\n"
    text += f"Updated: {_stamp(session.updated_at)}\n"
    text += "=" * 50 + "\n\n"
    for message in session.messages:
        text += f"[{_speaker(message)}]: {message.content}\n\n"
    return text


def to_clipboard_text(session: Session) -> str:
    text = f"Chat: {session.title}\nCreated: {_stamp(session.created_at)}\n\n"
    for message in session.messages:
        text += f"{_speaker(message)}: {message.content}\n\n"
    return text


RENDERERS: dict[str, Callable[[Session], str]] = {
    "json": to_json,
    "md": to_markdown,
    "txt": to_text,
}


def slugify(title: str) -> str:
    slug = re.sub(r"\s+", "-", title.lower())
    return slug.replace("/", "-").replace("\\", "-")


def export_filename(session: Session, ext: str, on: date | None = None) -> str:
    """``chat-<slug>-<YYYY-MM-DD>.<ext>``, dated by the day of export."""
    day = (on or date.today()).isoformat()
    return f"chat-{slugify(session.title)}-{day}.{ext}"


def export_session(session: Session, fmt: str, directory: Path, on: date | None = None) -> Path:
    """Write ``session`` to ``directory`` in the given format and return the file path."""
    ext = FORMATS.get(fmt.lower())
    if ext is None:
        raise ValueError(f"Unknown export format: {fmt} (choose from json, md, txt)")

    directory.mkdir(parents=True, exist_ok=True)
    path = directory / export_filename(session, ext, on)
    path.write_text(RENDERERS[ext](session))
    return path


def copy_to_clipboard(session: Session, copy: Callable[[str], None] | None = None) -> str:
    """Put a compact transcript on the system clipboard and return it."""
    text = to_clipboard_text(session)
    (copy or pyperclip.copy)(text)
    return text
