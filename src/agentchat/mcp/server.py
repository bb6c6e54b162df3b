"""MCP server exposing saved chat sessions as tools."""

from mcp.server.fastmcp import FastMCP

from agentchat.export import FORMATS, RENDERERS
from agentchat.sessions.store import SessionStore

mcp = FastMCP("agentchat")
store = SessionStore()


@mcp.tool()
def list_sessions(query: str | None = None, limit: int = 20) -> list[dict]:
    """Browse saved chat sessions, most recent first.

    Args:
        query: Optional - only sessions whose title contains this text (case-insensitive)
        limit: Maximum results to return (default 20)
    """
    sessions = store.search_sessions(query) if query else store.list_sessions()
    return [
        {
            "id": s.id,
            "title": s.title,
            "messages": len(s.messages),
            "created_at": s.created_at.isoformat(),
            "updated_at": s.updated_at.isoformat(),
        }
        for s in sessions[:limit]
    ]


@mcp.tool()
def get_session(session_id: str) -> dict | str:
    """Get the full message history of a saved session.

    Args:
        session_id: The session ID to retrieve
    """
    session = store.get_session(session_id)
    if not session:
        return f"Session {session_id} not found"
    return {
        "id": session.id,
        "title": session.title,
        "messages": [m.model_dump(mode="json") for m in session.messages],
        "created_at": session.created_at.isoformat(),
        "updated_at": session.updated_at.isoformat(),
    }


@mcp.tool()
def export_session(session_id: str, fmt: str = "md") -> str:
    """Render a saved session as a transcript.

    Args:
        session_id: The session ID to export
        fmt: One of "json", "md" or "txt" (default "md")
    """
    session = store.get_session(session_id)
    if not session:
        return f"Session {session_id} not found"
    ext = FORMATS.get(fmt.lower())
    if ext is None:
        return f"Unknown export format: {fmt}"
    return RENDERERS[ext](session)


@mcp.tool()
def delete_session(session_id: str) -> dict:
    """Delete a saved session. Deleting an unknown ID does nothing.

    Args:
        session_id: The session ID to delete
    """
    existed = store.get_session(session_id) is not None
    store.delete_session(session_id)
    return {"id": session_id, "status": "deleted" if existed else "not_found"}
