"""agentchat CLI - chat with a remote agent and manage local session history."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from loguru import logger
from pyperclip import PyperclipException
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from agentchat import __version__, config
from agentchat.sessions.models import Session

app = typer.Typer(
    name="agentchat",
    help="Chat with a remote agent service and keep your conversations locally.",
    no_args_is_help=True,
)
sessions_app = typer.Typer(help="Browse, export and delete saved sessions.")
mcp_app = typer.Typer(help="MCP server management.")

app.add_typer(sessions_app, name="sessions")
app.add_typer(mcp_app, name="mcp")

console = Console()


def version_callback(value: bool) -> None:
    if value:
        console.print(f"agentchat {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option("--version", "-v", callback=version_callback, is_eager=True),
    ] = None,
    logs: Annotated[bool, typer.Option("--logs", help="Show diagnostic logs")] = False,
) -> None:
    """agentchat - chat with a remote agent, keep history locally."""
    if logs:
        logger.enable("agentchat")
    config.ensure_dirs()


def _get_store():
    from agentchat.sessions.store import SessionStore

    return SessionStore()


def _require_session(session_id: str) -> Session:
    session = _get_store().get_session(session_id)
    if session is None:
        console.print(f"[red]Session not found:[/red] {escape(session_id)}")
        raise typer.Exit(1)
    return session


def _copy(session: Session) -> bool:
    from agentchat.export import copy_to_clipboard

    try:
        copy_to_clipboard(session)
    except PyperclipException as e:
        console.print(f"[red]Clipboard unavailable:[/red] {escape(str(e))}")
        return False
    console.print("[green]Copied to clipboard.[/green]")
    return True


def _sessions_table(title: str, sessions: list[Session]) -> Table:
    table = Table(title=escape(title))
    table.add_column("ID", style="cyan")
    table.add_column("Title", style="green")
    table.add_column("Messages", justify="right")
    table.add_column("Updated")
    for session in sessions:
        table.add_row(
            escape(session.id),
            escape(session.title),
            str(len(session.messages)),
            session.updated_at.astimezone().strftime("%H:%M"),
        )
    return table


def _print_sessions(sessions: list[Session]) -> None:
    from agentchat.sessions.store import group_by_day

    for label, group in group_by_day(sessions).items():
        console.print(_sessions_table(label, group))


# ── Chat command ─────────────────────────────────────────────────


HELP_TEXT = "[dim]/new  /export json|md|txt  /copy  /quit[/dim]"


async def _chat_loop(session_id: str | None) -> None:
    from agentchat.client import AgentClient
    from agentchat.export import export_session
    from agentchat.sessions.lifecycle import SessionManager
    from agentchat.sessions.turns import TurnOrchestrator

    store = _get_store()
    async with AgentClient() as client:
        manager = SessionManager(store, client)
        turns = TurnOrchestrator(store, client)

        if session_id:
            if await manager.load_session(session_id) is None:
                console.print(f"[red]Session not found:[/red] {escape(session_id)}")
                return
            for message in manager.current.messages:
                speaker = "You" if message.role == "user" else "Assistant"
                console.print(f"[bold]{speaker}:[/bold] {escape(message.content)}")
        else:
            await manager.create_session()

        current = manager.current
        console.print(f"[bold]{escape(current.title)}[/bold] [dim]({escape(current.record_id)})[/dim]")
        if not current.identity.is_bound:
            console.print("[yellow]Agent service unavailable; chatting in offline mode.[/yellow]")
        console.print(HELP_TEXT)

        while True:
            try:
                text = await asyncio.to_thread(console.input, "[bold cyan]You:[/bold cyan] ")
            except EOFError:
                break
            command = text.strip()

            if command in ("/quit", "/exit"):
                break
            if command == "/new":
                await manager.new_chat()
                console.print(f"[green]New chat[/green] [dim]({escape(manager.current.record_id)})[/dim]")
                continue
            if command.startswith("/export") or command == "/copy":
                session = store.get_session(manager.current.record_id)
                if session is None:
                    console.print("[yellow]Nothing to export yet.[/yellow]")
                elif command == "/copy":
                    _copy(session)
                else:
                    fmt = command.partition(" ")[2].strip() or "json"
                    try:
                        path = export_session(session, fmt, config.EXPORT_DIR)
                    except ValueError as e:
                        console.print(f"[red]Error:[/red] {escape(str(e))}")
                    else:
                        console.print(f"[green]Exported:[/green] {escape(str(path))}")
                continue

            reply = await turns.send_turn(manager.current, text)
            if reply is not None:
                console.print(f"[bold green]Assistant:[/bold green] {escape(reply.content)}")

        manager.close()


@app.command("chat")
def chat(
    session_id: Annotated[
        Optional[str], typer.Option("--session", "-s", help="Resume a saved session")
    ] = None,
) -> None:
    """Start an interactive chat (new session unless --session is given)."""
    try:
        asyncio.run(_chat_loop(session_id))
    except KeyboardInterrupt:
        console.print()


# ── Sessions commands ────────────────────────────────────────────


@sessions_app.command("list")
def sessions_list(
    search: Annotated[
        Optional[str], typer.Option("--search", "-q", help="Only titles containing this text")
    ] = None,
    watch: Annotated[
        bool, typer.Option("--watch", "-w", help="Keep refreshing as sessions change")
    ] = False,
) -> None:
    """List saved sessions grouped by day, newest first."""
    store = _get_store()
    sessions = store.search_sessions(search) if search else store.list_sessions()
    if not sessions and not watch:
        if search:
            console.print(f"[dim]No sessions match[/dim] {escape(search)}")
            return
        console.print("[dim]No saved sessions yet. Start one with:[/dim]")
        console.print("  agentchat chat")
        return

    _print_sessions(sessions)
    if not watch:
        return

    def refresh(fresh: list[Session]) -> None:
        _print_sessions(store.search_sessions(search) if search else fresh)

    store.subscribe(refresh)
    try:
        asyncio.run(store.watch())
    except KeyboardInterrupt:
        pass


@sessions_app.command("show")
def sessions_show(
    session_id: Annotated[str, typer.Argument(help="Session ID")],
) -> None:
    """Print a session transcript."""
    from agentchat.export import to_text

    console.print(to_text(_require_session(session_id)), markup=False)


@sessions_app.command("delete")
def sessions_delete(
    session_id: Annotated[str, typer.Argument(help="Session ID to delete")],
) -> None:
    """Delete a saved session."""
    _require_session(session_id)
    _get_store().delete_session(session_id)
    console.print(f"[green]Deleted session:[/green] {escape(session_id)}")


@sessions_app.command("export")
def sessions_export(
    session_id: Annotated[str, typer.Argument(help="Session ID to export")],
    fmt: Annotated[
        str, typer.Option("--format", "-f", help="Export format (json, md, txt)")
    ] = "json",
    out: Annotated[Optional[Path], typer.Option("--out", "-o", help="Output directory")] = None,
) -> None:
    """Export a session to a file."""
    from agentchat.export import export_session

    session = _require_session(session_id)
    try:
        path = export_session(session, fmt, out or config.EXPORT_DIR)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1)
    console.print(f"[green]Exported:[/green] {escape(str(path))}")


@sessions_app.command("copy")
def sessions_copy(
    session_id: Annotated[str, typer.Argument(help="Session ID to copy")],
) -> None:
    """Copy a session transcript to the clipboard."""
    if not _copy(_require_session(session_id)):
        raise typer.Exit(1)


# ── MCP commands ─────────────────────────────────────────────────


@mcp_app.command("serve")
def mcp_serve() -> None:
    """Start the MCP server (stdio transport)."""
    from agentchat.mcp.server import mcp

    mcp.run()
