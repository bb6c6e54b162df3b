"""Configuration and directory management for agentchat."""

import os
from pathlib import Path

AGENTCHAT_DIR = Path.home() / ".agentchat"
STORE_PATH = AGENTCHAT_DIR / "storage.json"
EXPORT_DIR = Path(".")

# Remote agent service
BACKEND_URL = os.environ.get("ADK_SERVER_ENDPOINT", "http://127.0.0.1:8000")
APP_NAME = os.environ.get("ADK_APP_NAME", "ce_agent")
AGENT_AUTHOR = os.environ.get("ADK_AGENT_AUTHOR", APP_NAME)
REQUEST_TIMEOUT = float(os.environ.get("AGENTCHAT_REQUEST_TIMEOUT", "60"))

# Seconds between checks for session writes made by other processes
POLL_INTERVAL = float(os.environ.get("AGENTCHAT_POLL_INTERVAL", "5"))

STORAGE_KEY = "chat_sessions"
DEFAULT_TITLE = "New Chat"
TITLE_MAX_LENGTH = 50

ERROR_REPLY = "Sorry, I encountered an error. Please try again."
EMPTY_REPLY = "..."


def ensure_dirs() -> None:
    """Ensure the agentchat data directory exists."""
    AGENTCHAT_DIR.mkdir(parents=True, exist_ok=True)
