"""agentchat - terminal chat client with durable local session history."""

from loguru import logger

__version__ = "0.1.0"

logger.disable("agentchat")
