"""Error types raised by the agent client and the local storage area."""


class AgentServiceError(Exception):
    """Base class for failures talking to the remote agent service."""


class TransportError(AgentServiceError):
    """The service could not be reached (connection refused, timeout, ...)."""


class BackendError(AgentServiceError):
    """The service answered with a non-success status."""

    def __init__(self, status: int, body: str = ""):
        self.status = status
        self.body = body
        super().__init__(f"Error from backend ({status}): {body}")


class MalformedResponseError(AgentServiceError):
    """The service answered, but not with a list of events."""


class StorageError(Exception):
    """The local key-value area is unavailable, full or corrupt."""
