"""Exception taxonomy shared by the stores, the sync engine and the Notion client."""
from typing import Optional


class PersistenceError(RuntimeError):
    """Raised when the local durable store cannot complete an operation."""


class RemoteError(RuntimeError):
    """Raised when the remote record store rejects or cannot be reached for a call.

    ``status_code`` is the HTTP status returned by the remote, or None when the
    request never produced a response (DNS failure, timeout, reset connection).
    """

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"HTTP {self.status_code}: {self.message}"


class NotAuthenticated(RuntimeError):
    """Raised when no valid credential is available for the remote store."""


class InvalidPropertyData(ValueError):
    """Raised when stored entry properties cannot be decoded."""


class CaptureError(ValueError):
    """Raised when a capture request cannot be turned into an entry."""
