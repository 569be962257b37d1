"""
Client error taxonomy.

Every failure surfaced by the synchronization layer is one of these.
"""


class GatherError(Exception):
    """Base class for client errors."""


class NetworkError(GatherError):
    """The request never completed (connection, timeout, protocol failure)."""


class ServerError(GatherError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, status_text: str) -> None:
        self.status_code = status_code
        self.status_text = status_text
        super().__init__(f"API error: {status_code} {status_text}".rstrip())

    @property
    def is_server_side(self) -> bool:
        return self.status_code >= 500


class ResponseError(GatherError):
    """The backend answered 2xx with a body that does not decode into the expected schema."""


class ValidationError(GatherError):
    """Malformed or empty client input, rejected before any request."""


class ResolutionError(GatherError):
    """A YouTube resolution or feed discovery round trip produced nothing usable."""
