"""
Domain errors raised by the memo registry services.

Endpoints never translate these by hand; ``app.main`` registers one
handler per class and turns them into JSON error responses.
"""


class MemoRegistryError(Exception):
    """Base class for every error the registry reports to a caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidInput(MemoRegistryError):
    """Malformed or missing request data (empty approver list, unknown status...)."""

    status_code = 400


class NotFound(MemoRegistryError):
    """A referenced memo, approval step or user does not exist."""

    status_code = 404


class UpstreamFailure(MemoRegistryError):
    """Datastore or blob fetch failed."""

    status_code = 502
