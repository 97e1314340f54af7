"""Error taxonomy shared by the collaborator client and the navigation core.

// [LAW:one-source-of-truth] Every failure the console reports is one of these types.
"""


class StreamViewerError(Exception):
    """Base class for all reportable stream-viewer failures."""

    retryable = True

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class NetworkError(StreamViewerError):
    """Transport failure, non-2xx response, or malformed response body."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class NotFound(StreamViewerError):
    """The stream (or its connection) no longer exists."""


class InvalidInput(StreamViewerError):
    """Offset, page size or stream reference outside the allowed domain.

    Raised before any request is sent.
    """

    retryable = False
