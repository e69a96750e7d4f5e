"""Error types raised by the acquisition pipeline and its collaborators."""


class WebRagError(Exception):
    """Base exception for webrag errors."""

    pass


class ValidationError(WebRagError):
    """Raised when caller input is rejected before any work starts."""

    pass


class FetchError(WebRagError):
    """Raised when a URL cannot be fetched after all retry attempts."""

    def __init__(self, message: str, *, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class ParseError(WebRagError):
    """Malformed page content. Extraction degrades to body text instead of raising it."""

    pass


class NoResultsError(WebRagError):
    """Raised when a whole acquisition run accepted zero results."""

    pass


class ModelError(WebRagError):
    """Raised when the embedding/generation backend fails."""

    pass
