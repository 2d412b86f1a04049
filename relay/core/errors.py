"""
Error types raised inside the relay.
Every failure a handler can hit maps to one of these; the router turns them
into a failed HandlerResult instead of letting them reach the webhook caller.
"""


class RelayError(Exception):
    """Base class for all relay failures."""


class ConfigurationError(RelayError):
    """A required setting (credentials, backend URL) is missing or invalid."""


class ContentFetchError(RelayError):
    """A single file could not be resolved to text at a given ref."""

    def __init__(self, message: str, path: str = "", ref: str = ""):
        super().__init__(message)
        self.path = path
        self.ref = ref


class FileListingError(RelayError):
    """Listing the changed files of a pull request failed."""


class BackendError(RelayError):
    """The analysis backend could not be reached or answered with an error."""


class CommentPostError(RelayError):
    """Writing the comment or reply back to GitHub failed."""
