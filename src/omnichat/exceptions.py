"""Exception hierarchy for omnichat.

Every failure the core can report derives from OmnichatError so the
presentation layer can catch one type. Individual malformed stream frames
are not represented here: they are skipped, never raised.
"""


class OmnichatError(Exception):
    """Base class for all omnichat errors."""


class ConfigurationError(OmnichatError):
    """Settings are incomplete (missing URL, or missing key for a remote host).

    Raised before any network activity. The caller should send the user to
    the settings surface.
    """


class ProviderError(OmnichatError):
    """The provider answered with a non-success HTTP status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class ProtocolError(OmnichatError):
    """The provider answered successfully but the body was unusable."""


class NetworkError(OmnichatError):
    """The HTTP transport failed before or during streaming."""


class AttachmentTooLargeError(OmnichatError, ValueError):
    """A file exceeds the attachment size limit."""


class SessionNotFoundError(OmnichatError, KeyError):
    """No session with the requested id exists."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else "Session not found"
