"""Import pipeline exceptions for error handling."""


def truncate(text: str, limit: int = 200) -> str:
    """Shorten an upstream error message before logging or surfacing it."""
    text = " ".join(str(text or "").split())
    if len(text) <= limit:
        return text
    return text[: limit - 3].rstrip() + "..."


class SonicStreamError(Exception):
    """Base exception for import and playback operations."""

    pass


class InvalidReferenceError(SonicStreamError):
    """Raised when a URL or id cannot be recognized. The user must fix the input."""

    pass


class ConfigurationError(SonicStreamError):
    """Raised when required configuration (e.g. API credentials) is missing."""

    pass


class SourceUnavailableError(SonicStreamError):
    """Raised when a single upstream source fails or returns nothing.

    Recorded by the resolver and used to trigger the next fallback.
    """

    def __init__(self, source: str, reason: str):
        self.source = source
        self.reason = truncate(reason, 120)
        super().__init__(f"{source}: {self.reason}")


class ItemSkippedError(SonicStreamError):
    """Raised when a single track cannot be imported. The session continues."""

    def __init__(self, reason: str):
        self.reason = truncate(reason)
        super().__init__(self.reason)


class SessionFatalError(SonicStreamError):
    """Raised when an import session cannot continue (all sources exhausted)."""

    pass


class ExtractionError(SonicStreamError):
    """Raised when the audio extraction process produced no output."""

    pass


class RangeNotSatisfiableError(SonicStreamError):
    """Raised when a requested byte range lies outside the audio buffer."""

    def __init__(self, total: int):
        self.total = total
        super().__init__(f"Requested range not satisfiable (size {total})")


class ProgressProtocolError(SonicStreamError):
    """Raised when an event would break the progress stream ordering rules."""

    pass


class ClientDisconnectedError(SonicStreamError):
    """Raised when the HTTP client went away before the work finished."""

    pass
