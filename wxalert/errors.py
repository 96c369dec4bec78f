"""Typed failures surfaced by the alert derivation engine."""


class AlertEngineError(Exception):
    """Base class for every failure the engine reports to its caller."""


class MissingCredentialError(AlertEngineError):
    """Raised when no provider API key is configured."""


class OperationCancelled(AlertEngineError):
    """Raised when the caller cancels an in-flight derivation."""


class ProviderError(AlertEngineError):
    """A fetch against the weather provider failed.

    `fetch` names which request failed ("current" or "forecast") so the
    caller can decide on retry/backoff.
    """

    def __init__(self, message: str, fetch: str | None = None):
        super().__init__(message)
        self.fetch = fetch


class ProviderUnavailable(ProviderError):
    """Provider responded with a non-success status or could not be reached."""

    def __init__(
        self, message: str, fetch: str | None = None, status_code: int | None = None
    ):
        super().__init__(message, fetch)
        self.status_code = status_code


class MalformedProviderResponse(ProviderUnavailable):
    """Provider payload is not JSON or lacks the fields we read."""


class ProviderTimeout(ProviderError):
    """No response arrived within the allotted time."""
