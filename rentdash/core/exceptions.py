"""Errors raised by the notification dispatch path. HTTP mapping lives in rentdash.main."""


class AuthError(Exception):
    """Bearer token missing or not matching CRON_SECRET. Surfaced as 401; dispatch never starts."""


class UpstreamQueryError(Exception):
    """A database read used to resolve recipients failed. The run is aborted and nothing is logged."""

    def __init__(self, message: str, *, query: str | None = None):
        super().__init__(message)
        self.message = message
        self.query = query


class InsufficientRecipientData(Exception):
    """A due item lacks the phone or name needed to message its tenant. Skipped, never logged."""


class TransportError(Exception):
    """SMS send failed (after any sender fallback). Carries the provider's numeric error code."""

    def __init__(self, message: str, code: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code


class LogWriteError(Exception):
    """Writing a notification record failed. Idempotency for that attempt is lost."""
