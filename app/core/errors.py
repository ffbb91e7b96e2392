"""
Application errors for clean API error handling.

Only these errors cross the service boundary. Upstream generation problems are
absorbed by the generation client and turned into a fallback answer.
"""


class AppError(Exception):
    """Base class for errors that are surfaced to the API caller."""

    status_code: int = 500

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ClientInputError(AppError):
    """Raised when the request itself is unusable (e.g. empty query). Not retried."""

    status_code = 400


class CredentialMissingError(AppError):
    """Raised when no provider credential is configured. Needs an operator fix."""

    status_code = 500
