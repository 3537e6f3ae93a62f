"""Custom exceptions for extractflow."""


class ExtractflowError(Exception):
    """Base exception for all extractflow errors."""

    pass


class ConfigError(ExtractflowError):
    """Configuration-related errors."""

    pass


class NoContentProvided(ExtractflowError):
    """Raised when the source content is empty, before any network call."""

    def __init__(self, message: str = "No content provided") -> None:
        super().__init__(message)


class UnsupportedSourceError(ExtractflowError):
    """Source input that cannot be read (unknown type, rejected file suffix)."""

    pass


class AuthenticationRequired(ExtractflowError):
    """Raised when no access token is available for an authenticated call."""

    def __init__(self, message: str = "Authentication required") -> None:
        super().__init__(message)


class ApiError(ExtractflowError):
    """A serverless function answered with an error.

    Attributes:
        status_code: HTTP status of the response, if one was received.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ExtractionApiError(ApiError):
    """Extraction endpoint returned non-2xx or ``success: false``."""

    pass


class TranslationApiError(ApiError):
    """Translation endpoint returned non-2xx or ``success: false``."""

    pass


class ServiceUnavailableError(ExtractflowError):
    """Network failure or an unreadable response body."""

    pass


class StoreError(ExtractflowError):
    """Persistent store request failed."""

    pass


class SessionError(ExtractflowError):
    """Illegal review session transition or edit."""

    pass
