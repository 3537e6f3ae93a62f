"""Core modules for extractflow."""

from extractflow.core.config import (
    ApiConfig,
    Config,
    ExtractionConfig,
    FeatureFlags,
    TranslationConfig,
    load_config,
)
from extractflow.core.errors import (
    ApiError,
    AuthenticationRequired,
    ConfigError,
    ExtractflowError,
    ExtractionApiError,
    NoContentProvided,
    ServiceUnavailableError,
    SessionError,
    StoreError,
    TranslationApiError,
    UnsupportedSourceError,
)
from extractflow.core.notify import Notification, Notifier
from extractflow.core.progress import ProgressReporter, ProgressUpdate
from extractflow.core.session import ReviewSession, SessionState

__all__ = [
    "ApiConfig",
    "ApiError",
    "AuthenticationRequired",
    "Config",
    "ConfigError",
    "ExtractflowError",
    "ExtractionApiError",
    "ExtractionConfig",
    "FeatureFlags",
    "NoContentProvided",
    "Notification",
    "Notifier",
    "ProgressReporter",
    "ProgressUpdate",
    "ReviewSession",
    "ServiceUnavailableError",
    "SessionError",
    "SessionState",
    "StoreError",
    "TranslationApiError",
    "TranslationConfig",
    "UnsupportedSourceError",
    "load_config",
]
