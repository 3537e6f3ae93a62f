"""extractflow - AI content extraction and translation review workflow."""

__version__ = "0.1.0"
