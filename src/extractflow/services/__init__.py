"""Services for extractflow."""

from extractflow.services.extraction import ExtractionOrchestrator
from extractflow.services.functions import FunctionsClient
from extractflow.services.review import ReviewService
from extractflow.services.sources import read_source, suggest_template
from extractflow.services.store import ContentStore
from extractflow.services.translation import TranslationOrchestrator

__all__ = [
    "ContentStore",
    "ExtractionOrchestrator",
    "FunctionsClient",
    "ReviewService",
    "TranslationOrchestrator",
    "read_source",
    "suggest_template",
]
