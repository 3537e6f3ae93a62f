"""Pytest fixtures for extractflow tests."""

from typing import Any

import pytest

from extractflow.core.config import (
    ENV_ACCESS_TOKEN,
    ENV_ANON_KEY,
    ENV_BASE_URL,
    ApiConfig,
    Config,
)
from extractflow.core.models import ExtractionResult, TranslationResult, TranslationStatus
from extractflow.core.session import ReviewSession

BASE_URL = "https://project.example.test"


@pytest.fixture(autouse=True)
def clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep credentials from the developer's environment out of tests."""
    for name in (ENV_BASE_URL, ENV_ANON_KEY, ENV_ACCESS_TOKEN):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config() -> Config:
    """Config pointing at the mocked project, signed in."""
    return Config(
        api=ApiConfig(base_url=BASE_URL, anon_key="anon-key", access_token="token-123")
    )


@pytest.fixture
def signed_out_config() -> Config:
    return Config(api=ApiConfig(base_url=BASE_URL, anon_key="anon-key"))


@pytest.fixture
def extraction_payload() -> dict[str, Any]:
    """A successful extraction response body."""
    return {
        "success": True,
        "extraction_id": "ext-1",
        "extracted_fields": {
            "title": "Building Better Podcasts",
            "summary": "How to plan and record an episode.",
            "description": "A practical guide.",
            "content": "Full transcript text.",
            "key_topics": ["planning", "recording"],
        },
        "confidence_scores": {"title": 0.92, "summary": 0.81},
        "quality_score": 0.85,
        "processing_time": 1500,
        "cost_usd": 0.0123,
        "validation_errors": [],
        "source_language": "en",
    }


@pytest.fixture
def translation_payload() -> dict[str, Any]:
    """A successful batched translation response for fr and de."""
    return {
        "success": True,
        "translations": {
            "fr": {
                "language_code": "fr",
                "translated_fields": {"title": "Mieux podcaster", "summary": "Comment planifier."},
                "confidence_scores": {"title": 0.9},
                "translation_status": "completed",
                "quality_score": 0.88,
                "translation_cost_usd": 0.002,
            },
            "de": {
                "language_code": "de",
                "translated_fields": {"title": "Bessere Podcasts", "summary": "Wie man plant."},
                "confidence_scores": {"title": 0.87},
                "translation_status": "completed",
                "quality_score": 0.84,
                "translation_cost_usd": 0.002,
            },
        },
        "total_cost": 0.004,
    }


@pytest.fixture
def sample_extraction(extraction_payload: dict[str, Any]) -> ExtractionResult:
    return ExtractionResult.from_dict(extraction_payload)


@pytest.fixture
def extracted_session(sample_extraction: ExtractionResult) -> ReviewSession:
    """A session holding an extraction, targeting episode ep-42."""
    session = ReviewSession(selected_languages=["en", "fr", "de"], episode_id="ep-42")
    session.begin_extraction()
    session.complete_extraction(sample_extraction)
    return session


@pytest.fixture
def translated_session(extracted_session: ReviewSession) -> ReviewSession:
    """A session with completed fr and de translations."""
    extracted_session.begin_translation()
    extracted_session.complete_translation(
        {
            "fr": TranslationResult(
                language_code="fr",
                translated_fields={"title": "Mieux podcaster", "summary": "Comment planifier."},
                translation_status=TranslationStatus.COMPLETED,
                quality_score=0.88,
            ),
            "de": TranslationResult(
                language_code="de",
                translated_fields={"title": "Bessere Podcasts", "summary": "Wie man plant."},
                translation_status=TranslationStatus.COMPLETED,
                quality_score=0.84,
            ),
        }
    )
    return extracted_session
