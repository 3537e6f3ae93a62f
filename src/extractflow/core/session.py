"""In-memory review session state.

The session owns the single extraction under review and the per-language
translation results derived from it. Nothing here talks to the network;
services mutate the session only through these methods.

Lifecycle::

    none -> extracting -> extracted -> (translating -> translated)* -> applied | discarded
"""

from __future__ import annotations

import logging
from enum import Enum

from extractflow.core.errors import SessionError
from extractflow.core.models import (
    NEW_EPISODE,
    ExtractionResult,
    FieldValue,
    TranslationResult,
    TranslationStatus,
)

logger = logging.getLogger(__name__)


class SessionState(str, Enum):
    NONE = "none"
    EXTRACTING = "extracting"
    EXTRACTED = "extracted"
    TRANSLATING = "translating"
    TRANSLATED = "translated"
    APPLIED = "applied"
    DISCARDED = "discarded"


# States holding a usable extraction result
_REVIEWABLE = {SessionState.EXTRACTED, SessionState.TRANSLATED}


class ReviewSession:
    """Single-user state for one extraction under review."""

    def __init__(
        self,
        selected_languages: list[str] | None = None,
        source_language: str = "en",
        episode_id: str | None = None,
    ) -> None:
        self.selected_languages: list[str] = list(selected_languages or [])
        self.source_language = source_language
        self.episode_id = episode_id
        self.state = SessionState.NONE
        self.extraction: ExtractionResult | None = None
        self.translation_results: dict[str, TranslationResult] = {}
        self._resume_state = SessionState.NONE

    # -- derived views -------------------------------------------------

    def effective_source_language(self) -> str:
        """Detected source language when known, otherwise the declared one."""
        if self.extraction is not None and self.extraction.source_language:
            return self.extraction.source_language
        return self.source_language

    def target_languages(self) -> list[str]:
        """Selected languages minus the source language, order preserved."""
        source = self.effective_source_language()
        return [code for code in self.selected_languages if code != source]

    @property
    def has_target_episode(self) -> bool:
        return bool(self.episode_id) and self.episode_id != NEW_EPISODE

    @property
    def can_apply(self) -> bool:
        return (
            self.state in _REVIEWABLE
            and self.extraction is not None
            and self.has_target_episode
            and not self.extraction.validation_errors
        )

    @property
    def is_busy(self) -> bool:
        return self.state in (SessionState.EXTRACTING, SessionState.TRANSLATING)

    def completed_translations(self) -> dict[str, TranslationResult]:
        return {
            code: result
            for code, result in self.translation_results.items()
            if result.translation_status == TranslationStatus.COMPLETED
        }

    # -- extraction ----------------------------------------------------

    def begin_extraction(self) -> None:
        """Enter ``extracting``. Allowed from any state; starts a new lifecycle."""
        self._resume_state = self.state
        self.state = SessionState.EXTRACTING

    def complete_extraction(self, result: ExtractionResult) -> None:
        self._require(SessionState.EXTRACTING)
        self.extraction = result
        self.translation_results = {}
        self.state = SessionState.EXTRACTED

    def fail_extraction(self) -> None:
        """Leave ``extracting`` without a new result; prior state is restored."""
        self._require(SessionState.EXTRACTING)
        self.state = self._resume_state

    # -- translation ---------------------------------------------------

    def begin_translation(self) -> None:
        if self.state not in _REVIEWABLE:
            raise SessionError(f"Cannot translate from state '{self.state.value}'")
        self._resume_state = self.state
        self.state = SessionState.TRANSLATING

    def complete_translation(self, results: dict[str, TranslationResult]) -> None:
        """Replace the whole translation mapping with ``results``."""
        self._require(SessionState.TRANSLATING)
        assert self.extraction is not None
        allowed = set(self.extraction.extracted_fields)
        replaced: dict[str, TranslationResult] = {}
        for code, result in results.items():
            extra = set(result.translated_fields) - allowed
            if extra:
                logger.debug("Dropping fields %s from %s translation", sorted(extra), code)
                for name in extra:
                    result.translated_fields.pop(name, None)
                    result.confidence_scores.pop(name, None)
            replaced[code] = result
        self.translation_results = replaced
        self.state = SessionState.TRANSLATED

    def fail_translation(self) -> None:
        self._require(SessionState.TRANSLATING)
        self.state = self._resume_state

    def on_field_edit(self, language_code: str, field: str, value: FieldValue) -> None:
        """Merge one edited field into one language's in-memory translation.

        Nothing is persisted; see ReviewService.save_translation.

        Raises:
            SessionError: If there is no extraction, no translation for the
                language, or the field is not one the extraction produced.
        """
        if self.extraction is None:
            raise SessionError("No extraction to edit")
        if field not in self.extraction.extracted_fields:
            raise SessionError(f"Field '{field}' is not part of the extraction")
        current = self.translation_results.get(language_code)
        if current is None:
            raise SessionError(f"No translation for language '{language_code}'")
        current.translated_fields = {**current.translated_fields, field: value}

    def mark_translation_saved(self, language_code: str) -> None:
        result = self.translation_results.get(language_code)
        if result is None:
            raise SessionError(f"No translation for language '{language_code}'")
        result.translation_status = TranslationStatus.REVIEW_NEEDED

    # -- terminal ------------------------------------------------------

    def mark_applied(self) -> None:
        if self.state not in _REVIEWABLE:
            raise SessionError(f"Cannot apply from state '{self.state.value}'")
        self.state = SessionState.APPLIED

    def clear(self) -> None:
        """Discard the extraction and every translation."""
        self.extraction = None
        self.translation_results = {}
        self.state = SessionState.DISCARDED

    def _require(self, expected: SessionState) -> None:
        if self.state != expected:
            raise SessionError(
                f"Expected state '{expected.value}', session is '{self.state.value}'"
            )
