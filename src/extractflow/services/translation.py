"""Translation fan-out orchestrator.

Translates an extraction's fields into several target languages. By default
one batched request carries every target language and the server fans out.
With the ``per_language_fanout`` feature flag each language is requested
concurrently and retried on its own, so one failing language does not
discard the others.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from typing import Any

from extractflow.core.config import Config
from extractflow.core.errors import (
    ServiceUnavailableError,
    SessionError,
    TranslationApiError,
)
from extractflow.core.formatting import format_cost
from extractflow.core.models import (
    AIProvider,
    ProcessingOptions,
    TranslationBatch,
    TranslationRequest,
    TranslationResult,
)
from extractflow.core.notify import Notifier
from extractflow.core.session import ReviewSession
from extractflow.services.functions import FunctionsClient

logger = logging.getLogger(__name__)


def _parse_translations(data: dict[str, Any]) -> TranslationBatch:
    translations = {
        code: TranslationResult.from_dict(row or {}, language_code=code)
        for code, row in (data.get("translations") or {}).items()
    }
    return TranslationBatch(
        translations=translations,
        total_cost=float(data.get("total_cost") or 0.0),
    )


class TranslationOrchestrator:
    """Runs translation for the extraction held by a review session."""

    def __init__(
        self,
        config: Config,
        functions: FunctionsClient | None = None,
        notifier: Notifier | None = None,
        session: ReviewSession | None = None,
    ) -> None:
        self.config = config
        self.functions = functions or FunctionsClient(config)
        self.notifier = notifier or Notifier()
        self.session = session or ReviewSession(
            selected_languages=config.translation.target_languages,
            source_language=config.translation.source_language,
        )
        self.last_batch: TranslationBatch | None = None

    async def translate(
        self,
        extraction_id: str | None,
        target_languages: list[str],
        source_language: str,
        ai_provider: AIProvider | None = None,
        processing_options: ProcessingOptions | None = None,
    ) -> dict[str, TranslationResult]:
        """
        Translate an extraction into ``target_languages``.

        Returns immediately, without a request and without touching the
        session, when there is nothing to translate. On success the session's
        translation mapping is replaced wholesale.

        Returns:
            The session's translation mapping after the call.

        Raises:
            AuthenticationRequired: If no access token is available
            SessionError: If the session holds a different extraction
            TranslationApiError: If the endpoint reports failure
            ServiceUnavailableError: On network failure or invalid JSON
        """
        if not target_languages or not extraction_id:
            logger.debug(
                "Nothing to translate (extraction=%r, targets=%r)", extraction_id, target_languages
            )
            return self.session.translation_results

        current = self.session.extraction
        if current is not None and current.extraction_id != extraction_id:
            raise SessionError(
                f"Extraction {extraction_id} is not the one under review ({current.extraction_id})"
            )

        request = TranslationRequest(
            extraction_id=extraction_id,
            target_languages=list(target_languages),
            source_language=source_language,
            ai_provider=ai_provider or self.config.get_ai_provider(),
            processing_options=processing_options or self.config.processing_options(),
        )

        self.session.begin_translation()
        try:
            if self.config.features.per_language_fanout:
                batch = await self._translate_each(request)
            else:
                batch = _parse_translations(await self.functions.translate(request))
        except Exception:
            self.session.fail_translation()
            raise

        self.session.complete_translation(batch.translations)
        self.last_batch = batch
        logger.info(
            "Translated extraction %s into %d languages, total cost %s",
            extraction_id,
            len(batch.translations),
            format_cost(batch.total_cost),
        )
        return self.session.translation_results

    async def run(
        self,
        extraction_id: str | None,
        target_languages: list[str],
        source_language: str,
        ai_provider: AIProvider | None = None,
        processing_options: ProcessingOptions | None = None,
    ) -> dict[str, TranslationResult] | None:
        """Translate and surface the outcome as one notification.

        Same as translate() but errors are reported to the notifier
        instead of raised.

        Returns:
            The translation mapping on success (or no-op), None on failure.
        """
        if not target_languages or not extraction_id:
            return await self.translate(extraction_id, target_languages, source_language)
        try:
            results = await self.translate(
                extraction_id,
                target_languages,
                source_language,
                ai_provider=ai_provider,
                processing_options=processing_options,
            )
        except Exception as e:
            logger.error("Translation failed: %s", e)
            self.notifier.error("Translation Failed", str(e) or "Unknown error occurred")
            return None

        batch = self.last_batch or TranslationBatch()
        self.notifier.success(
            "Translation Complete",
            f"Translated to {len(batch.translations)} languages | "
            f"Total Cost: {format_cost(batch.total_cost)}",
        )
        return results

    async def _translate_each(self, request: TranslationRequest) -> TranslationBatch:
        """One concurrent request per language, joined into one batch."""
        outcomes = await asyncio.gather(
            *(self._translate_one(request, code) for code in request.target_languages)
        )
        batch = TranslationBatch()
        for code, result, cost in outcomes:
            batch.translations[code] = result
            batch.total_cost += cost
        return batch

    async def _translate_one(
        self, request: TranslationRequest, code: str
    ) -> tuple[str, TranslationResult, float]:
        """Translate a single language, retrying on API and network errors.

        Retries wait ``translation.retry_delay_s`` and double the wait each
        time. A language that still fails after its retries is returned as a
        ``failed`` result rather than raised.
        """
        single = replace(request, target_languages=[code])
        attempts = self.config.translation.max_retries + 1
        delay = self.config.translation.retry_delay_s
        last_error: Exception | None = None

        for attempt in range(attempts):
            if last_error is not None:
                logger.warning(
                    "Translation to %s failed (attempt %d/%d): %s. Retrying in %.1fs...",
                    code,
                    attempt,
                    attempts,
                    last_error,
                    delay,
                )
                await asyncio.sleep(delay)
                delay *= 2
            try:
                data = await self.functions.translate(single)
            except (TranslationApiError, ServiceUnavailableError) as e:
                last_error = e
                continue

            batch = _parse_translations(data)
            result = batch.translations.get(code)
            if result is None:
                # Server skips the source language
                result = TranslationResult.failed(code, "No translation returned")
            return code, result, batch.total_cost

        logger.error("Translation to %s failed after %d attempts: %s", code, attempts, last_error)
        return code, TranslationResult.failed(code, str(last_error)), 0.0
