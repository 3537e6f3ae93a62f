"""Extraction orchestrator.

Reads a source, sends it to the extraction function, records the result in
the review session and, when multilingual extraction is enabled, hands the
result straight on to the translation orchestrator.
"""

from __future__ import annotations

import logging

from extractflow.core.config import Config
from extractflow.core.errors import NoContentProvided, StoreError
from extractflow.core.formatting import format_extraction_summary
from extractflow.core.models import (
    AIProvider,
    EpisodeSummary,
    ExtractionRequest,
    ExtractionResult,
    ExtractionTemplate,
    ProcessingOptions,
    SourceInput,
    SourceType,
)
from extractflow.core.notify import Notifier
from extractflow.core.progress import (
    ANALYZING,
    COMPLETE,
    FETCHING_URL,
    PREPARING,
    PROCESSING_RESULTS,
    READING_FILE,
    ProgressReporter,
)
from extractflow.core.session import ReviewSession
from extractflow.services import sources
from extractflow.services.functions import FunctionsClient
from extractflow.services.store import ContentStore
from extractflow.services.translation import TranslationOrchestrator

logger = logging.getLogger(__name__)


class ExtractionOrchestrator:
    """
    Runs one extraction and its optional translation follow-on.

    Collaborators are created from ``config`` unless injected, so tests can
    pass clients bound to a mocked transport.
    """

    def __init__(
        self,
        config: Config,
        functions: FunctionsClient | None = None,
        store: ContentStore | None = None,
        translator: TranslationOrchestrator | None = None,
        notifier: Notifier | None = None,
        progress: ProgressReporter | None = None,
        session: ReviewSession | None = None,
    ) -> None:
        self.config = config
        self.functions = functions or FunctionsClient(config)
        self.store = store or ContentStore(config)
        self.notifier = notifier or Notifier()
        self.progress = progress or ProgressReporter()
        self.session = session or ReviewSession(
            selected_languages=config.translation.target_languages,
            source_language=config.translation.source_language,
        )
        self.translator = translator or TranslationOrchestrator(
            config,
            functions=self.functions,
            notifier=self.notifier,
            session=self.session,
        )

    async def extract(
        self,
        source: SourceInput,
        template_id: str | None = None,
        episode_id: str | None = None,
        ai_provider: AIProvider | None = None,
        processing_options: ProcessingOptions | None = None,
    ) -> ExtractionResult:
        """
        Extract structured fields from a source.

        Args:
            source: Text, file path or URL to extract from
            template_id: Template to steer extraction, or None to auto-detect
            episode_id: Episode the extraction is for, or None for a new one
            ai_provider: Provider override; defaults to the configured one
            processing_options: Options override; defaults from config

        Returns:
            The extraction result, also stored in the session.

        Raises:
            NoContentProvided: If the source is empty or whitespace
            UnsupportedSourceError: If a file cannot be accepted or read
            AuthenticationRequired: If no access token is available
            ExtractionApiError: If the endpoint reports failure
            ServiceUnavailableError: On network failure or invalid JSON
        """
        result = await self._run_extraction(
            source, template_id, episode_id, ai_provider, processing_options
        )
        await self._auto_translate(result, ai_provider, processing_options)
        return result

    async def _run_extraction(
        self,
        source: SourceInput,
        template_id: str | None,
        episode_id: str | None,
        ai_provider: AIProvider | None,
        processing_options: ProcessingOptions | None,
    ) -> ExtractionResult:
        self.progress.advance(PREPARING)
        self.session.begin_extraction()
        if episode_id is not None:
            self.session.episode_id = episode_id

        try:
            result = await self._extract(
                source,
                template_id=template_id,
                episode_id=episode_id,
                ai_provider=ai_provider,
                processing_options=processing_options,
            )
        except Exception:
            self.session.fail_extraction()
            raise

        self.session.complete_extraction(result)
        self.progress.advance(COMPLETE)
        logger.info(
            "Extraction %s complete: %s",
            result.extraction_id,
            format_extraction_summary(result.quality_score, result.cost_usd),
        )
        return result

    async def _extract(
        self,
        source: SourceInput,
        template_id: str | None,
        episode_id: str | None,
        ai_provider: AIProvider | None,
        processing_options: ProcessingOptions | None,
    ) -> ExtractionResult:
        if source.source_type == SourceType.FILE:
            self.progress.advance(READING_FILE)
        elif source.source_type == SourceType.URL:
            self.progress.advance(FETCHING_URL)

        content = sources.read_source(source, self.config)
        if not content.content.strip():
            raise NoContentProvided()

        request = ExtractionRequest(
            source_type=content.source_type,
            source_name=content.source_name,
            source_content=content.content,
            ai_provider=ai_provider or self.config.get_ai_provider(),
            template_id=template_id,
            episode_id=episode_id,
            processing_options=processing_options or self.config.processing_options(),
        )

        self.progress.advance(ANALYZING)
        data = await self.functions.extract(request)

        self.progress.advance(PROCESSING_RESULTS)
        return ExtractionResult.from_dict(data)

    async def _auto_translate(
        self,
        result: ExtractionResult,
        ai_provider: AIProvider | None,
        processing_options: ProcessingOptions | None,
    ) -> None:
        if not self.config.features.multilingual_extraction:
            return
        if len(self.session.selected_languages) <= 1:
            return
        targets = self.session.target_languages()
        if not targets:
            return

        logger.info(
            "Translating extraction %s into %s", result.extraction_id, ", ".join(targets)
        )
        await self.translator.run(
            result.extraction_id,
            targets,
            self.session.effective_source_language(),
            ai_provider=ai_provider,
            processing_options=processing_options,
        )

    async def run(
        self,
        source: SourceInput,
        template_id: str | None = None,
        episode_id: str | None = None,
        ai_provider: AIProvider | None = None,
        processing_options: ProcessingOptions | None = None,
    ) -> ExtractionResult | None:
        """
        Extract and surface the outcome as one notification.

        Never raises; a failure becomes an "Extraction Failed" notification
        and None is returned. Progress is reset afterwards either way.
        """
        try:
            result = await self._run_extraction(
                source, template_id, episode_id, ai_provider, processing_options
            )
        except Exception as e:
            logger.error("Extraction failed: %s", e)
            self.notifier.error("Extraction Failed", str(e) or "Unknown error occurred")
            return None
        finally:
            self.progress.reset()

        self.notifier.success(
            "Content Extracted Successfully!",
            format_extraction_summary(result.quality_score, result.cost_usd),
        )
        await self._auto_translate(result, ai_provider, processing_options)
        return result

    # -- reference data ------------------------------------------------

    async def load_templates(self) -> list[ExtractionTemplate]:
        """Templates by popularity, or an empty list if they cannot be read."""
        try:
            return await self.store.list_templates()
        except StoreError as e:
            logger.warning("Could not load extraction templates: %s", e)
            return []

    async def load_episodes(self, limit: int = 50) -> list[EpisodeSummary]:
        return await self.store.list_episodes(limit=limit)

    def suggest_template(
        self, file_name: str, templates: list[ExtractionTemplate]
    ) -> ExtractionTemplate | None:
        return sources.suggest_template(file_name, templates)
