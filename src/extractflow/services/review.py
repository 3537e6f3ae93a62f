"""Review actions: save edited translations and apply an extraction.

Edits themselves happen in memory on the ReviewSession. This module holds
the two operations that persist review work to the store.
"""

from __future__ import annotations

import logging

from extractflow.core.config import Config
from extractflow.core.errors import ExtractflowError, SessionError
from extractflow.core.models import ApplyReport
from extractflow.core.notify import Notifier
from extractflow.core.session import ReviewSession
from extractflow.services.store import ContentStore

logger = logging.getLogger(__name__)


class ReviewService:
    """Persists the review session's edits and approvals."""

    def __init__(
        self,
        config: Config,
        session: ReviewSession,
        store: ContentStore | None = None,
        notifier: Notifier | None = None,
    ) -> None:
        self.config = config
        self.session = session
        self.store = store or ContentStore(config)
        self.notifier = notifier or Notifier()

    async def save_translation(self, language_code: str) -> bool:
        """
        Persist one language's edited fields and flag them for review.

        The local status only moves to ``review_needed`` once the write has
        succeeded. On failure the in-memory edit is kept so it can be saved
        again.

        Returns:
            True if the translation was saved.
        """
        extraction = self.session.extraction
        translation = self.session.translation_results.get(language_code)
        if extraction is None or translation is None:
            raise SessionError(f"No translation for language '{language_code}'")

        try:
            await self.store.save_extraction_translation(
                extraction.extraction_id,
                language_code,
                translation.translated_fields,
            )
        except ExtractflowError as e:
            logger.error("Failed to save %s translation: %s", language_code, e)
            self.notifier.error("Save Failed", f"Failed to save translation: {e}")
            return False

        self.session.mark_translation_saved(language_code)
        self.notifier.success("Translation Saved", f"{language_code.upper()} translation saved")
        return True

    async def apply_to_episode(self) -> ApplyReport | None:
        """
        Copy the extraction and its completed translations onto the episode.

        Does nothing and returns None unless the session can apply: an
        extraction without validation errors and a real target episode.

        The steps are not transactional:

        1. Update the episode's title/summary/description/content. If this
           fails nothing else is attempted.
        2. Upsert each completed translation. Failures are recorded per
           language and the remaining languages are still written.
        3. Mark the extraction approved.

        Returns:
            An ApplyReport of what was written, or None if not applicable.
        """
        if not self.session.can_apply:
            logger.debug("Apply skipped: session cannot apply")
            return None

        extraction = self.session.extraction
        episode_id = self.session.episode_id
        assert extraction is not None and episode_id is not None

        report = ApplyReport()
        try:
            await self.store.update_episode(episode_id, extraction.extracted_fields)
        except ExtractflowError as e:
            logger.error("Failed to update episode %s: %s", episode_id, e)
            report.errors.append(str(e))
            self._report_failure(report)
            return report
        report.episode_updated = True

        for code, translation in self.session.completed_translations().items():
            try:
                await self.store.upsert_episode_translation(episode_id, translation)
            except ExtractflowError as e:
                logger.warning("Failed to save %s translation for %s: %s", code, episode_id, e)
                report.translation_failures[code] = str(e)
                continue
            report.translations_saved.append(code)

        try:
            await self.store.approve_extraction(extraction.extraction_id)
        except ExtractflowError as e:
            logger.error("Failed to approve extraction %s: %s", extraction.extraction_id, e)
            report.errors.append(str(e))
        else:
            report.extraction_approved = True

        if not report.complete:
            self._report_failure(report)
            return report

        self.session.mark_applied()
        saved = len(report.translations_saved)
        self.notifier.success(
            "Applied to Episode",
            f"Episode updated with {saved} translation{'s' if saved != 1 else ''}",
        )
        return report

    def _report_failure(self, report: ApplyReport) -> None:
        message = report.describe_failure()
        if report.errors:
            message = f"{message} ({'; '.join(report.errors)})"
        self.notifier.error("Apply Failed", message)
