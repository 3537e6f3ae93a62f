"""Persistent store client (PostgREST over HTTPS).

The tables and their schema are owned by the hosted project; this module
only reads reference data and writes the rows the review workflow touches.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any

import httpx

from extractflow.core.config import Config
from extractflow.core.errors import ServiceUnavailableError, StoreError
from extractflow.core.models import (
    EPISODE_FIELDS,
    EpisodeSummary,
    ExtractionTemplate,
    FieldValue,
    Language,
    ReviewStatus,
    TranslationResult,
    TranslationStatus,
)
from extractflow.services.functions import build_headers, require_base_url

logger = logging.getLogger(__name__)

EPISODES_TABLE = "episodes"
EPISODE_TRANSLATIONS_TABLE = "episodes_translations"
EXTRACTIONS_TABLE = "content_extractions"
EXTRACTION_TRANSLATIONS_TABLE = "extraction_translations"
TEMPLATES_TABLE = "extraction_templates"
LANGUAGES_TABLE = "languages"


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def _as_text(value: FieldValue | None) -> str | None:
    """Collapse a field value to the text columns of the record tables."""
    if value is None or value == "":
        return None
    if isinstance(value, list):
        return ", ".join(str(v) for v in value) or None
    return str(value)


class ContentStore:
    """Reads and writes workflow rows through the REST interface."""

    def __init__(self, config: Config, client: httpx.AsyncClient | None = None) -> None:
        self.config = config
        self.client = client

    def table_url(self, table: str) -> str:
        return f"{require_base_url(self.config)}/rest/v1/{table}"

    # -- reference data ------------------------------------------------

    async def list_templates(self) -> list[ExtractionTemplate]:
        rows = await self._request(
            "GET",
            TEMPLATES_TABLE,
            params={
                "select": "id,name,description,content_type,usage_count,success_rate",
                "order": "usage_count.desc",
            },
        )
        return [ExtractionTemplate.from_dict(row) for row in rows or []]

    async def list_episodes(self, limit: int = 50) -> list[EpisodeSummary]:
        rows = await self._request(
            "GET",
            EPISODES_TABLE,
            params={"select": "id,title", "order": "created_at.desc", "limit": str(limit)},
        )
        return [EpisodeSummary.from_dict(row) for row in rows or []]

    async def list_languages(self) -> list[Language]:
        """Active languages in display order."""
        rows = await self._request(
            "GET",
            LANGUAGES_TABLE,
            params={
                "select": "code,name,native_name,flag_emoji,is_default",
                "is_active": "eq.true",
                "order": "sort_order",
            },
        )
        return [Language.from_dict(row) for row in rows or []]

    # -- writes --------------------------------------------------------

    async def update_episode(
        self, episode_id: str, extracted_fields: dict[str, FieldValue]
    ) -> None:
        """Copy extracted title/summary/description/content onto an episode."""
        body: dict[str, Any] = {
            name: _as_text(extracted_fields.get(name)) for name in EPISODE_FIELDS
        }
        body["updated_at"] = _now_iso()
        await self._request(
            "PATCH",
            EPISODES_TABLE,
            params={"id": f"eq.{episode_id}"},
            json=body,
            prefer="return=minimal",
        )

    async def upsert_episode_translation(
        self, episode_id: str, translation: TranslationResult
    ) -> None:
        """Insert or replace the episode's row for one language."""
        fields = translation.translated_fields
        body: dict[str, Any] = {
            "episode_id": episode_id,
            "language_code": translation.language_code,
            **{name: _as_text(fields.get(name)) for name in EPISODE_FIELDS},
            "translation_status": TranslationStatus.COMPLETED.value,
            "translation_method": "ai",
            "translation_quality_score": translation.quality_score or None,
            "translated_at": _now_iso(),
        }
        await self._request(
            "POST",
            EPISODE_TRANSLATIONS_TABLE,
            params={"on_conflict": "episode_id,language_code"},
            json=body,
            prefer="resolution=merge-duplicates,return=minimal",
        )

    async def approve_extraction(self, extraction_id: str) -> None:
        await self._request(
            "PATCH",
            EXTRACTIONS_TABLE,
            params={"id": f"eq.{extraction_id}"},
            json={"review_status": ReviewStatus.APPROVED.value, "reviewed_at": _now_iso()},
            prefer="return=minimal",
        )

    async def save_extraction_translation(
        self,
        extraction_id: str,
        language_code: str,
        translated_fields: dict[str, FieldValue],
    ) -> None:
        """Persist edited fields for one language and flag them for review."""
        await self._request(
            "PATCH",
            EXTRACTION_TRANSLATIONS_TABLE,
            params={
                "extraction_id": f"eq.{extraction_id}",
                "language_code": f"eq.{language_code}",
            },
            json={
                "translated_fields": translated_fields,
                "translation_status": TranslationStatus.REVIEW_NEEDED.value,
                "updated_at": _now_iso(),
            },
            prefer="return=minimal",
        )

    # -- transport -----------------------------------------------------

    async def _request(
        self,
        method: str,
        table: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
        prefer: str | None = None,
    ) -> Any:
        headers = build_headers(self.config)
        if prefer:
            headers["Prefer"] = prefer
        url = self.table_url(table)

        should_close_client = self.client is None
        client = self.client or httpx.AsyncClient(timeout=self.config.api.timeout_s)

        try:
            response = await client.request(method, url, params=params, json=json, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StoreError(
                f"{method} {table} failed with status {e.response.status_code}: "
                f"{_store_message(e.response)}"
            ) from e
        except httpx.RequestError as e:
            raise ServiceUnavailableError(f"Failed to connect to store: {e}") from e
        finally:
            if should_close_client:
                await client.aclose()

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise StoreError(f"{method} {table} returned invalid JSON: {e}") from e


def _store_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text
    if isinstance(data, dict):
        return str(data.get("message") or data.get("error") or data)
    return str(data)
