"""Data models for extractflow."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# Fields an extraction may produce. Not all are guaranteed present.
EXTRACTED_FIELDS = ("title", "summary", "description", "content", "key_topics", "guest_names")

# Fields copied onto the canonical episode record when applying an extraction.
EPISODE_FIELDS = ("title", "summary", "description", "content")

# Sentinel selections the review UI uses for "no template" and "no target record".
AUTO_DETECT_TEMPLATE = "auto-detect"
NEW_EPISODE = "new-episode"

FieldValue = str | list[str]


class SourceType(str, Enum):
    """Where the raw content came from."""

    TEXT = "text"
    FILE = "file"
    URL = "url"


class AIProvider(str, Enum):
    """AI provider the serverless functions should use."""

    CLAUDE = "claude"
    OPENAI = "openai"
    GROK = "grok"


class TranslationStatus(str, Enum):
    """Lifecycle status of one language's translation."""

    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"
    REVIEW_NEEDED = "review_needed"
    APPROVED = "approved"  # written by the store, never by this client

    @classmethod
    def parse(cls, value: Any) -> TranslationStatus:
        """Map a store value to a status; unknown values read as ``pending``."""
        try:
            return cls(value or cls.PENDING.value)
        except ValueError:
            return cls.PENDING


class ReviewStatus(str, Enum):
    """Review status of an extraction audit row."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


@dataclass
class ProcessingOptions:
    """Processing switches forwarded to the serverless functions."""

    parallel_processing: bool = False
    quality_validation: bool = True
    auto_approve: bool = False

    def to_payload(self) -> dict[str, bool]:
        return {
            "parallel_processing": self.parallel_processing,
            "quality_validation": self.quality_validation,
            "auto_approve": self.auto_approve,
        }


@dataclass
class SourceInput:
    """Raw user input: pasted text, a file path, or a URL."""

    source_type: SourceType
    value: str


@dataclass
class SourceContent:
    """Content read from a SourceInput, ready to send for extraction."""

    source_type: SourceType
    source_name: str
    content: str


@dataclass
class ExtractionRequest:
    """Request body for the extraction endpoint."""

    source_type: SourceType
    source_name: str
    source_content: str
    ai_provider: AIProvider = AIProvider.CLAUDE
    template_id: str | None = None
    episode_id: str | None = None
    processing_options: ProcessingOptions = field(default_factory=ProcessingOptions)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the wire format, omitting unset or sentinel ids."""
        payload: dict[str, Any] = {
            "source_type": self.source_type.value,
            "source_name": self.source_name,
            "source_content": self.source_content,
            "ai_provider": self.ai_provider.value,
            "processing_options": self.processing_options.to_payload(),
        }
        if self.template_id and self.template_id != AUTO_DETECT_TEMPLATE:
            payload["template_id"] = self.template_id
        if self.episode_id and self.episode_id != NEW_EPISODE:
            payload["episode_id"] = self.episode_id
        return payload


@dataclass
class TranslationRequest:
    """Request body for the translation endpoint."""

    extraction_id: str
    target_languages: list[str]
    source_language: str
    ai_provider: AIProvider = AIProvider.CLAUDE
    processing_options: ProcessingOptions = field(default_factory=ProcessingOptions)

    def to_payload(self) -> dict[str, Any]:
        return {
            "extraction_id": self.extraction_id,
            "target_languages": list(self.target_languages),
            "source_language": self.source_language,
            "ai_provider": self.ai_provider.value,
            "processing_options": self.processing_options.to_payload(),
        }


@dataclass
class ExtractionResult:
    """Structured fields produced by one successful extraction call.

    Attributes:
        extraction_id: Server-side identifier of the extraction row.
        extracted_fields: Field name to value (string or list of strings).
        confidence_scores: Field name to provider confidence in [0, 1].
        quality_score: Aggregate automated quality judgment in [0, 1].
        processing_time: Milliseconds spent in the extraction call.
        cost_usd: Metered cost of the AI call.
        validation_errors: Human-readable problems; non-empty blocks apply.
        source_language: ISO code when the server detected one.
    """

    extraction_id: str
    extracted_fields: dict[str, FieldValue] = field(default_factory=dict)
    confidence_scores: dict[str, float] = field(default_factory=dict)
    quality_score: float = 0.0
    processing_time: float = 0.0
    cost_usd: float = 0.0
    validation_errors: list[str] = field(default_factory=list)
    source_language: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractionResult:
        return cls(
            extraction_id=str(data.get("extraction_id") or ""),
            extracted_fields=dict(data.get("extracted_fields") or {}),
            confidence_scores={
                k: float(v) for k, v in (data.get("confidence_scores") or {}).items()
            },
            quality_score=float(data.get("quality_score") or 0.0),
            processing_time=float(data.get("processing_time") or 0.0),
            cost_usd=float(data.get("cost_usd") or 0.0),
            validation_errors=[str(e) for e in data.get("validation_errors") or []],
            source_language=data.get("source_language") or None,
        )

    @property
    def field_names(self) -> list[str]:
        return list(self.extracted_fields)

    @property
    def is_valid(self) -> bool:
        return not self.validation_errors


@dataclass
class TranslationResult:
    """Translation of one extraction into one target language."""

    language_code: str
    translated_fields: dict[str, FieldValue] = field(default_factory=dict)
    confidence_scores: dict[str, float] = field(default_factory=dict)
    translation_status: TranslationStatus = TranslationStatus.PENDING
    quality_score: float = 0.0
    processing_time_ms: float = 0.0
    translation_cost_usd: float = 0.0
    validation_errors: list[str] = field(default_factory=list)
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any], language_code: str | None = None) -> TranslationResult:
        """Build from a translation row; ``language_code`` fills in a missing code."""
        return cls(
            language_code=str(data.get("language_code") or language_code or ""),
            translated_fields=dict(data.get("translated_fields") or {}),
            confidence_scores={
                k: float(v) for k, v in (data.get("confidence_scores") or {}).items()
            },
            translation_status=TranslationStatus.parse(data.get("translation_status")),
            quality_score=float(data.get("quality_score") or 0.0),
            processing_time_ms=float(data.get("processing_time_ms") or 0.0),
            translation_cost_usd=float(data.get("translation_cost_usd") or 0.0),
            validation_errors=[str(e) for e in data.get("validation_errors") or []],
            created_at=str(data.get("created_at") or ""),
        )

    @classmethod
    def failed(cls, language_code: str, error: str) -> TranslationResult:
        return cls(
            language_code=language_code,
            translation_status=TranslationStatus.FAILED,
            validation_errors=[error],
        )


@dataclass(frozen=True)
class Language:
    """Reference language row."""

    code: str
    name: str
    native_name: str = ""
    flag_emoji: str = ""
    is_default: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Language:
        return cls(
            code=data["code"],
            name=data.get("name") or data["code"],
            native_name=data.get("native_name") or "",
            flag_emoji=data.get("flag_emoji") or "",
            is_default=bool(data.get("is_default", False)),
        )


@dataclass(frozen=True)
class ExtractionTemplate:
    """Extraction template row."""

    id: str
    name: str
    description: str = ""
    content_type: str = ""
    usage_count: int = 0
    success_rate: float = 0.0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ExtractionTemplate:
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            description=data.get("description") or "",
            content_type=data.get("content_type") or "",
            usage_count=int(data.get("usage_count") or 0),
            success_rate=float(data.get("success_rate") or 0.0),
        )


@dataclass(frozen=True)
class EpisodeSummary:
    """An episode a reviewer can apply extracted content to."""

    id: str
    title: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EpisodeSummary:
        return cls(id=str(data["id"]), title=data.get("title") or "")


@dataclass
class TranslationBatch:
    """Outcome of one translation fan-out."""

    translations: dict[str, TranslationResult] = field(default_factory=dict)
    total_cost: float = 0.0

    @property
    def completed_count(self) -> int:
        return sum(
            1
            for t in self.translations.values()
            if t.translation_status == TranslationStatus.COMPLETED
        )


@dataclass
class ApplyReport:
    """What each step of applying an extraction to its episode achieved.

    The three steps are not transactional, so a failure part-way leaves
    earlier steps committed. ``complete`` is True only if nothing failed.
    """

    episode_updated: bool = False
    translations_saved: list[str] = field(default_factory=list)
    translation_failures: dict[str, str] = field(default_factory=dict)
    extraction_approved: bool = False
    errors: list[str] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return (
            self.episode_updated
            and self.extraction_approved
            and not self.translation_failures
            and not self.errors
        )

    def describe_failure(self) -> str:
        """Summarize which steps did not complete."""
        pending: list[str] = []
        if not self.episode_updated:
            pending.append("episode update")
        if self.translation_failures:
            pending.append("translations " + ", ".join(sorted(self.translation_failures)))
        if not self.extraction_approved:
            pending.append("extraction approval")
        return "Failed to update episode: " + "; ".join(pending)
