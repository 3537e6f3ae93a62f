"""Source readers: turn pasted text, a file or a URL into extraction input."""

from __future__ import annotations

import logging
from pathlib import Path

from extractflow.core.config import Config
from extractflow.core.errors import UnsupportedSourceError
from extractflow.core.models import ExtractionTemplate, SourceContent, SourceInput, SourceType

logger = logging.getLogger(__name__)

PASTED_TEXT_NAME = "Pasted Text"


def read_text(text: str, max_length: int) -> SourceContent:
    """Read pasted text, stripped and capped at ``max_length`` characters."""
    content = text.strip()
    if len(content) > max_length:
        logger.warning(
            "Pasted text is %d characters; truncating to %d", len(content), max_length
        )
        content = content[:max_length]
    return SourceContent(source_type=SourceType.TEXT, source_name=PASTED_TEXT_NAME, content=content)


def read_file(path: Path, accepted_types: list[str]) -> SourceContent:
    """Read a file as text.

    The suffix filter is a convenience for users, not a security boundary.
    Bytes that do not decode as UTF-8 are replaced, so binary formats come
    through as lossy text.

    Raises:
        UnsupportedSourceError: If the suffix is not accepted or the file
            cannot be read.
    """
    suffix = path.suffix.lower()
    if suffix not in accepted_types:
        raise UnsupportedSourceError(
            f"Unsupported file type '{suffix or path.name}'. "
            f"Accepted: {', '.join(accepted_types)}"
        )
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise UnsupportedSourceError(f"Could not read {path}: {e}") from e
    return SourceContent(source_type=SourceType.FILE, source_name=path.name, content=content)


def read_url(url: str) -> SourceContent:
    """Pass a URL through as content.

    URL fetching is not implemented; the server receives the raw URL string.
    """
    url = url.strip()
    logger.debug("URL sources are not fetched; sending raw URL %s", url)
    return SourceContent(source_type=SourceType.URL, source_name=url, content=url)


def read_source(source: SourceInput, config: Config) -> SourceContent:
    """Dispatch on the source type."""
    if source.source_type == SourceType.TEXT:
        return read_text(source.value, config.extraction.max_text_length)
    if source.source_type == SourceType.FILE:
        return read_file(Path(source.value), config.extraction.accepted_file_types)
    if source.source_type == SourceType.URL:
        return read_url(source.value)
    raise UnsupportedSourceError(f"Unknown source type: {source.source_type}")


def suggest_template(
    file_name: str, templates: list[ExtractionTemplate]
) -> ExtractionTemplate | None:
    """Suggest the transcript template for files that look like transcripts."""
    if "transcript" not in file_name.lower():
        return None
    for template in templates:
        if template.content_type == "transcript":
            return template
    return None
