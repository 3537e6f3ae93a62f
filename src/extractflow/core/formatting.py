"""Display formatting for quality, cost and timing metrics."""

from __future__ import annotations


def format_quality(score: float) -> str:
    """Format a [0, 1] quality score as a percentage with one decimal.

    >>> format_quality(0.8567)
    '85.7%'
    """
    return f"{round(score * 100, 1):.1f}%"


def format_cost(cost_usd: float) -> str:
    """Format a USD cost to four decimal places."""
    return f"${cost_usd:.4f}"


def format_processing_time(ms: float | None) -> str:
    """Format milliseconds as seconds with one decimal, ``N/A`` when unknown."""
    if not ms:
        return "N/A"
    return f"{ms / 1000:.1f}s"


def quality_tier(score: float) -> str:
    """Bucket a quality score into ``high``, ``medium`` or ``low``."""
    if score >= 0.8:
        return "high"
    if score >= 0.6:
        return "medium"
    return "low"


def format_extraction_summary(quality_score: float, cost_usd: float) -> str:
    return f"Quality Score: {format_quality(quality_score)} | Cost: {format_cost(cost_usd)}"
