"""Translation cost estimation.

Mirrors the store's ``estimate_translation_cost`` function so estimates can be
shown before any request is made.
"""

from __future__ import annotations

# USD per 1k input tokens
COST_PER_1K_TOKENS = {
    "openai": 0.00015,
    "claude": 0.00025,
    "grok": 0.0001,
}
DEFAULT_COST_PER_1K_TOKENS = 0.00015

# Rough 4 characters per token, plus 80% overhead for prompt and output.
# The token count is a whole number, rounded like the store rounds it.
CHARS_PER_TOKEN = 4
TOKEN_OVERHEAD = 1.8

MIN_COST_PER_LANGUAGE = 0.0001


def estimate_translation_cost(
    content_length: int,
    target_language_count: int,
    provider: str = "openai",
) -> float:
    """Estimate the USD cost of translating content into N languages.

    Args:
        content_length: Length of the source content in characters.
        target_language_count: Number of target languages.
        provider: AI provider name; unknown providers use the openai rate.

    Returns:
        Estimated cost, never below 0.0001 per target language.
    """
    if target_language_count <= 0:
        return 0.0

    rate = COST_PER_1K_TOKENS.get(provider, DEFAULT_COST_PER_1K_TOKENS)
    estimated_tokens = round((max(content_length, 0) // CHARS_PER_TOKEN) * TOKEN_OVERHEAD)
    total = (estimated_tokens / 1000.0) * rate * target_language_count

    if total < MIN_COST_PER_LANGUAGE:
        total = MIN_COST_PER_LANGUAGE * target_language_count
    return total
