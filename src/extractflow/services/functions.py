"""Client for the hosted extraction and translation functions.

Both endpoints take a bearer-authenticated JSON POST and answer with
``{"success": true, ...}`` or ``{"success": false, "error": "..."}``.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from extractflow.core.config import Config
from extractflow.core.errors import (
    ApiError,
    AuthenticationRequired,
    ConfigError,
    ExtractionApiError,
    ServiceUnavailableError,
    TranslationApiError,
)
from extractflow.core.models import ExtractionRequest, TranslationRequest

logger = logging.getLogger(__name__)

EXTRACTION_FUNCTION = "extract-episode-content"
TRANSLATION_FUNCTION = "translate-extraction-content"


def build_headers(config: Config) -> dict[str, str]:
    """Auth headers shared by function and store calls.

    Raises:
        AuthenticationRequired: If no access token is configured.
    """
    token = config.get_access_token()
    if not token:
        raise AuthenticationRequired()
    headers = {
        "Authorization": f"Bearer {token}",
        "Content-Type": "application/json",
    }
    anon_key = config.get_anon_key()
    if anon_key:
        headers["apikey"] = anon_key
    return headers


def require_base_url(config: Config) -> str:
    base_url = config.get_base_url()
    if not base_url:
        raise ConfigError(
            "Base URL not configured. "
            "Set EXTRACTFLOW_BASE_URL or api.base_url in .extractflow/config"
        )
    return base_url


class FunctionsClient:
    """Calls the serverless functions over HTTPS."""

    def __init__(self, config: Config, client: httpx.AsyncClient | None = None) -> None:
        """
        Initialize the functions client.

        Args:
            config: Application configuration (base URL, credentials, timeout)
            client: Optional httpx client for testing; created per call if None
        """
        self.config = config
        self.client = client

    def function_url(self, name: str) -> str:
        return f"{require_base_url(self.config)}/functions/v1/{name}"

    async def extract(self, request: ExtractionRequest) -> dict[str, Any]:
        """
        Run one extraction.

        Returns:
            The decoded success body.

        Raises:
            AuthenticationRequired: If no access token is available
            ExtractionApiError: On non-2xx or ``success: false``
            ServiceUnavailableError: On network failure or invalid JSON
        """
        return await self._post(
            EXTRACTION_FUNCTION,
            request.to_payload(),
            error_cls=ExtractionApiError,
            fallback_message="Extraction failed",
        )

    async def translate(self, request: TranslationRequest) -> dict[str, Any]:
        """
        Translate an extraction into every requested language in one batch.

        Raises:
            AuthenticationRequired: If no access token is available
            TranslationApiError: On non-2xx or ``success: false``
            ServiceUnavailableError: On network failure or invalid JSON
        """
        return await self._post(
            TRANSLATION_FUNCTION,
            request.to_payload(),
            error_cls=TranslationApiError,
            fallback_message="Translation failed",
        )

    async def _post(
        self,
        function_name: str,
        payload: dict[str, Any],
        *,
        error_cls: type[ApiError],
        fallback_message: str,
    ) -> dict[str, Any]:
        headers = build_headers(self.config)
        url = self.function_url(function_name)

        should_close_client = self.client is None
        client = self.client or httpx.AsyncClient(timeout=self.config.api.timeout_s)

        logger.debug("POST %s", url)
        try:
            response = await client.post(url, json=payload, headers=headers)
        except httpx.TimeoutException as e:
            raise ServiceUnavailableError(
                f"{function_name} timed out after {self.config.api.timeout_s} seconds"
            ) from e
        except httpx.RequestError as e:
            raise ServiceUnavailableError(f"Failed to connect to {function_name}: {e}") from e
        finally:
            if should_close_client:
                await client.aclose()

        if not response.is_success:
            message = _error_message(response) or f"API error: {response.status_code}"
            logger.warning("%s returned %s: %s", function_name, response.status_code, message)
            raise error_cls(message, status_code=response.status_code)

        try:
            data = response.json()
        except ValueError as e:
            raise ServiceUnavailableError(
                f"{function_name} returned invalid JSON response: {e}"
            ) from e

        if not isinstance(data, dict) or not data.get("success"):
            message = (data.get("error") if isinstance(data, dict) else None) or fallback_message
            raise error_cls(str(message), status_code=response.status_code)

        return data


def _error_message(response: httpx.Response) -> str | None:
    """Server-provided ``error`` field of an error response, if any."""
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return None
