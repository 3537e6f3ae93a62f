"""Tests for the serverless functions client.

Uses respx to mock HTTP responses.
"""

import json

import httpx
import pytest
import respx

from extractflow.core.config import ApiConfig, Config
from extractflow.core.errors import (
    AuthenticationRequired,
    ConfigError,
    ExtractionApiError,
    ServiceUnavailableError,
    TranslationApiError,
)
from extractflow.core.models import ExtractionRequest, SourceType, TranslationRequest
from extractflow.services.functions import FunctionsClient, build_headers

EXTRACT_URL = "https://project.example.test/functions/v1/extract-episode-content"
TRANSLATE_URL = "https://project.example.test/functions/v1/translate-extraction-content"


@pytest.fixture
def extraction_request() -> ExtractionRequest:
    return ExtractionRequest(
        source_type=SourceType.TEXT,
        source_name="Pasted Text",
        source_content="Some episode text",
    )


@pytest.fixture
def translation_request() -> TranslationRequest:
    return TranslationRequest(
        extraction_id="ext-1", target_languages=["fr", "de"], source_language="en"
    )


class TestHeaders:
    def test_bearer_and_api_key(self, config: Config) -> None:
        headers = build_headers(config)

        assert headers["Authorization"] == "Bearer token-123"
        assert headers["apikey"] == "anon-key"
        assert headers["Content-Type"] == "application/json"

    def test_api_key_omitted_when_unset(self) -> None:
        headers = build_headers(Config(api=ApiConfig(access_token="t")))
        assert "apikey" not in headers

    def test_missing_token(self, signed_out_config: Config) -> None:
        with pytest.raises(AuthenticationRequired, match="Authentication required"):
            build_headers(signed_out_config)


class TestExtract:
    @respx.mock
    @pytest.mark.asyncio
    async def test_posts_payload_with_auth(
        self, config: Config, extraction_request: ExtractionRequest, extraction_payload: dict
    ) -> None:
        route = respx.post(EXTRACT_URL).mock(
            return_value=httpx.Response(200, json=extraction_payload)
        )

        data = await FunctionsClient(config).extract(extraction_request)

        assert data["extraction_id"] == "ext-1"
        request = route.calls.last.request
        assert request.headers["Authorization"] == "Bearer token-123"
        assert request.headers["apikey"] == "anon-key"
        body = json.loads(request.content)
        assert body["source_content"] == "Some episode text"
        assert body["source_type"] == "text"

    @pytest.mark.asyncio
    async def test_missing_token_sends_nothing(
        self, signed_out_config: Config, extraction_request: ExtractionRequest
    ) -> None:
        with respx.mock(assert_all_called=False) as mock:
            route = mock.post(EXTRACT_URL)
            with pytest.raises(AuthenticationRequired):
                await FunctionsClient(signed_out_config).extract(extraction_request)

        assert not route.called

    @respx.mock
    @pytest.mark.asyncio
    async def test_success_false_surfaces_server_message(
        self, config: Config, extraction_request: ExtractionRequest
    ) -> None:
        respx.post(EXTRACT_URL).mock(
            return_value=httpx.Response(200, json={"success": False, "error": "rate limited"})
        )

        with pytest.raises(ExtractionApiError) as exc_info:
            await FunctionsClient(config).extract(extraction_request)

        assert str(exc_info.value) == "rate limited"

    @respx.mock
    @pytest.mark.asyncio
    async def test_success_false_without_message(
        self, config: Config, extraction_request: ExtractionRequest
    ) -> None:
        respx.post(EXTRACT_URL).mock(return_value=httpx.Response(200, json={"success": False}))

        with pytest.raises(ExtractionApiError, match="^Extraction failed$"):
            await FunctionsClient(config).extract(extraction_request)

    @respx.mock
    @pytest.mark.asyncio
    async def test_http_error_with_body_message(
        self, config: Config, extraction_request: ExtractionRequest
    ) -> None:
        respx.post(EXTRACT_URL).mock(
            return_value=httpx.Response(429, json={"error": "rate limited"})
        )

        with pytest.raises(ExtractionApiError) as exc_info:
            await FunctionsClient(config).extract(extraction_request)

        assert str(exc_info.value) == "rate limited"
        assert exc_info.value.status_code == 429

    @respx.mock
    @pytest.mark.asyncio
    async def test_http_error_without_body(
        self, config: Config, extraction_request: ExtractionRequest
    ) -> None:
        respx.post(EXTRACT_URL).mock(return_value=httpx.Response(500, text="oops"))

        with pytest.raises(ExtractionApiError, match="^API error: 500$"):
            await FunctionsClient(config).extract(extraction_request)

    @respx.mock
    @pytest.mark.asyncio
    async def test_connection_error(
        self, config: Config, extraction_request: ExtractionRequest
    ) -> None:
        respx.post(EXTRACT_URL).mock(side_effect=httpx.ConnectError("Connection refused"))

        with pytest.raises(ServiceUnavailableError, match="Failed to connect"):
            await FunctionsClient(config).extract(extraction_request)

    @respx.mock
    @pytest.mark.asyncio
    async def test_timeout(self, config: Config, extraction_request: ExtractionRequest) -> None:
        respx.post(EXTRACT_URL).mock(side_effect=httpx.ReadTimeout("too slow"))

        with pytest.raises(ServiceUnavailableError, match="timed out"):
            await FunctionsClient(config).extract(extraction_request)

    @respx.mock
    @pytest.mark.asyncio
    async def test_invalid_json(
        self, config: Config, extraction_request: ExtractionRequest
    ) -> None:
        respx.post(EXTRACT_URL).mock(return_value=httpx.Response(200, text="<html>"))

        with pytest.raises(ServiceUnavailableError, match="invalid JSON"):
            await FunctionsClient(config).extract(extraction_request)

    @pytest.mark.asyncio
    async def test_missing_base_url(self, extraction_request: ExtractionRequest) -> None:
        config = Config(api=ApiConfig(access_token="t"))

        with pytest.raises(ConfigError, match="Base URL not configured"):
            await FunctionsClient(config).extract(extraction_request)

    @pytest.mark.asyncio
    async def test_uses_injected_client(
        self, config: Config, extraction_request: ExtractionRequest, extraction_payload: dict
    ) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json=extraction_payload)

        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            data = await FunctionsClient(config, client=client).extract(extraction_request)
            assert not client.is_closed

        assert data["quality_score"] == 0.85


class TestTranslate:
    @respx.mock
    @pytest.mark.asyncio
    async def test_one_batched_request(
        self, config: Config, translation_request: TranslationRequest, translation_payload: dict
    ) -> None:
        route = respx.post(TRANSLATE_URL).mock(
            return_value=httpx.Response(200, json=translation_payload)
        )

        data = await FunctionsClient(config).translate(translation_request)

        assert route.call_count == 1
        body = json.loads(route.calls.last.request.content)
        assert body["target_languages"] == ["fr", "de"]
        assert body["extraction_id"] == "ext-1"
        assert set(data["translations"]) == {"fr", "de"}

    @respx.mock
    @pytest.mark.asyncio
    async def test_fallback_message(
        self, config: Config, translation_request: TranslationRequest
    ) -> None:
        respx.post(TRANSLATE_URL).mock(return_value=httpx.Response(200, json={"success": False}))

        with pytest.raises(TranslationApiError, match="^Translation failed$"):
            await FunctionsClient(config).translate(translation_request)
