"""Unit tests for the engine adapters, with all network access mocked."""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest
import requests
from ollama import ResponseError

from subtitle_translator.exceptions import (
    ConnectionRefused,
    MissingCredential,
    ProviderError,
    UnsupportedLanguage,
)
from subtitle_translator.translators.deepl import DeeplTranslator
from subtitle_translator.translators.google import GoogleFreeTranslator
from subtitle_translator.translators.libre import LibreTranslator
from subtitle_translator.translators.llm import (
    ClaudeTranslator,
    GeminiTranslator,
    OpenAICompatibleTranslator,
)
from subtitle_translator.translators.mymemory import MyMemoryTranslator
from subtitle_translator.translators.ollama import OllamaTranslator, check_ollama_status, normalize_host
from subtitle_translator.translators.prompts import SRT_SYSTEM_PROMPT


def mock_response(status_code=200, payload=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text or json.dumps(payload or {})
    response.json.return_value = payload
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status_code} Error")
    return response


def no_delay(provider):
    provider.current_delay = 0
    provider.min_delay = 0
    return provider


class TestOpenAICompatibleTranslator:
    """Test cases for chat completion APIs over httpx."""

    @pytest.mark.asyncio
    async def test_sends_chat_request(self):
        # Arrange
        captured = {}

        def handler(request: httpx.Request) -> httpx.Response:
            captured["url"] = str(request.url)
            captured["auth"] = request.headers["Authorization"]
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"choices": [{"message": {"content": " 안녕하세요 "}}]})

        translator = OpenAICompatibleTranslator(
            "groq", "gsk-test", "llama-3.3-70b-versatile",
            base_url="https://api.groq.com/openai/v1",
            transport=httpx.MockTransport(handler),
        )

        # Act
        result = await translator.translate("Hello", "ko", "en")

        # Assert
        assert result.translated_text == "안녕하세요"
        assert result.model == "llama-3.3-70b-versatile"
        assert captured["url"] == "https://api.groq.com/openai/v1/chat/completions"
        assert captured["auth"] == "Bearer gsk-test"
        assert captured["body"]["messages"][0]["role"] == "system"
        assert captured["body"]["messages"][1]["content"].endswith("Hello")

    @pytest.mark.asyncio
    async def test_unauthorized_is_missing_credential(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(401, json={"error": "bad key"}))
        translator = OpenAICompatibleTranslator("openai", "sk-bad", "gpt-4.1-nano", transport=transport)

        with pytest.raises(MissingCredential):
            await translator.translate("Hello", "ko")

    @pytest.mark.asyncio
    async def test_server_error_is_provider_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(500, text="overloaded"))
        translator = OpenAICompatibleTranslator("openai", "sk-test", "gpt-4.1-nano", transport=transport)

        with pytest.raises(ProviderError, match="500"):
            await translator.translate("Hello", "ko")

    @pytest.mark.asyncio
    async def test_connection_error_is_connection_refused(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        translator = OpenAICompatibleTranslator(
            "openai", "sk-test", "gpt-4.1-nano", transport=httpx.MockTransport(handler)
        )

        with pytest.raises(ConnectionRefused):
            await translator.translate("Hello", "ko")

    @pytest.mark.asyncio
    async def test_empty_content_is_provider_error(self):
        transport = httpx.MockTransport(
            lambda request: httpx.Response(200, json={"choices": [{"message": {"content": "  "}}]})
        )
        translator = OpenAICompatibleTranslator("openai", "sk-test", "gpt-4.1-nano", transport=transport)

        with pytest.raises(ProviderError):
            await translator.translate("Hello", "ko")

    def test_missing_key(self):
        with pytest.raises(MissingCredential):
            OpenAICompatibleTranslator("openai", None, "gpt-4.1-nano")


class TestGeminiAndClaude:

    @pytest.mark.asyncio
    async def test_gemini_request(self):
        captured = {}

        def handler(request):
            captured["url"] = request.url
            return httpx.Response(200, json={
                "candidates": [{"content": {"parts": [{"text": "Hola"}]}}]
            })

        translator = GeminiTranslator("gemini", "gm-key", "gemini-1.5-flash", transport=httpx.MockTransport(handler))

        result = await translator.translate("Hello", "es")

        assert result.translated_text == "Hola"
        assert captured["url"].path == "/v1beta/models/gemini-1.5-flash:generateContent"
        assert captured["url"].params["key"] == "gm-key"

    @pytest.mark.asyncio
    async def test_claude_request(self):
        captured = {}

        def handler(request):
            captured["headers"] = request.headers
            captured["body"] = json.loads(request.content)
            return httpx.Response(200, json={"content": [{"type": "text", "text": "Bonjour"}]})

        translator = ClaudeTranslator("claude", "ant-key", "claude-3-haiku-20240307",
                                      transport=httpx.MockTransport(handler))

        result = await translator.translate("1\n00:00:01,000 --> 00:00:02,000\nHello\n", "fr")

        assert result.translated_text == "Bonjour"
        assert captured["headers"]["x-api-key"] == "ant-key"
        assert captured["headers"]["anthropic-version"] == "2023-06-01"
        assert captured["body"]["system"] == SRT_SYSTEM_PROMPT

    @pytest.mark.asyncio
    async def test_unexpected_body_is_provider_error(self):
        transport = httpx.MockTransport(lambda request: httpx.Response(200, json={"content": []}))
        translator = ClaudeTranslator("claude", "ant-key", "claude-3-haiku-20240307", transport=transport)

        with pytest.raises(ProviderError):
            await translator.translate("Hello", "fr")


class TestOllamaTranslator:
    """Test cases for the Ollama adapter with a mocked client."""

    @pytest.mark.asyncio
    async def test_generates_with_model_options(self):
        # Arrange
        client = MagicMock()
        client.generate = AsyncMock(return_value={"response": " Good morning \n"})
        translator = OllamaTranslator("ollama-gemma2", "gemma2:9b", client=client)

        # Act
        result = await translator.translate("좋은 아침", "en", "ko")

        # Assert
        assert result.translated_text == "Good morning"
        assert result.model == "gemma2:9b"
        kwargs = client.generate.call_args.kwargs
        assert kwargs["model"] == "gemma2:9b"
        assert kwargs["stream"] is False
        assert kwargs["options"]["temperature"] == 0.3
        assert kwargs["prompt"].endswith("좋은 아침")

    @pytest.mark.asyncio
    async def test_connect_error_is_connection_refused(self):
        client = MagicMock()
        client.generate = AsyncMock(side_effect=httpx.ConnectError("refused"))
        translator = OllamaTranslator("ollama-gemma2", "gemma2:9b", client=client)

        with pytest.raises(ConnectionRefused):
            await translator.translate("hi", "ko")

    @pytest.mark.asyncio
    async def test_model_error_is_provider_error(self):
        client = MagicMock()
        client.generate = AsyncMock(side_effect=ResponseError("model 'gemma2:9b' not found", 404))
        translator = OllamaTranslator("ollama-gemma2", "gemma2:9b", client=client)

        with pytest.raises(ProviderError, match="not found"):
            await translator.translate("hi", "ko")

    @pytest.mark.asyncio
    async def test_empty_response_is_provider_error(self):
        client = MagicMock()
        client.generate = AsyncMock(return_value={"response": ""})
        translator = OllamaTranslator("ollama-gemma2", "gemma2:9b", client=client)

        with pytest.raises(ProviderError):
            await translator.translate("hi", "ko")

    def test_normalize_host(self):
        assert normalize_host(None) == "http://127.0.0.1:11434"
        assert normalize_host("gpu-box:11434/") == "http://gpu-box:11434"

    @pytest.mark.asyncio
    async def test_status_reports_offline_instead_of_raising(self):
        with patch("subtitle_translator.translators.ollama.httpx.AsyncClient") as client_class:
            client = client_class.return_value.__aenter__.return_value
            client.get = AsyncMock(side_effect=httpx.ConnectError("refused"))

            status = await check_ollama_status("http://localhost:11434")

        assert status["status"] == "offline"
        assert status["models"] == []
        assert "refused" in status["error"]

    @pytest.mark.asyncio
    async def test_status_lists_models(self):
        response = MagicMock()
        response.json.return_value = {"models": [{"name": "gemma2:9b", "size": 1, "modified_at": "now"}]}
        with patch("subtitle_translator.translators.ollama.httpx.AsyncClient") as client_class:
            client = client_class.return_value.__aenter__.return_value
            client.get = AsyncMock(return_value=response)

            status = await check_ollama_status("localhost:11434")

        assert status["status"] == "online"
        assert status["url"] == "http://localhost:11434"
        assert status["model_count"] == 1
        assert status["models"][0]["name"] == "gemma2:9b"


class TestMachineTranslators:
    """Test cases for the requests-based machine translation adapters."""

    @pytest.mark.asyncio
    async def test_google_maps_language_codes(self):
        translator = no_delay(GoogleFreeTranslator())
        with patch("subtitle_translator.translators.google.GoogleTranslator") as google_class:
            google_class.return_value.translate.return_value = "你好"

            result = await translator.translate("Hello", "zh", "en")

        google_class.assert_called_once_with(source="en", target="zh-CN")
        assert result.translated_text == "你好"
        assert result.engine == "google"
        assert translator.get_stats()["success_count"] == 1

    @pytest.mark.asyncio
    async def test_google_connection_error(self):
        translator = no_delay(GoogleFreeTranslator())
        with patch("subtitle_translator.translators.google.GoogleTranslator") as google_class:
            google_class.return_value.translate.side_effect = requests.exceptions.ConnectionError("offline")

            with pytest.raises(ConnectionRefused):
                await translator.translate("Hello", "ko")

        assert translator.get_stats()["error_count"] == 1

    @pytest.mark.asyncio
    async def test_mymemory_request(self):
        translator = no_delay(MyMemoryTranslator(email="me@example.com"))
        payload = {"responseStatus": 200, "responseData": {"translatedText": "Bonjour"}}
        with patch("subtitle_translator.translators.mymemory.requests.get",
                   return_value=mock_response(payload=payload)) as get:
            result = await translator.translate("Hello", "fr", "en")

        assert result.translated_text == "Bonjour"
        params = get.call_args.kwargs["params"]
        assert params["langpair"] == "en|fr"
        assert params["de"] == "me@example.com"

    @pytest.mark.asyncio
    async def test_mymemory_invalid_language(self):
        translator = no_delay(MyMemoryTranslator())
        payload = {"responseStatus": 403, "responseDetails": "'XX' IS AN INVALID TARGET LANGUAGE"}
        with patch("subtitle_translator.translators.mymemory.requests.get",
                   return_value=mock_response(payload=payload)):
            with pytest.raises(UnsupportedLanguage):
                await translator.translate("Hello", "xx", "en")

    @pytest.mark.asyncio
    async def test_libre_request(self):
        translator = no_delay(LibreTranslator(api_url="http://libre.local/translate", api_key="k"))
        with patch("subtitle_translator.translators.libre.requests.post",
                   return_value=mock_response(payload={"translatedText": "Hallo"})) as post:
            result = await translator.translate("Hello", "de")

        assert result.translated_text == "Hallo"
        body = post.call_args.kwargs["json"]
        assert body["source"] == "auto"
        assert body["api_key"] == "k"

    @pytest.mark.asyncio
    async def test_libre_server_error(self):
        translator = no_delay(LibreTranslator())
        with patch("subtitle_translator.translators.libre.requests.post",
                   return_value=mock_response(status_code=503, text="unavailable")):
            with pytest.raises(ProviderError):
                await translator.translate("Hello", "de")

    @pytest.mark.asyncio
    async def test_deepl_request(self):
        translator = no_delay(DeeplTranslator("key:fx"))
        payload = {"translations": [{"text": "Hallo", "detected_source_language": "EN"}]}
        with patch("subtitle_translator.translators.deepl.requests.post",
                   return_value=mock_response(payload=payload)) as post:
            result = await translator.translate("Hello", "de", "en")

        assert result.translated_text == "Hallo"
        assert post.call_args.args[0] == "https://api-free.deepl.com/v2/translate"
        assert post.call_args.kwargs["json"] == {"text": ["Hello"], "target_lang": "DE", "source_lang": "EN"}
        assert post.call_args.kwargs["headers"]["Authorization"] == "DeepL-Auth-Key key:fx"

    @pytest.mark.asyncio
    async def test_deepl_rejected_key(self):
        translator = no_delay(DeeplTranslator("bad"))
        with patch("subtitle_translator.translators.deepl.requests.post",
                   return_value=mock_response(status_code=403, text="Forbidden")):
            with pytest.raises(MissingCredential):
                await translator.translate("Hello", "de")

    @pytest.mark.asyncio
    async def test_deepl_unsupported_language(self):
        translator = no_delay(DeeplTranslator("key"))

        with pytest.raises(UnsupportedLanguage):
            await translator.translate("Hello", "th")
