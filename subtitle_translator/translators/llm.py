"""
Hosted LLM Translation Providers

OpenAI-compatible chat completion APIs (OpenAI, Groq), Google Gemini and
Anthropic Claude, all called over httpx.
"""

import logging
from typing import Any, Dict, Optional

import httpx

from ..exceptions import ConnectionRefused, MissingCredential, ProviderError
from ..models import TranslationResult
from .base import TranslationProvider
from .prompts import build_prompts


logger = logging.getLogger("subtitle_translator")


class HostedLLMTranslator(TranslationProvider):
    """Shared request handling for hosted LLM APIs"""

    def __init__(
        self,
        engine_id: str,
        api_key: Optional[str],
        model: str,
        display_name: Optional[str] = None,
        timeout: float = 60.0,
        max_tokens: int = 4000,
        temperature: float = 0.3,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        super().__init__(engine_id, display_name)
        if not api_key:
            raise MissingCredential(f"API key for {engine_id} is not configured", engine_id)
        self.api_key = api_key
        self.model = model
        self.timeout = timeout
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.transport = transport

    async def _post(self, url: str, payload: Dict[str, Any], headers: Dict[str, str],
                    params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, json=payload, headers=headers, params=params)
                response.raise_for_status()
                return response.json()
        except httpx.ConnectError as e:
            raise ConnectionRefused(f"Cannot connect to {self.display_name}: {e}", self.engine_id) from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"{self.display_name} request timed out after {self.timeout}s", self.engine_id) from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code in (401, 403):
                raise MissingCredential(f"{self.display_name} rejected the API key", self.engine_id) from e
            raise ProviderError(
                f"{self.display_name} translation failed: HTTP {e.response.status_code} {e.response.text[:200]}",
                self.engine_id,
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderError(f"{self.display_name} translation failed: {e}", self.engine_id) from e

    def _result(self, text: Optional[str]) -> TranslationResult:
        translated_text = (text or "").strip()
        if not translated_text:
            raise ProviderError(f"{self.display_name} returned an empty response", self.engine_id)
        return TranslationResult(translated_text=translated_text, engine=self.engine_id, model=self.model)


class OpenAICompatibleTranslator(HostedLLMTranslator):
    """Chat completions API (OpenAI, Groq and other compatible services)"""

    def __init__(self, engine_id: str, api_key: Optional[str], model: str,
                 base_url: str = "https://api.openai.com/v1", **kwargs):
        super().__init__(engine_id, api_key, model, **kwargs)
        self.base_url = base_url.rstrip("/")

    async def translate(self, text: str, target_lang: str, source_lang: Optional[str] = None) -> TranslationResult:
        system_prompt, prompt = build_prompts(text, target_lang, source_lang)
        data = await self._post(
            f"{self.base_url}/chat/completions",
            payload={
                "model": self.model,
                "messages": [
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": prompt},
                ],
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
            },
            headers={"Authorization": f"Bearer {self.api_key}"},
        )
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected {self.display_name} response: {data}", self.engine_id) from e
        return self._result(content)


class GeminiTranslator(HostedLLMTranslator):
    """Google Gemini generateContent API"""

    base_url = "https://generativelanguage.googleapis.com/v1beta"

    async def translate(self, text: str, target_lang: str, source_lang: Optional[str] = None) -> TranslationResult:
        system_prompt, prompt = build_prompts(text, target_lang, source_lang)
        data = await self._post(
            f"{self.base_url}/models/{self.model}:generateContent",
            payload={
                "contents": [{"parts": [{"text": f"{system_prompt}\n\n{prompt}"}]}],
                "generationConfig": {
                    "maxOutputTokens": self.max_tokens,
                    "temperature": self.temperature,
                },
            },
            headers={},
            params={"key": self.api_key},
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected Gemini response: {data}", self.engine_id) from e
        return self._result("".join(part.get("text", "") for part in parts))


class ClaudeTranslator(HostedLLMTranslator):
    """Anthropic Messages API"""

    api_url = "https://api.anthropic.com/v1/messages"

    async def translate(self, text: str, target_lang: str, source_lang: Optional[str] = None) -> TranslationResult:
        system_prompt, prompt = build_prompts(text, target_lang, source_lang)
        data = await self._post(
            self.api_url,
            payload={
                "model": self.model,
                "max_tokens": self.max_tokens,
                "temperature": self.temperature,
                "system": system_prompt,
                "messages": [{"role": "user", "content": prompt}],
            },
            headers={
                "x-api-key": self.api_key,
                "anthropic-version": "2023-06-01",
            },
        )
        try:
            content = data["content"][0]["text"]
        except (KeyError, IndexError, TypeError) as e:
            raise ProviderError(f"Unexpected Claude response: {data}", self.engine_id) from e
        return self._result(content)
