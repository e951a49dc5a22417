"""
Ollama Translation Provider

This module translates subtitle payloads with models served by a local
Ollama instance. Every engine id maps to one pulled model, so several
independent local engines can be registered against the same server.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from ollama import AsyncClient, ResponseError

from ..exceptions import ConnectionRefused, ProviderError
from ..models import TranslationResult
from ..utils.text import preview
from .base import TranslationProvider
from .prompts import build_prompts


logger = logging.getLogger("subtitle_translator")

# Engine id -> (model name, display name)
OLLAMA_MODELS = {
    "ollama-gemma2-sapie": ("sapie:latest", "Ollama Gemma2 Sapie (Korean)"),
    "ollama-kanana-1.5": ("kanana-1.5:latest", "Ollama Kanana 1.5-8B (Korean)"),
    "ollama-exaone3.5": ("exaone3.5:latest", "Ollama Exaone3.5 (Korean)"),
    "ollama-gemma2": ("gemma2:9b", "Ollama Gemma2"),
    "ollama-hyperclovax": ("hyperclovax:latest", "Ollama HyperCLOVAX 3B (Korean)"),
    "ollama-hyperclovax-1.5b": ("hyperclovax-1.5b:latest", "Ollama HyperCLOVAX 1.5B (Korean Lite)"),
}


def normalize_host(host: Optional[str]) -> str:
    base_url = host or "http://127.0.0.1:11434"
    if not base_url.startswith(("http://", "https://")):
        base_url = f"http://{base_url}"
    return base_url.rstrip("/")


class OllamaTranslator(TranslationProvider):
    """
    Translate text using an Ollama model.

    Local models are slow on CPU-only hosts, so the request timeout is
    generous (minutes rather than seconds).
    """

    def __init__(
        self,
        engine_id: str,
        model: str,
        host: Optional[str] = None,
        display_name: Optional[str] = None,
        temperature: float = 0.3,
        top_p: float = 0.9,
        top_k: int = 40,
        num_predict: int = 4000,
        timeout: float = 300.0,
        client: Optional[AsyncClient] = None,
    ):
        """
        Initialize the Ollama translator.

        Args:
            engine_id: Engine id this adapter is registered under
            model: Ollama model name to use
            host: Ollama API endpoint (e.g., "http://localhost:11434")
            display_name: Human readable engine name
            temperature: Model temperature (0.0 to 1.0)
            top_p: Top-p sampling parameter (0.0 to 1.0)
            top_k: Top-k sampling parameter
            num_predict: Maximum number of tokens to generate
            timeout: Request timeout in seconds
            client: Preconfigured client (used in tests)
        """
        super().__init__(engine_id, display_name or engine_id)
        self.model = model
        self.host = normalize_host(host)
        self.temperature = temperature
        self.top_p = top_p
        self.top_k = top_k
        self.num_predict = num_predict
        self.timeout = timeout
        self.client = client or AsyncClient(host=self.host, timeout=timeout)

    async def translate(self, text: str, target_lang: str, source_lang: Optional[str] = None) -> TranslationResult:
        system_prompt, prompt = build_prompts(text, target_lang, source_lang)
        logger.debug(f"Ollama translation with {self.model}: {preview(text)}")

        try:
            response = await self.client.generate(
                model=self.model,
                prompt=f"{system_prompt}\n\n{prompt}",
                stream=False,
                options={
                    "temperature": self.temperature,
                    "top_k": self.top_k,
                    "top_p": self.top_p,
                    "num_predict": self.num_predict,
                },
            )
        except (httpx.ConnectError, ConnectionError) as e:
            raise ConnectionRefused(
                f"Cannot connect to the Ollama server at {self.host}. Is it running?", self.engine_id
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"Ollama request timed out after {self.timeout}s", self.engine_id) from e
        except (ResponseError, httpx.HTTPError) as e:
            raise ProviderError(f"Ollama translation failed: {e}", self.engine_id) from e

        translated_text = (response["response"] or "").strip()
        if not translated_text:
            raise ProviderError(f"Ollama model {self.model} returned an empty response", self.engine_id)

        return TranslationResult(
            translated_text=translated_text,
            engine=self.engine_id,
            model=self.model,
        )


async def check_ollama_status(host: Optional[str] = None, timeout: float = 5.0) -> Dict[str, Any]:
    """
    Report whether the Ollama server is reachable and which models it serves.

    Never raises; an unreachable server is reported as offline.
    """
    base_url = normalize_host(host)
    api_url = f"{base_url}/api/tags"
    checked_at = datetime.now().isoformat()

    try:
        logger.info(f"Testing connection to Ollama API at: {api_url}")
        async with httpx.AsyncClient(timeout=timeout) as client:
            response = await client.get(api_url)
            response.raise_for_status()
            data = response.json()
    except (httpx.HTTPError, ValueError) as e:
        logger.error(f"Error connecting to Ollama: {e}")
        return {
            "status": "offline",
            "url": base_url,
            "error": str(e),
            "models": [],
            "model_count": 0,
            "last_checked": checked_at,
        }

    models: List[Dict[str, Any]] = [
        {"name": model.get("name"), "size": model.get("size"), "modified_at": model.get("modified_at")}
        for model in data.get("models", [])
        if isinstance(model, dict)
    ]
    logger.info(f"Available Ollama models: {[model['name'] for model in models]}")

    return {
        "status": "online",
        "url": base_url,
        "models": models,
        "model_count": len(models),
        "last_checked": checked_at,
    }
