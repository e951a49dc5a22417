#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Engine gateway: one translate() call over every registered engine.
"""

import time
import logging
from typing import Dict, List, Mapping, Optional

from ..exceptions import EngineError, MissingCredential, ProviderError
from ..models import TranslationResult
from ..utils.text import preview
from .base import TranslationProvider

# Get logger
logger = logging.getLogger("subtitle_translator")

# Local Ollama engines, in default preference order
LOCAL_ENGINES = [
    "ollama-gemma2-sapie",
    "ollama-kanana-1.5",
    "ollama-exaone3.5",
    "ollama-gemma2",
    "ollama-hyperclovax",
    "ollama-hyperclovax-1.5b",
]

# Free machine translation engines that need no credentials
FREE_ENGINES = ["google", "mymemory", "libre"]

# Hosted engines that need an API key
HOSTED_ENGINES = ["gemini", "groq", "openai", "claude", "deepl"]

ENGINE_NAMES = {
    "gemini": "Google Gemini",
    "groq": "Groq Llama",
    "openai": "OpenAI GPT",
    "claude": "Anthropic Claude",
    "deepl": "DeepL",
    "google": "Google Translate",
    "mymemory": "MyMemory",
    "libre": "LibreTranslate",
    "ollama-kanana-1.5": "Ollama Kanana 1.5-8B (Korean)",
    "ollama-hyperclovax": "Ollama HyperCLOVAX 3B (Korean)",
    "ollama-hyperclovax-1.5b": "Ollama HyperCLOVAX 1.5B (Korean Lite)",
    "ollama-gemma2": "Ollama Gemma2",
    "ollama-gemma2-sapie": "Ollama Gemma2 Sapie (Korean)",
    "ollama-exaone3.5": "Ollama Exaone3.5 (Korean)",
}

# Local models are tried before paid or rate-limited alternatives
_HOSTED_FALLBACK = [
    "ollama-kanana-1.5", "ollama-gemma2-sapie", "ollama-exaone3.5",
    "ollama-gemma2", "ollama-hyperclovax", "ollama-hyperclovax-1.5b",
]

FALLBACK_ORDER: Dict[str, List[str]] = {
    "ollama-gemma2-sapie": ["ollama-kanana-1.5", "ollama-exaone3.5", "ollama-gemma2",
                            "ollama-hyperclovax", "ollama-hyperclovax-1.5b"],
    "ollama-kanana-1.5": ["ollama-gemma2-sapie", "ollama-exaone3.5", "ollama-gemma2",
                          "ollama-hyperclovax", "ollama-hyperclovax-1.5b"],
    "ollama-exaone3.5": ["ollama-kanana-1.5", "ollama-gemma2-sapie", "ollama-gemma2",
                         "ollama-hyperclovax", "ollama-hyperclovax-1.5b"],
    "ollama-gemma2": ["ollama-kanana-1.5", "ollama-gemma2-sapie", "ollama-exaone3.5",
                      "ollama-hyperclovax", "ollama-hyperclovax-1.5b"],
    "ollama-hyperclovax": ["ollama-kanana-1.5", "ollama-gemma2-sapie", "ollama-exaone3.5",
                           "ollama-gemma2", "ollama-hyperclovax-1.5b"],
    "ollama-hyperclovax-1.5b": ["ollama-kanana-1.5", "ollama-gemma2-sapie", "ollama-exaone3.5",
                                "ollama-gemma2", "ollama-hyperclovax"],
    "gemini": _HOSTED_FALLBACK,
    "groq": _HOSTED_FALLBACK,
    "openai": _HOSTED_FALLBACK,
    "claude": _HOSTED_FALLBACK,
    "deepl": _HOSTED_FALLBACK,
    "google": _HOSTED_FALLBACK,
    "mymemory": _HOSTED_FALLBACK,
    "libre": _HOSTED_FALLBACK,
}

DEFAULT_FALLBACK = [
    "ollama-gemma2-sapie", "ollama-kanana-1.5", "ollama-exaone3.5",
    "ollama-gemma2", "ollama-hyperclovax", "ollama-hyperclovax-1.5b",
]

KNOWN_ENGINES = LOCAL_ENGINES + FREE_ENGINES + HOSTED_ENGINES


class EngineGateway:
    """
    Uniform access to the registered translation engines.

    The gateway dispatches by engine id and normalizes failures to
    EngineError. It never retries; that is the chunk translator's job.
    """

    def __init__(self, registry: Mapping[str, TranslationProvider]):
        self.registry: Dict[str, TranslationProvider] = dict(registry)

    @classmethod
    def from_settings(cls, settings=None) -> "EngineGateway":
        """Build a gateway with every engine the settings make usable"""
        from . import build_registry
        from ..config import EngineSettings

        return cls(build_registry(settings or EngineSettings.from_env()))

    async def translate(self, text: str, target_lang: str, source_lang: Optional[str],
                        engine_id: str) -> TranslationResult:
        """
        Translate text with one engine.

        Raises:
            MissingCredential: Engine is not registered
            EngineError: The engine call failed
        """
        if not text or not text.strip():
            raise ProviderError("No text to translate", engine_id)

        provider = self.registry.get(engine_id)
        if provider is None:
            if engine_id in KNOWN_ENGINES:
                raise MissingCredential(f"Engine '{engine_id}' is not configured", engine_id)
            raise MissingCredential(f"Unknown translation engine: {engine_id}", engine_id)

        start_time = time.time()
        logger.debug(
            f"Calling {engine_id}: {source_lang or 'auto'} -> {target_lang}, "
            f"{len(text)} chars, '{preview(text, 100)}'"
        )

        try:
            result = await provider.translate(text, target_lang, source_lang)
        except EngineError as e:
            if e.engine is None:
                e.engine = engine_id
            logger.warning(f"{engine_id} failed: {e}")
            raise
        except Exception as e:
            logger.warning(f"{engine_id} failed unexpectedly: {e}")
            raise ProviderError(f"{engine_id} translation failed: {e}", engine_id) from e

        duration = time.time() - start_time
        result.engine = engine_id
        rate = round(len(text) / duration) if duration > 0 else 0
        logger.debug(
            f"{engine_id} done in {duration:.2f}s ({rate} chars/s): "
            f"'{preview(result.translated_text, 100)}'"
        )
        return result

    def get_fallback_engines(self, primary_engine: str) -> List[str]:
        """Fixed fallback order for an engine; never contains the engine itself"""
        engines = FALLBACK_ORDER.get(primary_engine, DEFAULT_FALLBACK)
        return [engine for engine in engines if engine != primary_engine]

    def available_engines(self) -> List[str]:
        """Registered engines, local ones first"""
        ordered = [engine for engine in KNOWN_ENGINES if engine in self.registry]
        extra = [engine for engine in self.registry if engine not in KNOWN_ENGINES]
        return ordered + extra

    def engine_names(self) -> Dict[str, str]:
        """Display names of the available engines"""
        names = {}
        for engine in self.available_engines():
            provider = self.registry[engine]
            names[engine] = ENGINE_NAMES.get(engine, provider.display_name)
        return names
