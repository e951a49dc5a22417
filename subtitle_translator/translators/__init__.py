#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Translation engines module for Subtitle Translator.
"""

import logging
from typing import Dict, Optional

from ..config import EngineSettings
from .base import TranslationProvider, MachineTranslationProvider
from .deepl import DeeplTranslator
from .gateway import EngineGateway, ENGINE_NAMES, FREE_ENGINES, KNOWN_ENGINES, LOCAL_ENGINES
from .google import GoogleFreeTranslator
from .libre import LibreTranslator
from .llm import ClaudeTranslator, GeminiTranslator, OpenAICompatibleTranslator
from .mymemory import MyMemoryTranslator
from .ollama import OLLAMA_MODELS, OllamaTranslator, check_ollama_status
from .prompts import SUBTITLE_SEPARATOR, build_prompts

# Get logger
logger = logging.getLogger("subtitle_translator")


def build_registry(settings: Optional[EngineSettings] = None) -> Dict[str, TranslationProvider]:
    """
    Build the engine registry from settings.

    Local Ollama models and the free machine translation services are
    always registered; hosted engines only when their API key is set.

    Args:
        settings: Engine settings (default: read from the environment)

    Returns:
        Mapping of engine id to provider
    """
    settings = settings or EngineSettings.from_env()
    registry: Dict[str, TranslationProvider] = {}

    for engine_id, (model, display_name) in OLLAMA_MODELS.items():
        registry[engine_id] = OllamaTranslator(
            engine_id,
            model,
            host=settings.ollama_url,
            display_name=display_name,
            timeout=settings.local_timeout,
        )

    registry["google"] = GoogleFreeTranslator(timeout=settings.machine_timeout)
    registry["mymemory"] = MyMemoryTranslator(email=settings.mymemory_email, timeout=settings.machine_timeout)
    registry["libre"] = LibreTranslator(
        api_url=settings.libre_url,
        api_key=settings.libre_api_key,
        timeout=settings.machine_timeout,
    )

    if settings.gemini_api_key:
        registry["gemini"] = GeminiTranslator(
            "gemini", settings.gemini_api_key, settings.gemini_model,
            display_name="Google Gemini", timeout=settings.hosted_timeout,
        )
    if settings.groq_api_key:
        registry["groq"] = OpenAICompatibleTranslator(
            "groq", settings.groq_api_key, settings.groq_model,
            base_url="https://api.groq.com/openai/v1",
            display_name="Groq", timeout=settings.hosted_timeout,
        )
    if settings.openai_api_key:
        registry["openai"] = OpenAICompatibleTranslator(
            "openai", settings.openai_api_key, settings.openai_model,
            display_name="OpenAI", timeout=settings.hosted_timeout,
        )
    if settings.anthropic_api_key:
        registry["claude"] = ClaudeTranslator(
            "claude", settings.anthropic_api_key, settings.claude_model,
            display_name="Anthropic Claude", timeout=settings.hosted_timeout,
        )
    if settings.deepl_api_key:
        registry["deepl"] = DeeplTranslator(settings.deepl_api_key, timeout=settings.machine_timeout)

    logger.debug(f"Registered engines: {', '.join(registry)}")
    return registry


__all__ = [
    "TranslationProvider",
    "MachineTranslationProvider",
    "EngineGateway",
    "build_registry",
    "build_prompts",
    "check_ollama_status",
    "SUBTITLE_SEPARATOR",
    "ENGINE_NAMES",
    "FREE_ENGINES",
    "KNOWN_ENGINES",
    "LOCAL_ENGINES",
    "OllamaTranslator",
    "OpenAICompatibleTranslator",
    "GeminiTranslator",
    "ClaudeTranslator",
    "DeeplTranslator",
    "GoogleFreeTranslator",
    "MyMemoryTranslator",
    "LibreTranslator",
]
