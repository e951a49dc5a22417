#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Engine configuration for Subtitle Translator.
"""

import os
from typing import Mapping, Optional

from pydantic import BaseModel, Field


class EngineSettings(BaseModel):
    """Credentials, endpoints and timeouts of the translation engines"""
    ollama_url: str = Field("http://localhost:11434", description="Ollama server URL")
    openai_api_key: Optional[str] = Field(None, description="OpenAI API key")
    openai_model: str = Field("gpt-4.1-nano", description="OpenAI chat model")
    groq_api_key: Optional[str] = Field(None, description="Groq API key")
    groq_model: str = Field("llama-3.3-70b-versatile", description="Groq chat model")
    gemini_api_key: Optional[str] = Field(None, description="Google Gemini API key")
    gemini_model: str = Field("gemini-1.5-flash", description="Gemini model")
    anthropic_api_key: Optional[str] = Field(None, description="Anthropic API key")
    claude_model: str = Field("claude-3-haiku-20240307", description="Claude model")
    deepl_api_key: Optional[str] = Field(None, description="DeepL API key")
    libre_url: str = Field(
        "https://translate.argosopentech.com/translate",
        description="LibreTranslate API URL"
    )
    libre_api_key: str = Field("", description="LibreTranslate API key (optional)")
    mymemory_email: str = Field("", description="MyMemory contact email (raises the daily limit)")
    # Per-call timeouts in seconds
    local_timeout: float = Field(300.0, description="Timeout for local Ollama models")
    hosted_timeout: float = Field(60.0, description="Timeout for hosted LLM APIs")
    machine_timeout: float = Field(30.0, description="Timeout for machine translation APIs")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "EngineSettings":
        """Build settings from environment variables"""
        env = os.environ if environ is None else environ
        values = {
            "ollama_url": env.get("OLLAMA_URL"),
            "openai_api_key": env.get("OPENAI_API_KEY"),
            "openai_model": env.get("OPENAI_MODEL"),
            "groq_api_key": env.get("GROQ_API_KEY"),
            "groq_model": env.get("GROQ_MODEL"),
            "gemini_api_key": env.get("GEMINI_API_KEY"),
            "gemini_model": env.get("GEMINI_MODEL"),
            "anthropic_api_key": env.get("ANTHROPIC_API_KEY"),
            "claude_model": env.get("CLAUDE_MODEL"),
            "deepl_api_key": env.get("DEEPL_API_KEY"),
            "libre_url": env.get("LIBRETRANSLATE_URL"),
            "libre_api_key": env.get("LIBRETRANSLATE_API_KEY"),
            "mymemory_email": env.get("MYMEMORY_EMAIL"),
        }
        # Unset or empty variables keep the defaults
        return cls(**{key: value for key, value in values.items() if value})
