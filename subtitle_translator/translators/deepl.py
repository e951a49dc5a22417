#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
DeepL API provider.
"""

import logging
from typing import Optional

import requests

from ..exceptions import ConnectionRefused, MissingCredential, ProviderError, UnsupportedLanguage
from ..utils.text import is_auto_language
from .base import MachineTranslationProvider

# Get logger
logger = logging.getLogger("subtitle_translator")

DEEPL_LANGUAGE_CODES = {
    'ko': 'KO',
    'en': 'EN',
    'ja': 'JA',
    'zh': 'ZH',
    'es': 'ES',
    'fr': 'FR',
    'de': 'DE',
    'it': 'IT',
    'pt': 'PT',
    'ru': 'RU',
}


class DeeplTranslator(MachineTranslationProvider):
    """DeepL REST API provider; free-tier keys (ending in ':fx') use the free endpoint"""

    def __init__(self, api_key: str, engine_id: str = "deepl", timeout: float = 30.0):
        super().__init__(engine_id, "DeepL", timeout=timeout)
        if not api_key:
            raise MissingCredential("DeepL API key is not configured", engine_id)
        self.api_key = api_key
        if api_key.endswith(":fx"):
            self.api_url = "https://api-free.deepl.com/v2/translate"
        else:
            self.api_url = "https://api.deepl.com/v2/translate"

    def _translate_implementation(self, text: str, target_lang: str, source_lang: Optional[str]) -> str:
        target = DEEPL_LANGUAGE_CODES.get(target_lang)
        if not target:
            raise UnsupportedLanguage(f"DeepL does not support target language: {target_lang}", self.engine_id)

        payload = {"text": [text], "target_lang": target}
        if not is_auto_language(source_lang):
            source = DEEPL_LANGUAGE_CODES.get(source_lang)
            if not source:
                raise UnsupportedLanguage(f"DeepL does not support source language: {source_lang}", self.engine_id)
            payload["source_lang"] = source

        try:
            response = requests.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"DeepL-Auth-Key {self.api_key}"},
                timeout=self.timeout,
            )
        except requests.exceptions.ConnectionError as e:
            raise ConnectionRefused(f"Cannot reach DeepL: {e}", self.engine_id) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"DeepL request failed: {e}", self.engine_id) from e

        if response.status_code == 403:
            raise MissingCredential("DeepL rejected the API key", self.engine_id)
        try:
            response.raise_for_status()
            translations = response.json()["translations"]
        except (requests.exceptions.HTTPError, ValueError, KeyError) as e:
            raise ProviderError(f"DeepL translation failed: {e}", self.engine_id) from e

        if not translations:
            raise ProviderError("DeepL returned no translations", self.engine_id)
        return translations[0].get("text", "")
