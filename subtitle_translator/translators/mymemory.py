#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
MyMemory free translation API provider.
"""

import logging
from typing import Optional

import requests

from ..exceptions import ConnectionRefused, ProviderError, UnsupportedLanguage
from ..utils.text import detect_language, is_auto_language, preview
from .base import MachineTranslationProvider

# Get logger
logger = logging.getLogger("subtitle_translator")


class MyMemoryTranslator(MachineTranslationProvider):
    """MyMemory free translation API provider"""

    api_url = "https://api.mymemory.translated.net/get"

    def __init__(self, engine_id: str = "mymemory", email: str = "", timeout: float = 30.0):
        super().__init__(engine_id, "MyMemory", timeout=timeout)
        # Email for MyMemory API (optional, increases daily limit)
        self.email = email
        # MyMemory needs more conservative rate limiting
        self.min_delay = 0.5
        self.current_delay = 0.8

    def _translate_implementation(self, text: str, target_lang: str, source_lang: Optional[str]) -> str:
        # MyMemory needs an explicit language pair
        if is_auto_language(source_lang):
            source_lang = detect_language(text, min_text_length=1)
            if not source_lang:
                raise UnsupportedLanguage("MyMemory needs a source language and detection failed", self.engine_id)

        params = {
            'q': text,
            'langpair': f"{source_lang}|{target_lang}"
        }
        if self.email:
            params['de'] = self.email

        try:
            response = requests.get(self.api_url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.ConnectionError as e:
            raise ConnectionRefused(f"Cannot reach MyMemory: {e}", self.engine_id) from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise ProviderError(f"MyMemory request failed: {e}", self.engine_id) from e

        status = data.get('responseStatus')
        if str(status) != "200":
            logger.warning(f"MyMemory translation failed for '{preview(text, 30)}': {status}")
            if "INVALID" in str(data.get('responseDetails', '')).upper():
                raise UnsupportedLanguage(f"MyMemory rejected {source_lang}|{target_lang}", self.engine_id)
            raise ProviderError(f"MyMemory API error: {status}", self.engine_id)

        translated = (data.get('responseData') or {}).get('translatedText')
        if not translated:
            raise ProviderError("MyMemory returned an empty result", self.engine_id)
        return translated
