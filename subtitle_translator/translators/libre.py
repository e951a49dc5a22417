#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
LibreTranslate API provider - completely free and open source.
"""

import logging
from typing import Optional

import requests

from ..exceptions import ConnectionRefused, ProviderError, UnsupportedLanguage
from ..utils.text import is_auto_language, preview
from .base import MachineTranslationProvider

# Get logger
logger = logging.getLogger("subtitle_translator")


class LibreTranslator(MachineTranslationProvider):
    """LibreTranslate API provider - completely free and open source"""

    def __init__(self, engine_id: str = "libre",
                 api_url: str = "https://translate.argosopentech.com/translate",
                 api_key: str = "", timeout: float = 30.0):
        super().__init__(engine_id, "LibreTranslate", timeout=timeout)
        self.api_url = api_url
        self.api_key = api_key
        # LibreTranslate needs more conservative rate limiting
        self.min_delay = 0.5
        self.current_delay = 0.8

    def _translate_implementation(self, text: str, target_lang: str, source_lang: Optional[str]) -> str:
        payload = {
            "q": text,
            "source": "auto" if is_auto_language(source_lang) else source_lang,
            "target": target_lang,
            "format": "text",
            "api_key": self.api_key
        }

        try:
            response = requests.post(self.api_url, json=payload, timeout=self.timeout)
        except requests.exceptions.ConnectionError as e:
            raise ConnectionRefused(f"Cannot reach LibreTranslate at {self.api_url}: {e}", self.engine_id) from e
        except requests.exceptions.RequestException as e:
            raise ProviderError(f"LibreTranslate request failed: {e}", self.engine_id) from e

        if response.status_code == 400 and "language" in response.text.lower():
            raise UnsupportedLanguage(f"LibreTranslate rejected the language pair: {response.text}", self.engine_id)
        try:
            response.raise_for_status()
            data = response.json()
        except (requests.exceptions.HTTPError, ValueError) as e:
            raise ProviderError(f"LibreTranslate request failed: {e}", self.engine_id) from e

        translated = data.get('translatedText', '')
        if not translated:
            logger.warning(f"LibreTranslate returned empty result for '{preview(text, 30)}'")
            raise ProviderError("LibreTranslate returned empty result", self.engine_id)
        return translated
