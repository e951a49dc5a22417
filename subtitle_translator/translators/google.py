#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Google Translate provider using the deep-translator library.
"""

import logging
from typing import Optional

import requests
from deep_translator import GoogleTranslator
from deep_translator.exceptions import LanguageNotSupportedException

from ..exceptions import ConnectionRefused, ProviderError, UnsupportedLanguage
from ..utils.text import is_auto_language, preview
from .base import MachineTranslationProvider

# Get logger
logger = logging.getLogger("subtitle_translator")

# Codes that Google expects in regional form
GOOGLE_LANGUAGE_CODES = {
    "zh": "zh-CN",
    "he": "iw",
}


class GoogleFreeTranslator(MachineTranslationProvider):
    """Google Translate API provider using deep-translator library"""

    def __init__(self, engine_id: str = "google", timeout: float = 30.0):
        super().__init__(engine_id, "Google Translate", timeout=timeout)
        # Google can handle faster requests
        self.min_delay = 0.2
        self.current_delay = 0.3

    def _translate_implementation(self, text: str, target_lang: str, source_lang: Optional[str]) -> str:
        source = "auto" if is_auto_language(source_lang) else GOOGLE_LANGUAGE_CODES.get(source_lang, source_lang)
        target = GOOGLE_LANGUAGE_CODES.get(target_lang, target_lang)

        try:
            translated = GoogleTranslator(source=source, target=target).translate(text)
        except LanguageNotSupportedException as e:
            raise UnsupportedLanguage(f"Google does not support {source} -> {target}: {e}", self.engine_id) from e
        except requests.exceptions.ConnectionError as e:
            raise ConnectionRefused(f"Cannot reach Google Translate: {e}", self.engine_id) from e
        except Exception as e:
            raise ProviderError(f"Google translation failed: {e}", self.engine_id) from e

        if not translated:
            logger.warning(f"Empty translation result for: {preview(text)}")
            raise ProviderError("Google returned an empty result", self.engine_id)
        return translated
