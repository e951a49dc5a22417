#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Base translator classes that all engine adapters inherit from.
"""

import time
import asyncio
import threading
import logging
from abc import ABC, abstractmethod
from typing import Dict, Optional

from ..models import TranslationResult

# Get logger
logger = logging.getLogger("subtitle_translator")


class TranslationProvider(ABC):
    """
    One translation engine.

    Adapters raise EngineError subclasses on failure and never retry;
    retrying is left to the chunk translator.
    """

    def __init__(self, engine_id: str, display_name: Optional[str] = None):
        self.engine_id = engine_id
        self.display_name = display_name or engine_id

    @abstractmethod
    async def translate(self, text: str, target_lang: str, source_lang: Optional[str] = None) -> TranslationResult:
        """Translate text to target_lang; source_lang None or 'auto' means detect"""

    def get_provider_name(self) -> str:
        return self.__class__.__name__.replace("Translator", "")


class MachineTranslationProvider(TranslationProvider):
    """
    Base class for providers backed by blocking HTTP libraries.

    The blocking call runs in a worker thread. Requests to the same
    provider are spaced by an adaptive delay that grows on errors and
    shrinks slowly after a run of successes.
    """

    def __init__(self, engine_id: str, display_name: Optional[str] = None, timeout: float = 30.0):
        super().__init__(engine_id, display_name)
        self.timeout = timeout
        # Rate limiting parameters
        self.min_delay = 0.2  # Minimum delay between requests (seconds)
        self.max_delay = 2.0  # Maximum delay between requests (seconds)
        self.current_delay = 0.5  # Current adaptive delay
        self.last_request_time = 0  # Last request timestamp
        self.rate_limit_lock = threading.RLock()
        # Stats
        self.success_count = 0
        self.error_count = 0

    def wait_for_rate_limit(self):
        """Wait appropriate time to respect rate limits"""
        with self.rate_limit_lock:
            now = time.time()
            elapsed = now - self.last_request_time
            wait_time = max(0, self.current_delay - elapsed)

            if wait_time > 0:
                time.sleep(wait_time)

            self.last_request_time = time.time()

    def adjust_rate_limit(self, success: bool):
        """Adjust rate limiting based on success/failure"""
        with self.rate_limit_lock:
            if success:
                self.success_count += 1
                # After several successful requests, try reducing delay slightly
                if self.success_count % 10 == 0 and self.error_count == 0:
                    self.current_delay = max(self.min_delay, self.current_delay * 0.9)
            else:
                self.error_count += 1
                self.current_delay = min(self.max_delay, self.current_delay * 1.5)

    async def translate(self, text: str, target_lang: str, source_lang: Optional[str] = None) -> TranslationResult:
        return await asyncio.to_thread(self._translate_blocking, text, target_lang, source_lang)

    def _translate_blocking(self, text: str, target_lang: str, source_lang: Optional[str]) -> TranslationResult:
        self.wait_for_rate_limit()
        try:
            translated = self._translate_implementation(text, target_lang, source_lang)
        except Exception:
            self.adjust_rate_limit(False)
            raise
        self.adjust_rate_limit(True)
        return TranslationResult(translated_text=translated, engine=self.engine_id)

    @abstractmethod
    def _translate_implementation(self, text: str, target_lang: str, source_lang: Optional[str]) -> str:
        """Actual blocking translation, implemented by subclasses"""

    def get_stats(self) -> Dict[str, float]:
        """Get translation statistics"""
        return {
            "success_count": self.success_count,
            "error_count": self.error_count,
            "current_delay": round(self.current_delay, 2)
        }
