#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Translation of free-standing texts, one at a time or in small batches.
"""

import asyncio
import logging
from typing import List, Optional, Sequence

from .exceptions import EngineError
from .models import BatchItem, BatchResult, TranslationResult
from .translators.gateway import EngineGateway

# Get logger
logger = logging.getLogger("subtitle_translator")

MAX_TEXT_LENGTH = 5000
MAX_BATCH_SIZE = 20


async def translate_text(
    gateway: EngineGateway,
    text: str,
    target_lang: str,
    source_lang: Optional[str] = "auto",
    engine: str = "ollama-gemma2-sapie",
    enable_fallback: bool = True,
) -> TranslationResult:
    """
    Translate one text, falling back to other engines on failure.

    Only fallback engines that are registered in the gateway are tried.

    Raises:
        ValueError: Empty text, missing target language or text too long
        EngineError: The last engine failure when every engine failed
    """
    if not text or not text.strip():
        raise ValueError("Text is required")
    if not target_lang:
        raise ValueError("Target language is required")
    if len(text) > MAX_TEXT_LENGTH:
        raise ValueError(f"Text is too long ({len(text)} chars, maximum {MAX_TEXT_LENGTH})")

    engines = [engine]
    if enable_fallback:
        available = set(gateway.available_engines())
        engines.extend(e for e in gateway.get_fallback_engines(engine) if e in available)

    last_error = None
    for engine_id in engines:
        try:
            return await gateway.translate(text, target_lang, source_lang, engine_id)
        except EngineError as e:
            logger.warning(f"Text translation with {engine_id} failed: {e}")
            last_error = e

    raise last_error


async def translate_texts(
    gateway: EngineGateway,
    texts: Sequence[str],
    target_lang: str,
    source_lang: Optional[str] = "auto",
    engine: str = "ollama-gemma2-sapie",
    enable_fallback: bool = True,
    max_concurrency: int = 5,
) -> BatchResult:
    """
    Translate several independent texts concurrently.

    Each text succeeds or fails on its own; results keep the input order.

    Raises:
        ValueError: No texts or more than MAX_BATCH_SIZE texts
    """
    if not texts:
        raise ValueError("At least one text is required")
    if len(texts) > MAX_BATCH_SIZE:
        raise ValueError(f"Too many texts ({len(texts)}, maximum {MAX_BATCH_SIZE})")

    semaphore = asyncio.Semaphore(max(1, max_concurrency))

    async def run(index: int, text: str) -> BatchItem:
        async with semaphore:
            try:
                result = await translate_text(gateway, text, target_lang, source_lang, engine, enable_fallback)
            except (EngineError, ValueError) as e:
                return BatchItem(index=index, success=False, original_text=text, error=str(e))
            return BatchItem(
                index=index,
                success=True,
                original_text=text,
                translated_text=result.translated_text,
                engine=result.engine,
            )

    results: List[BatchItem] = await asyncio.gather(*(run(i, text) for i, text in enumerate(texts)))
    successful = sum(1 for item in results if item.success)
    logger.info(f"Batch translation: {successful}/{len(results)} texts translated")

    return BatchResult(
        results=results,
        summary={"total": len(results), "successful": successful, "failed": len(results) - successful},
    )
