#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Chunk translation for Subtitle Translator.

A chunk is a short run of consecutive subtitle entries sent to an engine
in one request, either as an SRT document or as texts joined with a
separator token. Failures degrade step by step: retries, per-entry
translation, fallback engines and finally marked placeholders.
"""

import re
import time
import asyncio
import logging
from typing import List, Optional, Sequence

from .exceptions import (
    ChunkExhausted,
    EngineError,
    PERMANENT_ENGINE_ERRORS,
    ValidationMismatch,
)
from .models import ChunkResult, SubtitleEntry, TranslationOptions, failure_placeholder
from .translators.gateway import EngineGateway
from .translators.prompts import SEPARATOR_JOINER, SUBTITLE_SEPARATOR
from .utils.subtitle_codec import generate_srt
from .utils.text import preview

# Get logger
logger = logging.getLogger("subtitle_translator")

SRT_DIRECT = "srt_direct"
SEPARATOR = "separator"
INDIVIDUAL = "individual"

# Longest chunk sent as an SRT document in auto mode
AUTO_SRT_MAX_ENTRIES = 10

INDEX_LINE_PATTERN = re.compile(r"^\d+$")
CODE_FENCE_PATTERN = re.compile(r"^\s*```[\w-]*\s*$", re.MULTILINE)


def resolve_strategy(translation_mode: str, source_format: str, chunk_length: int) -> str:
    """Pick the request strategy for one chunk"""
    if translation_mode == SRT_DIRECT and source_format in ("srt", "vtt"):
        return SRT_DIRECT
    if translation_mode == SEPARATOR:
        return SEPARATOR
    if source_format == "srt" and chunk_length <= AUTO_SRT_MAX_ENTRIES:
        return SRT_DIRECT
    return SEPARATOR


def extract_texts_from_srt(content: str) -> List[str]:
    """
    Pull the text of every block out of an engine's SRT reply.

    Engines often wrap the reply in markdown fences or lose blank lines
    between blocks, so this scans line by line instead of using a strict
    parser. A block is an index line followed by a timestamp line; its
    text runs up to a blank line, a timestamp line or the index line of
    the next block. A digits-only text line ("3", "1999") stays text
    unless a timestamp line follows it. Blocks without text are dropped.
    """
    lines = CODE_FENCE_PATTERN.sub("", content).replace("\r\n", "\n").split("\n")

    def starts_block(position: int) -> bool:
        return (
            bool(INDEX_LINE_PATTERN.match(lines[position].strip()))
            and position + 1 < len(lines)
            and "-->" in lines[position + 1]
        )

    texts = []
    i = 0

    while i < len(lines):
        if not starts_block(i):
            i += 1
            continue

        i += 2
        text_lines = []
        while i < len(lines):
            current = lines[i].strip()
            if not current or "-->" in current or starts_block(i):
                break
            text_lines.append(current)
            i += 1

        if text_lines:
            texts.append("\n".join(text_lines))

    return texts


def split_separator_reply(content: str) -> Optional[List[str]]:
    """Split a separator reply; None when the separator is missing"""
    if SEPARATOR_JOINER in content:
        return content.split(SEPARATOR_JOINER)
    if SUBTITLE_SEPARATOR in content:
        return content.split(SUBTITLE_SEPARATOR)
    return None


class ChunkTranslator:
    """
    Translate chunks of subtitle entries through an engine gateway.

    translate_chunk() never raises for engine failures; the returned
    ChunkResult always holds one text per input entry, in input order.
    """

    def __init__(self, gateway: EngineGateway):
        self.gateway = gateway

    async def translate_chunk(self, chunk: Sequence[SubtitleEntry], options: TranslationOptions,
                              chunk_index: int = 1, total_chunks: int = 1) -> ChunkResult:
        """
        Translate one chunk.

        Args:
            chunk: Consecutive subtitle entries
            options: Job options (engine, mode, retries, fallback)
            chunk_index: 1-based chunk number, for logging
            total_chunks: Number of chunks in the job, for logging

        Returns:
            ChunkResult with one translated text per entry
        """
        start_time = time.time()
        chunk_chars = sum(len(entry.text) for entry in chunk)
        strategy = resolve_strategy(options.translation_mode, options.source_format, len(chunk))

        logger.info(
            f"Chunk {chunk_index}/{total_chunks}: {len(chunk)} entries, {chunk_chars} chars "
            f"({strategy}, {options.engine})"
        )

        try:
            texts, used_strategy = await self._run_strategy(strategy, chunk, options, options.engine, chunk_index)
            return self._success(texts, options.engine, used_strategy, start_time, chunk_chars, chunk_index)
        except (EngineError, ValidationMismatch) as e:
            logger.error(f"Chunk {chunk_index} failed with {options.engine}: {e}")
            error = e

        if options.enable_fallback:
            for engine in self.gateway.get_fallback_engines(options.engine):
                logger.info(f"Chunk {chunk_index}: trying fallback engine {engine}")
                try:
                    texts, used_strategy = await self._run_strategy(strategy, chunk, options, engine, chunk_index)
                except (EngineError, ValidationMismatch) as e:
                    logger.warning(f"Chunk {chunk_index}: fallback engine {engine} failed: {e}")
                    error = e
                    continue
                logger.info(f"Chunk {chunk_index}: fallback engine {engine} succeeded")
                return self._success(texts, engine, used_strategy, start_time, chunk_chars, chunk_index)

        exhausted = ChunkExhausted(f"All engines failed for chunk {chunk_index}: {error}")
        logger.error(str(exhausted))
        return ChunkResult(
            success=False,
            translated_texts=[failure_placeholder(entry.text) for entry in chunk],
            strategy=strategy,
            error=str(exhausted),
            duration=time.time() - start_time,
            chars=chunk_chars,
        )

    def _success(self, texts: List[str], engine: str, strategy: str, start_time: float,
                 chunk_chars: int, chunk_index: int) -> ChunkResult:
        duration = time.time() - start_time
        rate = round(chunk_chars / duration) if duration > 0 else 0
        logger.info(f"Chunk {chunk_index} done in {duration:.2f}s ({rate} chars/s, {engine})")
        return ChunkResult(
            success=True,
            translated_texts=texts,
            used_engine=engine,
            strategy=strategy,
            duration=duration,
            chars=chunk_chars,
        )

    async def _run_strategy(self, strategy: str, chunk: Sequence[SubtitleEntry], options: TranslationOptions,
                            engine: str, chunk_index: int):
        if strategy == SRT_DIRECT:
            return await self.translate_srt_direct(chunk, options, engine, chunk_index), SRT_DIRECT
        return await self.translate_with_separator(chunk, options, engine, chunk_index)

    async def translate_srt_direct(self, chunk: Sequence[SubtitleEntry], options: TranslationOptions,
                                   engine: str, chunk_index: int = 1) -> List[str]:
        """
        Send the chunk as an SRT document and read the texts back.

        Entries with blank text are left out of the request and keep
        their original text.

        Raises:
            EngineError: The last engine failure once retries are used up
            ValidationMismatch: The reply never had one block per entry
        """
        positions = [position for position, entry in enumerate(chunk) if entry.text.strip()]
        if not positions:
            return [entry.text for entry in chunk]

        payload = generate_srt([chunk[position] for position in positions])
        logger.debug(f"SRT direct request (chunk {chunk_index}): {len(payload)} chars")

        async def attempt() -> List[str]:
            result = await self.gateway.translate(payload, options.target_lang, options.source_lang, engine)
            texts = extract_texts_from_srt(result.translated_text)
            if len(texts) != len(positions):
                raise ValidationMismatch(len(positions), len(texts))
            return texts

        translated = await self._with_retries(attempt, options, f"SRT direct (chunk {chunk_index}, {engine})")
        merged = [entry.text for entry in chunk]
        for position, text in zip(positions, translated):
            merged[position] = text
        return merged

    async def translate_with_separator(self, chunk: Sequence[SubtitleEntry], options: TranslationOptions,
                                       engine: str, chunk_index: int = 1):
        """
        Send the chunk as separator-joined texts.

        A reply without the separator or with the wrong number of
        segments switches to per-entry translation at once; so does a
        run of engine failures once retries are used up.

        Returns:
            Tuple of (texts, strategy actually used)
        """
        texts = [entry.text for entry in chunk]
        payload = SEPARATOR_JOINER.join(texts)
        logger.debug(f"Separator request (chunk {chunk_index}): {len(payload)} chars")

        async def attempt() -> Optional[List[str]]:
            result = await self.gateway.translate(payload, options.target_lang, options.source_lang, engine)
            return split_separator_reply(result.translated_text)

        try:
            segments = await self._with_retries(attempt, options, f"Separator (chunk {chunk_index}, {engine})")
        except EngineError as e:
            logger.warning(f"Separator translation gave up ({e}), translating entries individually")
            return await self.translate_individually(texts, options, engine), INDIVIDUAL

        if segments is None:
            logger.warning(f"No separator in reply (chunk {chunk_index}), translating entries individually")
            return await self.translate_individually(texts, options, engine), INDIVIDUAL
        if len(segments) != len(chunk):
            logger.warning(
                f"Separator segment count mismatch (chunk {chunk_index}): "
                f"expected={len(chunk)}, actual={len(segments)}; translating entries individually"
            )
            return await self.translate_individually(texts, options, engine), INDIVIDUAL

        return [segment.strip() for segment in segments], SEPARATOR

    async def translate_individually(self, texts: Sequence[str], options: TranslationOptions,
                                     engine: str) -> List[str]:
        """Translate texts one request at a time; failures become placeholders"""
        translated = []
        for text in texts:
            if not text.strip():
                translated.append(text)
                continue
            try:
                result = await self.gateway.translate(text, options.target_lang, options.source_lang, engine)
                translated.append(result.translated_text)
            except EngineError as e:
                logger.error(f"Individual translation failed for '{preview(text)}': {e}")
                translated.append(failure_placeholder(text))
        return translated

    async def _with_retries(self, attempt, options: TranslationOptions, label: str):
        """Run attempt() once plus up to max_retries retries with a fixed pause"""
        attempts = options.max_retries + 1
        for number in range(1, attempts + 1):
            try:
                return await attempt()
            except PERMANENT_ENGINE_ERRORS as e:
                logger.error(f"{label}: {e}")
                raise
            except (EngineError, ValidationMismatch) as e:
                if number >= attempts:
                    raise
                logger.warning(f"{label} failed ({e}); retry {number}/{options.max_retries}")
                await asyncio.sleep(options.retry_delay / 1000)
