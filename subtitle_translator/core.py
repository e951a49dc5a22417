#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Core translation functionality for Subtitle Translator.
"""

import time
import asyncio
import logging
from typing import Callable, List, Optional, Sequence, Tuple, Union

from .chunk_translator import ChunkTranslator
from .exceptions import EngineError, JobError, SubtitleFormatError
from .models import (
    ChunkOutcome,
    JobResult,
    JobStats,
    SubtitleEntry,
    TranslationOptions,
    failure_placeholder,
)
from .translators.gateway import EngineGateway
from .utils.progress import ProgressTracker
from .utils.subtitle_codec import (
    generate_output_filename,
    generate_subtitle,
    parse_subtitle,
    write_subtitle_file,
)
from .utils.text import (
    contains_hangul,
    detect_language,
    extract_text_for_language_detection,
    get_language_name,
    normalize_language_code,
    preview,
)

# Get logger
logger = logging.getLogger("subtitle_translator")

# Pause between chunks (seconds)
CHUNK_PAUSE = 0.2

ProgressCallback = Callable[[int, int], None]


def split_into_chunks(entries: Sequence[SubtitleEntry], chunk_size: int) -> List[List[SubtitleEntry]]:
    """Split entries into consecutive chunks of at most chunk_size"""
    return [list(entries[i:i + chunk_size]) for i in range(0, len(entries), chunk_size)]


async def retranslate_leaked_entry(gateway: EngineGateway, entry: SubtitleEntry,
                                   options: TranslationOptions) -> str:
    """
    Translate a single entry again after Korean text leaked into English output.

    Tries the primary engine, then its fallback engines when fallback is
    enabled. Returns a placeholder when every engine fails.
    """
    engines = [options.engine]
    if options.enable_fallback:
        engines.extend(gateway.get_fallback_engines(options.engine))

    for engine in engines:
        try:
            result = await gateway.translate(entry.text, options.target_lang, options.source_lang, engine)
            logger.info(f"Entry {entry.index} retranslated with {engine}: '{preview(result.translated_text)}'")
            return result.translated_text.strip()
        except EngineError as e:
            logger.warning(f"Retranslation of entry {entry.index} with {engine} failed: {e}")

    logger.error(f"Retranslation of entry {entry.index} failed with every engine")
    return failure_placeholder(entry.text)


async def run_translation_job(
    job_id: str,
    entries: Sequence[SubtitleEntry],
    source_format: str,
    options: TranslationOptions,
    *,
    gateway: EngineGateway,
    progress: ProgressTracker,
    chunk_pause: float = CHUNK_PAUSE,
    progress_callback: Optional[ProgressCallback] = None,
) -> JobResult:
    """
    Translate all subtitle entries of a job, chunk by chunk.

    Chunks run strictly in order. Translation failures never abort the
    job; affected entries carry a failure placeholder instead.

    Args:
        job_id: Progress tracker key
        entries: Parsed subtitle entries
        source_format: Format the entries were parsed from
        options: Job options
        gateway: Engine gateway used for every request
        progress: Tracker receiving progress updates
        chunk_pause: Seconds to wait between chunks
        progress_callback: Optional callback(processed_entries, total_entries)

    Returns:
        JobResult with the translated entries and statistics

    Raises:
        JobError: Missing target language or no entries
    """
    if not options.target_lang:
        raise JobError("Target language is required")
    if not entries:
        raise JobError("No subtitle entries to translate")

    options = options.model_copy(update={"source_format": source_format})
    total_entries = len(entries)
    total_characters = sum(len(entry.text) for entry in entries)
    progress.initialize(job_id, total_entries, total_characters)

    try:
        return await _translate_job(
            job_id, entries, options, gateway, progress, chunk_pause, progress_callback,
            total_entries, total_characters,
        )
    except Exception as e:
        progress.set_error(job_id, f"Translation failed: {e}")
        raise


async def _translate_job(job_id, entries, options, gateway, progress, chunk_pause, progress_callback,
                         total_entries, total_characters) -> JobResult:
    start_time = time.time()
    chunks = split_into_chunks(entries, options.chunk_size)
    total_chunks = len(chunks)
    translator = ChunkTranslator(gateway)

    logger.info(
        f"Job {job_id}: {total_entries} entries in {total_chunks} chunks "
        f"({options.source_lang} -> {options.target_lang}, {options.engine}, {options.translation_mode})"
    )

    translated_entries: List[SubtitleEntry] = []
    outcomes: List[ChunkOutcome] = []
    processed_entries = 0
    processed_characters = 0
    retranslated = 0

    for chunk_index, chunk in enumerate(chunks, start=1):
        chunk_chars = sum(len(entry.text) for entry in chunk)
        progress.set_chunk_status(job_id, chunk_index, total_chunks, len(chunk), chunk_chars)

        result = await translator.translate_chunk(chunk, options, chunk_index, total_chunks)
        outcomes.append(ChunkOutcome(
            chunk_index=chunk_index,
            entries=len(chunk),
            success=result.success,
            used_engine=result.used_engine,
            strategy=result.strategy,
            error=result.error,
        ))

        for entry, text in zip(chunk, result.translated_texts):
            text = text.strip()
            if options.target_lang == "en" and contains_hangul(text):
                logger.warning(f"Korean text left in entry {entry.index}: '{preview(text)}'")
                text = await retranslate_leaked_entry(gateway, entry, options)
                retranslated += 1
            translated_entries.append(entry.with_text(text))

        processed_entries += len(chunk)
        processed_characters += chunk_chars
        snapshot = progress.update(
            job_id,
            processed_entries=processed_entries,
            processed_characters=processed_characters,
            current_chunk=chunk_index,
            total_chunks=total_chunks,
        )
        if snapshot is not None:
            logger.info(snapshot.message)
        if progress_callback:
            progress_callback(processed_entries, total_entries)

        if chunk_index < total_chunks and chunk_pause > 0:
            await asyncio.sleep(chunk_pause)

    total_time = time.time() - start_time
    chars_per_second = round(total_characters / total_time) if total_time > 0 else 0
    progress.complete(job_id, total_time, chars_per_second)

    failed_chunks = sum(1 for outcome in outcomes if not outcome.success)
    if failed_chunks:
        logger.warning(f"Job {job_id}: {failed_chunks}/{total_chunks} chunks failed")

    stats = JobStats(
        total_time=total_time,
        total_entries=total_entries,
        total_characters=total_characters,
        average_chars_per_second=chars_per_second,
        total_chunks=total_chunks,
        failed_chunks=failed_chunks,
        retranslated_entries=retranslated,
        chunks=outcomes,
    )
    return JobResult(translated_entries=translated_entries, stats=stats)


async def translate_subtitle_content(
    job_id: str,
    content: Union[bytes, str],
    declared_format: str,
    options: TranslationOptions,
    *,
    gateway: EngineGateway,
    progress: ProgressTracker,
    output_format: Optional[str] = None,
    title: Optional[str] = None,
    chunk_pause: float = CHUNK_PAUSE,
    progress_callback: Optional[ProgressCallback] = None,
) -> Tuple[str, JobResult]:
    """
    Parse subtitle content, translate it and generate the output document.

    Args:
        job_id: Progress tracker key
        content: Raw subtitle file content
        declared_format: Format name, extension or filename
        options: Job options
        output_format: Output format (default: the input format)
        title: SMI document title (default: "Translated to <language>")

    Returns:
        Tuple of (generated subtitle text, JobResult)

    Raises:
        JobError: Unparseable input or missing parameters
    """
    try:
        fmt, entries = parse_subtitle(content, declared_format)
    except SubtitleFormatError as e:
        raise JobError(f"Failed to parse subtitle file: {e}") from e

    logger.info(f"Parsed {len(entries)} {fmt.upper()} entries")
    result = await run_translation_job(
        job_id, entries, fmt, options,
        gateway=gateway,
        progress=progress,
        chunk_pause=chunk_pause,
        progress_callback=progress_callback,
    )

    title = title or f"Translated to {get_language_name(options.target_lang)}"
    try:
        output = generate_subtitle(result.translated_entries, output_format or fmt, title)
    except SubtitleFormatError as e:
        raise JobError(f"Failed to generate subtitle file: {e}") from e
    return output, result


async def translate_subtitle_file(
    job_id: str,
    input_path: str,
    output_path: Optional[str] = None,
    options: Optional[TranslationOptions] = None,
    *,
    gateway: EngineGateway,
    progress: ProgressTracker,
    output_format: Optional[str] = None,
    chunk_pause: float = CHUNK_PAUSE,
    progress_callback: Optional[ProgressCallback] = None,
) -> Tuple[str, JobResult]:
    """
    Translate a subtitle file and write the result next to it.

    Returns:
        Tuple of (output path, JobResult)
    """
    if options is None:
        raise JobError("Target language is required")

    try:
        with open(input_path, "rb") as f:
            content = f.read()
    except OSError as e:
        raise JobError(f"Cannot read subtitle file {input_path}: {e}") from e

    output, result = await translate_subtitle_content(
        job_id, content, input_path, options,
        gateway=gateway,
        progress=progress,
        output_format=output_format,
        chunk_pause=chunk_pause,
        progress_callback=progress_callback,
    )

    if not output_path:
        output_path = generate_output_filename(input_path, options.target_lang, options.engine, output_format)
    write_subtitle_file(output, output_path)
    return output_path, result


def detect_subtitle_language(entries: Sequence[SubtitleEntry]) -> Optional[str]:
    """
    Detect the language of subtitles.

    Args:
        entries: Subtitle entries

    Returns:
        Detected language code or None if detection failed
    """
    if not entries:
        logger.warning("No subtitles to detect language from")
        return None

    # Extract text for language detection
    sample_text = extract_text_for_language_detection([entry.text for entry in entries])

    # Detect language
    detected_lang = detect_language(sample_text)

    if detected_lang:
        logger.info(f"Detected subtitle language: {detected_lang}")
        return normalize_language_code(detected_lang)
    else:
        logger.warning("Failed to detect subtitle language")
        return None


__all__ = [
    "run_translation_job",
    "translate_subtitle_content",
    "translate_subtitle_file",
    "detect_subtitle_language",
    "split_into_chunks",
]
