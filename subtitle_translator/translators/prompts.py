#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Prompt construction for LLM translation engines.

The payload shape decides the instruction set: an SRT block keeps its
numbering and timestamps, a separator-joined payload keeps its separators,
anything else is translated as plain text.
"""

import re
from typing import Optional, Tuple

from ..utils.text import get_language_name, is_auto_language

# Separator joining the entries of a chunk in the separator strategy
SUBTITLE_SEPARATOR = "---SUBTITLE_SEPARATOR---"
SEPARATOR_JOINER = f"\n{SUBTITLE_SEPARATOR}\n"

SRT_BLOCK_PATTERN = re.compile(
    r"^\d+\s*\n\d{2}:\d{2}:\d{2}[,.]\d{3}\s*-->\s*\d{2}:\d{2}:\d{2}[,.]\d{3}",
    re.MULTILINE,
)

SRT_SYSTEM_PROMPT = """You are a professional subtitle translator specializing in SRT format.

CRITICAL RULES - FOLLOW EXACTLY:
1. NEVER modify subtitle numbers (1, 2, 3, etc.)
2. NEVER modify timestamps (00:00:01,000 --> 00:00:03,000)
3. NEVER modify the SRT structure or formatting
4. ONLY translate the text content lines
5. Keep empty lines exactly as they are
6. Maintain the exact same number of subtitle entries
7. Output the complete SRT format with translated text

TRANSLATION QUALITY:
- Use natural, conversational language for subtitles
- Keep translations concise and readable
- Preserve emotional tone and context
- Use culturally appropriate expressions
- Maintain consistency throughout"""

SEPARATOR_SYSTEM_PROMPT = f"""You are a professional subtitle translator.
CRITICAL RULES:
1. NEVER modify, remove, or change the "{SUBTITLE_SEPARATOR}" markers
2. ALWAYS preserve the exact separator format: "{SUBTITLE_SEPARATOR}"
3. Translate each subtitle segment individually
4. Maintain the exact same number of segments
5. Do NOT summarize or combine subtitles
6. Do NOT add explanations or commentary
7. Output ONLY the translated text with separators preserved

IMPORTANT: Each subtitle is separated by "{SUBTITLE_SEPARATOR}".
You must keep these separators EXACTLY as they are between translated segments."""

TEXT_SYSTEM_PROMPT = (
    "You are a professional translator. Translate the following text accurately and "
    "naturally while preserving the original meaning and tone."
)


def is_srt_payload(text: str) -> bool:
    """Check whether text looks like one or more SRT blocks"""
    return SRT_BLOCK_PATTERN.search(text) is not None


def is_separator_payload(text: str) -> bool:
    return SUBTITLE_SEPARATOR in text


def build_prompts(text: str, target_lang: str, source_lang: Optional[str] = None) -> Tuple[str, str]:
    """
    Build the system prompt and user prompt for a payload.

    Args:
        text: Payload to translate
        target_lang: Target language code
        source_lang: Source language code, None or 'auto'

    Returns:
        Tuple of (system_prompt, prompt)
    """
    target_language = get_language_name(target_lang)
    has_source = not is_auto_language(source_lang)
    source_language = get_language_name(source_lang) if has_source else None

    if is_srt_payload(text):
        direction = (
            f"from {source_language} to {target_language}" if has_source else f"to {target_language}"
        )
        prompt = (
            f"Translate ALL subtitle text content {direction}.\n\n"
            "Keep ALL numbers and timestamps EXACTLY as they are.\n"
            "Only translate the text lines.\n"
            "Maintain the exact SRT format.\n\n"
            f"{text}"
        )
        return SRT_SYSTEM_PROMPT, prompt

    if is_separator_payload(text):
        direction = (
            f"from {source_language} to {target_language}" if has_source else f"to {target_language}"
        )
        prompt = (
            f"Translate the following text {direction}.\n"
            f'IMPORTANT: Each subtitle is separated by "{SUBTITLE_SEPARATOR}".\n'
            "You must translate each subtitle individually and keep the exact same separators.\n"
            "Do not summarize or combine subtitles. Translate each segment separately and "
            "maintain the exact structure.\n"
            "Only return the translated text with the same separators:\n\n"
            f"{text}"
        )
        return SEPARATOR_SYSTEM_PROMPT, prompt

    if has_source:
        prompt = (
            f"Translate the following text from {source_language} to {target_language}. "
            f"Only return the translated text without any explanations:\n\n{text}"
        )
    else:
        prompt = (
            f"Translate the following text to {target_language}. "
            f"Only return the translated text without any explanations:\n\n{text}"
        )
    return TEXT_SYSTEM_PROMPT, prompt
