#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Text processing utilities for Subtitle Translator.
"""

import re
import logging
from typing import List, Optional
from langdetect import detect, LangDetectException

# Get logger
logger = logging.getLogger("subtitle_translator")

# Hangul jamo, compatibility jamo, jamo extended-A/B and syllables
HANGUL_PATTERN = re.compile(r"[\u1100-\u11FF\u3130-\u318F\uA960-\uA97F\uAC00-\uD7AF\uD7B0-\uD7FF]")

# Language names used in prompts and in the CLI
LANGUAGE_NAMES = {
    "ko": "Korean",
    "en": "English",
    "ja": "Japanese",
    "zh": "Chinese",
    "es": "Spanish",
    "fr": "French",
    "de": "German",
    "it": "Italian",
    "pt": "Portuguese",
    "ru": "Russian",
    "nl": "Dutch",
    "pl": "Polish",
    "ar": "Arabic",
    "hi": "Hindi",
    "tr": "Turkish",
    "vi": "Vietnamese",
    "th": "Thai",
    "id": "Indonesian",
    "uk": "Ukrainian",
    "sv": "Swedish",
}


def safe_str(text: str) -> str:
    """Convert text to a safe string representation for logging"""
    if not text:
        return ""

    # Replace problematic characters with their Unicode escape sequences
    result = ""
    for char in text:
        if ord(char) < 32 or ord(char) > 126:
            result += f"\\u{ord(char):04x}"
        else:
            result += char
    return result


def preview(text: str, length: int = 50) -> str:
    """Short log-safe preview of a text"""
    text = text or ""
    suffix = "..." if len(text) > length else ""
    return safe_str(text[:length]) + suffix


def contains_hangul(text: str) -> bool:
    """Check whether text still contains Korean script"""
    return bool(text) and HANGUL_PATTERN.search(text) is not None


def get_language_name(lang_code: Optional[str]) -> str:
    """Get the English language name for a code, or the code itself"""
    if not lang_code:
        return ""
    return LANGUAGE_NAMES.get(normalize_language_code(lang_code), lang_code)


def is_auto_language(lang_code: Optional[str]) -> bool:
    return not lang_code or lang_code.lower() == "auto"


def detect_language(text: str, min_text_length: int = 100) -> Optional[str]:
    """
    Detect the language of a text using langdetect.

    Args:
        text: The text to detect language from
        min_text_length: Minimum text length for reliable detection

    Returns:
        ISO 639-1 language code or None if detection failed
    """
    if not text or len(text) < min_text_length:
        logger.warning(f"Text too short for reliable language detection: {len(text) if text else 0} chars")
        return None

    try:
        return detect(text)
    except LangDetectException as e:
        logger.warning(f"Language detection failed: {e}")
        return None


def normalize_language_code(lang_code: str) -> str:
    """
    Normalize language code to ISO 639-1 format.

    Args:
        lang_code: Language code to normalize

    Returns:
        Normalized ISO 639-1 language code
    """
    mappings = {
        # ISO 639-2/T to ISO 639-1
        "eng": "en",
        "fra": "fr",
        "deu": "de",
        "spa": "es",
        "ita": "it",
        "jpn": "ja",
        "kor": "ko",
        "zho": "zh",
        "rus": "ru",
        # Common variations
        "zh-cn": "zh",
        "zh-tw": "zh",
        "en-us": "en",
        "en-gb": "en",
        "pt-br": "pt",
        "pt-pt": "pt",
    }

    lang_code = lang_code.lower()
    return mappings.get(lang_code, lang_code)


def extract_text_for_language_detection(texts: List[str], sample_size: int = 20) -> str:
    """
    Build a cleaned text sample for language detection.

    Args:
        texts: Subtitle texts
        sample_size: Number of leading texts to use

    Returns:
        Concatenated text without tags, digits or punctuation
    """
    sample_text = " ".join(texts[:sample_size])

    # Remove HTML/XML tags
    sample_text = re.sub(r'<[^>]+>', ' ', sample_text)
    # Keep letters of the common scripts only
    sample_text = re.sub(r'[^a-zA-Z\u00C0-\u00FF\u0400-\u04FF\u3040-\u30FF\u4E00-\u9FFF\uAC00-\uD7AF\s]', ' ', sample_text)
    # Normalize whitespace
    sample_text = re.sub(r'\s+', ' ', sample_text).strip()

    return sample_text
