#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Exception hierarchy for Subtitle Translator.
"""


class SubtitleTranslatorError(Exception):
    """Base class for all package errors"""


class SubtitleFormatError(SubtitleTranslatorError):
    """Raised by the subtitle codec"""


class UnsupportedFormat(SubtitleFormatError):
    """Subtitle format is not one of srt, smi or vtt"""


class MalformedFile(SubtitleFormatError):
    """Subtitle content could not be decoded or contains no entries"""


class EngineError(SubtitleTranslatorError):
    """
    A single translation engine call failed.

    Raised by the engine gateway; the chunk translator always catches it.
    """

    def __init__(self, message: str, engine: str = None):
        super().__init__(message)
        self.engine = engine


class MissingCredential(EngineError):
    """Engine is not configured (no API key or not registered)"""


class UnsupportedLanguage(EngineError):
    """Engine cannot translate between the requested languages"""


class ProviderError(EngineError):
    """Provider returned an error or an unusable response"""


class ConnectionRefused(EngineError):
    """Provider endpoint could not be reached"""


class ValidationMismatch(SubtitleTranslatorError):
    """Translated segment count does not match the chunk size"""

    def __init__(self, expected: int, actual: int):
        super().__init__(f"Text count mismatch: expected={expected}, actual={actual}")
        self.expected = expected
        self.actual = actual


class ChunkExhausted(SubtitleTranslatorError):
    """All retries and fallback engines failed for a chunk"""


class JobError(SubtitleTranslatorError):
    """Job-fatal error: bad input file or missing parameters"""


# Engine errors that retrying the same engine cannot fix
PERMANENT_ENGINE_ERRORS = (MissingCredential, UnsupportedLanguage)
