#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Utility functions for Subtitle Translator.
"""

from .text import safe_str, contains_hangul, detect_language, normalize_language_code, extract_text_for_language_detection
from .progress import ProgressTracker
from .logging_utils import setup_logging
from .subtitle_codec import (
    parse_subtitle,
    generate_subtitle,
    read_subtitle_file,
    write_subtitle_file,
    get_subtitle_statistics,
    generate_output_filename,
)

__all__ = [
    'safe_str',
    'contains_hangul',
    'detect_language',
    'normalize_language_code',
    'extract_text_for_language_detection',
    'ProgressTracker',
    'setup_logging',
    'parse_subtitle',
    'generate_subtitle',
    'read_subtitle_file',
    'write_subtitle_file',
    'get_subtitle_statistics',
    'generate_output_filename',
]
