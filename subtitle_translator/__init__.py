#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Subtitle Translator: translate SRT, SMI and VTT subtitles chunk by chunk
with local Ollama models, hosted LLM APIs and machine translation services.
"""

__version__ = "1.0.0"
