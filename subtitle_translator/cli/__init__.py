#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Command-line interface for Subtitle Translator.
"""

from .typer_cli import app, main

__all__ = ['app', 'main']
