#!/usr/bin/env python
# -*- coding: utf-8 -*-

"""
Setup script for Subtitle Translator package.
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

setup(
    name="subtitle-translator",
    version="1.0.0",
    author="Subtitle Translator Team",
    description="Translate SRT, SMI and VTT subtitle files with local and hosted translation engines",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.9",
    install_requires=[
        "srt>=3.5.0",
        "deep-translator>=1.10.1",
        "requests>=2.25.1",
        "langdetect>=1.0.9",
        "rich>=13.0.0",
        "typer>=0.9.0",
        "pydantic>=2.0.0",
        "httpx>=0.24.0",
        "ollama>=0.2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-asyncio>=0.21.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "subtitle-translator=subtitle_translator.cli:main",
        ],
    },
)
