"""Pytest configuration and shared fixtures."""

from datetime import timedelta
from typing import Callable, Dict, List, Optional

import pytest

from subtitle_translator.models import SubtitleEntry, TranslationOptions, TranslationResult
from subtitle_translator.translators.base import TranslationProvider
from subtitle_translator.translators.gateway import EngineGateway
from subtitle_translator.utils.progress import ProgressTracker


class FakeProvider(TranslationProvider):
    """
    In-memory engine.

    `handler(text, target_lang, source_lang)` returns the translation or
    raises; every payload received is recorded in `calls`.
    """

    def __init__(self, engine_id: str, handler: Optional[Callable] = None):
        super().__init__(engine_id, f"Fake {engine_id}")
        self.handler = handler or (lambda text, target_lang, source_lang: text.upper())
        self.calls: List[str] = []

    async def translate(self, text, target_lang, source_lang=None):
        self.calls.append(text)
        translated = self.handler(text, target_lang, source_lang)
        return TranslationResult(translated_text=translated, engine=self.engine_id)


class FakeClock:
    """Manually advanced time source for the progress tracker."""

    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


def make_entries(*texts: str) -> List[SubtitleEntry]:
    return [
        SubtitleEntry(
            index=i,
            start=timedelta(seconds=i * 2),
            end=timedelta(seconds=i * 2 + 1),
            text=text,
        )
        for i, text in enumerate(texts, start=1)
    ]


@pytest.fixture
def fake_provider():
    """FakeProvider class, for building engines inside tests."""
    return FakeProvider


@pytest.fixture
def gateway_factory():
    """Build an EngineGateway from FakeProviders keyed by engine id."""

    def build(providers: Dict[str, FakeProvider]) -> EngineGateway:
        return EngineGateway(providers)

    return build


@pytest.fixture
def entries_factory():
    return make_entries


@pytest.fixture
def three_entries():
    return make_entries("Hello", "World", "Goodbye")


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def tracker(fake_clock):
    return ProgressTracker(ttl=60, clock=fake_clock)


@pytest.fixture
def fast_options():
    """Options with the shortest retry pause and no fallback."""

    def build(**overrides) -> TranslationOptions:
        values = {
            "target_lang": "en",
            "source_lang": "ko",
            "engine": "primary",
            "max_retries": 1,
            "retry_delay": 100,
            "enable_fallback": False,
        }
        values.update(overrides)
        return TranslationOptions(**values)

    return build
