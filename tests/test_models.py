"""Unit tests for data models, prompts and text helpers."""

from datetime import timedelta

import pytest
from pydantic import ValidationError

from subtitle_translator.config import EngineSettings
from subtitle_translator.models import (
    BatchItem,
    BatchResult,
    SubtitleEntry,
    TranslationOptions,
    failure_placeholder,
)
from subtitle_translator.translators.prompts import (
    SEPARATOR_SYSTEM_PROMPT,
    SRT_SYSTEM_PROMPT,
    TEXT_SYSTEM_PROMPT,
    build_prompts,
)
from subtitle_translator.utils.text import contains_hangul, get_language_name, preview


class TestTranslationOptions:
    """Test cases for option defaults and clamping."""

    def test_defaults(self):
        options = TranslationOptions(target_lang="en")

        assert options.source_lang == "auto"
        assert options.engine == "ollama-gemma2-sapie"
        assert options.translation_mode == "auto"
        assert options.max_retries == 5
        assert options.retry_delay == 1000
        assert options.enable_fallback is True
        assert options.chunk_size == 50
        assert options.source_format == "srt"

    @pytest.mark.parametrize("field,value,expected", [
        ("chunk_size", 5000, 1000),
        ("chunk_size", -3, 1),
        ("chunk_size", 0, 50),
        ("max_retries", 99, 10),
        ("max_retries", "3", 3),
        ("retry_delay", 10, 100),
        ("retry_delay", 60000, 10000),
        ("retry_delay", "not a number", 1000),
    ])
    def test_clamps_numeric_fields(self, field, value, expected):
        options = TranslationOptions(target_lang="en", **{field: value})

        assert getattr(options, field) == expected

    def test_unknown_mode_becomes_auto(self):
        assert TranslationOptions(target_lang="en", translation_mode="fast").translation_mode == "auto"

    def test_empty_source_lang_becomes_auto(self):
        assert TranslationOptions(target_lang="en", source_lang="").source_lang == "auto"

    def test_enable_fallback_from_string(self):
        assert TranslationOptions(target_lang="en", enable_fallback="false").enable_fallback is False
        assert TranslationOptions(target_lang="en", enable_fallback="true").enable_fallback is True


class TestSubtitleEntry:
    """Test cases for the subtitle entry model."""

    def test_with_text_keeps_timing(self):
        entry = SubtitleEntry(index=3, start=timedelta(seconds=1), end=timedelta(seconds=2), text="원문")

        translated = entry.with_text("Original")

        assert translated.text == "Original"
        assert (translated.index, translated.start, translated.end) == (3, entry.start, entry.end)
        assert entry.text == "원문"

    def test_index_must_be_positive(self):
        with pytest.raises(ValidationError):
            SubtitleEntry(index=0, start=timedelta(0), end=timedelta(seconds=1))

    def test_failure_placeholder(self):
        assert failure_placeholder("Hello") == "[translation-failed] Hello"


class TestBatchResult:

    def test_partitions_items(self):
        result = BatchResult(
            results=[
                BatchItem(index=0, success=True, original_text="a", translated_text="A", engine="x"),
                BatchItem(index=1, success=False, original_text="b", error="boom"),
            ],
            summary={"total": 2, "successful": 1, "failed": 1},
        )

        assert [item.index for item in result.successful] == [0]
        assert [item.index for item in result.failed] == [1]


class TestEngineSettings:
    """Test cases for environment configuration."""

    def test_reads_environment(self):
        settings = EngineSettings.from_env({
            "OLLAMA_URL": "http://gpu-box:11434",
            "GROQ_API_KEY": "gsk-test",
            "OPENAI_MODEL": "gpt-4o-mini",
            "DEEPL_API_KEY": "",
        })

        assert settings.ollama_url == "http://gpu-box:11434"
        assert settings.groq_api_key == "gsk-test"
        assert settings.openai_model == "gpt-4o-mini"
        assert settings.deepl_api_key is None
        assert settings.local_timeout == 300.0

    def test_empty_environment_uses_defaults(self):
        settings = EngineSettings.from_env({})

        assert settings.ollama_url == "http://localhost:11434"
        assert settings.openai_api_key is None


class TestPrompts:
    """Test cases for prompt selection by payload shape."""

    def test_srt_payload(self):
        system_prompt, prompt = build_prompts("1\n00:00:01,000 --> 00:00:03,000\n안녕\n", "en", "ko")

        assert system_prompt == SRT_SYSTEM_PROMPT
        assert "from Korean to English" in prompt
        assert prompt.endswith("안녕\n")

    def test_separator_payload(self):
        system_prompt, prompt = build_prompts("a\n---SUBTITLE_SEPARATOR---\nb", "ko", "auto")

        assert system_prompt == SEPARATOR_SYSTEM_PROMPT
        assert "to Korean" in prompt
        assert "from" not in prompt.split("\n")[0]

    def test_plain_text_payload(self):
        system_prompt, prompt = build_prompts("Hello", "ja")

        assert system_prompt == TEXT_SYSTEM_PROMPT
        assert prompt.startswith("Translate the following text to Japanese.")
        assert prompt.endswith("Hello")


class TestTextHelpers:

    @pytest.mark.parametrize("text,expected", [
        ("Hello", False),
        ("안녕하세요", True),
        ("Mixed 한국어 text", True),
        ("ㅋㅋㅋ", True),
        ("", False),
    ])
    def test_contains_hangul(self, text, expected):
        assert contains_hangul(text) is expected

    def test_language_name(self):
        assert get_language_name("ko") == "Korean"
        assert get_language_name("xx") == "xx"

    def test_preview_truncates(self):
        assert preview("a" * 60, 10) == "a" * 10 + "..."
