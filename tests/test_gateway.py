"""Unit tests for the engine gateway and registry."""

import pytest

from subtitle_translator.config import EngineSettings
from subtitle_translator.exceptions import ConnectionRefused, MissingCredential, ProviderError
from subtitle_translator.translators import build_registry
from subtitle_translator.translators.gateway import DEFAULT_FALLBACK, EngineGateway, LOCAL_ENGINES


class TestFallbackOrder:
    """Test cases for the fixed fallback table."""

    def test_hosted_engine_falls_back_to_local_models(self):
        gateway = EngineGateway({})

        assert gateway.get_fallback_engines("groq") == [
            "ollama-kanana-1.5",
            "ollama-gemma2-sapie",
            "ollama-exaone3.5",
            "ollama-gemma2",
            "ollama-hyperclovax",
            "ollama-hyperclovax-1.5b",
        ]

    def test_local_engine_never_lists_itself(self):
        gateway = EngineGateway({})

        for engine in LOCAL_ENGINES:
            fallbacks = gateway.get_fallback_engines(engine)
            assert engine not in fallbacks
            assert len(fallbacks) == len(LOCAL_ENGINES) - 1

    def test_sapie_order(self):
        assert EngineGateway({}).get_fallback_engines("ollama-gemma2-sapie") == [
            "ollama-kanana-1.5",
            "ollama-exaone3.5",
            "ollama-gemma2",
            "ollama-hyperclovax",
            "ollama-hyperclovax-1.5b",
        ]

    def test_unknown_engine_uses_default_order(self):
        assert EngineGateway({}).get_fallback_engines("my-engine") == DEFAULT_FALLBACK


class TestGatewayTranslate:
    """Test cases for dispatch and error normalization."""

    @pytest.mark.asyncio
    async def test_dispatches_to_registered_engine(self, fake_provider):
        # Arrange
        provider = fake_provider("groq")
        gateway = EngineGateway({"groq": provider})

        # Act
        result = await gateway.translate("hello", "ko", "en", "groq")

        # Assert
        assert result.translated_text == "HELLO"
        assert result.engine == "groq"
        assert provider.calls == ["hello"]

    @pytest.mark.asyncio
    async def test_unregistered_engine_is_missing_credential(self):
        with pytest.raises(MissingCredential) as exc_info:
            await EngineGateway({}).translate("hello", "ko", None, "openai")

        assert exc_info.value.engine == "openai"

    @pytest.mark.asyncio
    async def test_empty_text_is_provider_error(self, fake_provider):
        gateway = EngineGateway({"groq": fake_provider("groq")})

        with pytest.raises(ProviderError):
            await gateway.translate("   ", "ko", None, "groq")

    @pytest.mark.asyncio
    async def test_engine_errors_propagate_with_engine_id(self, fake_provider):
        def refuse(text, target_lang, source_lang):
            raise ConnectionRefused("server down")

        gateway = EngineGateway({"ollama-gemma2": fake_provider("ollama-gemma2", refuse)})

        with pytest.raises(ConnectionRefused) as exc_info:
            await gateway.translate("hello", "en", None, "ollama-gemma2")

        assert exc_info.value.engine == "ollama-gemma2"

    @pytest.mark.asyncio
    async def test_unexpected_errors_become_provider_errors(self, fake_provider):
        def explode(text, target_lang, source_lang):
            raise RuntimeError("boom")

        gateway = EngineGateway({"libre": fake_provider("libre", explode)})

        with pytest.raises(ProviderError, match="boom"):
            await gateway.translate("hello", "en", None, "libre")


class TestRegistry:
    """Test cases for building the registry from settings."""

    def test_without_keys_registers_local_and_free_engines(self):
        gateway = EngineGateway(build_registry(EngineSettings()))

        available = gateway.available_engines()

        assert available[:len(LOCAL_ENGINES)] == LOCAL_ENGINES
        assert {"google", "mymemory", "libre"} <= set(available)
        assert not {"openai", "groq", "gemini", "claude", "deepl"} & set(available)

    def test_keys_register_hosted_engines(self):
        settings = EngineSettings(
            openai_api_key="sk-test",
            groq_api_key="gsk-test",
            gemini_api_key="gm-test",
            anthropic_api_key="ant-test",
            deepl_api_key="dl-test:fx",
        )

        gateway = EngineGateway(build_registry(settings))

        assert {"openai", "groq", "gemini", "claude", "deepl"} <= set(gateway.available_engines())
        assert gateway.engine_names()["claude"] == "Anthropic Claude"
        assert gateway.registry["deepl"].api_url == "https://api-free.deepl.com/v2/translate"
