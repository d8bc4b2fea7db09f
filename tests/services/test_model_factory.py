"""Tests for the centralized AI model factory."""

from __future__ import annotations

from collections.abc import Iterator
from types import SimpleNamespace
from unittest.mock import patch

import pytest
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel

from services.ai import model_factory
from services.ai.model_factory import (
    ProviderNotConfiguredError,
    _normalize_azure_endpoint,
    clear_embedding_client_cache,
    get_embedding_client,
    get_text_model,
)


def _settings(**overrides: object) -> SimpleNamespace:
    values: dict[str, object] = {
        "LLM_PROVIDER": "gemini",
        "TEXT_MODEL": "gemini-2.5-flash",
        "EMBEDDING_MODEL": "text-embedding-004",
        "GEMINI_API_KEY": "gemini-key",
        "OPENAI_API_KEY": None,
        "AZURE_OPENAI_ENDPOINT": None,
        "AZURE_OPENAI_API_KEY": None,
        "AZURE_OPENAI_API_VERSION": None,
    }
    values.update(overrides)
    return SimpleNamespace(**values)


@pytest.fixture(autouse=True)
def _fresh_embedding_cache() -> Iterator[None]:
    clear_embedding_client_cache()
    yield
    clear_embedding_client_cache()


class TestGetTextModel:
    def test_gemini_is_the_default(self) -> None:
        with patch.object(model_factory, "get_settings", return_value=_settings()):
            model = get_text_model()

        assert isinstance(model, GoogleModel)
        assert model.model_name == "gemini-2.5-flash"

    def test_model_name_override(self) -> None:
        with patch.object(model_factory, "get_settings", return_value=_settings()):
            model = get_text_model("gemini-2.5-pro")

        assert model.model_name == "gemini-2.5-pro"

    def test_openai_provider(self) -> None:
        settings = _settings(
            LLM_PROVIDER="openai", TEXT_MODEL="gpt-4o-mini", OPENAI_API_KEY="sk-test"
        )
        with patch.object(model_factory, "get_settings", return_value=settings):
            model = get_text_model()

        assert isinstance(model, OpenAIChatModel)
        assert model.model_name == "gpt-4o-mini"

    def test_azure_provider(self) -> None:
        settings = _settings(
            LLM_PROVIDER="azure_openai",
            TEXT_MODEL="ideas-deployment",
            AZURE_OPENAI_ENDPOINT="https://example.openai.azure.com/",
            AZURE_OPENAI_API_KEY="azure-key",
            AZURE_OPENAI_API_VERSION="2024-10-21",
        )
        with patch.object(model_factory, "get_settings", return_value=settings):
            model = get_text_model()

        assert isinstance(model, OpenAIChatModel)
        assert model.model_name == "ideas-deployment"

    @pytest.mark.parametrize(
        "overrides,provider",
        [
            ({"GEMINI_API_KEY": None}, "gemini"),
            ({"LLM_PROVIDER": "openai"}, "openai"),
            (
                {"LLM_PROVIDER": "azure_openai", "AZURE_OPENAI_API_KEY": "k"},
                "azure",
            ),
        ],
    )
    def test_missing_credentials_raise(
        self, overrides: dict[str, object], provider: str
    ) -> None:
        settings = _settings(**overrides)
        with patch.object(model_factory, "get_settings", return_value=settings):
            with pytest.raises(ProviderNotConfiguredError, match=provider):
                get_text_model()


class TestGetEmbeddingClient:
    def test_client_is_cached(self) -> None:
        settings = _settings(LLM_PROVIDER="openai", OPENAI_API_KEY="sk-test")
        with patch.object(model_factory, "get_settings", return_value=settings):
            first = get_embedding_client()
            second = get_embedding_client()

        assert first is second

    def test_cache_clear_builds_new_client(self) -> None:
        settings = _settings(LLM_PROVIDER="openai", OPENAI_API_KEY="sk-test")
        with patch.object(model_factory, "get_settings", return_value=settings):
            first = get_embedding_client()
            clear_embedding_client_cache()
            second = get_embedding_client()

        assert first is not second

    def test_missing_credentials_raise(self) -> None:
        settings = _settings(GEMINI_API_KEY=None)
        with patch.object(model_factory, "get_settings", return_value=settings):
            with pytest.raises(ProviderNotConfiguredError):
                get_embedding_client()


def test_azure_endpoint_trailing_slash_is_removed() -> None:
    assert (
        _normalize_azure_endpoint("https://example.openai.azure.com//")
        == "https://example.openai.azure.com"
    )
