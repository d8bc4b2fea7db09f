"""Centralized AI model factory for text generation and embeddings.

This module is the single source of truth for building provider clients,
supporting Gemini, OpenAI and Azure OpenAI based on configuration.

Usage:
    from services.ai.model_factory import get_text_model, get_embedding_client

    model = get_text_model()  # Returns pydantic-ai Model
    client = get_embedding_client()  # Returns provider-specific async client
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING, Any, cast

from pydantic_ai.models import Model
from pydantic_ai.models.google import GoogleModel
from pydantic_ai.models.openai import OpenAIChatModel
from pydantic_ai.providers.google import GoogleProvider
from pydantic_ai.providers.openai import OpenAIProvider

from core.config import get_settings


if TYPE_CHECKING:
    from httpx import AsyncClient

logger = logging.getLogger(__name__)


class ProviderNotConfiguredError(ValueError):
    """Raised when the selected provider has no usable credentials."""


def _normalize_azure_endpoint(endpoint: str) -> str:
    """Normalize Azure OpenAI endpoint.

    Trailing slashes lead to `//openai/...` URLs, which Azure answers
    with 404.
    """
    return endpoint.rstrip("/")


def current_provider() -> str:
    return get_settings().LLM_PROVIDER


def _validate_azure_credentials() -> None:
    settings = get_settings()
    if (
        not settings.AZURE_OPENAI_ENDPOINT
        or not settings.AZURE_OPENAI_API_KEY
        or not settings.AZURE_OPENAI_API_VERSION
    ):
        raise ProviderNotConfiguredError(
            "azure credentials missing (AZURE_OPENAI_ENDPOINT, "
            "AZURE_OPENAI_API_KEY, AZURE_OPENAI_API_VERSION)"
        )


def _validate_openai_credentials() -> None:
    if not get_settings().OPENAI_API_KEY:
        raise ProviderNotConfiguredError("openai API key not configured")


def _validate_gemini_credentials() -> None:
    if not get_settings().GEMINI_API_KEY:
        raise ProviderNotConfiguredError("gemini API key not configured")


def _create_azure_model(
    model_name: str,
    http_client: AsyncClient | None = None,
) -> Model:
    """Create an Azure OpenAI model for the given deployment name."""
    settings = get_settings()

    from openai import AsyncAzureOpenAI

    azure_client = AsyncAzureOpenAI(
        azure_endpoint=_normalize_azure_endpoint(settings.AZURE_OPENAI_ENDPOINT or ""),
        api_key=settings.AZURE_OPENAI_API_KEY,
        api_version=settings.AZURE_OPENAI_API_VERSION,
        http_client=http_client,
    )
    provider = OpenAIProvider(openai_client=azure_client)
    return OpenAIChatModel(model_name, provider=provider)


def _create_openai_model(
    model_name: str,
    http_client: AsyncClient | None = None,
) -> Model:
    settings = get_settings()
    provider = OpenAIProvider(
        api_key=settings.OPENAI_API_KEY,
        http_client=http_client,
    )
    return OpenAIChatModel(model_name, provider=provider)


def _create_gemini_model(
    model_name: str,
    http_client: AsyncClient | None = None,
) -> Model:
    settings = get_settings()
    provider = GoogleProvider(
        api_key=settings.GEMINI_API_KEY,
        http_client=http_client,
    )
    return cast(Model, GoogleModel(model_name, provider=provider))


def get_text_model(
    model_name: str | None = None,
    http_client: AsyncClient | None = None,
) -> Model:
    """Get the text-generation model for the configured provider.

    Args:
        model_name: Overrides ``TEXT_MODEL`` for a single call.
        http_client: Optional HTTP client for custom retry logic.

    Raises:
        ProviderNotConfiguredError: if the selected provider lacks credentials.
    """
    settings = get_settings()
    name = model_name or settings.TEXT_MODEL
    provider = settings.LLM_PROVIDER

    if provider == "azure_openai":
        _validate_azure_credentials()
        logger.info("Using Azure OpenAI text model: %s", name)
        return _create_azure_model(name, http_client)

    if provider == "openai":
        _validate_openai_credentials()
        logger.info("Using OpenAI text model: %s", name)
        return _create_openai_model(name, http_client)

    _validate_gemini_credentials()
    logger.info("Using Gemini text model: %s", name)
    return _create_gemini_model(name, http_client)


@lru_cache
def get_embedding_client() -> Any:
    """Get the cached embedding client for the configured provider.

    For Azure: AsyncAzureOpenAI client
    For OpenAI: AsyncOpenAI client
    For Gemini: google.genai.Client
    """
    settings = get_settings()
    provider = settings.LLM_PROVIDER

    if provider == "azure_openai":
        _validate_azure_credentials()
        from openai import AsyncAzureOpenAI

        logger.info("Using Azure OpenAI for embeddings: %s", settings.EMBEDDING_MODEL)
        return AsyncAzureOpenAI(
            azure_endpoint=_normalize_azure_endpoint(
                settings.AZURE_OPENAI_ENDPOINT or ""
            ),
            api_key=settings.AZURE_OPENAI_API_KEY,
            api_version=settings.AZURE_OPENAI_API_VERSION,
        )

    if provider == "openai":
        _validate_openai_credentials()
        from openai import AsyncOpenAI

        logger.info("Using OpenAI for embeddings: %s", settings.EMBEDDING_MODEL)
        return AsyncOpenAI(api_key=settings.OPENAI_API_KEY)

    _validate_gemini_credentials()
    from google import genai

    logger.info("Using Gemini for embeddings: %s", settings.EMBEDDING_MODEL)
    return genai.Client(api_key=settings.GEMINI_API_KEY)


def clear_embedding_client_cache() -> None:
    """Clear the cached embedding client.

    Useful for testing or when configuration changes at runtime.
    """
    get_embedding_client.cache_clear()
