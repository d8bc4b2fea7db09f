"""Generate knowledge-base embeddings using Gemini, OpenAI or Azure OpenAI."""

from __future__ import annotations

import logging

import numpy as np

from core.config import get_settings
from services.ai.model_factory import get_embedding_client


logger = logging.getLogger(__name__)

# Embedding dimensions - consistent across providers
EMBEDDING_DIMENSIONS = 768


def _uses_openai_client() -> bool:
    return get_settings().LLM_PROVIDER in {"openai", "azure_openai"}


async def generate_embedding(text: str) -> list[float]:
    """Generate a normalized embedding for a knowledge snippet.

    Uses the RETRIEVAL_DOCUMENT task type on Gemini.
    """
    if _uses_openai_client():
        return await _generate_openai_embedding(text, "document")
    return await _generate_gemini_embedding(text, task_type="RETRIEVAL_DOCUMENT")


async def generate_query_embedding(query: str) -> list[float]:
    """Generate a normalized embedding for a search query.

    Uses the RETRIEVAL_QUERY task type on Gemini; OpenAI embeds queries and
    documents the same way.
    """
    if _uses_openai_client():
        return await _generate_openai_embedding(query, "query")
    return await _generate_gemini_embedding(query, task_type="RETRIEVAL_QUERY")


async def _generate_openai_embedding(text: str, embed_type: str) -> list[float]:
    """Generate embedding using OpenAI or Azure OpenAI."""
    settings = get_settings()
    client = get_embedding_client()

    response = await client.embeddings.create(
        model=settings.EMBEDDING_MODEL,
        input=text,
        dimensions=EMBEDDING_DIMENSIONS,
    )

    if not response.data:
        raise ValueError("No embeddings returned from OpenAI API")

    embedding = np.array(response.data[0].embedding)
    return _normalize_embedding(embedding, embed_type)


async def _generate_gemini_embedding(text: str, task_type: str) -> list[float]:
    """Generate embedding using Gemini API."""
    from google.genai import types

    settings = get_settings()
    client = get_embedding_client()

    result = await client.aio.models.embed_content(
        model=settings.EMBEDDING_MODEL,
        contents=text,
        config=types.EmbedContentConfig(
            task_type=task_type,
            output_dimensionality=EMBEDDING_DIMENSIONS,
        ),
    )

    if not result.embeddings:
        raise ValueError("No embeddings returned from Gemini API")

    embedding = np.array(result.embeddings[0].values)
    embed_type = "query" if task_type == "RETRIEVAL_QUERY" else "document"
    return _normalize_embedding(embedding, embed_type)


def _normalize_embedding(embedding: np.ndarray, embed_type: str) -> list[float]:
    """Normalize embedding for cosine similarity."""
    norm = np.linalg.norm(embedding)

    if norm == 0:
        raise ValueError(
            f"{embed_type.capitalize()} embedding has zero norm (all zeros). "
            "Cannot normalize. This may indicate an issue with the input text "
            "or API response."
        )

    normalized = embedding / norm
    return list(normalized.tolist())
