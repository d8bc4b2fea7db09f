"""Completion gateway backed by a pydantic-ai text agent."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx
from pydantic_ai import Agent
from pydantic_ai.exceptions import ModelHTTPError, UnexpectedModelBehavior
from pydantic_ai.models import Model
from pydantic_ai.settings import ModelSettings

from core.config import get_settings
from services.ai.exceptions import (
    CompletionError,
    GatewayAuthError,
    GatewayQuotaOrRateLimit,
    GatewayTransportError,
    GatewayUpstreamError,
)
from services.ai.model_factory import (
    ProviderNotConfiguredError,
    current_provider,
    get_text_model,
)
from services.ai.models import GenerationParams


logger = logging.getLogger(__name__)

# Every wrapped provider failure carries this prefix
FAILURE_PREFIX = "Failed to generate AI completion: "

_QUOTA_HINTS = ("quota", "rate limit", "resource_exhausted", "insufficient")


def classify_model_http_error(exc: ModelHTTPError) -> CompletionError:
    """Map a provider HTTP error onto the gateway taxonomy."""
    body = "" if exc.body is None else str(exc.body)
    detail = f"{FAILURE_PREFIX}{exc.model_name} returned {exc.status_code}: {body}"
    if exc.status_code in (401, 403):
        return GatewayAuthError(detail)
    if exc.status_code == 429 or any(h in body.lower() for h in _QUOTA_HINTS):
        return GatewayQuotaOrRateLimit(detail)
    return GatewayUpstreamError(detail, status_code=exc.status_code, body=body)


class PydanticAIGateway:
    """Call the configured text model once per ``complete``; no retries."""

    def __init__(self, model: Model | None = None) -> None:
        # Injected model (tests); otherwise built lazily per model name
        self._model = model
        self._agents: dict[str, Agent[None, str]] = {}

    def _get_agent(self, model_name: str | None) -> Agent[None, str]:
        key = model_name or ""
        agent = self._agents.get(key)
        if agent is None:
            model = self._model or get_text_model(model_name)
            agent = Agent(model, output_type=str)
            self._agents[key] = agent
        return agent

    async def complete(self, prompt: str, params: GenerationParams) -> str:
        timeout = params.timeout or get_settings().GENERATION_TIMEOUT_SECONDS
        model_settings = ModelSettings(
            temperature=params.temperature,
            max_tokens=params.max_tokens,
            timeout=timeout,
        )
        try:
            agent = self._get_agent(params.model)
        except ProviderNotConfiguredError as exc:
            raise GatewayAuthError(f"{FAILURE_PREFIX}{exc}") from exc

        try:
            result: Any = await asyncio.wait_for(
                agent.run(prompt, model_settings=model_settings), timeout=timeout
            )
        except ModelHTTPError as exc:
            raise classify_model_http_error(exc) from exc
        except UnexpectedModelBehavior as exc:
            raise GatewayUpstreamError(f"{FAILURE_PREFIX}{exc.message}") from exc
        except TimeoutError as exc:
            raise GatewayTransportError(
                f"{FAILURE_PREFIX}{current_provider()} timed out after {timeout}s"
            ) from exc
        except (httpx.HTTPError, ConnectionError) as exc:
            raise GatewayTransportError(
                f"{FAILURE_PREFIX}{current_provider()} unreachable: {exc}"
            ) from exc

        text = str(result.output).strip()
        logger.debug(
            "Completion received (%d chars): %.80s", len(text), text
        )
        return text
