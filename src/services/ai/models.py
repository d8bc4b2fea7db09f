"""Typed contract objects shared by the gateway and the orchestrator."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class GenerationParams:
    """Per-call generation settings passed to the completion gateway.

    ``model`` overrides the configured text model; ``timeout`` (seconds)
    overrides ``GENERATION_TIMEOUT_SECONDS``.
    """

    temperature: float = 0.7
    max_tokens: int = 2000
    model: str | None = None
    timeout: float | None = None
