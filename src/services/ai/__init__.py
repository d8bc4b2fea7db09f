"""Text generation services: extraction, normalization and orchestration."""

from .extractor import extract_blocks, iter_blocks
from .normalizer import Schema, normalize


__all__ = [
    "extract_blocks",
    "iter_blocks",
    "Schema",
    "normalize",
]
