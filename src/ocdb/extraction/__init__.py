"""Screenshot venue extraction through OpenRouter."""

from .config import ExtractionSettings
from .openrouter import ExtractionRequestError, OpenRouterVenueExtractor
from .parsing import parse_candidates

__all__ = [
    "ExtractionRequestError",
    "ExtractionSettings",
    "OpenRouterVenueExtractor",
    "parse_candidates",
]
