"""Runtime configuration for screenshot venue extraction."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"
DEFAULT_VISION_MODEL = "google/gemini-2.5-flash"
DEFAULT_ORIGIN_ADDRESS = "Rua Julio Teodoro Martins, 3067, Rio Caveiras, Biguaçu, SC"
DEFAULT_TIMEOUT_SECONDS = 60.0


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    """Validated OpenRouter settings used by the screenshot extractor."""

    api_key: str
    model: str = DEFAULT_VISION_MODEL
    base_url: str = DEFAULT_OPENROUTER_BASE_URL
    origin_address: str = DEFAULT_ORIGIN_ADDRESS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractionSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        api_key = source.get("OPENROUTER_API_KEY", "").strip()
        if not api_key:
            raise ValueError("Missing required extraction environment variable: OPENROUTER_API_KEY")

        model = source.get("OPENROUTER_VISION_MODEL", DEFAULT_VISION_MODEL).strip()
        base_url = source.get("OPENROUTER_BASE_URL", DEFAULT_OPENROUTER_BASE_URL).strip()
        origin_address = source.get("OCDB_ORIGIN_ADDRESS", DEFAULT_ORIGIN_ADDRESS).strip()
        timeout_raw = source.get("OPENROUTER_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)).strip()

        if not model:
            raise ValueError("OPENROUTER_VISION_MODEL cannot be empty")
        if not base_url:
            raise ValueError("OPENROUTER_BASE_URL cannot be empty")
        if not (base_url.startswith("http://") or base_url.startswith("https://")):
            raise ValueError("OPENROUTER_BASE_URL must start with http:// or https://")
        if not origin_address:
            raise ValueError("OCDB_ORIGIN_ADDRESS cannot be empty")

        try:
            timeout_seconds = float(timeout_raw)
        except ValueError as exc:
            raise ValueError("OPENROUTER_TIMEOUT_SECONDS must be a number") from exc
        if timeout_seconds < 1:
            raise ValueError("OPENROUTER_TIMEOUT_SECONDS must be >= 1")

        return cls(
            api_key=api_key,
            model=model,
            base_url=base_url.rstrip("/"),
            origin_address=origin_address,
            timeout_seconds=timeout_seconds,
        )
