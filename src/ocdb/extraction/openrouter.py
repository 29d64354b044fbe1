"""OpenRouter vision client that lists venues found in a screenshot."""

from __future__ import annotations

import base64
from dataclasses import dataclass
import logging
import time
from typing import Any, Callable

from ocdb.catalog.models import VenueCandidate
from ocdb.extraction.config import ExtractionSettings
from ocdb.extraction.parsing import parse_candidates

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "Aja como um assistente de produção de bandas. Responda apenas com JSON válido."

EXTRACTION_PROMPT = """\
Analise este print de uma agenda de shows e extraia todas as casas de show listadas.
Para cada casa, identifique: Nome, Cidade e o DDD da região (ex: 48, 47, 49).
Tente encontrar ou sugerir o link da rede social (Instagram) mais provável da casa.

CALCULE A DISTÂNCIA E O TEMPO DE VIAGEM:
Partida: {origin}.
Calcule a distância precisa em KM e o tempo estimado de viagem de carro.

Retorne um objeto JSON no formato:
{{"venues": [{{"name": "...", "city": "...", "ddd": "48", "socialMedia": "...", "distanceKm": 12.5, "travelTime": "1h 20min"}}]}}
"""

TRANSIENT_STATUS_CODES = frozenset({408, 429, 500, 502, 503, 504})
TRANSIENT_ERROR_NAMES = frozenset({"RateLimitError", "APITimeoutError", "APIConnectionError", "InternalServerError"})


@dataclass(slots=True)
class ExtractionRequestError(RuntimeError):
    """Raised when the vision model could not be reached or kept failing."""

    model: str
    stage: str
    message: str

    def __str__(self) -> str:
        return f"{self.message} (model={self.model}, stage={self.stage})"


def is_transient(exc: BaseException) -> bool:
    """Rate limits, server errors and dropped connections are worth retrying."""

    if getattr(exc, "status_code", None) in TRANSIENT_STATUS_CODES:
        return True
    return isinstance(exc, (TimeoutError, ConnectionError)) or type(exc).__name__ in TRANSIENT_ERROR_NAMES


def build_image_url(image_bytes: bytes, mime_type: str = "image/png") -> str:
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def reply_text(response: Any) -> str:
    """Pull the first choice's text out of an SDK object or a plain dict reply."""

    choices = response.get("choices") if isinstance(response, dict) else getattr(response, "choices", None)
    if not choices:
        return ""

    first = choices[0]
    message = first.get("message") if isinstance(first, dict) else getattr(first, "message", None)
    content = message.get("content") if isinstance(message, dict) else getattr(message, "content", None)

    if isinstance(content, list):
        return "".join(str(part.get("text", "")) for part in content if isinstance(part, dict))
    return content if isinstance(content, str) else ""


def _openai_client(settings: ExtractionSettings) -> Any:
    from openai import OpenAI

    return OpenAI(api_key=settings.api_key, base_url=settings.base_url, timeout=settings.timeout_seconds)


class OpenRouterVenueExtractor:
    """Multimodal chat wrapper returning validated venue candidates."""

    def __init__(
        self,
        settings: ExtractionSettings,
        *,
        client: Any | None = None,
        max_retries: int = 2,
        retry_base_seconds: float = 0.5,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_retries < 0 or retry_base_seconds < 0:
            raise ValueError("max_retries and retry_base_seconds must be non-negative")

        self._settings = settings
        self._client = client if client is not None else _openai_client(settings)
        self._max_retries = max_retries
        self._retry_base_seconds = retry_base_seconds
        self._sleep = sleep

    @property
    def model(self) -> str:
        return self._settings.model

    def build_messages(self, image_bytes: bytes, mime_type: str) -> list[dict[str, Any]]:
        prompt = EXTRACTION_PROMPT.format(origin=self._settings.origin_address)
        return [
            {"role": "system", "content": SYSTEM_PROMPT},
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": prompt},
                    {"type": "image_url", "image_url": {"url": build_image_url(image_bytes, mime_type)}},
                ],
            },
        ]

    def extract_venues(self, image_bytes: bytes, *, mime_type: str = "image/png") -> list[VenueCandidate | None]:
        """Send one screenshot and return the candidates the model listed.

        Transport failures raise ``ExtractionRequestError``; a reply that is
        not usable JSON yields an empty list.
        """

        if not image_bytes:
            raise ValueError("image_bytes cannot be empty")

        text = reply_text(self._complete(self.build_messages(image_bytes, mime_type)))
        if not text.strip():
            logger.warning("Extraction reply was empty (model=%s)", self.model)
            return []

        candidates = parse_candidates(text)
        logger.info("Model %s listed %s candidate venues", self.model, len(candidates))
        return candidates

    def _complete(self, messages: list[dict[str, Any]]) -> Any:
        attempt = 0
        while True:
            try:
                return self._client.chat.completions.create(
                    model=self.model,
                    messages=messages,
                    response_format={"type": "json_object"},
                    temperature=0.1,
                )
            except Exception as exc:
                if attempt >= self._max_retries or not is_transient(exc):
                    raise ExtractionRequestError(
                        model=self.model,
                        stage="extract",
                        message=f"Extraction request failed after {attempt + 1} attempt(s): {exc}",
                    ) from exc
                delay = self._retry_base_seconds * (2**attempt)
                logger.warning("Extraction attempt %s failed, retrying in %.2fs: %s", attempt + 1, delay, exc)
                self._sleep(delay)
                attempt += 1
