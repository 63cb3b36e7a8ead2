"""Gemini provider backed by the google-genai SDK."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass

from google import genai
from google.genai import types

from repochecker.providers.base import ProviderError, SuggestionProvider


@dataclass(frozen=True)
class GeminiProviderConfig:
    """Configuration for GeminiProvider."""

    api_key: str
    model: str = "gemini-2.5-flash"
    timeout_seconds: float = 120.0


class GeminiProvider(SuggestionProvider):
    """Sends a single prompt to Gemini and returns the response text."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        config: GeminiProviderConfig,
        client: genai.Client | None = None,
    ) -> None:
        self._config = config
        self._client = client or genai.Client(
            api_key=config.api_key,
            # HttpOptions.timeout is expressed in milliseconds.
            http_options=types.HttpOptions(timeout=int(config.timeout_seconds * 1000)),
        )

    def complete(self, *, prompt: str) -> str:
        self._logger.info(
            "Gemini request started: model=%s prompt_chars=%s", self._config.model, len(prompt)
        )
        start_time = time.monotonic()
        response = self._client.models.generate_content(
            model=self._config.model,
            contents=prompt,
        )
        elapsed = round(time.monotonic() - start_time, 2)
        text = response.text
        if not text:
            raise ProviderError(f"Gemini returned an empty response (model={self._config.model}).")
        self._logger.info(
            "Gemini request finished: elapsed_seconds=%s response_chars=%s", elapsed, len(text)
        )
        return text
