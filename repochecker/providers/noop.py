"""No-op provider used when no model API key is configured."""

from __future__ import annotations

from repochecker.providers.base import ProviderError, SuggestionProvider


class NoOpProvider(SuggestionProvider):
    """Provider that always fails with a configured message."""

    def __init__(self, *, message: str) -> None:
        self._message = message

    def complete(self, *, prompt: str) -> str:
        raise ProviderError(self._message)
