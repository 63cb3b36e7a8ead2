"""Provider interface for generative-model completions."""

from __future__ import annotations


class ProviderError(RuntimeError):
    """Raised when a completion cannot be produced."""


class SuggestionProvider:
    """Abstract completion provider.

    Implementations send a single prompt and return the model's text. They must
    raise ``ProviderError`` (or let transport errors propagate) on failure.
    """

    def complete(self, *, prompt: str) -> str:
        """Runs one blocking completion.

        Args:
            prompt: Full prompt text.

        Returns:
            Model response text.
        """

        raise NotImplementedError
