"""Suggestion stage: prompt construction and a single model completion."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from repochecker.domain.models import RepositoryFile, RepositoryInfo, SuggestionResult
from repochecker.providers.base import SuggestionProvider
from repochecker.rendering.review_prompt import build_repository_overview, build_review_prompt

FALLBACK_SUGGESTION_TEXT = "Could not generate suggestions due to an error. Please check the logs."


class SuggestionGenerator:
    """Builds the review prompt and asks the provider for suggestions.

    Never raises: any provider failure is logged and replaced by
    ``FALLBACK_SUGGESTION_TEXT`` so that the run always has something to publish.
    """

    _logger = logging.getLogger(__name__)

    def __init__(self, *, provider: SuggestionProvider, max_content_chars: int = 5_000) -> None:
        self._provider = provider
        self._max_content_chars = max_content_chars

    def build_prompt(
        self, *, files: Sequence[RepositoryFile], repository: RepositoryInfo
    ) -> str:
        overview = build_repository_overview(
            repository=repository,
            files=files,
            max_content_chars=self._max_content_chars,
        )
        return build_review_prompt(overview)

    def generate(
        self, *, files: Sequence[RepositoryFile], repository: RepositoryInfo
    ) -> SuggestionResult:
        """Returns the model's suggestions, or the fallback text on failure."""

        self._logger.info(
            "Generating suggestions for repository: %s files=%s",
            repository.full_name,
            len(files),
        )
        prompt = self.build_prompt(files=files, repository=repository)
        try:
            text = self._provider.complete(prompt=prompt)
        except Exception as exc:  # noqa: BLE001
            self._logger.error("Error generating AI suggestions: %s", exc)
            return SuggestionResult(text=FALLBACK_SUGGESTION_TEXT, success=False, error=str(exc))
        return SuggestionResult(text=text, success=True)
