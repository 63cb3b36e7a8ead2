"""Analysis pipeline orchestrating a single repository run.

This module is intentionally synchronous (blocking) and is expected to be run
in a background thread by the HTTP server.

Stages run in strict order: sampling, generating, publishing. An exception
escaping a stage ends the run in ``FAILED`` with that stage recorded; nothing
is rolled back and nothing is persisted.
"""

from __future__ import annotations

import logging

from repochecker.domain.file_sampler import FileSampler
from repochecker.domain.issue_publisher import IssuePublisher
from repochecker.domain.models import PipelineResult, PipelineStage, RepositoryInfo
from repochecker.domain.suggestion_generator import SuggestionGenerator
from repochecker.integrations.github.github_client import GitHubClient


class AnalysisPipeline:
    """Coordinates sampling files, generating suggestions, and creating the issue."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        sampler: FileSampler,
        generator: SuggestionGenerator,
        publisher: IssuePublisher,
    ) -> None:
        self._sampler = sampler
        self._generator = generator
        self._publisher = publisher

    def run(self, *, repository: RepositoryInfo, github_client: GitHubClient) -> PipelineResult:
        """Runs one analysis. Never raises.

        Args:
            repository: Repository to analyse.
            github_client: Client authenticated for the repository.

        Returns:
            PipelineResult describing the final stage.
        """

        stage = PipelineStage.IDLE
        files_sampled = 0
        fallback = False
        self._logger.info("Analyzing repository: %s", repository.full_name)
        try:
            stage = PipelineStage.SAMPLING
            files = self._sampler.sample(repository=repository, github_client=github_client)
            files_sampled = len(files)

            stage = PipelineStage.GENERATING
            suggestion = self._generator.generate(files=files, repository=repository)
            fallback = not suggestion.success

            stage = PipelineStage.PUBLISHING
            published = self._publisher.publish(
                text=suggestion.text, repository=repository, github_client=github_client
            )
        except Exception as exc:  # noqa: BLE001
            self._logger.exception(
                "Error analyzing repository %s: stage=%s error=%s",
                repository.full_name,
                stage.value,
                exc,
            )
            return PipelineResult(
                repository=repository.full_name,
                stage=PipelineStage.FAILED,
                failed_stage=stage,
                files_sampled=files_sampled,
                suggestion_fallback=fallback,
                error=str(exc),
            )

        if not published.success:
            # The publisher already logged the failure.
            self._logger.info(
                "run finished without issue: repo=%s files=%s",
                repository.full_name,
                files_sampled,
            )
            return PipelineResult(
                repository=repository.full_name,
                stage=PipelineStage.FAILED,
                failed_stage=PipelineStage.PUBLISHING,
                files_sampled=files_sampled,
                suggestion_fallback=fallback,
                error=published.error,
            )

        self._logger.info(
            "run finished: repo=%s files=%s fallback=%s issue=%s",
            repository.full_name,
            files_sampled,
            fallback,
            published.issue_number,
        )
        return PipelineResult(
            repository=repository.full_name,
            stage=PipelineStage.DONE,
            files_sampled=files_sampled,
            suggestion_fallback=fallback,
            issue_number=published.issue_number,
        )
