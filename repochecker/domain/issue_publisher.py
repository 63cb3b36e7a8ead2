"""Publishing stage: files the suggestions as a GitHub issue."""

from __future__ import annotations

import logging

import httpx

from repochecker.domain.models import IssueDraft, PublishResult, RepositoryInfo
from repochecker.integrations.github.github_client import GitHubApiError, GitHubClient
from repochecker.rendering.issue_template import (
    ISSUE_LABELS,
    ISSUE_TITLE,
    IssueBodyInput,
    IssueBodyRenderer,
)


class IssuePublisher:
    """Creates the suggestions issue. Failures are logged once and returned."""

    _logger = logging.getLogger(__name__)

    def __init__(self, *, body_renderer: IssueBodyRenderer, project_url: str) -> None:
        self._body_renderer = body_renderer
        self._project_url = project_url

    def build_draft(self, *, text: str) -> IssueDraft:
        body = self._body_renderer.render(
            data=IssueBodyInput(suggestions=text, project_url=self._project_url)
        )
        return IssueDraft(title=ISSUE_TITLE, body=body, labels=ISSUE_LABELS)

    def publish(
        self, *, text: str, repository: RepositoryInfo, github_client: GitHubClient
    ) -> PublishResult:
        """Creates one issue. Never retries and never raises GitHub errors."""

        self._logger.info(
            "Creating issue with suggestions for repository: %s", repository.full_name
        )
        draft = self.build_draft(text=text)
        try:
            created = github_client.create_issue(
                repo=repository.full_name,
                title=draft.title,
                body=draft.body,
                labels=list(draft.labels),
            )
        except (GitHubApiError, httpx.HTTPError) as exc:
            self._logger.error("Error creating issue: repo=%s error=%s", repository.full_name, exc)
            return PublishResult(success=False, error=str(exc))
        self._logger.info(
            "Successfully created issue in %s: number=%s url=%s",
            repository.full_name,
            created.number,
            created.html_url,
        )
        return PublishResult(success=True, issue_number=created.number, html_url=created.html_url)
