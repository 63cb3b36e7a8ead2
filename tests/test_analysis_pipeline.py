from __future__ import annotations

import base64
import logging
from dataclasses import dataclass, field

from repochecker.domain.analysis_pipeline import AnalysisPipeline
from repochecker.domain.file_sampler import FileSampler
from repochecker.domain.issue_publisher import IssuePublisher
from repochecker.domain.models import PipelineStage, RepositoryInfo
from repochecker.domain.suggestion_generator import FALLBACK_SUGGESTION_TEXT, SuggestionGenerator
from repochecker.integrations.github.github_client import (
    FileContent,
    GitHubApiError,
    IssueCreated,
    TreeEntry,
)
from repochecker.integrations.webhooks.github_events import decide_trigger
from repochecker.providers.base import ProviderError, SuggestionProvider
from repochecker.rendering.issue_template import IssueBodyRenderer, get_default_template_dir

REPOSITORY = RepositoryInfo(
    owner="octo",
    name="demo",
    full_name="octo/demo",
    default_branch="main",
    description="Demo repository",
)


class _FakeProvider(SuggestionProvider):
    def __init__(self, *, text: str = "Add CI.", error: Exception | None = None) -> None:
        self._text = text
        self._error = error
        self.prompts: list[str] = []

    def complete(self, *, prompt: str) -> str:
        self.prompts.append(prompt)
        if self._error is not None:
            raise self._error
        return self._text


@dataclass
class _FakeGitHubClient:
    tree: list[TreeEntry] = field(default_factory=list)
    tree_error: Exception | None = None
    issue_error: Exception | None = None
    created_issues: list[tuple[str, str, str, list[str]]] = field(default_factory=list)

    def get_tree(self, *, repo: str, ref: str, recursive: bool = True) -> list[TreeEntry]:
        if self.tree_error is not None:
            raise self.tree_error
        return self.tree

    def get_file_content(self, *, repo: str, path: str, ref: str) -> FileContent:
        encoded = base64.b64encode(f"# {path}".encode("utf-8")).decode("ascii")
        return FileContent(path=path, encoding="base64", content=encoded)

    def create_issue(self, *, repo: str, title: str, body: str, labels: list[str]) -> IssueCreated:
        self.created_issues.append((repo, title, body, labels))
        if self.issue_error is not None:
            raise self.issue_error
        return IssueCreated(number=1, html_url="https://example/issues/1", title=title)


def _pipeline(provider: SuggestionProvider) -> AnalysisPipeline:
    return AnalysisPipeline(
        sampler=FileSampler(),
        generator=SuggestionGenerator(provider=provider),
        publisher=IssuePublisher(
            body_renderer=IssueBodyRenderer(template_dir=get_default_template_dir()),
            project_url="https://example/repochecker",
        ),
    )


def _push_payload(*, ref: str, default_branch: str = "main") -> dict[str, object]:
    return {
        "ref": ref,
        "repository": {
            "name": "demo",
            "full_name": "octo/demo",
            "owner": {"login": "octo", "name": "octo"},
            "default_branch": default_branch,
            "description": "Demo repository",
        },
        "installation": {"id": 42},
    }


def test_pipeline_runs_all_stages_and_creates_one_issue() -> None:
    gh = _FakeGitHubClient(tree=[TreeEntry(path="app.py", type="blob", size=10)])
    provider = _FakeProvider(text="Split app.py into modules.")

    result = _pipeline(provider).run(repository=REPOSITORY, github_client=gh)  # type: ignore[arg-type]

    assert result.success is True
    assert result.stage is PipelineStage.DONE
    assert result.files_sampled == 1
    assert result.issue_number == 1
    assert len(gh.created_issues) == 1
    repo, title, body, labels = gh.created_issues[0]
    assert repo == "octo/demo"
    assert title == "AI-powered Repository Suggestions"
    assert set(labels) == {"enhancement", "ai-suggestion"}
    assert "Split app.py into modules." in body
    assert "File path: app.py" in provider.prompts[0]


def test_push_to_default_branch_runs_pipeline_end_to_end() -> None:
    decision = decide_trigger(event="push", payload=_push_payload(ref="refs/heads/main"))
    assert decision.accepted is True
    assert decision.request is not None

    gh = _FakeGitHubClient(tree=[TreeEntry(path="app.py", type="blob", size=10)])
    result = _pipeline(_FakeProvider()).run(
        repository=decision.request.repository,
        github_client=gh,  # type: ignore[arg-type]
    )

    assert result.success is True
    assert len(gh.created_issues) == 1
    _, title, _, labels = gh.created_issues[0]
    assert title == "AI-powered Repository Suggestions"
    assert set(labels) == {"enhancement", "ai-suggestion"}


def test_push_to_other_branch_does_not_trigger() -> None:
    decision = decide_trigger(event="push", payload=_push_payload(ref="refs/heads/feature-x"))
    assert decision.accepted is False
    assert decision.request is None


def test_pipeline_publishes_fallback_text_when_model_fails() -> None:
    gh = _FakeGitHubClient()
    provider = _FakeProvider(error=ProviderError("boom"))

    result = _pipeline(provider).run(repository=REPOSITORY, github_client=gh)  # type: ignore[arg-type]

    assert result.success is True
    assert result.suggestion_fallback is True
    assert len(provider.prompts) == 1
    assert FALLBACK_SUGGESTION_TEXT in gh.created_issues[0][2]


def test_pipeline_issue_failure_is_logged_once_and_not_raised(caplog) -> None:
    gh = _FakeGitHubClient(issue_error=GitHubApiError(status_code=403, message="Forbidden"))
    with caplog.at_level(logging.INFO):
        result = _pipeline(_FakeProvider()).run(
            repository=REPOSITORY, github_client=gh  # type: ignore[arg-type]
        )

    assert result.stage is PipelineStage.FAILED
    assert result.failed_stage is PipelineStage.PUBLISHING
    assert len(gh.created_issues) == 1
    errors = [r for r in caplog.records if r.levelno >= logging.ERROR]
    assert len(errors) == 1
    assert "Error creating issue" in errors[0].getMessage()


def test_pipeline_records_failed_sampling_stage_and_skips_issue(caplog) -> None:
    gh = _FakeGitHubClient(tree_error=GitHubApiError(status_code=404, message="Not Found"))
    provider = _FakeProvider()
    with caplog.at_level(logging.ERROR):
        result = _pipeline(provider).run(repository=REPOSITORY, github_client=gh)  # type: ignore[arg-type]

    assert result.stage is PipelineStage.FAILED
    assert result.failed_stage is PipelineStage.SAMPLING
    assert provider.prompts == []
    assert gh.created_issues == []
    assert any("octo/demo" in r.getMessage() for r in caplog.records)
