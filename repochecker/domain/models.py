"""Value objects passed between the analysis stages."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class RepositoryInfo:
    """Repository metadata taken from a webhook payload.

    Attributes:
        owner: Owner login.
        name: Repository name without the owner.
        full_name: Repository in 'owner/repo' format.
        description: Free-text description, if any.
        default_branch: Branch analysed and used to filter push events.
    """

    owner: str
    name: str
    full_name: str
    default_branch: str
    description: str | None = None


@dataclass(frozen=True)
class RepositoryFile:
    """A sampled file with decoded text content."""

    path: str
    size: int
    content: str


@dataclass(frozen=True)
class RepositoryOverview:
    """Repository name, description and truncated files embedded in the prompt."""

    name: str
    description: str
    files: tuple[RepositoryFile, ...] = ()


@dataclass(frozen=True)
class SuggestionResult:
    """Outcome of the suggestion stage. ``text`` is always publishable."""

    text: str
    success: bool
    error: str | None = None


@dataclass(frozen=True)
class IssueDraft:
    """Issue to be created."""

    title: str
    body: str
    labels: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class PublishResult:
    """Outcome of the publishing stage."""

    success: bool
    issue_number: int | None = None
    html_url: str | None = None
    error: str | None = None


class PipelineStage(str, Enum):
    """Stages of a single analysis run."""

    IDLE = "idle"
    SAMPLING = "sampling"
    GENERATING = "generating"
    PUBLISHING = "publishing"
    DONE = "done"
    FAILED = "failed"


@dataclass(frozen=True)
class PipelineResult:
    """Result of a single analysis run.

    ``failed_stage`` is set only when ``stage`` is FAILED.
    """

    repository: str
    stage: PipelineStage
    failed_stage: PipelineStage | None = None
    files_sampled: int = 0
    suggestion_fallback: bool = False
    issue_number: int | None = None
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.stage is PipelineStage.DONE
