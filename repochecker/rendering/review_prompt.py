"""Review prompt construction.

The prompt is a single flattened document: repository metadata followed by
every sampled file, each labelled with ``File path:`` and fenced so the model
can tell files apart.
"""

from __future__ import annotations

from collections.abc import Sequence

from repochecker.domain.models import RepositoryFile, RepositoryInfo, RepositoryOverview

NO_DESCRIPTION_PLACEHOLDER = "No description provided"
TRUNCATION_MARKER = "..."

_INSTRUCTIONS = (
    "You are an expert code reviewer and software architect. Analyze the repository files "
    "and provide helpful, actionable suggestions for improvement.\n"
    "Focus on architecture, best practices, security issues, and code organization. "
    "Provide specific examples where possible."
)
_CLOSING = "Please provide a comprehensive analysis with specific improvement suggestions."


def truncate_content(content: str, *, max_chars: int) -> str:
    """Returns the first ``max_chars`` characters plus a marker, or ``content`` unchanged."""

    if len(content) > max_chars:
        return content[:max_chars] + TRUNCATION_MARKER
    return content


def build_repository_overview(
    *,
    repository: RepositoryInfo,
    files: Sequence[RepositoryFile],
    max_content_chars: int = 5_000,
) -> RepositoryOverview:
    """Builds the overview embedded in the prompt, truncating each file."""

    return RepositoryOverview(
        name=repository.full_name,
        description=repository.description or NO_DESCRIPTION_PLACEHOLDER,
        files=tuple(
            RepositoryFile(
                path=f.path,
                size=f.size,
                content=truncate_content(f.content, max_chars=max_content_chars),
            )
            for f in files
        ),
    )


def render_file_section(file: RepositoryFile) -> str:
    return f"\nFile path: {file.path}\nContent:\n```\n{file.content}\n```\n"


def build_review_prompt(overview: RepositoryOverview) -> str:
    """Renders the full review prompt for an overview."""

    files_section = "\n".join(render_file_section(f) for f in overview.files)
    return (
        f"\n{_INSTRUCTIONS}\n\n"
        "Repository information:\n"
        f"- Name: {overview.name}\n"
        f"- Description: {overview.description}\n\n"
        "Files to analyze:\n"
        f"{files_section}\n\n"
        f"{_CLOSING}\n"
    )
