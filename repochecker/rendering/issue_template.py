"""Issue body rendering."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined

ISSUE_TITLE = "AI-powered Repository Suggestions"
ISSUE_LABELS: tuple[str, ...] = ("enhancement", "ai-suggestion")


@dataclass(frozen=True)
class IssueBodyInput:
    """Input to render an issue body."""

    suggestions: str
    project_url: str


class IssueBodyRenderer:
    """Renders the suggestions issue body from a Jinja2 template."""

    def __init__(self, *, template_dir: str, template_name: str = "issue_body.md") -> None:
        env = Environment(
            loader=FileSystemLoader(template_dir),
            undefined=StrictUndefined,
            autoescape=False,
            keep_trailing_newline=True,
        )
        self._template = env.get_template(template_name)

    def render(self, *, data: IssueBodyInput) -> str:
        """Renders the body. Suggestions are embedded verbatim."""

        body = self._template.render(
            suggestions=data.suggestions,
            project_url=data.project_url,
        )
        return body.strip() + "\n"


def get_default_template_dir() -> str:
    """Returns the default template directory path."""

    return str(Path(__file__).parent / "templates")
