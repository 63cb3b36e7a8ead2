"""GitHub REST API wrapper.

This module uses GitHub REST v3 endpoints. Authentication is performed via
``Authorization: Bearer <token>`` header, where the token is either a static
token or a GitHub App installation access token.
"""

from __future__ import annotations

from dataclasses import dataclass
from urllib.parse import quote

import httpx
from pydantic import BaseModel, Field


class GitHubApiError(RuntimeError):
    """Raised when GitHub API returns a non-success response."""

    def __init__(self, *, status_code: int, message: str) -> None:
        super().__init__(f"GitHub API error: status={status_code}, message={message}")
        self.status_code = status_code
        self.message = message


class TreeEntry(BaseModel):
    """Subset of git tree entry fields used by the sampler."""

    path: str
    type: str
    size: int | None = None


class FileContent(BaseModel):
    """Subset of the contents API response for a single file."""

    path: str
    encoding: str | None = None
    content: str | None = None


class IssueCreated(BaseModel):
    """Subset of issue creation response fields."""

    number: int = Field(..., ge=1)
    html_url: str
    title: str


class InstallationToken(BaseModel):
    """Installation access token issued for a GitHub App installation."""

    token: str
    expires_at: str | None = None


@dataclass(frozen=True)
class GitHubClientConfig:
    """GitHub client configuration."""

    api_base_url: str
    token: str
    timeout_seconds: float = 30.0


def build_default_headers(*, token: str) -> dict[str, str]:
    """Returns the headers sent with every REST call."""

    return {
        "Accept": "application/vnd.github+json",
        "Authorization": f"Bearer {token}",
        "X-GitHub-Api-Version": "2022-11-28",
        "User-Agent": "repochecker",
    }


def raise_for_error(resp: httpx.Response) -> None:
    """Raises GitHubApiError for any non-2xx response."""

    if 200 <= resp.status_code < 300:
        return
    raise GitHubApiError(status_code=resp.status_code, message=resp.text)


class GitHubClient:
    """Thin wrapper around GitHub REST API."""

    def __init__(
        self,
        *,
        config: GitHubClientConfig,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._config = config
        self._client = httpx.Client(
            base_url=self._config.api_base_url,
            headers=build_default_headers(token=self._config.token),
            timeout=httpx.Timeout(self._config.timeout_seconds),
            transport=transport,
        )

    def close(self) -> None:
        """Closes underlying HTTP client."""

        self._client.close()

    def get_tree(self, *, repo: str, ref: str, recursive: bool = True) -> list[TreeEntry]:
        """Lists the git tree for ``ref``.

        Args:
            repo: Repository in 'owner/repo' format.
            ref: Branch name, tag or tree SHA.
            recursive: Whether to list nested trees as a flat list.

        Returns:
            Tree entries in the order GitHub returns them.
        """

        params = {"recursive": "1"} if recursive else {}
        resp = self._client.get(f"/repos/{repo}/git/trees/{quote(ref, safe='/')}", params=params)
        raise_for_error(resp)
        payload = resp.json()
        items = payload.get("tree", []) if isinstance(payload, dict) else []
        return [TreeEntry.model_validate(item) for item in items if isinstance(item, dict)]

    def get_file_content(self, *, repo: str, path: str, ref: str) -> FileContent:
        """Fetches a single file through the contents API."""

        resp = self._client.get(
            f"/repos/{repo}/contents/{quote(path, safe='/')}",
            params={"ref": ref},
        )
        raise_for_error(resp)
        payload = resp.json()
        if not isinstance(payload, dict):
            # Directories come back as a list of entries.
            raise GitHubApiError(
                status_code=resp.status_code,
                message=f"Expected a single file payload for path={path}.",
            )
        return FileContent.model_validate({"path": path, **payload})

    def create_issue(
        self,
        *,
        repo: str,
        title: str,
        body: str,
        labels: list[str],
    ) -> IssueCreated:
        """Creates an issue."""

        resp = self._client.post(
            f"/repos/{repo}/issues",
            json={"title": title, "body": body, "labels": labels},
        )
        raise_for_error(resp)
        return IssueCreated.model_validate(resp.json())
