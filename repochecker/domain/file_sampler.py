"""Selects a bounded sample of repository files for review."""

from __future__ import annotations

import base64
import logging
from dataclasses import dataclass

from repochecker.config import AppSettings
from repochecker.domain.models import RepositoryFile, RepositoryInfo
from repochecker.integrations.github.github_client import GitHubClient

DEFAULT_BINARY_EXTENSIONS: tuple[str, ...] = (".jpg", ".png", ".gif", ".mp4", ".zip", ".pdf")


@dataclass(frozen=True)
class SamplingPolicy:
    """Limits applied when sampling a repository tree."""

    max_files: int = 10
    max_file_size_bytes: int = 100_000
    binary_extensions: tuple[str, ...] = DEFAULT_BINARY_EXTENSIONS

    @classmethod
    def from_settings(cls, settings: AppSettings) -> SamplingPolicy:
        return cls(
            max_files=settings.max_files,
            max_file_size_bytes=settings.max_file_size_bytes,
            binary_extensions=settings.get_binary_extensions(),
        )


def is_binary_path(path: str, binary_extensions: tuple[str, ...]) -> bool:
    """Returns True if ``path`` ends with a denylisted extension (case-insensitive)."""

    lowered = path.lower()
    return any(lowered.endswith(ext.lower()) for ext in binary_extensions)


class FileSampler:
    """Fetches the first few small, non-binary files of the default branch.

    Candidates are the first ``max_files`` blobs in tree order; size and
    extension filters are applied to those candidates afterwards, so fewer
    than ``max_files`` files may be returned even when the tree is larger.
    """

    _logger = logging.getLogger(__name__)

    def __init__(self, *, policy: SamplingPolicy | None = None) -> None:
        self._policy = policy or SamplingPolicy()

    def sample(
        self, *, repository: RepositoryInfo, github_client: GitHubClient
    ) -> list[RepositoryFile]:
        """Returns decoded files in tree order.

        Errors listing the tree propagate. Errors for an individual file are
        logged and that file is omitted.
        """

        ref = repository.default_branch
        tree = github_client.get_tree(repo=repository.full_name, ref=ref, recursive=True)
        blobs = [entry for entry in tree if entry.type == "blob"]
        candidates = blobs[: self._policy.max_files]
        self._logger.info(
            "sampling files: repo=%s ref=%s blobs=%s candidates=%s",
            repository.full_name,
            ref,
            len(blobs),
            len(candidates),
        )

        files: list[RepositoryFile] = []
        for entry in candidates:
            size = entry.size or 0
            if size > self._policy.max_file_size_bytes:
                self._logger.debug("skipping large file: path=%s size=%s", entry.path, size)
                continue
            if is_binary_path(entry.path, self._policy.binary_extensions):
                self._logger.debug("skipping binary file: path=%s", entry.path)
                continue
            try:
                content = github_client.get_file_content(
                    repo=repository.full_name, path=entry.path, ref=ref
                )
                if content.encoding != "base64" or content.content is None:
                    self._logger.debug(
                        "skipping file without base64 content: path=%s encoding=%s",
                        entry.path,
                        content.encoding,
                    )
                    continue
                text = base64.b64decode(content.content).decode("utf-8", errors="replace")
            except Exception as exc:  # noqa: BLE001
                self._logger.warning("Could not get content for %s: %s", entry.path, exc)
                continue
            files.append(RepositoryFile(path=entry.path, size=size, content=text))

        self._logger.info("sampled files: repo=%s count=%s", repository.full_name, len(files))
        return files
