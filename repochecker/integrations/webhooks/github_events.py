"""GitHub webhook delivery parsing.

Only two deliveries trigger an analysis: ``repository`` with action
``created``, and ``push`` to the repository's default branch.
"""

from __future__ import annotations

import hashlib
import hmac
from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from repochecker.domain.models import RepositoryInfo


class WebhookPayloadError(ValueError):
    """Raised when a triggering delivery lacks required fields."""


class _Owner(BaseModel):
    login: str


class _Repository(BaseModel):
    name: str
    full_name: str
    owner: _Owner
    default_branch: str = "main"
    description: str | None = None


class _Installation(BaseModel):
    id: int


class RepositoryEventPayload(BaseModel):
    """Subset of the ``repository`` event payload."""

    action: str
    repository: _Repository
    installation: _Installation | None = None


class PushEventPayload(BaseModel):
    """Subset of the ``push`` event payload."""

    ref: str
    repository: _Repository
    installation: _Installation | None = None


@dataclass(frozen=True)
class AnalysisRequest:
    """A delivery accepted for analysis."""

    event: str
    repository: RepositoryInfo
    installation_id: int | None = None


@dataclass(frozen=True)
class TriggerDecision:
    """Whether a delivery triggers an analysis, and why."""

    accepted: bool
    reason: str
    request: AnalysisRequest | None = None


def verify_signature(*, secret: str, body: bytes, signature_header: str | None) -> bool:
    """Checks ``X-Hub-Signature-256`` against the HMAC-SHA256 of ``body``."""

    if not signature_header:
        return False
    expected = "sha256=" + hmac.new(secret.encode("utf-8"), body, hashlib.sha256).hexdigest()
    return hmac.compare_digest(expected, signature_header)


def _to_repository_info(repo: _Repository) -> RepositoryInfo:
    return RepositoryInfo(
        owner=repo.owner.login,
        name=repo.name,
        full_name=repo.full_name,
        default_branch=repo.default_branch,
        description=repo.description,
    )


def decide_trigger(*, event: str, payload: dict[str, Any]) -> TriggerDecision:
    """Decides whether a delivery should run the analysis.

    Raises:
        WebhookPayloadError: If a ``repository`` or ``push`` payload is malformed.
    """

    try:
        if event == "repository":
            parsed_repo = RepositoryEventPayload.model_validate(payload)
            if parsed_repo.action != "created":
                return TriggerDecision(
                    accepted=False, reason=f"ignored repository action {parsed_repo.action}"
                )
            return TriggerDecision(
                accepted=True,
                reason="repository created",
                request=AnalysisRequest(
                    event="repository.created",
                    repository=_to_repository_info(parsed_repo.repository),
                    installation_id=(
                        parsed_repo.installation.id if parsed_repo.installation else None
                    ),
                ),
            )
        if event == "push":
            parsed_push = PushEventPayload.model_validate(payload)
            default_ref = f"refs/heads/{parsed_push.repository.default_branch}"
            if parsed_push.ref != default_ref:
                return TriggerDecision(
                    accepted=False, reason=f"ignored push to non-default ref {parsed_push.ref}"
                )
            return TriggerDecision(
                accepted=True,
                reason="push to default branch",
                request=AnalysisRequest(
                    event="push",
                    repository=_to_repository_info(parsed_push.repository),
                    installation_id=(
                        parsed_push.installation.id if parsed_push.installation else None
                    ),
                ),
            )
    except ValidationError as exc:
        raise WebhookPayloadError(f"Malformed {event} payload: {exc}") from exc
    return TriggerDecision(accepted=False, reason=f"ignored event {event}")
