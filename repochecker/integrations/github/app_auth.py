"""GitHub App authentication.

A GitHub App authenticates as itself with a short-lived RS256 JWT and exchanges
it for an installation access token scoped to the installation that sent the
webhook delivery.
"""

from __future__ import annotations

import logging
import time

import httpx
import jwt

from repochecker.config import AppSettings
from repochecker.integrations.github.github_client import (
    GitHubClient,
    GitHubClientConfig,
    InstallationToken,
    build_default_headers,
    raise_for_error,
)

# GitHub rejects JWTs valid for more than 10 minutes; backdate to absorb clock drift.
_JWT_BACKDATE_SECONDS = 60
_JWT_LIFETIME_SECONDS = 9 * 60


class GitHubAuthError(RuntimeError):
    """Raised when no usable GitHub credentials are available."""


def create_app_jwt(*, app_id: str, private_key: str, now: float | None = None) -> str:
    """Creates a JWT that authenticates as the GitHub App."""

    issued_at = int(now if now is not None else time.time())
    claims = {
        "iat": issued_at - _JWT_BACKDATE_SECONDS,
        "exp": issued_at + _JWT_LIFETIME_SECONDS,
        "iss": str(app_id),
    }
    return jwt.encode(claims, private_key, algorithm="RS256")


class GitHubClientFactory:
    """Builds a GitHub client for a single webhook delivery.

    The returned client is owned by the caller and must be closed.
    """

    _logger = logging.getLogger(__name__)

    def __init__(
        self,
        *,
        settings: AppSettings,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def create_client(self, *, installation_id: int | None) -> GitHubClient:
        """Returns an authenticated client.

        Args:
            installation_id: ``installation.id`` from the webhook payload. Required
                when GitHub App credentials are configured.

        Raises:
            GitHubAuthError: If credentials are missing.
            GitHubApiError: If the installation token exchange fails.
        """

        if self._settings.uses_app_authentication():
            if installation_id is None:
                raise GitHubAuthError("Webhook payload has no installation id for app auth.")
            token = self.create_installation_token(installation_id=installation_id).token
        elif self._settings.github_token:
            token = self._settings.github_token
        else:
            raise GitHubAuthError("GITHUB_TOKEN or APP_ID with PRIVATE_KEY is required.")
        return self._build_client(token=token)

    def create_installation_token(self, *, installation_id: int) -> InstallationToken:
        """Exchanges an app JWT for an installation access token."""

        private_key = self._settings.get_private_key()
        if self._settings.app_id is None or private_key is None:
            raise GitHubAuthError("APP_ID and PRIVATE_KEY (or PRIVATE_KEY_PATH) are required.")
        app_jwt = create_app_jwt(app_id=self._settings.app_id, private_key=private_key)
        self._logger.info("requesting installation token: installation_id=%s", installation_id)
        with httpx.Client(
            base_url=self._settings.github_api_base_url,
            headers=build_default_headers(token=app_jwt),
            timeout=httpx.Timeout(self._settings.http_timeout_seconds),
            transport=self._transport,
        ) as client:
            resp = client.post(f"/app/installations/{installation_id}/access_tokens")
            raise_for_error(resp)
            return InstallationToken.model_validate(resp.json())

    def _build_client(self, *, token: str) -> GitHubClient:
        return GitHubClient(
            config=GitHubClientConfig(
                api_base_url=self._settings.github_api_base_url,
                token=token,
                timeout_seconds=self._settings.http_timeout_seconds,
            ),
            transport=self._transport,
        )
