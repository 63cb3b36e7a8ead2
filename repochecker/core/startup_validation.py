"""Startup validation for required credentials and configuration.

This module validates that the credentials needed to receive deliveries,
talk to GitHub and call the model are present before the server starts.
"""

from __future__ import annotations

import logging
from pathlib import Path

from repochecker.config import AppSettings

_logger = logging.getLogger(__name__)


class ValidationError(RuntimeError):
    """Raised when validation fails."""


def validate_github_credentials(*, settings: AppSettings) -> None:
    """Validates that GitHub App credentials or a static token are configured.

    Raises:
        ValidationError: If no usable GitHub credentials are configured.
    """

    if settings.app_id is not None:
        if settings.private_key is None and settings.private_key_path is None:
            raise ValidationError(
                "No private key defined. Please set either PRIVATE_KEY or PRIVATE_KEY_PATH."
            )
        if settings.private_key_path is not None and not Path(settings.private_key_path).is_file():
            raise ValidationError(
                f"PRIVATE_KEY_PATH does not point to a file: {settings.private_key_path}"
            )
        return
    if settings.github_token is None:
        raise ValidationError(
            "No GitHub credentials defined. Set APP_ID with PRIVATE_KEY, or GITHUB_TOKEN."
        )


def validate_analysis_limits(*, settings: AppSettings) -> None:
    """Validates sampling limits that pydantic cannot express on its own.

    Raises:
        ValidationError: If the binary denylist is empty after parsing.
    """

    if not settings.get_binary_extensions():
        raise ValidationError("BINARY_EXTENSIONS must list at least one extension.")


def validate_all(*, settings: AppSettings) -> None:
    """Validates all required credentials and configuration.

    Missing optional credentials are logged as warnings.

    Args:
        settings: Application settings.

    Raises:
        ValidationError: If any validation fails.
    """

    errors: list[str] = []

    if settings.webhook_secret is None:
        _logger.warning(
            "No webhook secret defined. Webhook signature verification is disabled."
        )
    if settings.gemini_api_key is None:
        _logger.warning(
            "GEMINI_API_KEY is not set. Issues will contain the fallback suggestion text."
        )

    for check in (validate_github_credentials, validate_analysis_limits):
        try:
            check(settings=settings)
        except ValidationError as exc:
            errors.append(str(exc))

    if errors:
        error_message = "Startup validation failed:\n\n" + "\n".join(f"  - {err}" for err in errors)
        raise ValidationError(error_message)
