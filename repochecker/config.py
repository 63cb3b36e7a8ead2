"""Application configuration.

All secrets must be supplied via environment variables. This module intentionally
avoids printing secret values.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_BINARY_EXTENSIONS = ".jpg,.png,.gif,.mp4,.zip,.pdf"


class AppSettings(BaseSettings):
    """Settings for the webhook process."""

    model_config = SettingsConfigDict(
        env_prefix="",
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # GitHub auth: either a static token or GitHub App credentials
    github_token: str | None = None
    github_api_base_url: str = "https://api.github.com"
    app_id: str | None = None
    private_key: str | None = None
    private_key_path: str | None = None
    webhook_secret: str | None = None

    # Model
    gemini_api_key: str | None = None
    gemini_model: str = "gemini-2.5-flash"

    # Sampling and prompt limits
    max_files: int = Field(default=10, ge=1)
    max_file_size_bytes: int = Field(default=100_000, ge=0)
    max_content_chars: int = Field(default=5_000, ge=1)
    binary_extensions: str = DEFAULT_BINARY_EXTENSIONS  # comma-separated

    # Timeouts
    http_timeout_seconds: float = 30.0
    model_timeout_seconds: float = 120.0

    # Issue footer
    project_url: str = "https://github.com/your-username/repochecker"

    # Server
    listen_host: str = "0.0.0.0"
    port: int = 3000
    log_level: str = "INFO"

    @field_validator(
        "github_token",
        "app_id",
        "private_key",
        "private_key_path",
        "webhook_secret",
        "gemini_api_key",
        mode="before",
    )
    @classmethod
    def _normalize_env_string(cls, value: Any) -> Any:
        """Normalizes env var strings.

        Docker's `--env-file` does not strip quotes. To avoid subtle auth failures
        like 401 caused by surrounding quotes, we trim whitespace and strip a
        single pair of surrounding quotes.
        """

        if value is None or not isinstance(value, str):
            return value
        text = value.strip()
        if len(text) >= 2 and ((text[0] == text[-1] == '"') or (text[0] == text[-1] == "'")):
            text = text[1:-1].strip()
        return text or None

    def get_binary_extensions(self) -> tuple[str, ...]:
        """Returns the binary denylist as lower-cased suffixes with a leading dot."""

        suffixes: list[str] = []
        for raw in self.binary_extensions.split(","):
            item = raw.strip().lower()
            if not item:
                continue
            suffixes.append(item if item.startswith(".") else f".{item}")
        return tuple(suffixes)

    def get_private_key(self) -> str | None:
        """Returns the GitHub App private key from PRIVATE_KEY or PRIVATE_KEY_PATH."""

        if self.private_key:
            # Single-line env values usually carry literal "\n" sequences.
            return self.private_key.replace("\\n", "\n")
        if self.private_key_path:
            return Path(self.private_key_path).read_text(encoding="utf-8")
        return None

    def uses_app_authentication(self) -> bool:
        """Returns True when GitHub App credentials are configured."""

        return self.app_id is not None and (
            self.private_key is not None or self.private_key_path is not None
        )
