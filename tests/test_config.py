from __future__ import annotations

from pathlib import Path

from repochecker.config import AppSettings


def test_app_settings_can_load_from_dotenv(tmp_path: Path, monkeypatch) -> None:
    for name in ("GITHUB_TOKEN", "GEMINI_API_KEY", "WEBHOOK_SECRET", "MAX_FILES"):
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text(
        "\n".join(
            [
                "GITHUB_TOKEN=token_from_env_file",
                "GEMINI_API_KEY=gemini_from_env_file",
                "WEBHOOK_SECRET=secret_from_env_file",
                "MAX_FILES=3",
            ]
        )
        + "\n",
        encoding="utf-8",
    )

    settings = AppSettings(_env_file=str(env_file))
    assert settings.github_token == "token_from_env_file"
    assert settings.gemini_api_key == "gemini_from_env_file"
    assert settings.webhook_secret == "secret_from_env_file"
    assert settings.max_files == 3


def test_app_settings_strips_surrounding_quotes_from_env(monkeypatch) -> None:
    monkeypatch.setenv("GITHUB_TOKEN", '"quoted_token"')
    monkeypatch.setenv("GEMINI_API_KEY", "'quoted_gemini'")
    settings = AppSettings(_env_file=None)
    assert settings.github_token == "quoted_token"
    assert settings.gemini_api_key == "quoted_gemini"


def test_app_settings_defaults_match_sampling_limits() -> None:
    settings = AppSettings(_env_file=None)
    assert settings.max_files == 10
    assert settings.max_file_size_bytes == 100_000
    assert settings.max_content_chars == 5_000
    assert settings.get_binary_extensions() == (".jpg", ".png", ".gif", ".mp4", ".zip", ".pdf")


def test_app_settings_normalizes_binary_extensions() -> None:
    settings = AppSettings(_env_file=None, binary_extensions=" .JPG, svg ,,.Tar ")
    assert settings.get_binary_extensions() == (".jpg", ".svg", ".tar")


def test_app_settings_reads_private_key_with_escaped_newlines() -> None:
    settings = AppSettings(
        _env_file=None,
        app_id="123",
        private_key="-----BEGIN KEY-----\\nabc\\n-----END KEY-----",
    )
    assert settings.uses_app_authentication() is True
    assert settings.get_private_key() == "-----BEGIN KEY-----\nabc\n-----END KEY-----"


def test_app_settings_reads_private_key_from_path(tmp_path: Path) -> None:
    key_file = tmp_path / "app.pem"
    key_file.write_text("pem-contents\n", encoding="utf-8")
    settings = AppSettings(_env_file=None, app_id="123", private_key_path=str(key_file))
    assert settings.get_private_key() == "pem-contents\n"
