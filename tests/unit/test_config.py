"""Unit tests for application settings."""

from caseload_planner.application.config import Settings


def test_settings_defaults(monkeypatch):
    """Test settings defaults when the environment is empty."""
    for name in ("STORAGE_BACKEND", "LESSON_API_BASE_URL", "LESSON_BATCH_MODE", "API_PORT"):
        monkeypatch.delenv(name, raising=False)

    config = Settings(_env_file=None)

    assert config.app_name == "caseload-planner"
    assert config.storage_backend == "local"
    assert config.lesson_api_base_url is None
    assert config.lesson_api_timeout == 115.0
    assert config.lesson_api_max_retries == 2
    assert config.lesson_batch_mode is True
    assert config.default_lesson_duration == 30
    assert config.signed_url_expiry == 3600
    assert config.max_document_size == 10 * 1024 * 1024


def test_settings_from_environment(monkeypatch):
    """Test settings are read case-insensitively from the environment."""
    monkeypatch.setenv("STORAGE_BACKEND", "dynamodb")
    monkeypatch.setenv("lesson_api_base_url", "https://lessons.example")
    monkeypatch.setenv("LESSON_BATCH_MODE", "false")
    monkeypatch.setenv("API_PORT", "9000")

    config = Settings(_env_file=None)

    assert config.storage_backend == "dynamodb"
    assert config.lesson_api_base_url == "https://lessons.example"
    assert config.lesson_batch_mode is False
    assert config.api_port == 9000
