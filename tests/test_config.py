"""Settings defaults and environment overrides."""

from src.config import Settings


def test_database_is_async_only():
    fields = Settings.model_fields
    assert "database_url_sync" not in fields
    assert fields["database_url"].default.startswith("postgresql+asyncpg://")


def test_transition_policy_from_environment(monkeypatch):
    monkeypatch.setenv("ENFORCE_TRANSITIONS", "false")
    assert Settings().enforce_transitions is False
