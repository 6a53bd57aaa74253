"""Tests for the engine options derived from settings."""

from scrumkit.config import settings
from scrumkit.database import engine, engine_kwargs


def test_engine_options_follow_settings() -> None:
    assert engine_kwargs["echo"] == settings.DEBUG
    assert "future" not in engine_kwargs
    if "postgresql" in settings.DATABASE_URL:
        assert engine_kwargs["connect_args"] == {"statement_cache_size": 0}
    else:
        assert "connect_args" not in engine_kwargs


def test_engine_uses_configured_url() -> None:
    assert engine.url.drivername == settings.DATABASE_URL.split("://", 1)[0]
