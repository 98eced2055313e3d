"""
Test suite for configuration settings.

System role: Verification of env-driven configuration
"""

import pytest
from pydantic import ValidationError

from agentchat.configs import Settings, get_settings
from agentchat.configs.database import DatabaseSettings
from agentchat.configs.index import IndexSettings
from agentchat.configs.retrieval import RetrievalSettings
from agentchat.configs.streaming import StreamingSettings


class TestSettings:
    """Test suite for the settings classes."""

    def test_retrieval_defaults_should_match_documented_values(self) -> None:
        settings = RetrievalSettings()

        assert settings.top_k == 5
        assert settings.similarity_threshold == 0.5
        assert settings.candidate_limit == 20
        assert settings.history_limit == 20

    def test_env_prefix_should_override_fields(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("RETRIEVAL_TOP_K", "7")
        monkeypatch.setenv("INDEX_STORE_TYPE", "postgres")

        assert RetrievalSettings().top_k == 7
        assert IndexSettings().store_type == "postgres"

    def test_index_settings_should_reject_overlap_not_smaller_than_size(self) -> None:
        with pytest.raises(ValidationError):
            IndexSettings(chunk_size=100, chunk_overlap=100)

    def test_log_level_should_be_normalised(self) -> None:
        assert Settings(log_level="debug").log_level == "DEBUG"
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")

    def test_database_url_should_honour_override_and_ssl(self) -> None:
        assert DatabaseSettings(url_override="sqlite+aiosqlite:///x.db").async_database_url == "sqlite+aiosqlite:///x.db"
        url = DatabaseSettings(host="db", user="u", password="p", db="chat", ssl=True).async_database_url
        assert url == "postgresql+asyncpg://u:p@db:5432/chat?ssl=require"

    def test_get_settings_should_be_cached(self) -> None:
        get_settings.cache_clear()

        assert get_settings() is get_settings()
        get_settings.cache_clear()

    def test_streaming_settings_should_bound_retention(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("STREAMING_MAX_RETAINED_STATES", "50")

        settings = Settings()

        assert settings.streaming.max_retained_states == 50
        assert settings.streaming.state_ttl_seconds == 600.0
        with pytest.raises(ValidationError):
            StreamingSettings(state_ttl_seconds=0)
