"""
Test suite for get_index_store().

System role: Verification of index store selection
"""

import pytest

from agentchat.boundary.vdb.in_memory_store import InMemoryIndexStore
from agentchat.boundary.vdb.index_store_factory import get_index_store
from agentchat.boundary.vdb.pgvector_store import PgVectorIndexStore
from agentchat.configs import Settings
from agentchat.configs.index import IndexSettings


class TestGetIndexStore:
    """Test suite for get_index_store()."""

    def test_get_index_store_should_build_memory_store(self) -> None:
        settings = Settings(index=IndexSettings(store_type="memory"))

        assert isinstance(get_index_store(settings), InMemoryIndexStore)

    def test_get_index_store_should_build_pgvector_store(self) -> None:
        settings = Settings(index=IndexSettings(store_type="Postgres"))

        assert isinstance(get_index_store(settings), PgVectorIndexStore)

    def test_get_index_store_should_reject_unknown_type(self) -> None:
        settings = Settings(index=IndexSettings(store_type="faiss"))

        with pytest.raises(ValueError):
            get_index_store(settings)
