"""
Index store factory for selecting between in-memory (dev) and pgvector (prod).

Depends on INDEX_STORE_TYPE environment variable.

Dependencies: agentchat.boundary.vdb, agentchat.configs
System role: Index store instantiation and selection
"""

import logging

from agentchat.boundary.vdb.index_store import IndexStore
from agentchat.boundary.vdb.in_memory_store import InMemoryIndexStore
from agentchat.configs import Settings

logger = logging.getLogger(__name__)


def get_index_store(settings: Settings) -> IndexStore:
    """
    Build the index store named by `settings.index.store_type`.

    Returns:
        IndexStore: In-memory or pgvector store

    Raises:
        ValueError: If INDEX_STORE_TYPE is invalid
    """
    store_type = settings.index.store_type.lower()

    if store_type == "memory":
        logger.info(f"{__name__}:get_index_store - Creating in-memory index store (local dev mode)")
        return InMemoryIndexStore(keyword_weight=settings.index.keyword_weight)

    if store_type == "postgres":
        from agentchat.boundary.db.connection import create_engine_from_settings
        from agentchat.boundary.vdb.pgvector_store import PgVectorIndexStore

        logger.info(f"{__name__}:get_index_store - Creating pgvector index store (production mode)")
        return PgVectorIndexStore(
            engine=create_engine_from_settings(settings.database),
            settings=settings.index,
        )

    raise ValueError(
        f"Invalid INDEX_STORE_TYPE: {store_type}. "
        f"Must be 'memory' (dev) or 'postgres' (production)."
    )
