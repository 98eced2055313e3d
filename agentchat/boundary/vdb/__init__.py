"""
Document index boundary layer.

- IndexStore: protocol shared by the stores
- InMemoryIndexStore: local development / test store
- PgVectorIndexStore: PostgreSQL + pgvector store with hybrid SQL search
- EmbeddingClient: async embedding service adapter

Dependencies: sqlalchemy, langchain_google_genai, tenacity
System role: Index store and embedding adapters for RAG
"""

from agentchat.boundary.vdb.embedding_client import EmbeddingClient
from agentchat.boundary.vdb.index_store import IndexStore
from agentchat.boundary.vdb.in_memory_store import InMemoryIndexStore

__all__ = ["EmbeddingClient", "IndexStore", "InMemoryIndexStore"]
