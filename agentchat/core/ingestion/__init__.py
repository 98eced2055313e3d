"""
Offline document ingestion: chunking, metadata enrichment, indexing.
"""

from agentchat.core.ingestion.chunker import ChunkingTask
from agentchat.core.ingestion.indexer import Indexer, IngestionResult
from agentchat.core.ingestion.metadata_enricher import MetadataEnricher

__all__ = ["ChunkingTask", "Indexer", "IngestionResult", "MetadataEnricher"]
