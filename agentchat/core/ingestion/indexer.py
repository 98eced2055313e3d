"""
Document indexer.

Turns a source document into content-addressed, overlapping chunks with
enriched metadata and writes them to the index store. Ingestion is keyed
by `source_id`: a source that already has chunks is skipped unless the
caller forces re-ingestion or asks to reconcile a partial run.

Dependencies: agentchat.boundary.vdb, agentchat.core.ingestion
System role: Offline ingestion entry point
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from agentchat.boundary.vdb.embedding_client import EmbeddingClient
from agentchat.boundary.vdb.index_store import IndexStore
from agentchat.core.exceptions import EmbeddingError, IndexUnavailableError
from agentchat.core.ingestion.chunker import ChunkingTask
from agentchat.core.ingestion.metadata_enricher import MetadataEnricher
from agentchat.models.chunk import DocumentChunk

logger = logging.getLogger(__name__)

INGESTIBLE_SUFFIXES = (".md", ".txt")
CRAWLED_SUBDIR = "crawled"


@dataclass
class IngestionResult:
    """Outcome of ingesting one source."""

    source_id: str
    chunks_written: int = 0
    skipped: bool = False
    total_chunks: int = 0
    failed_sequence_nos: list[int] = field(default_factory=list)

    @property
    def is_partial(self) -> bool:
        return bool(self.failed_sequence_nos)


class Indexer:
    """
    Ingests source documents into an index store.

    Example:
        >>> indexer = Indexer(store, embedder, ChunkingTask(1000, 200), MetadataEnricher())
        >>> result = await indexer.ingest("handbook-2024.md", text, {"title": "Handbook"})
    """

    def __init__(
        self,
        store: IndexStore,
        embedder: EmbeddingClient,
        chunker: ChunkingTask,
        enricher: MetadataEnricher,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._chunker = chunker
        self._enricher = enricher

    async def ingest(
        self,
        source_id: str,
        raw_text: str,
        metadata: dict[str, Any] | None = None,
        force: bool = False,
        reconcile: bool = False,
    ) -> IngestionResult:
        """
        Index one source document.

        Args:
            source_id: Stable identifier of the source (e.g. file name)
            raw_text: Full document text
            metadata: Caller metadata copied into every chunk's `extra`
            force: Delete existing chunks for the source and re-ingest
            reconcile: Write only the chunks whose sequence numbers are missing

        Returns:
            IngestionResult: Written count, skip flag and failed sequence numbers

        Raises:
            IndexUnavailableError: When the store cannot be checked or cleared
        """
        result = IngestionResult(source_id=source_id)

        if not raw_text or not raw_text.strip():
            logger.warning(f"{__name__}:ingest - empty text for source={source_id}, skipping")
            result.skipped = True
            return result

        existing: set[int] = set()
        if force:
            deleted = await self._store.delete_source(source_id)
            logger.info(f"{__name__}:ingest - force: deleted {deleted} chunks for source={source_id}")
        elif reconcile:
            existing = await self._store.existing_sequence_nos(source_id)
        elif await self._store.has_source(source_id):
            logger.info(f"{__name__}:ingest - source={source_id} already indexed, skipping")
            result.skipped = True
            return result

        pieces = self._chunker.split(raw_text)
        result.total_chunks = len(pieces)
        document_fields = self._enricher.document_fields(source_id, raw_text)

        pending = [(seq, text) for seq, text in enumerate(pieces) if seq not in existing]
        if reconcile and not pending:
            logger.info(f"{__name__}:ingest - source={source_id} complete, nothing to reconcile")
            result.skipped = True
            return result

        for sequence_no, content in pending:
            try:
                embedding = await self._embedder.embed(content)
                chunk = DocumentChunk(
                    id=DocumentChunk.make_id(source_id, sequence_no, content),
                    content=content,
                    embedding=embedding,
                    metadata=self._enricher.enrich(
                        source_id=source_id,
                        sequence_no=sequence_no,
                        total_chunks=len(pieces),
                        document_fields=document_fields,
                        extra=metadata,
                    ),
                )
                result.chunks_written += await self._store.add_chunks([chunk])
            except (EmbeddingError, IndexUnavailableError) as e:
                logger.error(
                    f"{__name__}:ingest - chunk {sequence_no} of source={source_id} failed: "
                    f"{type(e).__name__}: {e}"
                )
                result.failed_sequence_nos.append(sequence_no)

        logger.info(
            f"{__name__}:ingest - source={source_id} written={result.chunks_written}/"
            f"{len(pending)} failed={len(result.failed_sequence_nos)}"
        )
        return result

    async def ingest_file(self, path: Path, force: bool = False, reconcile: bool = False) -> IngestionResult:
        """Ingest one text file; `source_id` is the file name."""
        text = path.read_text(encoding="utf-8")
        return await self.ingest(
            source_id=path.name,
            raw_text=text,
            metadata={"title": path.stem, "path": str(path)},
            force=force,
            reconcile=reconcile,
        )

    async def ingest_directory(
        self,
        directory: Path,
        force: bool = False,
        reconcile: bool = False,
    ) -> list[IngestionResult]:
        """
        Ingest every `.md` / `.txt` file in `directory` and its `crawled/` subdir.

        Files are processed in name order; already indexed files are skipped
        unless `force` or `reconcile` is set.
        """
        directory = Path(directory)
        if not directory.is_dir():
            raise FileNotFoundError(f"Not a directory: {directory}")

        files = [p for p in sorted(directory.iterdir()) if p.is_file() and p.suffix.lower() in INGESTIBLE_SUFFIXES]
        crawled = directory / CRAWLED_SUBDIR
        if crawled.is_dir():
            files.extend(
                p for p in sorted(crawled.iterdir()) if p.is_file() and p.suffix.lower() in INGESTIBLE_SUFFIXES
            )

        logger.info(f"{__name__}:ingest_directory - {len(files)} files under {directory}")
        results = []
        for path in files:
            results.append(await self.ingest_file(path, force=force, reconcile=reconcile))
        return results
