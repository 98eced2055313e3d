"""
Offline document ingestion CLI.

Usage:
    python -m agentchat.scripts.ingest_docs <dir> [--force] [--reconcile]

Indexes every `.md` / `.txt` file in <dir> (and <dir>/crawled) into the
configured index store. Already indexed files are skipped; `--force`
re-ingests them, `--reconcile` fills in chunks missing from partial runs.

Dependencies: argparse, agentchat.core.ingestion
System role: Out-of-band indexer entry point
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from agentchat.boundary.vdb.embedding_client import EmbeddingClient, build_google_embeddings
from agentchat.boundary.vdb.index_store import IndexStore
from agentchat.boundary.vdb.index_store_factory import get_index_store
from agentchat.boundary.vdb.pgvector_store import PgVectorIndexStore
from agentchat.configs import Settings, get_settings
from agentchat.core.ingestion import ChunkingTask, Indexer, IngestionResult, MetadataEnricher
from agentchat.observability.logger import configure_logging

logger = logging.getLogger(__name__)


def build_indexer(settings: Settings, store: IndexStore) -> Indexer:
    index = settings.index
    return Indexer(
        store=store,
        embedder=EmbeddingClient(build_google_embeddings(index), dimension=index.embedding_dimension),
        chunker=ChunkingTask(index.chunk_size, index.chunk_overlap),
        enricher=MetadataEnricher(index.department_rules, index.default_department),
    )


def summarize(results: list[IngestionResult]) -> str:
    written = sum(r.chunks_written for r in results)
    skipped = sum(1 for r in results if r.skipped)
    partial = [r.source_id for r in results if r.is_partial]
    lines = [f"files={len(results)} chunks_written={written} skipped={skipped}"]
    if partial:
        lines.append(f"partial (re-run with --reconcile): {', '.join(partial)}")
    return "\n".join(lines)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Index documents for retrieval")
    parser.add_argument("directory", type=Path, help="Directory containing .md / .txt files")
    mode = parser.add_mutually_exclusive_group()
    mode.add_argument("--force", action="store_true", help="Delete and re-ingest already indexed files")
    mode.add_argument("--reconcile", action="store_true", help="Write only chunks missing from earlier runs")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace, indexer: Indexer | None = None) -> list[IngestionResult]:
    settings = get_settings()
    if indexer is None:
        store = get_index_store(settings)
        if isinstance(store, PgVectorIndexStore):
            await store.ensure_schema()
        else:
            logger.warning("In-memory index store selected; indexed chunks are lost when this process exits")
        indexer = build_indexer(settings, store)
    return await indexer.ingest_directory(args.directory, force=args.force, reconcile=args.reconcile)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    configure_logging(get_settings().log_level)
    if not args.directory.is_dir():
        logger.error(f"Not a directory: {args.directory}")
        return 2
    results = asyncio.run(run(args))
    print(summarize(results))
    return 1 if any(r.is_partial for r in results) else 0


if __name__ == "__main__":
    sys.exit(main())
