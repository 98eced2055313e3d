"""
PostgreSQL + pgvector index store.

Chunks live in one table (`id, content, metadata jsonb, embedding vector`)
declared with SQLAlchemy Core and pgvector's `Vector` type. Search goes
through two SQL functions so scoring stays in the database:
`hybrid_search_documents` blends cosine similarity with full-text rank,
`match_documents` is the vector-only fallback. `ensure_schema()` creates the
extension, table and functions when missing.

Dependencies: sqlalchemy (asyncio), asyncpg, pgvector
System role: Production index store
"""

import json
import logging
import re

from pgvector.sqlalchemy import Vector
from sqlalchemy import (
    Column,
    DateTime,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
    bindparam,
    delete,
    func,
    select,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB, insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from agentchat.configs.index import IndexSettings
from agentchat.core.exceptions import IndexUnavailableError
from agentchat.models.chunk import ChunkMetadata, DocumentChunk, IndexRow

logger = logging.getLogger(__name__)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

FUNCTION_TEMPLATES = (
    """
CREATE OR REPLACE FUNCTION {vector_fn}(
    query_embedding vector({dimension}), match_threshold float, match_count int
) RETURNS TABLE (id text, content text, metadata jsonb, similarity float)
LANGUAGE sql STABLE AS $$
    SELECT d.id, d.content, d.metadata, 1 - (d.embedding <=> query_embedding) AS similarity
    FROM {table} d
    WHERE 1 - (d.embedding <=> query_embedding) >= match_threshold
    ORDER BY d.embedding <=> query_embedding
    LIMIT match_count;
$$
""",
    """
CREATE OR REPLACE FUNCTION {hybrid_fn}(
    query_embedding vector({dimension}), match_threshold float, match_count int,
    query_text text, keyword_weight float DEFAULT {keyword_weight}
) RETURNS TABLE (
    id text, content text, metadata jsonb,
    similarity float, keyword_score float, combined_score float
)
LANGUAGE sql STABLE AS $$
    WITH scored AS (
        SELECT d.id, d.content, d.metadata,
               1 - (d.embedding <=> query_embedding) AS similarity,
               ts_rank_cd(
                   to_tsvector('simple', d.content || ' ' || coalesce(d.metadata->>'keyword_tags', '')),
                   plainto_tsquery('simple', query_text)
               ) AS keyword_score
        FROM {table} d
    )
    SELECT s.id, s.content, s.metadata, s.similarity, s.keyword_score,
           (1 - keyword_weight) * s.similarity + keyword_weight * least(s.keyword_score, 1.0) AS combined_score
    FROM scored s
    WHERE s.similarity >= match_threshold
    ORDER BY combined_score DESC
    LIMIT match_count;
$$
""",
)


def _identifier(name: str) -> str:
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid SQL identifier: {name!r}")
    return name


def build_documents_table(name: str, dimension: int, metadata: MetaData | None = None) -> Table:
    """
    Declare the chunk table.

    Args:
        name: Table name
        dimension: Embedding dimension of the `embedding` column
        metadata: MetaData to register the table on (a fresh one by default)

    Returns:
        Table: Chunk table with an expression index on `metadata->>'source_id'`
    """
    table = Table(
        name,
        metadata if metadata is not None else MetaData(),
        Column("id", Text, primary_key=True),
        Column("content", Text, nullable=False),
        Column("metadata", JSONB, nullable=False, server_default=text("'{}'::jsonb")),
        Column("embedding", Vector(dimension), nullable=False),
        Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    )
    Index(f"{name}_source_idx", table.c["metadata"]["source_id"].astext)
    return table


class PgVectorIndexStore:
    """Index store backed by PostgreSQL with the pgvector extension."""

    def __init__(self, engine: AsyncEngine, settings: IndexSettings) -> None:
        """
        Args:
            engine: Async SQLAlchemy engine (asyncpg)
            settings: Index settings (table/function names, dimension)
        """
        self._engine = engine
        self._settings = settings
        self._table = build_documents_table(
            _identifier(settings.table_name), settings.embedding_dimension
        )
        self._hybrid_fn = _identifier(settings.hybrid_function)
        self._vector_fn = _identifier(settings.vector_function)
        self._vector_type = Vector(settings.embedding_dimension)

        self._hybrid_stmt = text(
            f"SELECT id, content, metadata, similarity, keyword_score, combined_score "
            f"FROM {self._hybrid_fn}(:embedding, :threshold, :limit, :query_text)"
        ).bindparams(bindparam("embedding", type_=self._vector_type))
        self._vector_stmt = text(
            f"SELECT id, content, metadata, similarity "
            f"FROM {self._vector_fn}(:embedding, :threshold, :limit)"
        ).bindparams(bindparam("embedding", type_=self._vector_type))

    @property
    def table(self) -> Table:
        return self._table

    def _source_filter(self, source_id: str):
        return self._table.c["metadata"]["source_id"].astext == source_id

    async def ensure_schema(self) -> None:
        """Create the pgvector extension, chunk table and search functions."""
        functions = [
            template.format(
                table=self._table.name,
                dimension=self._settings.embedding_dimension,
                vector_fn=self._vector_fn,
                hybrid_fn=self._hybrid_fn,
                keyword_weight=self._settings.keyword_weight,
            ).strip()
            for template in FUNCTION_TEMPLATES
        ]
        async with self._engine.begin() as conn:
            await conn.execute(text("CREATE EXTENSION IF NOT EXISTS vector"))
            await conn.run_sync(self._table.metadata.create_all)
            for statement in functions:
                await conn.execute(text(statement))
        logger.info(f"{__name__}:ensure_schema - schema ready for table={self._table.name}")

    @staticmethod
    def _to_row(mapping) -> IndexRow:
        metadata = mapping["metadata"]
        if isinstance(metadata, str):
            metadata = json.loads(metadata)
        return IndexRow(
            id=mapping["id"],
            content=mapping["content"],
            metadata=ChunkMetadata.model_validate(metadata),
            similarity=float(mapping["similarity"]),
            keyword_score=(
                float(mapping["keyword_score"]) if mapping.get("keyword_score") is not None else None
            ),
            combined_score=(
                float(mapping["combined_score"]) if mapping.get("combined_score") is not None else None
            ),
        )

    async def hybrid_search(
        self,
        query_embedding: list[float],
        similarity_threshold: float,
        limit: int,
        query_text: str,
    ) -> list[IndexRow]:
        params = {
            "embedding": list(query_embedding),
            "threshold": similarity_threshold,
            "limit": limit,
            "query_text": query_text,
        }
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(self._hybrid_stmt, params)
                return [self._to_row(m) for m in result.mappings().all()]
        except SQLAlchemyError as e:
            raise IndexUnavailableError(
                f"Hybrid search failed: {e}", operation="hybrid_search"
            ) from e

    async def vector_search(
        self,
        query_embedding: list[float],
        similarity_threshold: float,
        limit: int,
    ) -> list[IndexRow]:
        params = {
            "embedding": list(query_embedding),
            "threshold": similarity_threshold,
            "limit": limit,
        }
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(self._vector_stmt, params)
                return [self._to_row(m) for m in result.mappings().all()]
        except SQLAlchemyError as e:
            raise IndexUnavailableError(
                f"Vector search failed: {e}", operation="vector_search"
            ) from e

    async def add_chunks(self, chunks: list[DocumentChunk]) -> int:
        if not chunks:
            return 0
        stmt = insert(self._table).on_conflict_do_nothing(index_elements=["id"])
        params = [
            {
                "id": chunk.id,
                "content": chunk.content,
                "metadata": chunk.metadata.model_dump(mode="json"),
                "embedding": chunk.embedding,
            }
            for chunk in chunks
        ]
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt, params)
        except SQLAlchemyError as e:
            raise IndexUnavailableError(
                f"Chunk insert failed: {e}",
                operation="add_chunks",
                details={"chunk_count": len(chunks)},
            ) from e
        written = result.rowcount if result.rowcount is not None and result.rowcount >= 0 else len(chunks)
        return written

    async def existing_sequence_nos(self, source_id: str) -> set[int]:
        stmt = select(
            self._table.c["metadata"]["sequence_no"].astext.cast(Integer)
        ).where(self._source_filter(source_id))
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                return {int(row) for row in result.scalars().all() if row is not None}
        except SQLAlchemyError as e:
            raise IndexUnavailableError(
                f"Source lookup failed: {e}", operation="existing_sequence_nos"
            ) from e

    async def has_source(self, source_id: str) -> bool:
        stmt = select(self._table.c["id"]).where(self._source_filter(source_id)).limit(1)
        try:
            async with self._engine.connect() as conn:
                result = await conn.execute(stmt)
                return result.first() is not None
        except SQLAlchemyError as e:
            raise IndexUnavailableError(
                f"Source lookup failed: {e}", operation="has_source"
            ) from e

    async def delete_source(self, source_id: str) -> int:
        stmt = delete(self._table).where(self._source_filter(source_id))
        try:
            async with self._engine.begin() as conn:
                result = await conn.execute(stmt)
        except SQLAlchemyError as e:
            raise IndexUnavailableError(
                f"Source delete failed: {e}", operation="delete_source"
            ) from e
        return result.rowcount or 0
