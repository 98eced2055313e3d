"""
Test suite for the ingestion CLI.

System role: Verification of the offline indexer entry point
"""

from pathlib import Path

import pytest

from agentchat.core.ingestion import ChunkingTask, Indexer, IngestionResult, MetadataEnricher
from agentchat.scripts.ingest_docs import main, parse_args, run, summarize


class TestIngestDocsCli:
    """Test suite for agentchat.scripts.ingest_docs."""

    def test_parse_args_should_reject_force_with_reconcile(self) -> None:
        with pytest.raises(SystemExit):
            parse_args(["docs", "--force", "--reconcile"])

    def test_summarize_should_list_partial_sources(self) -> None:
        results = [
            IngestionResult(source_id="a.md", chunks_written=3, total_chunks=3),
            IngestionResult(source_id="b.md", chunks_written=1, total_chunks=2, failed_sequence_nos=[1]),
            IngestionResult(source_id="c.md", skipped=True),
        ]

        summary = summarize(results)

        assert summary.splitlines()[0] == "files=3 chunks_written=4 skipped=1"
        assert "b.md" in summary.splitlines()[1]

    @pytest.mark.asyncio
    async def test_run_should_ingest_directory_with_given_indexer(
        self, tmp_path: Path, in_memory_store, embedding_client
    ) -> None:
        # Arrange
        (tmp_path / "exam.md").write_text("The exam deadline is May 1.", encoding="utf-8")
        (tmp_path / "notes.pdf").write_text("ignored", encoding="utf-8")
        indexer = Indexer(in_memory_store, embedding_client, ChunkingTask(200, 20), MetadataEnricher())

        # Act
        results = await run(parse_args([str(tmp_path)]), indexer=indexer)

        # Assert
        assert [r.source_id for r in results] == ["exam.md"]
        assert await in_memory_store.has_source("exam.md")

    def test_main_should_return_2_for_missing_directory(self, tmp_path: Path) -> None:
        assert main([str(tmp_path / "missing")]) == 2
