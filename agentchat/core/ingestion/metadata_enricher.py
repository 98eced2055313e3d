"""
Chunk metadata enrichment.

Derives a year and a coarse department from the source name and text, and
synthesizes the keyword string the hybrid search matches against.

Dependencies: re, agentchat.models
System role: Second stage of document ingestion
"""

import re
from pathlib import PurePath
from typing import Any

from agentchat.models.chunk import ChunkMetadata

_YEAR_RE = re.compile(r"(?<!\d)(20\d{2}|19\d{2})(?!\d)")
_TITLE_TOKEN_RE = re.compile(r"[^\W_]+", re.UNICODE)


def find_year(*texts: str) -> int | None:
    """First 4-digit year in the first text that has one."""
    for text in texts:
        if not text:
            continue
        match = _YEAR_RE.search(text)
        if match:
            return int(match.group(1))
    return None


class MetadataEnricher:
    """Builds ChunkMetadata for each chunk of one source."""

    def __init__(
        self,
        department_rules: list[tuple[str, str]] | None = None,
        default_department: str = "general",
    ) -> None:
        """
        Args:
            department_rules: Ordered `(needle, department)` pairs; first match wins
            default_department: Used when no rule matches
        """
        self._rules = department_rules or []
        self._default_department = default_department

    def guess_department(self, source_id: str, text: str = "") -> str:
        lowered_source = source_id.lower()
        for needle, department in self._rules:
            if needle.lower() in lowered_source:
                return department
        lowered_text = text.lower()
        for needle, department in self._rules:
            if needle.lower() in lowered_text:
                return department
        return self._default_department

    @staticmethod
    def title_tokens(source_id: str) -> list[str]:
        stem = PurePath(source_id).stem
        return _TITLE_TOKEN_RE.findall(stem)

    def document_fields(self, source_id: str, raw_text: str) -> dict[str, Any]:
        """
        Fields shared by every chunk of the source.

        Returns:
            dict: `year`, `department` and `keyword_tags`
        """
        year = find_year(source_id, raw_text)
        department = self.guess_department(source_id, raw_text)
        parts = [str(year) if year else "", department, *self.title_tokens(source_id)]
        return {
            "year": year,
            "department": department,
            "keyword_tags": " ".join(p for p in parts if p),
        }

    def enrich(
        self,
        source_id: str,
        sequence_no: int,
        total_chunks: int,
        document_fields: dict[str, Any],
        extra: dict[str, Any] | None = None,
    ) -> ChunkMetadata:
        return ChunkMetadata(
            source_id=source_id,
            sequence_no=sequence_no,
            total_chunks=total_chunks,
            extra=dict(extra or {}),
            **document_fields,
        )
