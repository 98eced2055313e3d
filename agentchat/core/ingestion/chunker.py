"""
Text chunking task using RecursiveCharacterTextSplitter.

Splits on paragraph, then line, then sentence, then word, then character
boundaries so chunks avoid cutting mid-word where possible.

Dependencies: langchain_text_splitters
System role: First stage of document ingestion
"""

from langchain_text_splitters import RecursiveCharacterTextSplitter

DEFAULT_SEPARATORS = ["\n\n", "\n", "。", "！", "？", ". ", "! ", "? ", " ", ""]


class ChunkingTask:
    """Split raw text into overlapping chunks."""

    def __init__(
        self,
        chunk_size: int = 1000,
        chunk_overlap: int = 200,
        separators: list[str] | None = None,
    ) -> None:
        """
        Initialize chunking task with splitter configuration.

        Args:
            chunk_size: Maximum chunk size in characters
            chunk_overlap: Overlap between consecutive chunks

        Raises:
            ValueError: If overlap is not smaller than size
        """
        if chunk_overlap >= chunk_size:
            raise ValueError("chunk_overlap must be smaller than chunk_size")

        self.chunk_size = chunk_size
        self.chunk_overlap = chunk_overlap
        self._splitter = RecursiveCharacterTextSplitter(
            chunk_size=chunk_size,
            chunk_overlap=chunk_overlap,
            separators=separators or DEFAULT_SEPARATORS,
            keep_separator="end",
            length_function=len,
        )

    def split(self, text: str) -> list[str]:
        """
        Split text into chunks.

        Returns:
            list[str]: Non-empty chunks, each at most `chunk_size` characters;
                empty list for blank input
        """
        if not text or not text.strip():
            return []
        return [chunk for chunk in self._splitter.split_text(text) if chunk.strip()]
