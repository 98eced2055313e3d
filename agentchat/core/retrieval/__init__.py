"""
Live retrieval: hybrid search, cross-encoder rerank, RAG pipeline.
"""

from agentchat.core.retrieval.hybrid_retriever import HybridRetriever
from agentchat.core.retrieval.rag_pipeline import RAGPipeline
from agentchat.core.retrieval.reranker import Reranker

__all__ = ["HybridRetriever", "Reranker", "RAGPipeline"]
