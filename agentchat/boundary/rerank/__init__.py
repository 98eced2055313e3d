from agentchat.boundary.rerank.rerank_client import RerankClient

__all__ = ["RerankClient"]
