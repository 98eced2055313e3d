from agentchat.boundary.web_search.web_search_client import WebSearchClient, WebSnippet

__all__ = ["WebSearchClient", "WebSnippet"]
