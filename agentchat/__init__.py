"""
agentchat: retrieval pipeline and streaming response coordinator for persona chat.
"""

__version__ = "0.1.0"
