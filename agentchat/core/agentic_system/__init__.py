"""
Language model adapters: token streaming and session titles.
"""

from agentchat.core.agentic_system.chat_model import GeminiModelStreamer, ModelStreamer, build_gemini_chat_model
from agentchat.core.agentic_system.title_generator import TitleGenerator

__all__ = ["ModelStreamer", "GeminiModelStreamer", "build_gemini_chat_model", "TitleGenerator"]
