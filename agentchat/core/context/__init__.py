"""
Context assembly: web, document and memory blocks fused into one bounded prompt.
"""

from agentchat.core.context.assembler import AssembledPrompt, ContextAssembler, ContextFlags

__all__ = ["AssembledPrompt", "ContextAssembler", "ContextFlags"]
