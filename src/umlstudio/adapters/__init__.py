"""
LLM provider adapters.

These adapters let the rewrite requester talk to different LLM providers
through one small interface.
"""

from umlstudio.adapters.base import AgentResponse, LLMAdapter, Message
from umlstudio.adapters.registry import available_providers, create_adapter

__all__ = [
    "AgentResponse",
    "LLMAdapter",
    "Message",
    "available_providers",
    "create_adapter",
]

# Optional imports for specific providers
try:
    from umlstudio.adapters.openai import OpenAIAdapter  # noqa: F401

    __all__.append("OpenAIAdapter")
except ImportError:
    pass

try:
    from umlstudio.adapters.anthropic import AnthropicAdapter  # noqa: F401

    __all__.append("AnthropicAdapter")
except ImportError:
    pass
