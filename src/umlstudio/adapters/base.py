"""
Base LLM adapter interface.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class Message:
    """A message in a conversation."""

    role: str  # "user", "assistant", "system"
    content: str


@dataclass
class AgentResponse:
    """Response from a language model."""

    content: str
    finish_reason: str | None = None
    usage: dict[str, int] = field(default_factory=dict)


class LLMAdapter(ABC):
    """
    Abstract base class for LLM provider adapters.

    Adapters hide the differences between provider SDKs so the rewrite
    requester can send a system prompt plus messages and get text back.

    Example implementation for a custom provider:

        class MyLLMAdapter(LLMAdapter):
            def __init__(self, client: MyLLMClient):
                super().__init__(model="my-model")
                self.client = client

            async def chat(self, messages, system_prompt=None):
                response = await self.client.chat(
                    system=system_prompt,
                    messages=[{"role": m.role, "content": m.content} for m in messages],
                )
                return AgentResponse(content=response.content)
    """

    def __init__(
        self,
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 4096,
    ) -> None:
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    @abstractmethod
    async def chat(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
    ) -> AgentResponse:
        """
        Send a chat request to the LLM.

        Args:
            messages: Conversation messages
            system_prompt: Optional system prompt

        Returns:
            AgentResponse with LLM output
        """
        pass
