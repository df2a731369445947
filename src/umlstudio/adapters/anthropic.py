"""
Anthropic adapter for umlstudio.

Requires the 'anthropic' package: pip install umlstudio[anthropic]
"""

from __future__ import annotations

from typing import Any

try:
    from anthropic import AsyncAnthropic  # type: ignore[import-not-found]
except ImportError:
    raise ImportError(
        "Anthropic adapter requires the 'anthropic' package. "
        "Install with: pip install umlstudio[anthropic]"
    )

from umlstudio.adapters.base import AgentResponse, LLMAdapter, Message


class AnthropicAdapter(LLMAdapter):
    """
    Anthropic messages adapter.

    Example:
        from anthropic import AsyncAnthropic
        from umlstudio.adapters import AnthropicAdapter

        adapter = AnthropicAdapter(AsyncAnthropic())
        response = await adapter.chat([
            Message(role="user", content="Add a database participant")
        ])
    """

    def __init__(
        self,
        client: AsyncAnthropic | None = None,
        model: str = "claude-3-5-sonnet-20241022",
        temperature: float = 0.2,
        max_tokens: int = 4096,
        timeout: float | None = None,
    ) -> None:
        super().__init__(model=model, temperature=temperature, max_tokens=max_tokens)
        if client is None:
            client = AsyncAnthropic(timeout=timeout) if timeout else AsyncAnthropic()
        self.client = client

    @staticmethod
    def _build_anthropic_messages(messages: list[Message]) -> list[dict[str, Any]]:
        # Anthropic takes the system prompt as a separate parameter
        return [
            {"role": msg.role, "content": msg.content}
            for msg in messages
            if msg.role != "system"
        ]

    async def chat(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
    ) -> AgentResponse:
        """Send a chat request to Anthropic."""
        request_kwargs: dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "temperature": self.temperature,
            "messages": self._build_anthropic_messages(messages),
        }
        if system_prompt:
            request_kwargs["system"] = system_prompt

        response = await self.client.messages.create(**request_kwargs)

        content = ""
        for block in response.content:
            if block.type == "text":
                content += block.text

        return AgentResponse(
            content=content,
            finish_reason=response.stop_reason,
            usage={
                "prompt_tokens": response.usage.input_tokens,
                "completion_tokens": response.usage.output_tokens,
            },
        )
