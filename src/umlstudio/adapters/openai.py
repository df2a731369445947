"""
OpenAI adapter for umlstudio.

Requires the 'openai' package: pip install umlstudio[openai]
"""

from __future__ import annotations

from typing import Any

try:
    from openai import AsyncOpenAI  # type: ignore[import-not-found]
except ImportError:
    raise ImportError(
        "OpenAI adapter requires the 'openai' package. "
        "Install with: pip install umlstudio[openai]"
    )

from umlstudio.adapters.base import AgentResponse, LLMAdapter, Message


class OpenAIAdapter(LLMAdapter):
    """
    OpenAI chat completions adapter.

    Example:
        from openai import AsyncOpenAI
        from umlstudio.adapters import OpenAIAdapter

        adapter = OpenAIAdapter(AsyncOpenAI(), model="gpt-4o-mini")
        response = await adapter.chat([
            Message(role="user", content="Add a database participant")
        ])
    """

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        model: str = "gpt-4o-mini",
        temperature: float = 0.2,
        max_tokens: int = 4096,
        timeout: float | None = None,
    ) -> None:
        super().__init__(model=model, temperature=temperature, max_tokens=max_tokens)
        self.client = client or AsyncOpenAI(timeout=timeout)

    def _build_openai_messages(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
    ) -> list[dict[str, Any]]:
        """Build OpenAI-format messages with system prompt."""
        openai_messages: list[dict[str, Any]] = []
        if system_prompt:
            openai_messages.append({"role": "system", "content": system_prompt})
        for msg in messages:
            openai_messages.append({"role": msg.role, "content": msg.content})
        return openai_messages

    async def chat(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
    ) -> AgentResponse:
        """Send a chat request to OpenAI."""
        response = await self.client.chat.completions.create(
            model=self.model,
            messages=self._build_openai_messages(messages, system_prompt),
            temperature=self.temperature,
            max_tokens=self.max_tokens,
        )

        choice = response.choices[0]
        return AgentResponse(
            content=choice.message.content or "",
            finish_reason=choice.finish_reason,
            usage={
                "prompt_tokens": response.usage.prompt_tokens if response.usage else 0,
                "completion_tokens": response.usage.completion_tokens if response.usage else 0,
            },
        )
