"""
Ask a language model to rewrite the diagram source.

The model receives the current PlantUML code and the user's instruction and
must answer with the complete replacement code. Its reply is taken verbatim
apart from stripping Markdown code fences, which models add despite being
told not to.
"""

from __future__ import annotations

import re

from umlstudio.adapters.base import LLMAdapter, Message
from umlstudio.errors import RewriteError
from umlstudio.logging import get_logger

logger = get_logger("rewrite")

SYSTEM_INSTRUCTION = """
You are an expert PlantUML Architect.
Your goal is to modify existing PlantUML code based on user requests.
You must output ONLY the raw PlantUML code.
Do not wrap the code in markdown code blocks (e.g. ```plantuml ... ```).
Do not provide any conversational text, explanations, or preambles.
If the user request is unclear, try to infer the best diagram modification.
Preserve existing logic unless asked to change it.
Ensure the syntax is valid PlantUML.
""".strip()

# Opening fence with an optional language tag, e.g. ```plantuml or ```puml
_OPENING_FENCE = re.compile(r"^\s*```[\w+-]*[ \t]*\r?\n?")
_CLOSING_FENCE = re.compile(r"\r?\n?```\s*$")


def strip_code_fences(text: str) -> str:
    """Remove a leading and trailing Markdown fence and surrounding whitespace."""
    text = _OPENING_FENCE.sub("", text, count=1)
    text = _CLOSING_FENCE.sub("", text, count=1)
    return text.strip()


def build_rewrite_prompt(current_code: str, instruction: str) -> str:
    """Build the user turn sent alongside the system instruction."""
    return (
        f"Current Code:\n{current_code}\n\n"
        f"User Request: {instruction}\n\n"
        "Output only the updated PlantUML code."
    )


class RewriteRequester:
    """
    Rewrites diagram source through an LLM adapter.

    Example:
        requester = RewriteRequester(create_adapter(config))
        new_code = await requester.rewrite(code, "Add a cache between App and DB")
    """

    def __init__(
        self,
        adapter: LLMAdapter,
        system_prompt: str = SYSTEM_INSTRUCTION,
    ) -> None:
        self.adapter = adapter
        self.system_prompt = system_prompt

    async def rewrite(self, current_code: str, instruction: str) -> str:
        """
        Return the model's replacement for ``current_code``.

        Raises:
            RewriteError: If the model call fails or the reply is empty
        """
        messages = [
            Message(role="user", content=build_rewrite_prompt(current_code, instruction))
        ]
        logger.info("Requesting rewrite from %s: %s", self.adapter.model, instruction[:80])

        try:
            response = await self.adapter.chat(messages, system_prompt=self.system_prompt)
        except Exception as exc:
            logger.error("Model request failed: %s", exc)
            raise RewriteError(f"Model request failed: {exc}") from exc

        code = strip_code_fences(response.content)
        if not code:
            raise RewriteError("Model returned an empty reply")

        logger.debug(
            "Rewrite produced %d characters (finish_reason=%s)",
            len(code),
            response.finish_reason,
        )
        return code
