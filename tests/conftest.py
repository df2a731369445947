"""Shared pytest fixtures for umlstudio tests."""

from __future__ import annotations

import asyncio
from pathlib import Path
from textwrap import dedent

import pytest

from umlstudio.adapters.base import AgentResponse, LLMAdapter, Message
from umlstudio.config import StudioConfig


class MockAdapter(LLMAdapter):
    """Adapter that records calls and replays canned replies."""

    def __init__(
        self,
        replies: list[str] | None = None,
        error: Exception | None = None,
        gate: asyncio.Event | None = None,
    ) -> None:
        super().__init__(model="mock-model")
        self.replies = list(replies or [])
        self.error = error
        self.gate = gate
        self.calls: list[tuple[list[Message], str | None]] = []

    async def chat(
        self,
        messages: list[Message],
        system_prompt: str | None = None,
    ) -> AgentResponse:
        self.calls.append((messages, system_prompt))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        content = self.replies.pop(0) if self.replies else ""
        return AgentResponse(content=content, finish_reason="stop")


@pytest.fixture(autouse=True)
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep user config files and UMLSTUDIO_* variables out of tests."""
    monkeypatch.setattr(
        "umlstudio.config.CONFIG_SEARCH_PATHS",
        (tmp_path / "no-such-config.yaml",),
    )
    for var in ("UMLSTUDIO_PROVIDER", "UMLSTUDIO_MODEL", "UMLSTUDIO_SERVER_URL"):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def make_adapter():
    """Factory for MockAdapter instances."""
    return MockAdapter


@pytest.fixture
def simple_diagram() -> str:
    return dedent("""
        @startuml
        Alice -> Bob: Authentication Request
        Bob --> Alice: Authentication Response
        @enduml
    """).strip()


@pytest.fixture
def diagram_file(tmp_path: Path, simple_diagram: str) -> Path:
    path = tmp_path / "diagram.puml"
    path.write_text(simple_diagram + "\n", encoding="utf-8")
    return path


@pytest.fixture
def fast_config() -> StudioConfig:
    """Config with a short quiet period for scheduling tests."""
    return StudioConfig(debounce_ms=10)
