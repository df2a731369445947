"""
Editor state and its transitions.

The studio's state is a frozen record; every event produces a new record via
a pure ``apply_*`` function. Encoding and model calls happen outside, in
:mod:`umlstudio.studio`, and report back through these transitions.
"""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field, replace
from typing import Literal

Role = Literal["user", "ai", "system"]

INITIAL_CODE = """@startuml
title Welcome to umlstudio

actor User
participant "Studio" as App
participant "Language Model" as AI
participant "PlantUML Server" as PlantUML

User -> App: Writes Code or Prompt
activate App

alt Manual Edit
    App -> App: Update State
else AI Prompt
    App -> AI: Send Code + Prompt
    activate AI
    AI --> App: Return Updated Code
    deactivate AI
end

App -> App: Encode (Deflate + B64)
App -> PlantUML: Request SVG
activate PlantUML
PlantUML --> App: Return Image
deactivate PlantUML

App --> User: Show Diagram
deactivate App

@enduml"""


@dataclass(frozen=True)
class ChatMessage:
    """A single entry in the chat transcript."""

    role: Role
    content: str
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    timestamp: float = field(default_factory=lambda: time.time() * 1000)


@dataclass(frozen=True)
class EditorState:
    """Snapshot of the studio: buffer, rendered URL, transcript and flags."""

    code: str = INITIAL_CODE
    image_url: str = ""
    history: tuple[ChatMessage, ...] = ()
    is_ai_loading: bool = False
    is_image_pending: bool = False
    render_error: str | None = None
    generation: int = 0  # bumped on every code change

    @property
    def is_stale(self) -> bool:
        """The displayed image may not match the buffer."""
        return self.is_image_pending or self.is_ai_loading or self.render_error is not None


def apply_edit(state: EditorState, new_text: str) -> EditorState:
    """Replace the buffer with a manual edit and mark the image pending."""
    return replace(
        state,
        code=new_text,
        is_image_pending=True,
        generation=state.generation + 1,
    )


def apply_rewrite_request(state: EditorState, prompt: str) -> EditorState:
    """Record the user's instruction and flag the model call as running."""
    return replace(
        state,
        history=state.history + (ChatMessage(role="user", content=prompt),),
        is_ai_loading=True,
    )


def apply_rewrite_result(state: EditorState, new_text: str) -> EditorState:
    """Adopt the model's reply as the new buffer, like any other edit."""
    return replace(apply_edit(state, new_text), is_ai_loading=False)


def apply_rewrite_failure(state: EditorState, error: str) -> EditorState:
    """Keep the buffer and note the failure in the transcript."""
    return replace(
        state,
        history=state.history + (ChatMessage(role="system", content=error),),
        is_ai_loading=False,
    )


def apply_render_result(state: EditorState, url: str, generation: int) -> EditorState:
    """
    Store a freshly encoded URL.

    Results for an older buffer generation are ignored so a late encode can
    never replace the image of a newer buffer.
    """
    if generation != state.generation:
        return state
    return replace(state, image_url=url, is_image_pending=False, render_error=None)


def apply_render_failure(state: EditorState, error: str, generation: int) -> EditorState:
    """Keep the last good image, mark it stale and remember the error."""
    if generation != state.generation:
        return state
    return replace(state, is_image_pending=False, render_error=error)
