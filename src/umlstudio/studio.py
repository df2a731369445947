"""
Studio controller.

Holds the current :class:`~umlstudio.state.EditorState` and drives the two
asynchronous side effects: debounced encoding of the buffer into a render
URL, and model rewrites of the buffer. Every state change goes through the
pure transitions in :mod:`umlstudio.state`.
"""

from __future__ import annotations

from collections.abc import Callable

from umlstudio.config import StudioConfig
from umlstudio.debounce import Debouncer
from umlstudio.encoder import encode_diagram
from umlstudio.errors import RewriteError
from umlstudio.logging import get_logger
from umlstudio.rewrite import RewriteRequester
from umlstudio.state import (
    EditorState,
    apply_edit,
    apply_render_failure,
    apply_render_result,
    apply_rewrite_failure,
    apply_rewrite_request,
    apply_rewrite_result,
)

logger = get_logger("studio")

StateListener = Callable[[EditorState], None]


class DiagramStudio:
    """
    Editor session tying the buffer, the renderer and the model together.

    Example:
        studio = DiagramStudio(config, requester=RewriteRequester(adapter))
        studio.on_change(lambda state: print(state.image_url))

        studio.edit("@startuml\\nA -> B\\n@enduml")
        await studio.request_rewrite("Add a database behind B")
        await studio.wait_rendered()
    """

    def __init__(
        self,
        config: StudioConfig | None = None,
        requester: RewriteRequester | None = None,
        initial_state: EditorState | None = None,
    ) -> None:
        self.config = config or StudioConfig()
        self.requester = requester
        self._state = initial_state or EditorState()
        self._listeners: list[StateListener] = []
        self._debouncer: Debouncer[str] = Debouncer(
            self._encode,
            delay=self.config.debounce_seconds,
            on_result=self._on_rendered,
            on_error=self._on_render_failed,
        )

    @property
    def state(self) -> EditorState:
        return self._state

    @property
    def render_pending(self) -> bool:
        return self._debouncer.pending

    def on_change(self, listener: StateListener) -> None:
        """Register a callback invoked with every new state."""
        self._listeners.append(listener)

    def remove_listener(self, listener: StateListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def start(self) -> None:
        """Schedule the first render of the initial buffer."""
        self._set_state(apply_edit(self._state, self._state.code))
        self._debouncer.schedule(self._state.code)

    def edit(self, new_text: str) -> bool:
        """
        Apply a manual edit and schedule a re-render.

        The buffer is read-only while a rewrite is running.

        Returns:
            False if the edit was ignored
        """
        if self._state.is_ai_loading:
            logger.warning("Ignoring edit while a rewrite is in progress")
            return False
        self._set_state(apply_edit(self._state, new_text))
        self._debouncer.schedule(new_text)
        return True

    async def request_rewrite(self, instruction: str) -> bool:
        """
        Ask the model to rewrite the buffer according to ``instruction``.

        The reply replaces the buffer and is rendered through the same
        debounced path as a manual edit. Failures are recorded in the
        transcript and leave the buffer untouched. Blank instructions, and
        requests made while another rewrite is running, are dropped without
        calling the model.

        Returns:
            True if the buffer was replaced
        """
        if self.requester is None:
            raise RuntimeError("No rewrite requester configured")

        instruction = instruction.strip()
        if not instruction:
            logger.debug("Ignoring blank rewrite instruction")
            return False
        if self._state.is_ai_loading:
            logger.warning("Ignoring rewrite request while another is in progress")
            return False

        snapshot = self._state.code
        self._set_state(apply_rewrite_request(self._state, instruction))

        try:
            new_code = await self.requester.rewrite(snapshot, instruction)
        except RewriteError as exc:
            logger.warning("Rewrite failed: %s", exc)
            self._set_state(apply_rewrite_failure(self._state, str(exc)))
            return False

        self._set_state(apply_rewrite_result(self._state, new_code))
        self._debouncer.schedule(new_code)
        return True

    async def wait_rendered(self) -> EditorState:
        """Wait for pending renders to settle and return the resulting state."""
        await self._debouncer.flush()
        return self._state

    async def close(self) -> None:
        await self._debouncer.close()

    async def _encode(self, text: str) -> str:
        return await encode_diagram(text, self.config.base_url)

    def _on_rendered(self, url: str, generation: int) -> None:
        # The debouncer only reports the newest run, which always matches
        # the buffer generation current at this point.
        logger.debug("Render %d ready: %s", generation, url[:80])
        self._set_state(apply_render_result(self._state, url, self._state.generation))

    def _on_render_failed(self, error: Exception, generation: int) -> None:
        logger.error("Encoding error (run %d): %s", generation, error)
        self._set_state(
            apply_render_failure(self._state, str(error), self._state.generation)
        )

    def _set_state(self, state: EditorState) -> None:
        if state is self._state:
            return
        self._state = state
        for listener in list(self._listeners):
            listener(state)
