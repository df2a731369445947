"""
umlstudio - an editing core for PlantUML diagrams.

Encodes PlantUML source into URLs understood by a PlantUML server, re-renders
a buffer a quiet period after each edit, and lets a language model rewrite
the buffer from natural-language instructions.

Example:
    from umlstudio import DiagramStudio, StudioConfig, encode_diagram

    url = await encode_diagram("@startuml\\nAlice -> Bob: hi\\n@enduml")

    studio = DiagramStudio(StudioConfig(debounce_ms=600))
    studio.on_change(lambda state: print(state.image_url))
    studio.edit("@startuml\\nAlice -> Bob: hello\\n@enduml")
    await studio.wait_rendered()
"""

from umlstudio.config import StudioConfig
from umlstudio.debounce import Debouncer
from umlstudio.encoder import (
    PLANTUML_SERVER_URL,
    PLANTUML_SVG_URL,
    build_server_url,
    deflate_raw,
    encode_3bytes,
    encode_6bit,
    encode_bytes,
    encode_diagram,
    encode_diagram_sync,
    encode_fragment,
)
from umlstudio.errors import RenderError, RewriteError, UmlStudioError
from umlstudio.render import RenderClient
from umlstudio.rewrite import RewriteRequester, build_rewrite_prompt, strip_code_fences
from umlstudio.state import (
    ChatMessage,
    EditorState,
    apply_edit,
    apply_render_failure,
    apply_render_result,
    apply_rewrite_failure,
    apply_rewrite_request,
    apply_rewrite_result,
)
from umlstudio.studio import DiagramStudio

__version__ = "0.1.0"

__all__ = [
    # Config
    "StudioConfig",
    # Encoding
    "PLANTUML_SERVER_URL",
    "PLANTUML_SVG_URL",
    "build_server_url",
    "deflate_raw",
    "encode_3bytes",
    "encode_6bit",
    "encode_bytes",
    "encode_diagram",
    "encode_diagram_sync",
    "encode_fragment",
    # Scheduling
    "Debouncer",
    "DiagramStudio",
    # State
    "ChatMessage",
    "EditorState",
    "apply_edit",
    "apply_render_failure",
    "apply_render_result",
    "apply_rewrite_failure",
    "apply_rewrite_request",
    "apply_rewrite_result",
    # Model rewrites
    "RewriteRequester",
    "build_rewrite_prompt",
    "strip_code_fences",
    # Rendering
    "RenderClient",
    # Errors
    "RenderError",
    "RewriteError",
    "UmlStudioError",
]
