#!/usr/bin/env python3
"""
umlstudio Demo

Edits a small sequence diagram, waits for the debounced render URL,
then asks a language model to extend the diagram.

Usage:
    # Encoding only (no API key needed)
    python examples/studio_demo.py

    # Include a model rewrite (reads OPENAI_API_KEY from .env)
    python examples/studio_demo.py --rewrite "Add a database behind the API"
"""

import argparse
import asyncio

from dotenv import load_dotenv

from umlstudio import DiagramStudio, EditorState, RewriteRequester, StudioConfig
from umlstudio.adapters import create_adapter

DIAGRAM = """@startuml
actor User
User -> API: GET /orders
API --> User: 200 OK
@enduml"""


async def demo_encoding(studio: DiagramStudio) -> None:
    """Type a few edits in quick succession; only the last one renders."""
    print("=" * 60)
    print("Debounced encoding")
    print("=" * 60)

    for end in (20, 40, len(DIAGRAM)):
        studio.edit(DIAGRAM[:end])

    state = await studio.wait_rendered()
    print(f"\nRender URL:\n  {state.image_url}")


async def demo_rewrite(studio: DiagramStudio, instruction: str) -> None:
    """Ask the model to change the diagram and render the result."""
    print("\n" + "=" * 60)
    print("Model rewrite")
    print("=" * 60)

    print(f"\nUser: {instruction}")
    replaced = await studio.request_rewrite(instruction)
    state = await studio.wait_rendered()

    if not replaced:
        print(f"\nSystem: {state.history[-1].content}")
        return

    print(f"\n{state.code}")
    print(f"\nRender URL:\n  {state.image_url}")


async def main() -> None:
    parser = argparse.ArgumentParser(description="umlstudio demo")
    parser.add_argument("--rewrite", help="Instruction to send to the model")
    args = parser.parse_args()

    load_dotenv()
    config = StudioConfig(debounce_ms=300).with_env_overrides()

    requester = RewriteRequester(create_adapter(config)) if args.rewrite else None
    studio = DiagramStudio(config, requester=requester, initial_state=EditorState(code=""))

    try:
        await demo_encoding(studio)
        if args.rewrite:
            await demo_rewrite(studio, args.rewrite)
    finally:
        await studio.close()


if __name__ == "__main__":
    asyncio.run(main())
