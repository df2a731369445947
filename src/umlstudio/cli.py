"""
Command-line interface for umlstudio.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from watchfiles import awatch

from umlstudio.config import CONFIG_SEARCH_PATHS, StudioConfig
from umlstudio.encoder import OUTPUT_FORMATS, encode_diagram, encode_diagram_sync, encode_fragment
from umlstudio.errors import UmlStudioError
from umlstudio.logging import setup_logging
from umlstudio.render import RenderClient
from umlstudio.rewrite import RewriteRequester
from umlstudio.state import EditorState
from umlstudio.studio import DiagramStudio

console = Console()

# Filesystem event coalescing for `watch`; the studio applies the quiet period
_WATCH_DEBOUNCE_MS = 50


def main() -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if getattr(args, "verbose", False):
        setup_logging("DEBUG")
    else:
        setup_logging("WARNING")

    # API keys for the model SDKs usually live in .env
    load_dotenv()

    try:
        if args.command == "encode":
            cmd_encode(args)
        elif args.command == "rewrite":
            asyncio.run(cmd_rewrite(args))
        elif args.command == "render":
            asyncio.run(cmd_render(args))
        elif args.command == "watch":
            try:
                asyncio.run(cmd_watch(args))
            except KeyboardInterrupt:
                console.print("\n[dim]Stopped watching.[/dim]")
        elif args.command == "config":
            cmd_config(args)
        else:
            parser.print_help()
    except UmlStudioError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}")
        sys.exit(1)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="PlantUML studio: encode, render and rewrite diagrams",
        prog="umlstudio",
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable verbose output (debug logging)",
    )
    parser.add_argument(
        "-c",
        "--config",
        help="Path to a YAML config file",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # Encode command
    encode_parser = subparsers.add_parser("encode", help="Print the render URL for a diagram")
    encode_parser.add_argument("file", nargs="?", help="Diagram file (default: stdin)")
    _add_server_options(encode_parser)
    encode_parser.add_argument(
        "--fragment-only",
        action="store_true",
        help="Print only the encoded fragment",
    )

    # Rewrite command
    rewrite_parser = subparsers.add_parser("rewrite", help="Rewrite a diagram with an LLM")
    rewrite_parser.add_argument("file", help="Diagram file")
    rewrite_parser.add_argument("instruction", nargs="+", help="What to change")
    rewrite_parser.add_argument(
        "-w",
        "--write",
        action="store_true",
        help="Write the result back to the file",
    )
    rewrite_parser.add_argument("--provider", choices=["openai", "anthropic"])
    rewrite_parser.add_argument("--model", help="Model name")
    _add_server_options(rewrite_parser)

    # Render command
    render_parser = subparsers.add_parser("render", help="Download the rendered diagram")
    render_parser.add_argument("file", help="Diagram file")
    render_parser.add_argument("-o", "--output", help="Output path (default: FILE.<format>)")
    _add_server_options(render_parser)

    # Watch command
    watch_parser = subparsers.add_parser("watch", help="Print a fresh URL whenever a file changes")
    watch_parser.add_argument("file", help="Diagram file")
    watch_parser.add_argument("--debounce-ms", type=int, help="Quiet period after a change")
    _add_server_options(watch_parser)

    # Config command with subcommands
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")
    config_subparsers.add_parser("show", help="Show current configuration")
    config_init_parser = config_subparsers.add_parser("init", help="Initialize a new config file")
    config_init_parser.add_argument(
        "-o",
        "--output",
        default="umlstudio.yaml",
        help="Output file path",
    )
    config_subparsers.add_parser("path", help="Show config file paths")

    return parser


def _add_server_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--server", help="PlantUML server root URL")
    parser.add_argument("-f", "--format", choices=OUTPUT_FORMATS, help="Output format")


def _discover_config(args: argparse.Namespace) -> tuple[StudioConfig, Path | None]:
    """Load config from file and environment."""
    explicit = Path(args.config) if getattr(args, "config", None) else None
    try:
        config, loaded_from = StudioConfig.discover(explicit)
        return config.with_env_overrides(), loaded_from
    except ValueError as exc:
        raise UmlStudioError(f"Invalid configuration: {exc}") from exc


def _load_config(args: argparse.Namespace) -> StudioConfig:
    """Load config from file and environment, then apply CLI overrides."""
    config, _ = _discover_config(args)

    if getattr(args, "server", None):
        config.server_url = args.server
    if getattr(args, "format", None):
        config.output_format = args.format
    if getattr(args, "provider", None):
        config.provider = args.provider
        config.model = None
    if getattr(args, "model", None):
        config.model = args.model
    if getattr(args, "debounce_ms", None) is not None:
        config.debounce_ms = args.debounce_ms
    return config


def _read_source(file: str | None) -> str:
    if file is None or file == "-":
        return sys.stdin.read()
    path = Path(file)
    if not path.exists():
        raise UmlStudioError(f"File not found: {path}")
    return path.read_text(encoding="utf-8")


def cmd_encode(args: argparse.Namespace) -> None:
    """Print the render URL (or bare fragment) for a diagram."""
    config = _load_config(args)
    text = _read_source(args.file)

    if args.fragment_only:
        result = encode_fragment(text)
    else:
        result = encode_diagram_sync(text, config.base_url)

    if not result:
        console.print("[yellow]Nothing to render: the diagram is empty.[/yellow]")
        return
    console.print(result, soft_wrap=True, highlight=False)


async def cmd_rewrite(args: argparse.Namespace) -> None:
    """Rewrite a diagram file with the configured model."""
    from umlstudio.adapters.registry import create_adapter

    config = _load_config(args)
    path = Path(args.file)
    current = _read_source(args.file)
    instruction = " ".join(args.instruction)

    try:
        adapter = create_adapter(config)
    except ImportError as exc:
        raise UmlStudioError(str(exc)) from exc

    requester = RewriteRequester(adapter)
    with console.status(f"Asking {config.resolved_model}..."):
        new_code = await requester.rewrite(current, instruction)

    if args.write:
        path.write_text(new_code + "\n", encoding="utf-8")
        console.print(f"[green]Updated {path}[/green]")
    else:
        console.print(new_code, highlight=False, markup=False)

    url = await encode_diagram(new_code, config.base_url)
    console.print(f"\n[bold]URL:[/bold] {url}", soft_wrap=True, highlight=False)


async def cmd_render(args: argparse.Namespace) -> None:
    """Download the rendered image of a diagram file."""
    config = _load_config(args)
    path = Path(args.file)
    url = await encode_diagram(_read_source(args.file), config.base_url)
    output = Path(args.output) if args.output else path.with_suffix(f".{config.output_format}")

    async with RenderClient(timeout=config.request_timeout_seconds) as client:
        content = await client.fetch(url)

    output.write_bytes(content)
    console.print(f"[green]Wrote {output}[/green] [dim]({len(content)} bytes)[/dim]")


async def cmd_watch(args: argparse.Namespace) -> None:
    """Re-encode a file after every change and print the new URL."""
    config = _load_config(args)
    path = Path(args.file)
    studio = DiagramStudio(config, initial_state=EditorState(code=_read_source(args.file)))

    last_url = ""
    last_error: str | None = None

    def on_change(state: EditorState) -> None:
        nonlocal last_url, last_error
        if state.is_image_pending:
            return
        if state.render_error:
            if state.render_error != last_error:
                last_error = state.render_error
                console.print(f"[red]Render failed:[/red] {state.render_error}")
            return
        last_error = None
        if state.image_url != last_url:
            last_url = state.image_url
            if last_url:
                console.print(last_url, soft_wrap=True, highlight=False)
            else:
                console.print("[yellow]Nothing to render: the diagram is empty.[/yellow]")

    studio.on_change(on_change)
    studio.start()
    console.print(f"[dim]Watching {path} (Ctrl+C to stop)[/dim]")

    try:
        async for _changes in awatch(path, debounce=_WATCH_DEBOUNCE_MS):
            if path.exists():
                studio.edit(path.read_text(encoding="utf-8"))
    finally:
        await studio.close()


def cmd_config(args: argparse.Namespace) -> None:
    """Configuration management commands."""
    if args.config_command == "show":
        _config_show(args)
    elif args.config_command == "init":
        _config_init(args.output)
    elif args.config_command == "path":
        _config_path()
    else:
        console.print("[yellow]Usage: umlstudio config <show|init|path>[/yellow]")


def _config_show(args: argparse.Namespace) -> None:
    """Show current configuration."""
    config, loaded_from = _discover_config(args)

    if loaded_from is None:
        console.print("[dim]No config file found. Using defaults.[/dim]")
    else:
        console.print(f"[dim]Loaded from: {loaded_from}[/dim]\n")

    console.print("[bold]Current Configuration:[/bold]\n")
    console.print(config.to_yaml(), highlight=False)


def _config_init(output: str) -> None:
    """Initialize a new config file."""
    output_path = Path(output)

    if output_path.exists():
        console.print(f"[red]File already exists: {output_path}[/red]")
        sys.exit(1)

    output_path.write_text(StudioConfig().to_yaml())
    console.print(f"[green]Created config file: {output_path}[/green]")


def _config_path() -> None:
    """Show config file search paths."""
    console.print("[bold]Config file search paths:[/bold]\n")

    for path in CONFIG_SEARCH_PATHS:
        exists = "[green]✓[/green]" if path.exists() else "[dim]·[/dim]"
        console.print(f"  {exists} {path}")


if __name__ == "__main__":
    main()
