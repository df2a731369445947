"""Tests for CLI commands."""

from __future__ import annotations

import asyncio
import io
import sys
from pathlib import Path
from unittest.mock import patch

import pytest

from umlstudio.cli import (
    _load_config,
    build_parser,
    cmd_config,
    cmd_encode,
    cmd_render,
    cmd_rewrite,
    cmd_watch,
    main,
)
from umlstudio.encoder import PLANTUML_SVG_URL, encode_diagram_sync, encode_fragment


class MockArgs:
    """Mock argparse namespace for testing."""

    def __init__(self, **kwargs):
        self.config = kwargs.get("config")
        self.file = kwargs.get("file")
        self.server = kwargs.get("server")
        self.format = kwargs.get("format")
        self.fragment_only = kwargs.get("fragment_only", False)
        self.instruction = kwargs.get("instruction", [])
        self.write = kwargs.get("write", False)
        self.provider = kwargs.get("provider")
        self.model = kwargs.get("model")
        self.output = kwargs.get("output")
        self.debounce_ms = kwargs.get("debounce_ms")
        self.config_command = kwargs.get("config_command")


class FakeRenderClient:
    """Stand-in for RenderClient that records fetched URLs."""

    fetched: list[str] = []

    def __init__(self, timeout: float = 30.0) -> None:
        self.timeout = timeout

    async def __aenter__(self) -> FakeRenderClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        pass

    async def fetch(self, url: str) -> bytes:
        FakeRenderClient.fetched.append(url)
        return b"<svg>diagram</svg>"


class TestParser:
    """Tests for argument parsing."""

    def test_encode_defaults(self) -> None:
        args = build_parser().parse_args(["encode"])
        assert args.command == "encode"
        assert args.file is None
        assert args.fragment_only is False

    def test_rewrite_joins_instruction(self) -> None:
        args = build_parser().parse_args(["rewrite", "d.puml", "add", "a", "db", "-w"])
        assert args.instruction == ["add", "a", "db"]
        assert args.write is True

    def test_rejects_unknown_format(self) -> None:
        with pytest.raises(SystemExit):
            build_parser().parse_args(["encode", "-f", "pdf"])


class TestLoadConfig:
    """Tests for _load_config."""

    def test_defaults(self) -> None:
        config = _load_config(MockArgs())
        assert config.base_url == PLANTUML_SVG_URL

    def test_cli_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "c.yaml"
        path.write_text("provider: anthropic\nmodel: claude-x\n")

        config = _load_config(
            MockArgs(config=str(path), server="http://local", format="png", provider="openai", debounce_ms=5)
        )

        assert config.base_url == "http://local/png/"
        assert config.provider == "openai"
        assert config.model is None
        assert config.debounce_ms == 5


class TestCmdEncode:
    """Tests for the encode command."""

    def test_prints_url(self, diagram_file: Path, capsys) -> None:
        cmd_encode(MockArgs(file=str(diagram_file)))

        out = capsys.readouterr().out.strip()
        assert out == encode_diagram_sync(diagram_file.read_text())

    def test_fragment_only(self, diagram_file: Path, capsys) -> None:
        cmd_encode(MockArgs(file=str(diagram_file), fragment_only=True))

        out = capsys.readouterr().out.strip()
        assert out == encode_fragment(diagram_file.read_text())

    def test_custom_server(self, diagram_file: Path, capsys) -> None:
        cmd_encode(MockArgs(file=str(diagram_file), server="http://localhost:8080", format="txt"))

        assert capsys.readouterr().out.startswith("http://localhost:8080/txt/")

    def test_blank_file(self, tmp_path: Path, capsys) -> None:
        path = tmp_path / "blank.puml"
        path.write_text("  \n")

        cmd_encode(MockArgs(file=str(path)))

        assert "Nothing to render" in capsys.readouterr().out

    def test_stdin(self, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setattr(sys, "stdin", io.StringIO("@startuml\n@enduml"))

        cmd_encode(MockArgs(file=None))

        assert capsys.readouterr().out.startswith(PLANTUML_SVG_URL)


class TestCmdRewrite:
    """Tests for the rewrite command."""

    def test_prints_new_code(self, diagram_file: Path, make_adapter, capsys) -> None:
        adapter = make_adapter(replies=["```plantuml\n@startuml\nA -> B\n@enduml\n```"])

        with patch("umlstudio.adapters.registry.create_adapter", return_value=adapter):
            asyncio.run(cmd_rewrite(MockArgs(file=str(diagram_file), instruction=["simplify"])))

        out = capsys.readouterr().out
        assert "@startuml\nA -> B\n@enduml" in out
        assert encode_diagram_sync("@startuml\nA -> B\n@enduml") in out
        assert "User Request: simplify" in adapter.calls[0][0][0].content

    def test_writes_file(self, diagram_file: Path, make_adapter) -> None:
        adapter = make_adapter(replies=["@startuml\nX\n@enduml"])

        with patch("umlstudio.adapters.registry.create_adapter", return_value=adapter):
            asyncio.run(
                cmd_rewrite(MockArgs(file=str(diagram_file), instruction=["x"], write=True))
            )

        assert diagram_file.read_text() == "@startuml\nX\n@enduml\n"


class TestCmdRender:
    """Tests for the render command."""

    def test_writes_image(self, diagram_file: Path, capsys) -> None:
        FakeRenderClient.fetched = []

        with patch("umlstudio.cli.RenderClient", FakeRenderClient):
            asyncio.run(cmd_render(MockArgs(file=str(diagram_file))))

        output = diagram_file.with_suffix(".svg")
        assert output.read_bytes() == b"<svg>diagram</svg>"
        assert FakeRenderClient.fetched == [encode_diagram_sync(diagram_file.read_text())]
        assert "Wrote" in capsys.readouterr().out

    def test_explicit_output(self, diagram_file: Path, tmp_path: Path) -> None:
        output = tmp_path / "out"
        output.mkdir()
        target = output / "diagram.png"

        with patch("umlstudio.cli.RenderClient", FakeRenderClient):
            asyncio.run(cmd_render(MockArgs(file=str(diagram_file), output=str(target), format="png")))

        assert target.exists()
        assert FakeRenderClient.fetched[-1].startswith("https://www.plantuml.com/plantuml/png/")


class TestCmdWatch:
    """Tests for the watch command."""

    def test_prints_url_after_change(self, diagram_file: Path, capsys) -> None:
        original = diagram_file.read_text()
        updated = "@startuml\nAlice -> Carol: hi\n@enduml"

        async def fake_awatch(*paths, **kwargs):
            await asyncio.sleep(0.1)
            diagram_file.write_text(updated, encoding="utf-8")
            yield {("modified", str(diagram_file))}
            await asyncio.sleep(0.1)

        with patch("umlstudio.cli.awatch", fake_awatch):
            asyncio.run(cmd_watch(MockArgs(file=str(diagram_file), debounce_ms=10)))

        out = capsys.readouterr().out
        first = encode_diagram_sync(original)
        second = encode_diagram_sync(updated)
        assert first in out
        assert second in out
        assert out.index(first) < out.index(second)

    def test_unchanged_url_printed_once(self, diagram_file: Path, capsys) -> None:
        async def fake_awatch(*paths, **kwargs):
            await asyncio.sleep(0.1)
            yield {("modified", str(diagram_file))}
            await asyncio.sleep(0.1)

        with patch("umlstudio.cli.awatch", fake_awatch):
            asyncio.run(cmd_watch(MockArgs(file=str(diagram_file), debounce_ms=10)))

        url = encode_diagram_sync(diagram_file.read_text())
        assert capsys.readouterr().out.count(url) == 1


class TestCmdConfig:
    """Tests for the config command."""

    def test_init_creates_file(self, tmp_path: Path, capsys) -> None:
        output = tmp_path / "umlstudio.yaml"

        cmd_config(MockArgs(config_command="init", output=str(output)))

        assert output.exists()
        assert "debounce_ms: 600" in output.read_text()
        assert "Created config file" in capsys.readouterr().out

    def test_init_refuses_overwrite(self, tmp_path: Path) -> None:
        output = tmp_path / "umlstudio.yaml"
        output.write_text("existing")

        with pytest.raises(SystemExit):
            cmd_config(MockArgs(config_command="init", output=str(output)))

        assert output.read_text() == "existing"

    def test_show_defaults(self, capsys) -> None:
        cmd_config(MockArgs(config_command="show"))

        out = capsys.readouterr().out
        assert "No config file found" in out
        assert "server_url: https://www.plantuml.com/plantuml" in out

    def test_usage(self, capsys) -> None:
        cmd_config(MockArgs(config_command=None))
        assert "Usage" in capsys.readouterr().out


class TestMain:
    """Tests for the main entry point."""

    def test_missing_file_exits(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.chdir(tmp_path)
        monkeypatch.setattr(sys, "argv", ["umlstudio", "encode", "missing.puml"])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        assert "File not found" in capsys.readouterr().out

    def test_encode(self, diagram_file: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.chdir(diagram_file.parent)
        monkeypatch.setattr(sys, "argv", ["umlstudio", "encode", str(diagram_file)])

        main()

        assert capsys.readouterr().out.startswith(PLANTUML_SVG_URL)


    def test_invalid_config_exits(self, diagram_file: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setenv("UMLSTUDIO_PROVIDER", "bogus")
        monkeypatch.setattr(sys, "argv", ["umlstudio", "encode", str(diagram_file)])

        with pytest.raises(SystemExit) as exc_info:
            main()

        assert exc_info.value.code == 1
        out = capsys.readouterr().out
        assert "Error:" in out
        assert "Unknown provider" in out

    def test_missing_sdk_exits(self, diagram_file: Path, monkeypatch: pytest.MonkeyPatch, capsys) -> None:
        monkeypatch.setattr(sys, "argv", ["umlstudio", "rewrite", str(diagram_file), "simplify"])

        with patch(
            "umlstudio.adapters.registry.create_adapter",
            side_effect=ImportError("pip install umlstudio[openai]"),
        ):
            with pytest.raises(SystemExit) as exc_info:
                main()

        assert exc_info.value.code == 1
        assert "umlstudio[openai]" in capsys.readouterr().out
