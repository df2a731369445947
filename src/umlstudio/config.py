"""
Configuration for umlstudio.

Provides a configuration object that can be loaded from YAML files,
overridden from the environment, or constructed programmatically.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Literal

import yaml

from umlstudio.encoder import OUTPUT_FORMATS, PLANTUML_SERVER_URL, build_server_url

Provider = Literal["openai", "anthropic"]

DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20241022",
}

CONFIG_SEARCH_PATHS: tuple[Path, ...] = (
    Path("umlstudio.yaml"),
    Path.home() / ".config" / "umlstudio" / "config.yaml",
)

# Environment variable -> config field
ENV_OVERRIDES: dict[str, str] = {
    "UMLSTUDIO_PROVIDER": "provider",
    "UMLSTUDIO_MODEL": "model",
    "UMLSTUDIO_SERVER_URL": "server_url",
}


@dataclass
class StudioConfig:
    """
    Main configuration for the diagram studio.

    Example YAML:
        server_url: https://www.plantuml.com/plantuml
        output_format: svg
        debounce_ms: 600
        provider: openai
        model: gpt-4o-mini
        temperature: 0.2
    """

    # Rendering server
    server_url: str = PLANTUML_SERVER_URL
    output_format: str = "svg"  # "svg", "png" or "txt"

    # Quiet period before re-encoding after an edit
    debounce_ms: int = 600

    # Language model used for rewrites
    provider: Provider = "openai"
    model: str | None = None  # None = provider default
    temperature: float = 0.2
    max_tokens: int = 4096
    request_timeout_seconds: float = 30.0

    @property
    def base_url(self) -> str:
        """URL prefix that encoded diagrams are appended to."""
        return build_server_url(self.server_url, self.output_format)

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0

    @property
    def resolved_model(self) -> str:
        """Configured model, or the provider's default."""
        return self.model or DEFAULT_MODELS[self.provider]

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> StudioConfig:
        """Create config from a dictionary."""
        provider = data.get("provider", "openai")
        if provider not in DEFAULT_MODELS:
            raise ValueError(f"Unknown provider: {provider!r}")
        output_format = data.get("output_format", "svg")
        if output_format not in OUTPUT_FORMATS:
            raise ValueError(f"Unknown output format: {output_format!r}")

        return cls(
            server_url=data.get("server_url", PLANTUML_SERVER_URL),
            output_format=output_format,
            debounce_ms=int(data.get("debounce_ms", 600)),
            provider=provider,
            model=data.get("model"),
            temperature=float(data.get("temperature", 0.2)),
            max_tokens=int(data.get("max_tokens", 4096)),
            request_timeout_seconds=float(data.get("request_timeout_seconds", 30.0)),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> StudioConfig:
        """Load config from a YAML file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_string(cls, content: str) -> StudioConfig:
        """Load config from a YAML string."""
        data = yaml.safe_load(content)
        return cls.from_dict(data or {})

    @classmethod
    def discover(cls, explicit: Path | None = None) -> tuple[StudioConfig, Path | None]:
        """
        Load config from an explicit path or the first existing search path.

        Returns:
            Tuple of (config, path it was loaded from or None for defaults)
        """
        if explicit is not None:
            return cls.from_yaml(explicit), explicit

        for path in CONFIG_SEARCH_PATHS:
            if path.exists():
                return cls.from_yaml(path), path

        return cls(), None

    def with_env_overrides(self, environ: dict[str, str] | None = None) -> StudioConfig:
        """Return a copy with UMLSTUDIO_* environment variables applied."""
        env = os.environ if environ is None else environ
        data = self.to_dict()
        for var, field_name in ENV_OVERRIDES.items():
            value = env.get(var)
            if value:
                data[field_name] = value
        return StudioConfig.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def to_yaml(self) -> str:
        """Serialize config to a YAML string."""
        return yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)
