"""Exception types raised by umlstudio."""

from __future__ import annotations


class UmlStudioError(Exception):
    """Base class for all umlstudio errors."""


class RewriteError(UmlStudioError):
    """The language model could not produce a replacement diagram."""


class RenderError(UmlStudioError):
    """The rendering server refused or failed to render a diagram."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
