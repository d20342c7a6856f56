"""Exception hierarchy for glyphnet."""

from __future__ import annotations


class GlyphNetError(Exception):
    """Base class for all glyphnet errors."""


class ShapeMismatchError(GlyphNetError, ValueError):
    """A vector or stored model disagrees with the network topology."""


class ModelParseError(GlyphNetError, ValueError):
    """A persisted model file is truncated or contains an invalid token."""

    def __init__(self, message: str, *, position: int | None = None) -> None:
        super().__init__(message)
        self.position = position


class ModelNotFoundError(GlyphNetError, FileNotFoundError):
    """No persisted model exists at the requested path."""


__all__ = [
    "GlyphNetError",
    "ShapeMismatchError",
    "ModelParseError",
    "ModelNotFoundError",
]
