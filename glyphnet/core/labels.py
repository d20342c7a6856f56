"""Closed label set recognised by glyphnet networks."""

from __future__ import annotations

from enum import Enum

import numpy as np

from .errors import ShapeMismatchError
from .types import Array


class Glyph(Enum):
    """Letter glyphs, indexed by output neuron, plus an explicit ``UNKNOWN``."""

    A = 0
    B = 1
    W = 2
    G = 3
    D = 4
    E = 5
    V = 6
    Z = 7
    I = 8  # noqa: E741
    K = 9
    UNKNOWN = None

    @classmethod
    def from_index(cls, index: int) -> "Glyph":
        for member in cls:
            if member.value is not None and member.value == index:
                return member
        raise IndexError(f"No glyph with class index {index}")

    @classmethod
    def parse(cls, text: object) -> "Glyph":
        """Resolve a glyph from its name or its integer class index."""

        if isinstance(text, Glyph):
            return text
        token = str(text).strip()
        if token.lstrip("-").isdigit():
            return cls.from_index(int(token))
        try:
            return cls[token.upper()]
        except KeyError:
            raise ValueError(f"Unknown glyph label: {text!r}") from None

    @classmethod
    def count(cls) -> int:
        """Number of real (indexable) glyphs."""

        return sum(1 for member in cls if member.value is not None)

    @property
    def index(self) -> int:
        if self.value is None:
            raise ValueError("Glyph.UNKNOWN has no class index")
        return int(self.value)

    @property
    def is_known(self) -> bool:
        return self.value is not None


def one_hot(glyph: Glyph, width: int) -> Array:
    """Return the target vector for ``glyph``; all zeros when unknown."""

    out = np.zeros(width, dtype=np.float64)
    if glyph.is_known:
        if glyph.index >= width:
            raise ShapeMismatchError(
                f"Glyph {glyph.name} (index {glyph.index}) does not fit {width} output classes"
            )
        out[glyph.index] = 1.0
    return out


__all__ = ["Glyph", "one_hot"]
