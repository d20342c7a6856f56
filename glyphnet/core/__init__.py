"""Core numerical primitives for glyphnet."""

from . import activations, codec, errors, labels, network, parallel, params, types

__all__ = [
    "activations",
    "codec",
    "errors",
    "labels",
    "network",
    "parallel",
    "params",
    "types",
]
