"""Flat parameter storage for sigmoid networks."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

import numpy as np

from .errors import ShapeMismatchError
from .types import Array, Topology


@dataclass
class ParameterStore:
    """Weights and biases backed by one contiguous ``float64`` buffer.

    The buffer holds every weight in (layer, source, destination) order
    followed by every bias in (layer, neuron) order, which is also the
    persisted order. ``weights[l]`` and ``biases[l]`` are views into it, so
    in-place updates through either path are visible to the other.
    """

    topology: Topology
    buffer: Array = field(repr=False)
    weights: List[Array] = field(init=False, repr=False)
    biases: List[Array] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        expected = self.topology.parameter_count
        if self.buffer.shape != (expected,):
            raise ShapeMismatchError(
                f"Parameter buffer has shape {self.buffer.shape}, topology "
                f"{self.topology} needs ({expected},)"
            )
        weights: list[Array] = []
        biases: list[Array] = []
        offset = 0
        for fan_in, fan_out in self.topology.boundaries:
            size = fan_in * fan_out
            weights.append(self.buffer[offset : offset + size].reshape(fan_in, fan_out))
            offset += size
        for _, fan_out in self.topology.boundaries:
            biases.append(self.buffer[offset : offset + fan_out])
            offset += fan_out
        self.weights = weights
        self.biases = biases

    @classmethod
    def random(cls, topology: Topology, rng: np.random.Generator) -> "ParameterStore":
        """Draw every parameter uniformly from ``[-0.5, 0.5)``."""

        buffer = rng.random(topology.parameter_count, dtype=np.float64) - 0.5
        return cls(topology=topology, buffer=buffer)

    @classmethod
    def zeros(cls, topology: Topology) -> "ParameterStore":
        return cls(topology=topology, buffer=np.zeros(topology.parameter_count))

    def flatten(self) -> Array:
        return self.buffer.copy()

    def assign(self, values: Array) -> None:
        """Overwrite every parameter at once; nothing changes on failure."""

        flat = np.asarray(values, dtype=np.float64).reshape(-1)
        if flat.shape != self.buffer.shape:
            raise ShapeMismatchError(
                f"Expected {self.buffer.size} parameters for topology "
                f"{self.topology}, got {flat.size}"
            )
        if not np.all(np.isfinite(flat)):
            raise ValueError("Parameters must be finite")
        self.buffer[:] = flat

    def copy(self) -> "ParameterStore":
        return ParameterStore(topology=self.topology, buffer=self.buffer.copy())


__all__ = ["ParameterStore"]
