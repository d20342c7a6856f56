"""Core typing contracts for glyphnet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

import numpy as np

Array = np.ndarray


@dataclass(frozen=True, init=False)
class Topology:
    """Per-layer neuron counts, input layer first and output layer last."""

    widths: Tuple[int, ...]

    def __init__(self, widths: Iterable[int]) -> None:
        values = tuple(int(w) for w in widths)
        if len(values) < 2:
            raise ValueError(f"Topology needs at least two layers, got {list(values)}")
        if any(w <= 0 for w in values):
            raise ValueError(f"Layer widths must be positive, got {list(values)}")
        object.__setattr__(self, "widths", values)

    @classmethod
    def parse(cls, text: str) -> "Topology":
        """Parse the ``w0;w1;...`` form used by persisted models."""

        parts = [p.strip() for p in text.strip().split(";")]
        try:
            return cls(int(p) for p in parts)
        except ValueError as exc:
            raise ValueError(f"Invalid topology line: {text.strip()!r}") from exc

    def __str__(self) -> str:
        return ";".join(str(w) for w in self.widths)

    def __len__(self) -> int:
        return len(self.widths)

    def __iter__(self) -> Iterator[int]:
        return iter(self.widths)

    def __getitem__(self, idx: int) -> int:
        return self.widths[idx]

    @property
    def input_width(self) -> int:
        return self.widths[0]

    @property
    def output_width(self) -> int:
        return self.widths[-1]

    @property
    def boundaries(self) -> List[Tuple[int, int]]:
        """``(fan_in, fan_out)`` for every weight layer."""

        return list(zip(self.widths[:-1], self.widths[1:]))

    @property
    def weight_count(self) -> int:
        return sum(i * o for i, o in self.boundaries)

    @property
    def bias_count(self) -> int:
        return sum(self.widths[1:])

    @property
    def parameter_count(self) -> int:
        return self.weight_count + self.bias_count


@dataclass(frozen=True)
class FitOutcome:
    """Result of a training call.

    ``steps`` counts iterations for single-sample training and completed
    epochs for dataset training. ``converged`` is ``False`` when the call
    stopped on its cap instead of reaching the acceptable error.
    """

    steps: int
    loss: float
    converged: bool


@dataclass(frozen=True)
class RunResult:
    """Summary returned by :func:`glyphnet.training.pipelines.run_pipeline`."""

    epochs: int
    loss: float
    accuracy: float
    model_path: str
    metrics_path: str
    manifest_path: str
    summary_path: str = ""


__all__ = ["Array", "Topology", "FitOutcome", "RunResult"]
