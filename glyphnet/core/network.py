"""Fully-connected sigmoid network with manual backpropagation."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import TYPE_CHECKING, Iterable, List, Sequence

import numpy as np

from .activations import sigmoid, sigmoid_deriv
from .errors import ShapeMismatchError
from .labels import Glyph
from .parallel import FanOut
from .params import ParameterStore
from .types import Array, Topology

if TYPE_CHECKING:  # pragma: no cover
    from ..data.samples import Sample

LEARNING_RATE = 0.1


class SigmoidNetwork:
    """Feed-forward network trained one sample at a time.

    ``outputs[0]`` holds the current input and ``outputs[-1]`` the network
    output; ``deltas[l]`` holds the backpropagated error of layer ``l``
    (``deltas[0]`` is never used). Both are scratch buffers overwritten on
    every pass.

    With ``parallel=True`` the per-neuron loops of one layer are split over
    a thread pool. Layers are always processed one after another.
    """

    def __init__(
        self,
        topology: Topology | Sequence[int],
        *,
        seed: int | None = None,
        parallel: bool = False,
        workers: int | None = None,
        params: ParameterStore | None = None,
    ) -> None:
        self.topology = topology if isinstance(topology, Topology) else Topology(topology)
        if self.topology.output_width > Glyph.count():
            raise ShapeMismatchError(
                f"Topology {self.topology} has {self.topology.output_width} outputs; "
                f"at most {Glyph.count()} classes are supported"
            )
        if params is None:
            params = ParameterStore.random(self.topology, np.random.default_rng(seed))
        elif params.topology != self.topology:
            raise ShapeMismatchError(
                f"Parameters for {params.topology} do not fit topology {self.topology}"
            )
        self.params = params
        self.parallel = parallel
        self.lock = threading.RLock()
        self._workers = workers
        self._fanout: FanOut | None = None
        self.outputs: List[Array] = [np.zeros(w) for w in self.topology]
        self.deltas: List[Array] = [np.zeros(w) for w in self.topology]
        self._primed = False

    # ------------------------------------------------------------------
    # Construction helpers

    @classmethod
    def from_file(cls, path: str | Path, **kwargs) -> "SigmoidNetwork":
        """Build a network shaped like the stored model and load its parameters."""

        from .codec import load_model, read_topology

        network = cls(read_topology(path), **kwargs)
        load_model(network, path)
        return network

    def save(self, path: str | Path) -> Path:
        from .codec import save_model

        return save_model(self, path)

    def load(self, path: str | Path) -> None:
        from .codec import load_model

        load_model(self, path)

    @property
    def weights(self) -> List[Array]:
        return self.params.weights

    @property
    def biases(self) -> List[Array]:
        return self.params.biases

    # ------------------------------------------------------------------
    # Forward engine

    def compute(self, inputs: Iterable[float] | Array, *, parallel: bool | None = None) -> Array:
        """Run a forward pass and return a copy of the output activations."""

        x = np.asarray(inputs, dtype=np.float64)
        if x.ndim != 1 or x.shape[0] != self.topology.input_width:
            raise ShapeMismatchError(
                f"Input has shape {x.shape}, topology {self.topology} expects "
                f"({self.topology.input_width},)"
            )
        run = self._runner(parallel)
        self.outputs[0][:] = x
        for layer, (W, b) in enumerate(zip(self.params.weights, self.params.biases)):
            prev = self.outputs[layer]
            out = self.outputs[layer + 1]

            def neurons(lo: int, hi: int, prev=prev, out=out, W=W, b=b) -> None:
                out[lo:hi] = sigmoid(prev @ W[:, lo:hi] + b[lo:hi])

            run(neurons, out.shape[0])
        self._primed = True
        return self.outputs[-1].copy()

    # ------------------------------------------------------------------
    # Backward engine

    def backpropagate(
        self, target: Iterable[float] | Array, *, parallel: bool | None = None
    ) -> float:
        """Apply one gradient step towards ``target`` and return the sample loss.

        Must directly follow :meth:`compute` on the same input.
        """

        t = np.asarray(target, dtype=np.float64)
        if t.ndim != 1 or t.shape[0] != self.topology.output_width:
            raise ShapeMismatchError(
                f"Target has shape {t.shape}, topology {self.topology} expects "
                f"({self.topology.output_width},)"
            )
        if not self._primed:
            raise RuntimeError("backpropagate() called without a preceding compute()")
        run = self._runner(parallel)
        outputs, deltas = self.outputs, self.deltas
        weights, biases = self.params.weights, self.params.biases
        last = len(self.topology) - 1

        error = t - outputs[last]
        sum_sq = float(np.dot(error, error))
        deltas[last][:] = error * sigmoid_deriv(outputs[last])

        for layer in range(last - 1, 0, -1):
            W, nxt, cur, out = weights[layer], deltas[layer + 1], deltas[layer], outputs[layer]

            def hidden(lo: int, hi: int, W=W, nxt=nxt, cur=cur, out=out) -> None:
                cur[lo:hi] = (W[lo:hi] @ nxt) * sigmoid_deriv(out[lo:hi])

            run(hidden, cur.shape[0])

        for layer in range(last):
            W, b, src, delta = weights[layer], biases[layer], outputs[layer], deltas[layer + 1]

            def update(lo: int, hi: int, W=W, b=b, src=src, delta=delta) -> None:
                step = LEARNING_RATE * delta[lo:hi]
                b[lo:hi] += step
                W[:, lo:hi] += np.outer(src, step)

            run(update, b.shape[0])

        self._primed = False
        return sum_sq / 2.0

    # ------------------------------------------------------------------
    # Inference

    def predict(self, sample: "Sample", *, parallel: bool | None = None) -> Glyph:
        """Classify ``sample`` in place and return the predicted glyph."""

        with self.lock:
            output = self.compute(sample.input, parallel=parallel)
        return sample.record_prediction(output)

    # ------------------------------------------------------------------
    # Resources

    def _runner(self, parallel: bool | None):
        use_parallel = self.parallel if parallel is None else parallel
        if not use_parallel:
            return _run_inline
        if self._fanout is None:
            self._fanout = FanOut(self._workers)
        return self._fanout.run

    def close(self) -> None:
        if self._fanout is not None:
            self._fanout.close()
            self._fanout = None

    def __enter__(self) -> "SigmoidNetwork":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SigmoidNetwork(topology={self.topology}, parallel={self.parallel})"


def _run_inline(kernel, size: int) -> None:
    kernel(0, size)


__all__ = ["LEARNING_RATE", "SigmoidNetwork"]
