"""Stochastic gradient descent loops for :class:`SigmoidNetwork`."""

from __future__ import annotations

import logging
import time
from typing import Mapping, Sequence

import numpy as np

from ..core.network import SigmoidNetwork
from ..core.types import FitOutcome
from ..data.samples import Sample, SampleSet

logger = logging.getLogger(__name__)

MAX_SINGLE_SAMPLE_ITERATIONS = 10_000
NOT_TRAINED_LOSS = float("inf")


class Trainer:
    """Train a network sample by sample.

    Samples are always visited sequentially: each update reads the
    parameters written by the previous one. ``use_parallel`` only controls
    the per-layer fan-out inside the forward and backward passes.

    Callbacks receive ``on_epoch(epoch, metrics)`` (or are called directly
    when they are plain callables) after every dataset epoch.
    """

    def __init__(
        self,
        network: SigmoidNetwork,
        *,
        callbacks: Sequence[object] | None = None,
        rng: np.random.Generator | None = None,
        seed: int | None = None,
    ) -> None:
        self.network = network
        self.callbacks = list(callbacks or [])
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.last_outcome: FitOutcome | None = None

    def train_one(self, sample: Sample, acceptable_error: float, use_parallel: bool = False) -> int:
        """Fit a single sample until its loss is acceptable; return iterations used."""

        network = self.network
        loss = NOT_TRAINED_LOSS
        iterations = 0
        with network.lock:
            while loss > acceptable_error and iterations < MAX_SINGLE_SAMPLE_ITERATIONS:
                network.compute(sample.input, parallel=use_parallel)
                loss = network.backpropagate(sample.target, parallel=use_parallel)
                iterations += 1
        converged = loss <= acceptable_error
        self.last_outcome = FitOutcome(steps=iterations, loss=loss, converged=converged)
        if not converged:
            logger.warning(
                "Single-sample training stopped after %d iterations with loss %.6g > %.6g",
                iterations,
                loss,
                acceptable_error,
            )
        return iterations

    def train_on_dataset(
        self,
        samples: SampleSet,
        epochs: int,
        acceptable_error: float,
        use_parallel: bool = False,
        *,
        eval_samples: SampleSet | None = None,
    ) -> float:
        """Run up to ``epochs`` shuffled SGD passes; return the last epoch's loss sum."""

        network = self.network
        loss_sum = NOT_TRAINED_LOSS
        completed = 0
        started = time.perf_counter()
        for epoch in range(epochs):
            samples.shuffle(self.rng)
            epoch_loss = 0.0
            with network.lock:
                for sample in samples:
                    network.compute(sample.input, parallel=use_parallel)
                    epoch_loss += network.backpropagate(sample.target, parallel=use_parallel)
            loss_sum = epoch_loss
            completed = epoch + 1

            metrics = {
                "progress": epoch / epochs,
                "loss": loss_sum,
                "mean_loss": loss_sum / max(1, len(samples)),
                "elapsed": time.perf_counter() - started,
            }
            if eval_samples is not None and len(eval_samples):
                metrics["accuracy"] = eval_samples.accuracy(network, parallel=use_parallel)
            self._emit_epoch(epoch, metrics)
            logger.debug("epoch %d/%d loss=%.6g", epoch + 1, epochs, loss_sum)

            if loss_sum < acceptable_error:
                break

        converged = loss_sum < acceptable_error
        self.last_outcome = FitOutcome(steps=completed, loss=loss_sum, converged=converged)
        if epochs > 0 and not converged:
            logger.warning(
                "Dataset training finished %d epochs with loss %.6g >= %.6g",
                completed,
                loss_sum,
                acceptable_error,
            )
        return loss_sum

    # ------------------------------------------------------------------
    # Internal helpers

    def _emit_epoch(self, epoch: int, metrics: Mapping[str, float]) -> None:
        for callback in self.callbacks:
            if hasattr(callback, "on_epoch"):
                callback.on_epoch(epoch, metrics)  # type: ignore[attr-defined]
            elif callable(callback):
                callback(epoch, metrics)


__all__ = ["MAX_SINGLE_SAMPLE_ITERATIONS", "NOT_TRAINED_LOSS", "Trainer"]
