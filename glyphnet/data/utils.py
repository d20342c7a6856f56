"""Utility helpers for dataset loaders."""

from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Mapping, Sequence

import numpy as np

from ..core.labels import Glyph
from ..core.types import Array
from .samples import SampleSet


def seed_everything(seed: int) -> np.random.Generator:
    """Seed Python and NumPy RNGs and return a generator."""

    random.seed(seed)
    np.random.seed(seed % (2**32 - 1))
    return np.random.default_rng(seed)


@dataclass(frozen=True)
class SplitIndices:
    """Indices for train/test partitions."""

    train: np.ndarray
    test: np.ndarray

    @property
    def sizes(self) -> Mapping[str, int]:
        return {"train": int(self.train.size), "test": int(self.test.size)}


def deterministic_split(n_samples: int, *, test_split: float = 0.0, seed: int = 0) -> SplitIndices:
    """Return deterministic indices for the requested hold-out ratio."""

    if not 0 <= test_split < 1:
        raise ValueError("test_split must be in [0, 1)")

    rng = np.random.default_rng(seed)
    indices = np.arange(n_samples)
    rng.shuffle(indices)

    test_size = int(round(n_samples * test_split))
    # Ensure at least one held-out sample when a split was requested
    test_size = min(max(test_size, 1 if test_split > 0 else 0), n_samples)
    if n_samples - test_size <= 0:
        raise ValueError("Not enough samples for the requested split")
    return SplitIndices(train=indices[test_size:], test=indices[:test_size])


def build_sets(
    features: Array,
    labels: Sequence[Glyph],
    num_classes: int,
    splits: SplitIndices,
) -> tuple[SampleSet, SampleSet]:
    """Materialise train/test :class:`SampleSet` objects from index splits."""

    train = SampleSet.from_arrays(
        features[splits.train], [labels[i] for i in splits.train], num_classes
    )
    test = SampleSet.from_arrays(
        features[splits.test], [labels[i] for i in splits.test], num_classes
    )
    return train, test


def minmax_scale(array: Array) -> tuple[Array, Array, Array]:
    """Scale every column into ``[0, 1]`` returning the scaled array and bounds."""

    low = array.min(axis=0, keepdims=True)
    high = array.max(axis=0, keepdims=True)
    span = np.where(high - low == 0, 1.0, high - low)
    return (array - low) / span, low, high


__all__ = [
    "SplitIndices",
    "build_sets",
    "deterministic_split",
    "minmax_scale",
    "seed_everything",
]
