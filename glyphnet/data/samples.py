"""Labelled observations and ordered sample collections."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, List, Sequence

import numpy as np

from ..core.labels import Glyph, one_hot
from ..core.types import Array

if TYPE_CHECKING:  # pragma: no cover
    from ..core.network import SigmoidNetwork


class Sample:
    """One feature vector with its target and the last prediction made on it."""

    def __init__(
        self,
        inputs: Iterable[float] | Array,
        num_classes: int,
        true_class: Glyph = Glyph.UNKNOWN,
    ) -> None:
        self.input: Array = np.array(inputs, dtype=np.float64).reshape(-1)
        self.true_class = true_class
        self.target: Array = one_hot(true_class, num_classes)
        self.output: Array | None = None
        self.error: Array | None = None
        self.predicted_class = Glyph.UNKNOWN

    @property
    def num_classes(self) -> int:
        return int(self.target.shape[0])

    def record_prediction(self, output: Array) -> Glyph:
        """Store ``output``, its per-unit error and the arg-max class."""

        output = np.asarray(output, dtype=np.float64)
        self.output = output
        self.error = output - one_hot(self.true_class, output.shape[0])
        # np.argmax returns the first maximum, so ties go to the lower index
        self.predicted_class = Glyph.from_index(int(np.argmax(output)))
        return self.predicted_class

    def estimated_error(self) -> float:
        if self.error is None:
            return 0.0
        return float(np.dot(self.error, self.error))

    def is_correct(self) -> bool:
        return self.true_class == self.predicted_class

    def __repr__(self) -> str:
        return (
            f"Sample(features={self.input.shape[0]}, true={self.true_class.name}, "
            f"predicted={self.predicted_class.name})"
        )


class SampleSet:
    """Ordered collection of samples; order matters only for training."""

    def __init__(self, samples: Iterable[Sample] = ()) -> None:
        self.samples: List[Sample] = list(samples)

    @classmethod
    def from_arrays(
        cls,
        inputs: Array,
        labels: Sequence[Glyph | int | str],
        num_classes: int,
    ) -> "SampleSet":
        features = np.asarray(inputs, dtype=np.float64)
        if features.ndim != 2 or features.shape[0] != len(labels):
            raise ValueError(
                f"Expected a (n, d) feature matrix matching {len(labels)} labels, "
                f"got shape {features.shape}"
            )
        return cls(
            Sample(row, num_classes, Glyph.parse(label))
            for row, label in zip(features, labels)
        )

    def add(self, sample: Sample) -> None:
        self.samples.append(sample)

    def shuffle(self, rng: np.random.Generator | None = None) -> None:
        rng = rng if rng is not None else np.random.default_rng()
        order = rng.permutation(len(self.samples))
        self.samples = [self.samples[i] for i in order]

    def accuracy(self, network: "SigmoidNetwork", *, parallel: bool | None = None) -> float:
        """Fraction of samples whose predicted class equals the true class."""

        if not self.samples:
            return 0.0
        correct = sum(
            1 for sample in self.samples if network.predict(sample, parallel=parallel) == sample.true_class
        )
        return correct / len(self.samples)

    def labels(self) -> List[Glyph]:
        return [sample.true_class for sample in self.samples]

    def __len__(self) -> int:
        return len(self.samples)

    def __iter__(self) -> Iterator[Sample]:
        return iter(self.samples)

    def __getitem__(self, idx: int) -> Sample:
        return self.samples[idx]

    def __setitem__(self, idx: int, sample: Sample) -> None:
        self.samples[idx] = sample


__all__ = ["Sample", "SampleSet"]
