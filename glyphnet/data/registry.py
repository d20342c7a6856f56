"""Dataset registry and metadata contracts."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, MutableMapping

from ..core.labels import Glyph
from .samples import SampleSet


@dataclass
class DatasetSpec:
    """A materialised dataset ready for training or evaluation.

    Attributes
    ----------
    name:
        Registry identifier of the factory that produced the dataset.
    train:
        Samples used for stochastic gradient descent.
    test:
        Held-out samples used only for accuracy reporting. May be empty.
    num_features:
        Length of every input vector (the network's input width).
    num_classes:
        Number of output classes (the network's output width).
    provenance:
        Factory options and any derived metadata, recorded in run manifests.
    """

    name: str
    train: SampleSet
    test: SampleSet
    num_features: int
    num_classes: int
    provenance: Dict[str, Any] = field(default_factory=dict)

    @property
    def splits(self) -> Dict[str, int]:
        return {"train": len(self.train), "test": len(self.test)}


DatasetFactory = Callable[..., DatasetSpec]


_REGISTRY: MutableMapping[str, DatasetFactory] = {}


def register_dataset(
    name: str | None = None,
    factory: DatasetFactory | None = None,
) -> Callable[[DatasetFactory], DatasetFactory] | DatasetFactory:
    """Register a dataset factory.

    ``register_dataset`` can be used both as a decorator::

        @register_dataset("blobs")
        def make_blobs(**kwargs):
            ...

    or directly::

        register_dataset("blobs", make_blobs)
    """

    def _decorator(func: DatasetFactory) -> DatasetFactory:
        _REGISTRY[str(name or func.__name__)] = func
        return func

    if factory is not None:
        return _decorator(factory)
    return _decorator


def get_dataset(dataset: str | None = None, /, **options: Any) -> DatasetSpec:
    """Build the dataset registered as ``dataset`` with ``options``."""

    if dataset is None:
        if "name" in options:
            dataset = str(options.pop("name"))
        else:
            raise TypeError("Dataset name must be provided")

    if dataset not in _REGISTRY:
        available = ", ".join(available_datasets())
        raise KeyError(f"Unknown dataset: {dataset}. Available datasets: {available}")

    spec = _REGISTRY[dataset](**options)
    _validate_spec(spec)
    return spec


def available_datasets() -> Iterable[str]:
    """Return the sorted list of available dataset identifiers."""

    return sorted(_REGISTRY)


def _validate_spec(spec: DatasetSpec) -> None:
    if spec.num_features <= 0:
        raise ValueError(f"Dataset {spec.name!r} has no features")
    if not 1 <= spec.num_classes <= Glyph.count():
        raise ValueError(
            f"Dataset {spec.name!r} declares {spec.num_classes} classes; "
            f"between 1 and {Glyph.count()} are supported"
        )
    if len(spec.train) == 0:
        raise ValueError(f"Dataset {spec.name!r} has an empty training split")
    for split_name, samples in (("train", spec.train), ("test", spec.test)):
        for sample in samples:
            if sample.input.shape[0] != spec.num_features:
                raise ValueError(
                    f"{split_name} sample has {sample.input.shape[0]} features, "
                    f"dataset declares {spec.num_features}"
                )


__all__ = [
    "DatasetSpec",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
