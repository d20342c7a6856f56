"""Samples, dataset registry and loader helpers."""

# Ensure built-in datasets register themselves when the package is imported.
from . import csv_features as _csv_features  # noqa: F401
from .loaders import synthetic as _synthetic  # noqa: F401
from .registry import DatasetSpec, available_datasets, get_dataset, register_dataset
from .samples import Sample, SampleSet

__all__ = [
    "DatasetSpec",
    "Sample",
    "SampleSet",
    "available_datasets",
    "get_dataset",
    "register_dataset",
]
