"""Training loops and pipeline assembly."""

from .pipelines import load_preset, presets, run_pipeline
from .trainer import MAX_SINGLE_SAMPLE_ITERATIONS, NOT_TRAINED_LOSS, Trainer

__all__ = [
    "MAX_SINGLE_SAMPLE_ITERATIONS",
    "NOT_TRAINED_LOSS",
    "Trainer",
    "load_preset",
    "presets",
    "run_pipeline",
]
