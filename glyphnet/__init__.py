"""glyphnet public API."""

from .core import types  # noqa: F401
from .core.codec import load_model, read_topology, save_model, warm_start
from .core.errors import (
    GlyphNetError,
    ModelNotFoundError,
    ModelParseError,
    ShapeMismatchError,
)
from .core.labels import Glyph
from .core.network import LEARNING_RATE, SigmoidNetwork
from .core.types import FitOutcome, RunResult, Topology
from .data import Sample, SampleSet, get_dataset
from .training.pipelines import load_preset, presets, run_pipeline
from .training.trainer import Trainer

__all__ = [
    "FitOutcome",
    "Glyph",
    "GlyphNetError",
    "LEARNING_RATE",
    "ModelNotFoundError",
    "ModelParseError",
    "RunResult",
    "Sample",
    "SampleSet",
    "ShapeMismatchError",
    "SigmoidNetwork",
    "Topology",
    "Trainer",
    "get_dataset",
    "load_model",
    "load_preset",
    "presets",
    "read_topology",
    "run_pipeline",
    "save_model",
    "types",
    "warm_start",
]
