"""Pure in-memory synthetic datasets."""

from __future__ import annotations

import numpy as np

from ...core.labels import Glyph
from ..registry import DatasetSpec, register_dataset
from ..utils import build_sets, deterministic_split


def _make_blobs(
    num_classes: int, num_features: int, per_class: int, spread: float, seed: int
) -> tuple[np.ndarray, list[Glyph]]:
    rng = np.random.default_rng(seed)
    centers = rng.uniform(0.2, 0.8, size=(num_classes, num_features))
    features = []
    labels: list[Glyph] = []
    for cls, center in enumerate(centers):
        noise = spread * rng.standard_normal((per_class, num_features))
        features.append(np.clip(center + noise, 0.0, 1.0))
        labels.extend([Glyph.from_index(cls)] * per_class)
    return np.vstack(features), labels


@register_dataset("blobs")
def load_blobs(
    num_classes: int = 2,
    num_features: int = 2,
    per_class: int = 16,
    spread: float = 0.05,
    seed: int = 0,
    test_split: float = 0.0,
    **_: object,
) -> DatasetSpec:
    """Gaussian clusters around random centres, clipped to ``[0, 1]``."""

    features, labels = _make_blobs(num_classes, num_features, per_class, spread, seed)
    splits = deterministic_split(features.shape[0], test_split=test_split, seed=seed)
    train, test = build_sets(features, labels, num_classes, splits)
    provenance = {
        "type": "synthetic",
        "num_classes": num_classes,
        "num_features": num_features,
        "per_class": per_class,
        "spread": spread,
        "seed": seed,
        "test_split": test_split,
    }
    return DatasetSpec(
        name="blobs",
        train=train,
        test=test,
        num_features=num_features,
        num_classes=num_classes,
        provenance=provenance,
    )


def _make_glyphs(
    num_classes: int, width: int, height: int, per_class: int, noise: float, seed: int
) -> tuple[np.ndarray, list[Glyph]]:
    rng = np.random.default_rng(seed)
    prototypes = rng.random((num_classes, height * width)) < 0.5
    features = []
    labels: list[Glyph] = []
    for cls, proto in enumerate(prototypes):
        flips = rng.random((per_class, proto.size)) < noise
        features.append(np.logical_xor(proto, flips).astype(np.float64))
        labels.extend([Glyph.from_index(cls)] * per_class)
    return np.vstack(features), labels


@register_dataset("glyph_grid")
def load_glyph_grid(
    num_classes: int = 4,
    width: int = 8,
    height: int = 8,
    per_class: int = 12,
    noise: float = 0.05,
    seed: int = 0,
    test_split: float = 0.25,
    **_: object,
) -> DatasetSpec:
    """Binary glyph bitmaps: one random prototype per class with pixel flips.

    Each sample mimics the output of the image pipeline, a flattened bitmap
    with pixels already mapped to ``0.0``/``1.0``.
    """

    if not 0 <= noise < 0.5:
        raise ValueError("noise must be in [0, 0.5)")
    features, labels = _make_glyphs(num_classes, width, height, per_class, noise, seed)
    splits = deterministic_split(features.shape[0], test_split=test_split, seed=seed)
    train, test = build_sets(features, labels, num_classes, splits)
    provenance = {
        "type": "synthetic",
        "num_classes": num_classes,
        "width": width,
        "height": height,
        "per_class": per_class,
        "noise": noise,
        "seed": seed,
        "test_split": test_split,
    }
    return DatasetSpec(
        name="glyph_grid",
        train=train,
        test=test,
        num_features=width * height,
        num_classes=num_classes,
        provenance=provenance,
    )


__all__ = ["load_blobs", "load_glyph_grid"]
