"""CSV loader for pre-extracted feature vectors."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
from sklearn.preprocessing import LabelEncoder

from ..core.labels import Glyph
from .registry import DatasetSpec, register_dataset
from .utils import build_sets, deterministic_split, minmax_scale


def _load_csv(path: Path, label_col: str) -> tuple[np.ndarray, np.ndarray]:
    df = pd.read_csv(path)
    if label_col not in df.columns:
        raise KeyError(f"Label column {label_col!r} not found in {path}")
    labels = df.pop(label_col).to_numpy()
    features = df.to_numpy(dtype=np.float64)
    return features, labels


def encode_labels(raw: np.ndarray) -> tuple[list[Glyph], list[str]]:
    """Map raw labels onto glyphs.

    Labels that already name glyphs (``"A"``, ``"k"``) or class indices keep
    their meaning; anything else is encoded in sorted order with
    :class:`~sklearn.preprocessing.LabelEncoder`.
    """

    try:
        glyphs = [Glyph.parse(value) for value in raw]
    except (ValueError, IndexError):
        glyphs = []
    if glyphs and all(g.is_known for g in glyphs):
        return glyphs, sorted({g.name for g in glyphs})

    encoder = LabelEncoder()
    encoded = encoder.fit_transform(raw.astype(str))
    if len(encoder.classes_) > Glyph.count():
        raise ValueError(
            f"Found {len(encoder.classes_)} distinct labels; at most {Glyph.count()} are supported"
        )
    return [Glyph.from_index(int(i)) for i in encoded], [str(c) for c in encoder.classes_]


@register_dataset("csv_features")
def load_csv_features(
    *,
    csv_path: str | Path,
    label_col: str = "label",
    num_classes: int | None = None,
    rescale: bool = False,
    test_split: float = 0.0,
    seed: int = 0,
    **_: object,
) -> DatasetSpec:
    """Load feature rows from ``csv_path``; every non-label column is a feature."""

    path = Path(csv_path)
    features, raw_labels = _load_csv(path, label_col)
    if rescale:
        features, _, _ = minmax_scale(features)
    elif features.size and (features.min() < 0.0 or features.max() > 1.0):
        raise ValueError(
            f"{path}: feature values must lie in [0, 1]; pass rescale=True to min-max scale"
        )

    labels, classes = encode_labels(raw_labels)
    observed = max(g.index for g in labels) + 1 if labels else 0
    num_classes = int(num_classes) if num_classes is not None else observed
    if observed > num_classes:
        raise ValueError(f"{path}: labels need {observed} classes, configured {num_classes}")

    splits = deterministic_split(features.shape[0], test_split=test_split, seed=seed)
    train, test = build_sets(features, labels, num_classes, splits)
    provenance = {
        "path": str(path),
        "label_col": label_col,
        "classes": classes,
        "rescale": rescale,
        "test_split": test_split,
        "seed": seed,
    }
    return DatasetSpec(
        name="csv_features",
        train=train,
        test=test,
        num_features=int(features.shape[1]),
        num_classes=num_classes,
        provenance=provenance,
    )


def read_feature_rows(csv_path: str | Path, label_col: str | None = None) -> np.ndarray:
    """Read unlabeled feature rows, dropping ``label_col`` if present."""

    df = pd.read_csv(csv_path)
    if label_col and label_col in df.columns:
        df = df.drop(columns=[label_col])
    return df.to_numpy(dtype=np.float64)


__all__ = ["encode_labels", "load_csv_features", "read_feature_rows"]
