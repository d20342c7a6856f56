import numpy as np
import pytest

from glyphnet.core.labels import Glyph
from glyphnet.data import available_datasets, get_dataset, register_dataset
from glyphnet.data.csv_features import encode_labels, read_feature_rows
from glyphnet.data.registry import DatasetSpec
from glyphnet.data.samples import SampleSet
from glyphnet.data.utils import deterministic_split


def test_builtin_datasets_are_registered():
    names = set(available_datasets())
    assert {"blobs", "glyph_grid", "csv_features"} <= names


def test_unknown_dataset_lists_alternatives():
    with pytest.raises(KeyError, match="blobs"):
        get_dataset("does-not-exist")


def test_blobs_are_bounded_and_labelled():
    spec = get_dataset("blobs", num_classes=3, num_features=4, per_class=5, seed=1)
    assert spec.num_features == 4
    assert spec.num_classes == 3
    assert spec.splits == {"train": 15, "test": 0}
    inputs = np.stack([s.input for s in spec.train])
    assert inputs.min() >= 0.0 and inputs.max() <= 1.0
    assert sorted({s.true_class for s in spec.train}, key=lambda g: g.index) == [
        Glyph.A,
        Glyph.B,
        Glyph.W,
    ]


def test_glyph_grid_is_deterministic_and_binary():
    first = get_dataset("glyph_grid", num_classes=2, width=4, height=3, per_class=6, seed=7)
    second = get_dataset("glyph_grid", num_classes=2, width=4, height=3, per_class=6, seed=7)
    assert first.num_features == 12
    assert first.splits["train"] + first.splits["test"] == 12
    assert first.splits["test"] == 3
    for a, b in zip(first.train, second.train):
        np.testing.assert_array_equal(a.input, b.input)
        assert set(np.unique(a.input)) <= {0.0, 1.0}


def test_deterministic_split_keeps_one_holdout():
    splits = deterministic_split(10, test_split=0.01, seed=0)
    assert splits.sizes == {"train": 9, "test": 1}
    assert deterministic_split(10).sizes == {"train": 10, "test": 0}
    with pytest.raises(ValueError):
        deterministic_split(10, test_split=1.0)


def test_csv_features_with_glyph_labels(tmp_path):
    path = tmp_path / "features.csv"
    path.write_text("f1,f2,label\n0.1,0.9,A\n0.8,0.2,b\n0.5,0.5,K\n")
    spec = get_dataset("csv_features", csv_path=path)
    assert spec.num_features == 2
    assert spec.num_classes == 10
    assert sorted(g.index for g in spec.train.labels()) == [0, 1, 9]
    assert spec.provenance["classes"] == ["A", "B", "K"]


def test_csv_features_encodes_arbitrary_labels(tmp_path):
    path = tmp_path / "features.csv"
    path.write_text("x,y,label\n0,1,dog\n1,0,cat\n1,1,dog\n")
    spec = get_dataset("csv_features", csv_path=path, num_classes=2)
    by_row = {tuple(s.input): s.true_class for s in spec.train}
    assert by_row == {(0.0, 1.0): Glyph.B, (1.0, 0.0): Glyph.A, (1.0, 1.0): Glyph.B}
    assert spec.provenance["classes"] == ["cat", "dog"]


def test_csv_features_rejects_unscaled_values(tmp_path):
    path = tmp_path / "features.csv"
    path.write_text("x,y,label\n0,10,A\n5,0,B\n")
    with pytest.raises(ValueError, match="rescale"):
        get_dataset("csv_features", csv_path=path)
    spec = get_dataset("csv_features", csv_path=path, rescale=True, num_classes=2)
    by_label = {s.true_class: s.input.tolist() for s in spec.train}
    assert by_label == {Glyph.A: [0.0, 1.0], Glyph.B: [1.0, 0.0]}


def test_csv_features_missing_label_column(tmp_path):
    path = tmp_path / "features.csv"
    path.write_text("x,y\n0,1\n")
    with pytest.raises(KeyError):
        get_dataset("csv_features", csv_path=path)


def test_read_feature_rows_drops_label(tmp_path):
    path = tmp_path / "rows.csv"
    path.write_text("a,b,label\n0.1,0.2,A\n0.3,0.4,B\n")
    rows = read_feature_rows(path, "label")
    np.testing.assert_array_equal(rows, [[0.1, 0.2], [0.3, 0.4]])


def test_encode_labels_rejects_too_many_classes():
    raw = np.array([f"label{i}" for i in range(11)])
    with pytest.raises(ValueError):
        encode_labels(raw)


def test_registry_validates_factories():
    @register_dataset("empty-for-test")
    def _empty(**_):
        return DatasetSpec(
            name="empty-for-test",
            train=SampleSet(),
            test=SampleSet(),
            num_features=2,
            num_classes=2,
        )

    with pytest.raises(ValueError, match="empty training split"):
        get_dataset("empty-for-test")
