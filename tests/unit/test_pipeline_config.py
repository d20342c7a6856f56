import json

import pytest

from glyphnet.core.errors import ShapeMismatchError
from glyphnet.core.types import Topology
from glyphnet.training import pipelines


def test_builtin_and_file_presets_have_required_sections():
    available = pipelines.presets()
    assert {"blobs-2class", "glyph-grid", "glyph-grid-parallel", "single-sample"} <= set(available)
    for config in available.values():
        assert {"data", "model", "train"} <= set(config)


def test_load_preset_returns_a_copy():
    first = pipelines.load_preset("blobs-2class")
    first["train"]["epochs"] = 1
    assert pipelines.load_preset("blobs-2class")["train"]["epochs"] != 1
    with pytest.raises(KeyError):
        pipelines.load_preset("missing")


def test_merge_config_is_recursive():
    base = {"train": {"epochs": 10, "seed": 1}, "model": {"hidden": [4]}}
    merged = pipelines.merge_config(base, {"train": {"epochs": 3}, "model": {"hidden": [8, 2]}})
    assert merged == {"train": {"epochs": 3, "seed": 1}, "model": {"hidden": [8, 2]}}
    assert base["train"]["epochs"] == 10


def test_read_config_file_formats(tmp_path):
    as_json = tmp_path / "c.json"
    as_json.write_text(json.dumps({"train": {"epochs": 2}}))
    assert pipelines.read_config_file(as_json) == {"train": {"epochs": 2}}

    as_yaml = tmp_path / "c.yaml"
    as_yaml.write_text("train:\n  epochs: 4\n")
    assert pipelines.read_config_file(as_yaml) == {"train": {"epochs": 4}}

    with pytest.raises(ValueError):
        pipelines.read_config_file(tmp_path / "c.toml")


def test_build_topology_from_hidden_or_explicit():
    assert pipelines.build_topology({"hidden": [5, 3]}, 4, 2) == Topology([4, 5, 3, 2])
    assert pipelines.build_topology({"topology": "4;2"}, 4, 2) == Topology([4, 2])
    with pytest.raises(ShapeMismatchError):
        pipelines.build_topology({"topology": [4, 3]}, 4, 2)
