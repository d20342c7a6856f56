import json
from pathlib import Path

import pytest

from glyphnet.core.codec import read_topology
from glyphnet.core.errors import ShapeMismatchError
from glyphnet.core.types import Topology
from glyphnet.training import pipelines


def _config(run_dir: Path, **train) -> dict:
    config = {
        "data": {
            "name": "blobs",
            "options": {"num_classes": 3, "num_features": 2, "per_class": 6, "seed": 0, "test_split": 0.2},
        },
        "model": {"hidden": [4], "seed": 5},
        "train": {
            "epochs": 4,
            "acceptable_error": 0.0,
            "seed": 11,
            "run_dir": str(run_dir),
            "enable_plots": False,
        },
    }
    config["train"].update(train)
    return config


def test_trainer_pipeline_produces_artifacts(tmp_path):
    config = _config(tmp_path / "run")
    result = pipelines.run_pipeline(config)

    assert Path(result.metrics_path).exists()
    assert (tmp_path / "run" / "metrics.csv").exists()
    assert read_topology(result.model_path) == Topology([2, 4, 3])
    assert 0.0 <= result.accuracy <= 1.0
    assert result.epochs == 4

    manifest = json.loads(Path(result.manifest_path).read_text())
    assert manifest["config"]["train"]["seed"] == 11
    assert manifest["dataset"]["type"] == "synthetic"
    assert manifest["model"]["topology"] == "2;4;3"
    assert manifest["model"]["warm_start"] is False

    metrics = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines() if line]
    assert len(metrics) == 4
    first = metrics[0]
    assert first["split"] == "train"
    assert "sha" in first and "seed" in first
    assert all({"loss", "progress", "accuracy"} <= set(entry) for entry in metrics)


def test_summary_outputs_are_deterministic(tmp_path):
    first = pipelines.run_pipeline(_config(tmp_path / "run_a"))
    second = pipelines.run_pipeline(_config(tmp_path / "run_b"))

    assert Path(first.summary_path).read_bytes() == Path(second.summary_path).read_bytes()
    assert Path(first.model_path).read_text() == Path(second.model_path).read_text()
    assert first.loss == second.loss


def test_warm_start_continues_from_saved_model(tmp_path):
    model_path = tmp_path / "shared" / "model.txt"
    first = pipelines.run_pipeline(_config(tmp_path / "a", model_path=str(model_path)))
    assert model_path.exists()
    saved = model_path.read_text()

    second = pipelines.run_pipeline(
        _config(tmp_path / "b", model_path=str(model_path), warm_start=True, epochs=1)
    )
    manifest = json.loads(Path(second.manifest_path).read_text())
    assert manifest["model"]["warm_start"] is True
    assert model_path.read_text() != saved
    assert first.model_path == second.model_path


def test_single_sample_mode_records_every_sample(tmp_path):
    config = _config(tmp_path / "single", mode="single", acceptable_error=0.05)
    config["data"]["options"] = {"num_classes": 2, "num_features": 2, "per_class": 2, "seed": 0}
    result = pipelines.run_pipeline(config)

    records = [json.loads(line) for line in Path(result.metrics_path).read_text().splitlines()]
    assert len(records) == 4
    assert all(record["iterations"] >= 1 for record in records)


def test_topology_must_fit_dataset(tmp_path):
    config = _config(tmp_path / "bad")
    config["model"] = {"topology": [3, 4, 3]}
    with pytest.raises(ShapeMismatchError, match="inputs"):
        pipelines.run_pipeline(config)


def test_unknown_mode_is_rejected(tmp_path):
    with pytest.raises(ValueError, match="mode"):
        pipelines.run_pipeline(_config(tmp_path / "bad", mode="batch"))
