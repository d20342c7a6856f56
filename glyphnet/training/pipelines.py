"""Pipeline assembly: dataset, network, trainer and run artifacts."""

from __future__ import annotations

import json
import logging
import time
from copy import deepcopy
from pathlib import Path
from typing import Dict, List, Mapping, Sequence

from ..core.codec import save_model, warm_start
from ..core.errors import ShapeMismatchError
from ..core.network import SigmoidNetwork
from ..core.types import RunResult, Topology
from ..data import registry
from ..data.utils import seed_everything
from ..reporting.artifacts import write_manifest
from ..reporting.metrics import CsvSink, JsonlSink
from ..reporting.plots import PlotAdapter
from ..reporting.summary import write_summary
from .trainer import Trainer

logger = logging.getLogger(__name__)

_PRESETS: Dict[str, Mapping[str, object]] = {
    "blobs-2class": {
        "data": {
            "name": "blobs",
            "options": {"num_classes": 2, "num_features": 2, "per_class": 16, "seed": 0},
        },
        "model": {"hidden": [4], "seed": 7, "parallel": False},
        "train": {
            "mode": "dataset",
            "epochs": 300,
            "acceptable_error": 0.05,
            "seed": 7,
            "run_dir": "runs/blobs-2class",
            "enable_plots": False,
        },
    },
    "glyph-grid": {
        "data": {
            "name": "glyph_grid",
            "options": {
                "num_classes": 4,
                "width": 8,
                "height": 8,
                "per_class": 12,
                "noise": 0.05,
                "seed": 0,
                "test_split": 0.25,
            },
        },
        "model": {"hidden": [16], "seed": 3, "parallel": False},
        "train": {
            "mode": "dataset",
            "epochs": 150,
            "acceptable_error": 0.1,
            "seed": 3,
            "run_dir": "runs/glyph-grid",
            "enable_plots": False,
        },
    },
    "glyph-grid-parallel": {
        "data": {
            "name": "glyph_grid",
            "options": {
                "num_classes": 10,
                "width": 16,
                "height": 8,
                "per_class": 10,
                "noise": 0.05,
                "seed": 1,
                "test_split": 0.2,
            },
        },
        "model": {"hidden": [96, 48], "seed": 11, "parallel": True, "workers": 4},
        "train": {
            "mode": "dataset",
            "epochs": 60,
            "acceptable_error": 0.5,
            "seed": 11,
            "run_dir": "runs/glyph-grid-parallel",
            "enable_plots": False,
        },
    },
    "single-sample": {
        "data": {
            "name": "blobs",
            "options": {"num_classes": 2, "num_features": 2, "per_class": 2, "seed": 0},
        },
        "model": {"hidden": [3], "seed": 5, "parallel": False},
        "train": {
            "mode": "single",
            "acceptable_error": 0.01,
            "seed": 5,
            "run_dir": "runs/single-sample",
            "enable_plots": False,
        },
    },
}

_PRESET_DIR = Path(__file__).resolve().parents[2] / "configs" / "presets"
_REQUIRED_SECTIONS = {"data", "model", "train"}


def read_config_file(path: str | Path) -> Mapping[str, object]:
    """Decode a JSON or YAML configuration file into a mapping."""

    path = Path(path)
    text = path.read_text()
    suffix = path.suffix.lower()
    if suffix in {".yaml", ".yml"}:
        try:
            import yaml  # type: ignore
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise RuntimeError("PyYAML is required to load YAML configs") from exc
        data = yaml.safe_load(text) or {}
    elif suffix == ".json":
        data = json.loads(text or "{}")
    else:
        raise ValueError(f"Unsupported config file type: {path.suffix}")

    if not isinstance(data, Mapping):
        raise TypeError(f"Config {path.name} must decode to a mapping")
    return data


def _file_presets() -> Dict[str, Mapping[str, object]]:
    presets: Dict[str, Mapping[str, object]] = {}
    if _PRESET_DIR.exists():
        for file in sorted(_PRESET_DIR.iterdir()):
            if file.suffix.lower() not in {".yaml", ".yml", ".json"}:
                continue
            data = read_config_file(file)
            missing = _REQUIRED_SECTIONS - set(data)
            if missing:
                missing_str = ", ".join(sorted(missing))
                raise KeyError(f"Preset {file.name} is missing required sections: {missing_str}")
            presets[file.stem] = json.loads(json.dumps(data))
    return presets


def presets() -> Mapping[str, Mapping[str, object]]:
    combined: Dict[str, Mapping[str, object]] = {}
    combined.update({name: deepcopy(cfg) for name, cfg in _PRESETS.items()})
    combined.update(_file_presets())
    return combined


def load_preset(name: str) -> Dict[str, object]:
    available = presets()
    try:
        return deepcopy(dict(available[name]))
    except KeyError as exc:
        raise KeyError(f"Unknown preset: {name}") from exc


def merge_config(base: Mapping[str, object], override: Mapping[str, object]) -> Dict[str, object]:
    """Recursively merge ``override`` into a copy of ``base``."""

    merged: Dict[str, object] = deepcopy(dict(base))
    for key, value in override.items():
        if isinstance(value, Mapping) and isinstance(merged.get(key), Mapping):
            merged[key] = merge_config(merged[key], value)  # type: ignore[arg-type]
        else:
            merged[key] = deepcopy(value)
    return merged


def build_topology(model_cfg: Mapping[str, object], num_features: int, num_classes: int) -> Topology:
    """Resolve the network shape and check it against the dataset."""

    if "topology" in model_cfg:
        raw = model_cfg["topology"]
        topology = Topology.parse(raw) if isinstance(raw, str) else Topology(raw)  # type: ignore[arg-type]
    else:
        hidden = [int(h) for h in model_cfg.get("hidden", [])]  # type: ignore[union-attr]
        topology = Topology([num_features, *hidden, num_classes])
    if topology.input_width != num_features:
        raise ShapeMismatchError(
            f"Topology {topology} expects {topology.input_width} inputs, dataset has {num_features}"
        )
    if topology.output_width != num_classes:
        raise ShapeMismatchError(
            f"Topology {topology} has {topology.output_width} outputs, dataset has {num_classes} classes"
        )
    return topology


def build_network(config: Mapping[str, object], dataset: registry.DatasetSpec) -> SigmoidNetwork:
    model_cfg = dict(config.get("model", {}))  # type: ignore[arg-type]
    topology = build_topology(model_cfg, dataset.num_features, dataset.num_classes)
    workers = model_cfg.get("workers")
    return SigmoidNetwork(
        topology,
        seed=int(model_cfg.get("seed", 0)),
        parallel=bool(model_cfg.get("parallel", False)),
        workers=int(workers) if workers is not None else None,
    )


def load_dataset(config: Mapping[str, object]) -> registry.DatasetSpec:
    data_cfg = dict(config["data"])  # type: ignore[arg-type]
    return registry.get_dataset(str(data_cfg["name"]), **dict(data_cfg.get("options", {})))


def run_pipeline(config: Mapping[str, object]) -> RunResult:
    missing = _REQUIRED_SECTIONS - set(config)
    if missing:
        raise KeyError(f"Config is missing required sections: {', '.join(sorted(missing))}")
    train_cfg = dict(config["train"])  # type: ignore[arg-type]

    seed = int(train_cfg.get("seed", 0))
    rng = seed_everything(seed)
    dataset = load_dataset(config)
    network = build_network(config, dataset)

    run_dir = _resolve_run_dir(train_cfg, dataset.name)
    run_dir.mkdir(parents=True, exist_ok=True)
    model_path = Path(train_cfg.get("model_path") or run_dir / "model.txt")  # type: ignore[arg-type]
    mode = str(train_cfg.get("mode", "dataset"))
    acceptable_error = float(train_cfg.get("acceptable_error", 0.01))
    epochs = int(train_cfg.get("epochs", 1))

    warm = bool(train_cfg.get("warm_start", False)) and warm_start(network, model_path)

    _print_startup_summary(
        dataset_name=dataset.name,
        topology=network.topology,
        splits=dataset.splits,
        mode=mode,
        parallel=network.parallel,
        warm=warm,
        param_count=network.topology.parameter_count,
    )

    train_jsonl = JsonlSink(run_dir / "metrics.jsonl", split="train", seed=seed)
    train_csv = CsvSink(run_dir / "metrics.csv", split="train")
    plots = PlotAdapter(run_dir, enable_plots=bool(train_cfg.get("enable_plots", False)))
    trainer = Trainer(network, callbacks=[train_jsonl, train_csv, plots], rng=rng)

    try:
        if mode == "dataset":
            eval_set = dataset.test if len(dataset.test) else None
            loss = trainer.train_on_dataset(
                dataset.train,
                epochs,
                acceptable_error,
                network.parallel,
                eval_samples=eval_set,
            )
        elif mode == "single":
            loss = _train_single_samples(trainer, dataset, acceptable_error, [train_jsonl, train_csv])
        else:
            raise ValueError(f"Unknown training mode: {mode!r} (expected 'dataset' or 'single')")

        report_set = dataset.test if len(dataset.test) else dataset.train
        accuracy = report_set.accuracy(network)
        save_model(network, model_path)
    finally:
        network.close()
    plots.close()

    outcome = trainer.last_outcome
    manifest = write_manifest(
        run_dir / "manifest.json",
        config=json.loads(json.dumps(config)),
        dataset_provenance=dataset.provenance,
        model={
            "topology": str(network.topology),
            "path": str(model_path),
            "warm_start": warm,
            "converged": bool(outcome.converged) if outcome else False,
        },
    )
    summary_path = write_summary(
        train_jsonl.path, run_dir / "summary.json", tail=int(train_cfg.get("summary_tail", 32))
    )
    logger.info("Run finished: loss=%.6g accuracy=%.3f model=%s", loss, accuracy, model_path)

    return RunResult(
        epochs=outcome.steps if outcome else 0,
        loss=float(loss),
        accuracy=float(accuracy),
        model_path=str(model_path),
        metrics_path=str(train_jsonl.path),
        manifest_path=manifest,
        summary_path=summary_path,
    )


def _train_single_samples(
    trainer: Trainer,
    dataset: registry.DatasetSpec,
    acceptable_error: float,
    sinks: Sequence[object],
) -> float:
    """Fit every training sample in turn with :meth:`Trainer.train_one`."""

    total = 0.0
    for idx, sample in enumerate(dataset.train):
        iterations = trainer.train_one(sample, acceptable_error, trainer.network.parallel)
        outcome = trainer.last_outcome
        if outcome is None:
            raise RuntimeError("train_one() did not record an outcome")
        total += outcome.loss
        metrics = {"iterations": float(iterations), "loss": outcome.loss}
        for sink in sinks:
            sink.on_epoch(idx, metrics)  # type: ignore[attr-defined]
    return total


def _resolve_run_dir(train_cfg: Mapping[str, object], dataset: str) -> Path:
    if "run_dir" in train_cfg:
        return Path(str(train_cfg["run_dir"]))
    timestamp = time.strftime("%Y%m%d-%H%M%S")
    return Path("runs") / timestamp / dataset


def _print_startup_summary(
    *,
    dataset_name: str,
    topology: Topology,
    splits: Mapping[str, int],
    mode: str,
    parallel: bool,
    warm: bool,
    param_count: int,
) -> None:
    print("=== glyphnet run ===")
    print(f"Dataset       : {dataset_name} {dict(splits)}")
    print(f"Topology      : {topology}")
    print(f"Mode          : {mode}")
    print(f"Parallel      : {parallel}")
    print(f"Warm start    : {warm}")
    print(f"Parameters    : {param_count}")
    print("====================")


__all__: List[str] = [
    "build_network",
    "build_topology",
    "load_dataset",
    "load_preset",
    "merge_config",
    "presets",
    "read_config_file",
    "run_pipeline",
]
