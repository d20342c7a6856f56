"""Command line entry point for glyphnet training and inference."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable

from glyphnet.core.network import SigmoidNetwork
from glyphnet.data.csv_features import read_feature_rows
from glyphnet.data.samples import Sample
from glyphnet.training import pipelines


def _format_result(result) -> str:
    payload = {
        "epochs": result.epochs,
        "loss": result.loss,
        "accuracy": result.accuracy,
        "model": result.model_path,
        "metrics": result.metrics_path,
        "manifest": result.manifest_path,
    }
    if getattr(result, "summary_path", ""):
        payload["summary"] = result.summary_path
    return json.dumps(payload, sort_keys=True)


def parse_args(argv: Iterable[str] | None = None) -> argparse.Namespace:
    preset_names = sorted(pipelines.presets().keys())
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument(
        "--preset",
        choices=preset_names,
        default="blobs-2class",
        help="Preset configuration to execute",
    )
    parser.add_argument("--config", type=Path, help="Optional JSON/YAML config override")
    parser.add_argument("--seed", type=int, help="Seed used for initialisation and shuffling")
    parser.add_argument("--epochs", type=int, help="Override the number of training epochs")
    parser.add_argument(
        "--acceptable-error", type=float, help="Override the early-stop loss threshold"
    )
    parser.add_argument(
        "--parallel",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Fan out per-neuron loops over a thread pool",
    )
    parser.add_argument("--workers", type=int, help="Thread pool size for --parallel")
    parser.add_argument("--model-path", type=Path, help="Where the model file is read/written")
    parser.add_argument(
        "--warm-start",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Continue from --model-path when it exists",
    )
    parser.add_argument(
        "--predict",
        type=Path,
        metavar="FEATURES_CSV",
        help="Classify every row of a CSV file with the saved model and exit",
    )
    parser.add_argument(
        "--label-col", default="label", help="Label column to ignore in --predict input"
    )
    parser.add_argument(
        "--evaluate",
        action="store_true",
        help="Report the saved model's accuracy on the configured dataset and exit",
    )
    parser.add_argument("--enable-plots", action="store_true", help="Write loss.png")
    parser.add_argument(
        "--list-presets", action="store_true", help="List available presets and exit"
    )
    parser.add_argument("--dump-config", type=Path, help="Dump the resolved config to a JSON file")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity",
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> dict:
    config = pipelines.load_preset(args.preset)

    if args.config:
        override = dict(pipelines.read_config_file(args.config))
        if {"data", "model", "train"} <= set(override.keys()):
            config = json.loads(json.dumps(override))
        else:
            config = pipelines.merge_config(config, override)

    train = config.setdefault("train", {})
    model = config.setdefault("model", {})
    if args.seed is not None:
        train["seed"] = int(args.seed)
        model["seed"] = int(args.seed)
    if args.epochs is not None:
        train["epochs"] = int(args.epochs)
    if args.acceptable_error is not None:
        train["acceptable_error"] = float(args.acceptable_error)
    if args.parallel is not None:
        model["parallel"] = bool(args.parallel)
    if args.workers is not None:
        model["workers"] = int(args.workers)
    if args.model_path is not None:
        train["model_path"] = str(args.model_path)
    if args.warm_start is not None:
        train["warm_start"] = bool(args.warm_start)
    if args.enable_plots:
        train["enable_plots"] = True
    return config


def _model_path(config: dict) -> Path:
    train = config.get("train", {})
    if train.get("model_path"):
        return Path(train["model_path"])
    return Path(train.get("run_dir", ".")) / "model.txt"


def predict_rows(model_path: Path, features_csv: Path, label_col: str | None) -> list[dict]:
    rows = read_feature_rows(features_csv, label_col)
    results = []
    with SigmoidNetwork.from_file(model_path) as network:
        for idx, row in enumerate(rows):
            sample = Sample(row, network.topology.output_width)
            predicted = network.predict(sample)
            results.append(
                {
                    "row": idx,
                    "predicted": predicted.name,
                    "output": [round(float(v), 6) for v in sample.output],
                }
            )
    return results


def evaluate(config: dict) -> dict:
    dataset = pipelines.load_dataset(config)
    model_path = _model_path(config)
    with SigmoidNetwork.from_file(model_path) as network:
        split = "test" if len(dataset.test) else "train"
        samples = dataset.test if split == "test" else dataset.train
        accuracy = samples.accuracy(network)
    return {"model": str(model_path), "split": split, "samples": len(samples), "accuracy": accuracy}


def main(argv: Iterable[str] | None = None) -> None:
    args = parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.list_presets:
        for name in sorted(pipelines.presets().keys()):
            print(name)
        raise SystemExit(0)

    config = resolve_config(args)

    if args.dump_config:
        args.dump_config.parent.mkdir(parents=True, exist_ok=True)
        args.dump_config.write_text(json.dumps(config, indent=2))

    if args.predict:
        for record in predict_rows(_model_path(config), args.predict, args.label_col):
            print(json.dumps(record, sort_keys=True))
        return

    if args.evaluate:
        print(json.dumps(evaluate(config), sort_keys=True))
        return

    result = pipelines.run_pipeline(config)
    print(_format_result(result))


if __name__ == "__main__":
    main()
