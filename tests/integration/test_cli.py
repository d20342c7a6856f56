import json
from pathlib import Path

import pytest

from cli.main import main


def _last_json(capsys) -> dict:
    lines = [line for line in capsys.readouterr().out.splitlines() if line.strip()]
    return json.loads(lines[-1])


def test_cli_basic_preset(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "blobs-2class", "--epochs", "5"])
    run_dir = Path("runs/blobs-2class")
    assert (run_dir / "metrics.jsonl").exists()
    assert (run_dir / "manifest.json").exists()
    assert (run_dir / "model.txt").read_text().startswith("2;4;2\n")

    result = _last_json(capsys)
    assert result["epochs"] <= 5
    assert Path(result["model"]) == run_dir / "model.txt"


def test_cli_predict_and_evaluate(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    main(["--preset", "blobs-2class", "--epochs", "20", "--model-path", "model.txt"])
    capsys.readouterr()

    rows = tmp_path / "rows.csv"
    rows.write_text("x,y,label\n0.2,0.3,A\n0.7,0.6,B\n")
    main(["--preset", "blobs-2class", "--model-path", "model.txt", "--predict", str(rows)])
    records = [json.loads(line) for line in capsys.readouterr().out.splitlines() if line.strip()]
    assert [record["row"] for record in records] == [0, 1]
    assert all(record["predicted"] in {"A", "B"} for record in records)
    assert all(len(record["output"]) == 2 for record in records)

    main(["--preset", "blobs-2class", "--model-path", "model.txt", "--evaluate"])
    report = _last_json(capsys)
    assert report["split"] == "train"
    assert report["samples"] == 32
    assert 0.0 <= report["accuracy"] <= 1.0


def test_cli_config_override_and_dump(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    override = tmp_path / "override.json"
    override.write_text(json.dumps({"train": {"epochs": 2, "run_dir": "runs/override"}}))
    main(["--config", str(override), "--dump-config", "resolved.json", "--seed", "3"])

    resolved = json.loads(Path("resolved.json").read_text())
    assert resolved["train"]["epochs"] == 2
    assert resolved["train"]["seed"] == 3
    assert resolved["model"]["seed"] == 3
    assert Path("runs/override/summary.json").exists()


def test_cli_predict_without_model_fails(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    rows = tmp_path / "rows.csv"
    rows.write_text("x,y\n0.1,0.2\n")
    with pytest.raises(FileNotFoundError):
        main(["--model-path", "absent.txt", "--predict", str(rows)])


def test_cli_lists_presets(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--list-presets"])
    assert info.value.code == 0
    names = capsys.readouterr().out.split()
    assert {"blobs-2class", "glyph-grid", "single-sample"} <= set(names)
