"""CLI tests for describe, decode and check."""

import json
from pathlib import Path
import sys

import pytest

from schemaunion import cli

FIXTURES = Path(__file__).resolve().parent.parent / "fixtures"
ANIMAL = FIXTURES / "animal" / "oneOfAsRoot.json"


def _run_cli(args, monkeypatch):
    monkeypatch.setattr(sys, "argv", ["schemaunion"] + args)
    return cli.main()


def _write_json(path: Path, data) -> None:
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def test_no_command_prints_help(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli([], monkeypatch)
    assert excinfo.value.code == 1
    assert "usage" in capsys.readouterr().out


def test_describe_table(monkeypatch, capsys):
    _run_cli(["describe", str(ANIMAL)], monkeypatch)
    out = capsys.readouterr().out
    assert "Animal  (2 variants, first match wins)" in out
    assert "1. DOG -> Dog" in out
    assert "2. CAT -> Cat" in out
    assert "required: gender, name" in out
    assert "[WARN] DOG shadows CAT" in out


def test_describe_output_dir(monkeypatch, capsys, tmp_path):
    _run_cli(["describe", str(ANIMAL), "--output-dir", str(tmp_path)], monkeypatch)
    out = capsys.readouterr().out
    assert "[OK] Union described" in out
    report = json.loads((tmp_path / "union.json").read_text(encoding="utf-8"))
    assert report["name"] == "Animal"
    assert [v["tag"] for v in report["variants"]] == ["DOG", "CAT"]


def test_describe_quiet(monkeypatch, capsys):
    _run_cli(["describe", str(ANIMAL), "--quiet"], monkeypatch)
    assert capsys.readouterr().out == ""


def test_describe_with_pointer_and_config(monkeypatch, capsys, tmp_path):
    config_path = tmp_path / "config.json"
    _write_json(config_path, {"class_name_prefix": "Gen"})
    _run_cli(
        [
            "describe", str(FIXTURES / "refs" / "owner.json"),
            "--pointer", "/properties/pet",
            "--config", str(config_path),
        ],
        monkeypatch,
    )
    out = capsys.readouterr().out
    assert "GenPet  (3 variants" in out
    assert "3. PET_1 -> Pet1" in out


def test_decode_match(monkeypatch, capsys):
    _run_cli(["decode", str(ANIMAL), "--input", str(FIXTURES / "animal" / "dog.json")], monkeypatch)
    report = json.loads(capsys.readouterr().out)
    assert report["ok"] is True
    assert report["tag"] == "DOG"
    assert report["value"] == {"name": "Rex", "gender": "M", "bark": True}


def test_decode_no_match_exits_1(monkeypatch, capsys, tmp_path):
    input_path = tmp_path / "bird.json"
    _write_json(input_path, {"wings": 2})
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["decode", str(ANIMAL), "--input", str(input_path)], monkeypatch)
    assert excinfo.value.code == 1
    report = json.loads(capsys.readouterr().out)
    assert report["code"] == "NO_MATCH"


def test_decode_non_object_exits_2(monkeypatch, capsys, tmp_path):
    input_path = tmp_path / "list.json"
    _write_json(input_path, [1, 2])
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["decode", str(ANIMAL), "--input", str(input_path)], monkeypatch)
    assert excinfo.value.code == 2
    assert "must be a JSON object" in capsys.readouterr().err


def test_check_reports_failures(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["check", str(ANIMAL), "--input", str(FIXTURES / "animal" / "inputs.json")], monkeypatch)
    assert excinfo.value.code == 1
    out = capsys.readouterr().out
    assert "[FAILED] Checked 4 items against Animal" in out
    assert "Matched: 3" in out
    assert "No match: 1" in out
    assert "DOG: 2" in out
    assert "[3] NO_MATCH" in out


def test_check_ok(monkeypatch, capsys, tmp_path):
    input_path = tmp_path / "inputs.json"
    _write_json(input_path, [{"name": "Tom", "gender": "F", "meow": True}])
    _run_cli(["check", str(ANIMAL), "--input", str(input_path)], monkeypatch)
    out = capsys.readouterr().out
    assert "[OK] Checked 1 items against Animal" in out
    assert "CAT: 1" in out


def test_generation_error_exits_2(monkeypatch, capsys):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["describe", str(FIXTURES / "refs" / "cyclic.json")], monkeypatch)
    assert excinfo.value.code == 2
    assert "Error: Circular $ref chain" in capsys.readouterr().err


def test_missing_schema_exits_2(monkeypatch, capsys, tmp_path):
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["describe", str(tmp_path / "nope.json")], monkeypatch)
    assert excinfo.value.code == 2
    assert "Error:" in capsys.readouterr().err


def test_invalid_config_exits_2(monkeypatch, capsys, tmp_path):
    config_path = tmp_path / "config.json"
    _write_json(config_path, {"hash_strategy": "md5"})
    with pytest.raises(SystemExit) as excinfo:
        _run_cli(["describe", str(ANIMAL), "--config", str(config_path)], monkeypatch)
    assert excinfo.value.code == 2
