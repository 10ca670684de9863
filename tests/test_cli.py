"""Tests for the command line entry point."""

import json
import logging

from toporegion._cli import build_parser, main
from toporegion._writer import ASSIGNMENTS_FILE, AVERAGED_FILE


def test_parser_overrides():
    args = build_parser().parse_args(["in", "out", "--seed", "3", "--crp-alpha", "0.5"])
    assert args.random_seed == 3
    assert args.crp_alpha == 0.5
    assert args.kappa is None


def test_main_writes_results(tmp_path, data_dir):
    out = tmp_path / "out"
    code = main([str(data_dir), str(out), "--iterations", "3", "--seed", "2"])
    assert code == 0
    assert (out / ASSIGNMENTS_FILE).exists()
    assert (out / AVERAGED_FILE).exists()
    assert (out / "manifest.json").exists()


def test_main_reads_config_file(tmp_path, data_dir):
    cfg = tmp_path / "sampler.json"
    cfg.write_text(json.dumps({"iterations": 2, "burn_in": 0, "kappa": 4.0}))
    assert main([str(data_dir), str(tmp_path / "out"), "--config", str(cfg)]) == 0


def test_main_missing_data_dir(tmp_path, caplog):
    with caplog.at_level(logging.ERROR):
        code = main([str(tmp_path / "absent"), str(tmp_path / "out")])
    assert code == 1
    assert "manifest.json not found" in caplog.text
    assert not (tmp_path / "out").exists()


def test_main_bad_config(tmp_path, data_dir):
    cfg = tmp_path / "sampler.json"
    cfg.write_text(json.dumps({"temperature": 2.0}))
    assert main([str(data_dir), str(tmp_path / "out"), "--config", str(cfg)]) == 1


def test_main_corrupt_manifest(tmp_path, data_dir):
    (data_dir / "manifest.json").write_text("{not json")
    assert main([str(data_dir), str(tmp_path / "out")]) == 1
