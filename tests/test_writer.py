"""Tests for result and input writers."""

import json

import msgpack
import pytest

from toporegion import SphericalRegionModel
from toporegion._loader import sha256
from toporegion._writer import ASSIGNMENTS_FILE, AVERAGED_FILE, write_result


@pytest.fixture
def result(corpus, lexicon, config):
    return SphericalRegionModel(corpus, lexicon, config).run()


def _unpack(path):
    with open(path, "rb") as f:
        return msgpack.unpackb(f.read(), raw=False)


def test_write_result_manifest(tmp_path, result, config):
    out = write_result(tmp_path / "out", result, config)
    with open(out / "manifest.json") as f:
        manifest = json.load(f)
    assert manifest["version"] == "1.0"
    assert set(manifest["files"]) == {ASSIGNMENTS_FILE, AVERAGED_FILE}
    for name, digest in manifest["files"].items():
        assert sha256(out / name) == digest


def test_write_result_contents(tmp_path, result, config):
    out = write_result(tmp_path / "out", result, config)

    assignments = _unpack(out / ASSIGNMENTS_FILE)
    assert assignments["region"] == result.regions.tolist()
    assert assignments["coordinate"] == result.coordinates.tolist()

    averaged = _unpack(out / AVERAGED_FILE)
    assert averaged["in_use"] == result.in_use
    assert averaged["capacity"] == result.capacity
    assert averaged["samples"] == config.iterations - config.burn_in
    assert len(averaged["region_counts"]) == result.capacity
    assert len(averaged["region_means"][0]) == 3
    assert averaged["hyperparameters"]["kappa"] == config.kappa
    assert averaged["hyperparameters"]["random_seed"] == 7
