"""Writers for input data directories and model results."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import TYPE_CHECKING, Any

import msgpack

from ._loader import EXPECTED_VERSION, TOKENS_FILE, TOPONYMS_FILE, sha256

if TYPE_CHECKING:
    from ._config import SamplerConfig
    from ._types import ModelResult

ASSIGNMENTS_FILE = "assignments.bin"
AVERAGED_FILE = "averaged.bin"


def _dump_msgpack(path: Path, payload: Any) -> None:
    with open(path, "wb") as f:
        f.write(msgpack.packb(payload, use_bin_type=True))


def _write_manifest(out_dir: Path, filenames: Sequence[str]) -> None:
    manifest = {
        "version": EXPECTED_VERSION,
        "files": {name: sha256(out_dir / name) for name in filenames},
    }
    with open(out_dir / "manifest.json", "w") as f:
        json.dump(manifest, f, indent=2)
        f.write("\n")


def write_input(
    data_dir: Path | str,
    word: Sequence[int],
    document: Sequence[int],
    toponym: Sequence[int],
    stopword: Sequence[int],
    toponyms: Mapping[int, Sequence[float]],
) -> Path:
    """Write a loadable data directory.

    toponyms maps toponym id to flattened ``[lat0, lon0, lat1, lon1, ...]``
    degrees.
    """
    data_dir = Path(data_dir)
    data_dir.mkdir(parents=True, exist_ok=True)
    _dump_msgpack(data_dir / TOKENS_FILE, {
        "word": [int(x) for x in word],
        "document": [int(x) for x in document],
        "toponym": [int(x) for x in toponym],
        "stopword": [int(x) for x in stopword],
    })
    _dump_msgpack(data_dir / TOPONYMS_FILE, [
        [int(t), [float(v) for v in flat]] for t, flat in sorted(toponyms.items())
    ])
    _write_manifest(data_dir, (TOKENS_FILE, TOPONYMS_FILE))
    return data_dir


def write_result(
    out_dir: Path | str,
    result: ModelResult,
    config: SamplerConfig,
) -> Path:
    """Write final assignments and averaged statistics with a manifest."""
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    avg = result.averaged

    _dump_msgpack(out_dir / ASSIGNMENTS_FILE, {
        "region": result.regions.tolist(),
        "coordinate": result.coordinates.tolist(),
    })
    _dump_msgpack(out_dir / AVERAGED_FILE, {
        "in_use": result.in_use,
        "capacity": result.capacity,
        "samples": avg.samples,
        "word_region": avg.word_region.tolist(),
        "document_region": avg.document_region.tolist(),
        "region_counts": avg.region_counts.tolist(),
        "region_means": avg.means.tolist(),
        "coordinate_counts": avg.coordinate_counts.tolist(),
        "hyperparameters": config.to_dict(),
    })
    _write_manifest(out_dir, (ASSIGNMENTS_FILE, AVERAGED_FILE))
    return out_dir
