"""Input loading, manifest validation, and SHA-256 checksum verification."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import msgpack

from ._corpus import Corpus
from ._errors import ChecksumError, InputError, VersionError
from ._lexicon import CoordinateLexicon

EXPECTED_VERSION = "1.0"

TOKENS_FILE = "tokens.bin"
TOPONYMS_FILE = "toponyms.bin"
_DATA_FILES = (TOKENS_FILE, TOPONYMS_FILE)

_TOKEN_FIELDS = ("word", "document", "toponym", "stopword")


def sha256(path: Path) -> str:
    h = hashlib.sha256()
    with open(path, "rb") as f:
        for chunk in iter(lambda: f.read(65536), b""):
            h.update(chunk)
    return h.hexdigest()


def _read_manifest(data_dir: Path) -> dict[str, Any]:
    manifest_path = data_dir / "manifest.json"
    if not manifest_path.exists():
        raise InputError(f"manifest.json not found in {data_dir}")
    with open(manifest_path) as f:
        try:
            manifest = json.load(f)
        except json.JSONDecodeError as exc:
            raise InputError(f"manifest.json in {data_dir} is not valid JSON: {exc}") from exc
    if not isinstance(manifest, dict):
        raise InputError(f"manifest.json in {data_dir} must hold a JSON object")
    return manifest


def _validate_manifest(manifest: dict[str, Any], data_dir: Path) -> None:
    version = manifest.get("version")
    if version != EXPECTED_VERSION:
        raise VersionError(
            f"Expected data version {EXPECTED_VERSION!r}, got {version!r}"
        )
    checksums = manifest.get("files", {})
    if not isinstance(checksums, dict):
        raise InputError("manifest \"files\" must map file names to checksums")
    for filename in _DATA_FILES:
        filepath = data_dir / filename
        if not filepath.exists():
            raise InputError(f"Missing data file: {filepath}")
        expected = checksums.get(filename)
        if expected is None:
            raise InputError(f"No checksum in manifest for {filename}")
        actual = sha256(filepath)
        if actual != expected:
            raise ChecksumError(
                f"Checksum mismatch for {filename}: "
                f"expected {expected[:16]}..., got {actual[:16]}..."
            )


def _load_msgpack(path: Path, **kwargs: Any) -> Any:
    with open(path, "rb") as f:
        data = f.read()
    try:
        return msgpack.unpackb(data, raw=False, **kwargs)
    except ValueError as exc:
        raise InputError(f"{path.name} is not valid msgpack: {exc}") from exc


def load_data(data_dir: Path | str) -> tuple[Corpus, CoordinateLexicon]:
    """Load and validate a data directory, returning the corpus and lexicon."""
    data_dir = Path(data_dir)

    manifest = _read_manifest(data_dir)
    _validate_manifest(manifest, data_dir)

    # tokens: {"word": [...], "document": [...], "toponym": [...], "stopword": [...]}
    raw_tokens = _load_msgpack(data_dir / TOKENS_FILE)
    if not isinstance(raw_tokens, dict):
        raise InputError(f"{TOKENS_FILE} must hold a map of token arrays")
    missing = [name for name in _TOKEN_FIELDS if name not in raw_tokens]
    if missing:
        raise InputError(f"{TOKENS_FILE} lacks arrays: {', '.join(missing)}")
    for name in ("n_words", "n_documents"):
        value = raw_tokens.get(name)
        if value is not None and not isinstance(value, int):
            raise InputError(f"{TOKENS_FILE} {name} must be an integer, got {value!r}")

    # toponyms: [[toponym_id, [lat0, lon0, lat1, lon1, ...]], ...]
    raw_toponyms = _load_msgpack(data_dir / TOPONYMS_FILE)
    records: dict[int, list[float]] = {}
    if not isinstance(raw_toponyms, list):
        raise InputError(f"{TOPONYMS_FILE} must hold a list of toponym records")
    for entry in raw_toponyms:
        if not (
            isinstance(entry, list) and len(entry) == 2
            and isinstance(entry[0], int) and isinstance(entry[1], list)
        ):
            raise InputError(
                f"{TOPONYMS_FILE} records must be [toponym_id, [lat, lon, ...]], got {entry!r}"
            )
        toponym_id, flat = entry
        if toponym_id in records:
            raise InputError(f"toponym {toponym_id} listed twice in {TOPONYMS_FILE}")
        records[int(toponym_id)] = list(flat)
    lexicon = CoordinateLexicon.from_degrees(records)

    corpus = Corpus(
        raw_tokens["word"],
        raw_tokens["document"],
        raw_tokens["toponym"],
        raw_tokens["stopword"],
        n_words=raw_tokens.get("n_words"),
        n_documents=raw_tokens.get("n_documents"),
    )
    corpus.check_lexicon(lexicon)
    return corpus, lexicon
