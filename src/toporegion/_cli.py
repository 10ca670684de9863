"""Command line entry point: load a data directory, run the model, write results."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from ._config import SamplerConfig, load_config
from ._errors import ToporegionError
from ._loader import load_data
from ._sampler import SphericalRegionModel
from ._writer import write_result

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
logger = logging.getLogger(__name__)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format=LOG_FORMAT)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="toporegion",
        description="Fit the spherical region model and resolve toponyms.",
    )
    parser.add_argument("data_dir", type=Path, help="input data directory")
    parser.add_argument("output_dir", type=Path, help="where results are written")
    parser.add_argument("--config", type=Path, help="JSON file of sampler settings")
    parser.add_argument("--iterations", type=int, help="sweeps per temperature level")
    parser.add_argument("--crp-alpha", type=float, dest="crp_alpha")
    parser.add_argument("--kappa", type=float)
    parser.add_argument("--seed", type=int, dest="random_seed")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser


def _resolve_config(args: argparse.Namespace) -> SamplerConfig:
    config = load_config(args.config) if args.config else SamplerConfig()
    overrides = {
        name: getattr(args, name)
        for name in ("iterations", "crp_alpha", "kappa", "random_seed")
        if getattr(args, name) is not None
    }
    return config.replace(**overrides) if overrides else config


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    _configure_logging(args.verbose)
    try:
        config = _resolve_config(args)
        corpus, lexicon = load_data(args.data_dir)
        model = SphericalRegionModel(corpus, lexicon, config)
        result = model.run()
        write_result(args.output_dir, result, config)
    except ToporegionError as exc:
        logger.error("%s: %s", type(exc).__name__, exc)
        return 1
    logger.info("Wrote results to %s", args.output_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
