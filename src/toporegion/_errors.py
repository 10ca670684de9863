"""Toporegion error types."""


class ToporegionError(Exception):
    """Base error for all toporegion failures."""


class ConfigError(ToporegionError):
    """Sampler configuration out of range."""


class InputError(ToporegionError):
    """Malformed input detected before sampling."""


class CorpusError(InputError):
    """Token arrays are inconsistent."""


class LexiconError(InputError):
    """Candidate coordinate table is malformed."""


class VersionError(InputError):
    """Manifest version mismatch."""


class ChecksumError(InputError):
    """File checksum verification failed."""


class InvariantError(ToporegionError):
    """Sampler bookkeeping violated one of its invariants."""


class DegenerateScoresError(ToporegionError):
    """Sampling distribution has zero or non-finite mass."""
