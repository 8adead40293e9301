"""Configuration and miscellaneous helpers."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass, fields

import numpy as np
import yaml

from .projection import UNKNOWN_POLICIES

logger = logging.getLogger(__name__)


@dataclass
class LSIConfig:
    """Settings of a :class:`~lsi.index.LatentSemanticIndex`.

    Attributes
    ----------
    rank : int
        Truncation rank ``k`` of the concept space.
    threshold : float
        Default similarity threshold for queries; hits must score above it.
    weighted : bool
        Score positions scaled by the singular values instead of raw rows.
    on_unknown : str
        Policy for identifiers outside the vocabulary: ``'ignore'``,
        ``'warn'`` or ``'raise'``.
    rank_tol : float, optional
        Singular values at or below this are treated as zero when the matrix
        is decomposed.  ``None`` uses the numpy default.
    """
    rank: int = 2
    threshold: float = 0.0
    weighted: bool = False
    on_unknown: str = "ignore"
    rank_tol: float | None = None

    def __post_init__(self) -> None:
        if self.on_unknown not in UNKNOWN_POLICIES:
            raise ValueError("on_unknown must be one of %s, got %r"
                             % (UNKNOWN_POLICIES, self.on_unknown))
        if isinstance(self.rank, bool) or int(self.rank) != self.rank or self.rank < 1:
            raise ValueError("rank must be a positive integer, got %r" % (self.rank,))
        if not isinstance(self.weighted, bool):
            raise ValueError("weighted must be true or false, got %r" % (self.weighted,))
        self.rank = int(self.rank)
        self.threshold = float(self.threshold)

    @classmethod
    def from_dict(cls, cfg: dict) -> "LSIConfig":
        """Build a config from a plain dictionary, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(cfg) - known
        if unknown:
            raise ValueError("unknown configuration keys: %s" % ", ".join(sorted(unknown)))
        return cls(**cfg)


def load_config(config_path: str) -> LSIConfig:
    """Load an :class:`LSIConfig` from a YAML file.

    The settings may sit at the top level or under an ``lsi:`` key, in which
    case that key must be the only one in the file::

        lsi:
          rank: 2
          threshold: 0.9
          on_unknown: warn

    Parameters
    ----------
    config_path : str
        Path to a YAML file.

    Returns
    -------
    cfg : LSIConfig
        Parsed configuration; missing keys keep their defaults.
    """
    with open(config_path, 'r', encoding='utf-8') as f:
        cfg = yaml.safe_load(f) or {}
    if not isinstance(cfg, dict):
        raise ValueError("configuration file %s must contain a mapping" % config_path)
    if 'lsi' in cfg:
        others = set(cfg) - {'lsi'}
        if others:
            raise ValueError("keys outside the lsi section of %s: %s"
                             % (config_path, ", ".join(sorted(map(str, others)))))
        cfg = cfg['lsi'] or {}
        if not isinstance(cfg, dict):
            raise ValueError("the lsi section of %s must be a mapping" % config_path)
    logger.debug("loaded configuration from %s: %s", config_path, cfg)
    return LSIConfig.from_dict(cfg)


def set_seed(seed: int | None) -> np.random.Generator:
    """Return a NumPy random generator for the given seed.

    Parameters
    ----------
    seed : int or None
        Seed for the random number generator.  If ``None``, a random seed is
        drawn from the operating system.
    """
    if seed is None:
        seed = np.random.SeedSequence().entropy
    return np.random.default_rng(seed)


@contextmanager
def timer(message: str | None = None):
    """A context manager logging the elapsed time of a block at INFO level."""
    start = time.perf_counter()
    try:
        yield
    finally:
        elapsed = time.perf_counter() - start
        if message:
            logger.info("%s: %.3f s", message, elapsed)
