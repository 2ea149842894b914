"""
simulator.samplers
~~~~~~~~~~~~~~~~~~
Ready-made :class:`~epiflows.simulator.protocols.Sampler` factories backed by
NumPy.

    >>> from epiflows.simulator import samplers
    >>> r_incubation = samplers.lognormal(meanlog=1.46, sdlog=0.35)
    >>> r_infectious = samplers.normal(mean=4.5, sd=1.5)
    >>> r_incubation(3).shape
    (3,)

Every factory takes an optional :class:`numpy.random.Generator`.  Without
one, draws come from the global ``numpy.random`` state, so
``np.random.seed(...)`` before a run makes it reproducible.

:func:`from_config` builds a sampler from a plain mapping, which is how the
YAML-driven entry points (and worker processes) obtain theirs.
"""
from __future__ import annotations

from typing import Any, Callable, Dict, Final, Mapping

import numpy as np

from ..datamodel import Array

__all__ = ["lognormal", "normal", "gamma", "fixed", "from_config", "DISTRIBUTIONS"]


def _source(rng: np.random.Generator | None) -> Any:
    return np.random if rng is None else rng


def lognormal(meanlog: float, sdlog: float, rng: np.random.Generator | None = None):
    """Log-normal draws; *meanlog* / *sdlog* are on the log scale."""
    if sdlog < 0:
        raise ValueError("`sdlog` must be non-negative.")

    def draw(n: int) -> Array:
        return _source(rng).lognormal(mean=meanlog, sigma=sdlog, size=n)

    return draw


def normal(mean: float, sd: float, rng: np.random.Generator | None = None):
    """Normal draws clipped at zero (periods cannot be negative)."""
    if sd < 0:
        raise ValueError("`sd` must be non-negative.")

    def draw(n: int) -> Array:
        return np.maximum(_source(rng).normal(loc=mean, scale=sd, size=n), 0.0)

    return draw


def gamma(shape: float, scale: float, rng: np.random.Generator | None = None):
    """Gamma draws."""
    if shape <= 0 or scale <= 0:
        raise ValueError("`shape` and `scale` must be positive.")

    def draw(n: int) -> Array:
        return _source(rng).gamma(shape=shape, scale=scale, size=n)

    return draw


def fixed(value: float, rng: np.random.Generator | None = None):
    """Constant draws; *rng* is accepted for a uniform signature and ignored."""
    if value < 0:
        raise ValueError("`value` must be non-negative.")

    def draw(n: int) -> Array:
        return np.full(n, float(value))

    return draw


DISTRIBUTIONS: Final[Dict[str, Callable[..., Callable[[int], Array]]]] = {
    "lognormal": lognormal,
    "normal": normal,
    "gamma": gamma,
    "fixed": fixed,
}


def from_config(cfg: Mapping[str, Any], rng: np.random.Generator | None = None):
    """
    Build a sampler from ``{"distribution": <name>, **parameters}``.

    Raises
    ------
    KeyError
        If ``distribution`` is missing or unknown.
    TypeError
        If the parameters do not match the factory's signature.
    """
    params = dict(cfg)
    try:
        name = params.pop("distribution")
    except KeyError:
        raise KeyError("Sampler config needs a 'distribution' key") from None
    try:
        factory = DISTRIBUTIONS[name]
    except KeyError:
        raise KeyError(
            f"Unknown distribution '{name}'. Allowed values are {sorted(DISTRIBUTIONS)}."
        ) from None
    return factory(rng=rng, **params)
