"""
simulator.engine
================

Single-run driver for the risk-of-spread estimator.

The public API is the :func:`run` function, which orchestrates:

1. Seeding of a dedicated :class:`numpy.random.Generator` from ``seed``.
2. Construction of the incubation / infectious samplers from their config
   mappings (:func:`simulator.samplers.from_config`).
3. The Monte-Carlo estimate itself
   (:func:`epiflows.algorithms.risk_spread.estimate`).

The function performs *no* I/O and is deterministic given identical inputs
and seed.
"""
from __future__ import annotations

import logging
from typing import Any, Dict

import numpy as np
import pandas as pd

from ..algorithms import risk_spread
from ..container import EpiflowsContainer
from . import samplers

__all__ = ["run"]

_LOGGER = logging.getLogger(__name__)


def run(cfg: Dict[str, Any], container: EpiflowsContainer) -> pd.DataFrame:
    """
    Execute **one** estimation.

    Parameters
    ----------
    cfg
        Parsed YAML config as a plain dict.  Expected keys (with defaults):

        * ``source`` : *str*, source location id (required)
        * ``incubation`` / ``infectious`` : sampler mappings (required), e.g.
          ``{"distribution": "lognormal", "meanlog": 1.46, "sdlog": 0.35}``
        * ``n_sim`` : *int* (default 1000)
        * ``seed`` : *int* or *None* (default None, i.e. unseeded)
        * ``stay_model`` : ``fixed`` | ``exponential`` | ``empirical``
          (default ``fixed``)
        * ``overrides`` : mapping forwarded to the estimator (default none)
        * ``return_all_simulations`` : *bool* (default False)

    container
        Validated :class:`~epiflows.container.EpiflowsContainer`.

    Returns
    -------
    pandas.DataFrame
        Summary or raw simulations, see
        :func:`~epiflows.algorithms.risk_spread.estimate`.
    """
    try:
        source = cfg["source"]
        incubation_cfg = cfg["incubation"]
        infectious_cfg = cfg["infectious"]
    except KeyError as e:
        raise KeyError(f"Missing required key in YAML config: {e.args[0]}") from None

    seed = cfg.get("seed")
    rng = np.random.default_rng(seed)
    _LOGGER.info("Running estimate for source %s (seed=%s)", source, seed)

    return risk_spread.estimate(
        container,
        source,
        r_incubation=samplers.from_config(incubation_cfg, rng=rng),
        r_infectious=samplers.from_config(infectious_cfg, rng=rng),
        n_sim=cfg.get("n_sim", 1000),
        overrides=cfg.get("overrides"),
        return_all_simulations=bool(cfg.get("return_all_simulations", False)),
        stay_model=cfg.get("stay_model", "fixed"),
        rng=rng,
    )
