"""
simulator package
=================

Public interface
----------------
`simulate_engine`
    Alias to :func:`simulator.engine.run`.  Runs a *single* config-driven
    estimation and returns its result table.
`Sampler`
    Protocol every incubation / infectious sampler conforms to.
`samplers`
    NumPy-backed sampler factories.

Example
-------
>>> from epiflows.simulator import simulate_engine
>>> table = simulate_engine(cfg, container)
"""

from __future__ import annotations

from . import samplers  # noqa: F401
from .engine import run as simulate_engine  # noqa: F401
from .protocols import Sampler  # noqa: F401

__all__: list[str] = ["simulate_engine", "Sampler", "samplers"]
