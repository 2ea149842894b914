"""
algorithms.stats
================

Turn per-destination Monte-Carlo vectors into result tables:

1. **Summary** – one row per destination with the mean and an empirical 95 %
   interval.
2. **Raw** – one column per destination, one row per simulation.

Quantiles use NumPy's ``method="linear"`` (linear interpolation between
order statistics, i.e. R's default *type 7*); this is fixed so results are
comparable across runs and versions.

Both helpers are pure functions (no I/O, no global state).
"""

from __future__ import annotations

from typing import Final, Mapping

import numpy as np
import pandas as pd

from ..datamodel import Array
from ..errors import InputError

__all__ = [
    "summarise",
    "raw_table",
    "MEAN_COL",
    "LOWER_COL",
    "UPPER_COL",
    "QUANTILES",
    "QUANTILE_METHOD",
]

MEAN_COL: Final[str] = "mean_cases"
LOWER_COL: Final[str] = "lower_limit_95CI"
UPPER_COL: Final[str] = "upper_limit_95CI"
LOCATION_INDEX: Final[str] = "location"
SIMULATION_INDEX: Final[str] = "simulation"

QUANTILES: Final[tuple[float, float]] = (0.025, 0.975)
QUANTILE_METHOD: Final[str] = "linear"


def _as_vector(dest: str, values: Array) -> Array:
    arr = np.asarray(values, dtype=float)
    if arr.ndim != 1 or arr.size == 0:
        raise InputError(f"Simulations for '{dest}' must be a non-empty 1-D vector")
    return arr


def summarise(draws: Mapping[str, Array]) -> pd.DataFrame:
    """
    Mean and 95 % interval of each destination's simulations.

    Parameters
    ----------
    draws
        Destination id → vector of simulated case counts.  Iteration order
        of the mapping becomes row order.

    Returns
    -------
    pandas.DataFrame
        Indexed by ``location`` with columns ``mean_cases``,
        ``lower_limit_95CI`` and ``upper_limit_95CI``.  An all-zero vector
        yields an all-zero row.
    """
    rows = []
    for dest, values in draws.items():
        arr = _as_vector(dest, values)
        lower, upper = np.quantile(arr, QUANTILES, method=QUANTILE_METHOD)
        rows.append((float(arr.mean()), float(lower), float(upper)))

    return pd.DataFrame(
        rows,
        index=pd.Index(list(draws), name=LOCATION_INDEX),
        columns=[MEAN_COL, LOWER_COL, UPPER_COL],
    )


def raw_table(draws: Mapping[str, Array]) -> pd.DataFrame:
    """All simulations: columns are destinations, rows keep trial order."""
    columns = {dest: _as_vector(dest, values) for dest, values in draws.items()}
    lengths = {arr.size for arr in columns.values()}
    if len(lengths) > 1:
        raise InputError("All destinations must have the same number of simulations")
    df = pd.DataFrame(columns)
    df.index.name = SIMULATION_INDEX
    return df
