"""
simulate.py
===========

Single public entry-point for running one risk-of-spread estimation from a
YAML file.  Designed for both programmatic use

    >>> import epiflows.simulate
    >>> table = epiflows.simulate.run("config.yaml")

and CLI use

    $ python -m epiflows.simulate config.yaml

A minimal config::

    flows: flows.csv
    locations: locations.csv
    vars:
      pop_size: population
      duration_stay: length_of_stay
      num_cases: cases
      first_date: first_case
      last_date: last_case
    source: MEX
    n_sim: 10000
    seed: 42
    incubation: {distribution: lognormal, meanlog: 1.46, sdlog: 0.35}
    infectious: {distribution: normal, mean: 4.5, sd: 1.5}

Relative table paths are resolved against the config file's directory.  If
``output`` is set, the result table is also written there as CSV.
"""
from __future__ import annotations

import argparse
import logging
from pathlib import Path

import pandas as pd

from . import io_utils
from .simulator import simulate_engine

_LOGGER = logging.getLogger(__name__)


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #
def run(config_path: str | Path) -> pd.DataFrame:
    """
    Execute **one** estimation described by a YAML file.

    Parameters
    ----------
    config_path
        Path to a YAML file; see the module docstring and
        :func:`epiflows.simulator.engine.run` for the keys.

    Returns
    -------
    pandas.DataFrame
        Summary (or raw simulations) per destination.
    """
    config_path = Path(config_path)
    cfg = io_utils.read_config(config_path)

    container = io_utils.load_container(cfg, base_dir=config_path.parent)
    table = simulate_engine(cfg, container)

    if (output := cfg.get("output")):
        output = config_path.parent / output
        output.parent.mkdir(parents=True, exist_ok=True)
        table.to_csv(output)
        _LOGGER.info("Wrote %d rows → %s", len(table), output)

    return table


# --------------------------------------------------------------------------- #
# Command-line hook
# --------------------------------------------------------------------------- #
def _cli() -> None:  # pragma: no cover
    parser = argparse.ArgumentParser(
        description="Estimate the risk of spread from one source location."
    )
    parser.add_argument(
        "config_path", help="Path to YAML configuration file describing the run."
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Log progress to stderr."
    )
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO if args.verbose else logging.WARNING)
    output = run(args.config_path)
    print(output.to_csv(sep="\t"))


if __name__ == "__main__":  # pragma: no cover
    _cli()
