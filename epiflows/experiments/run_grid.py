"""
experiments.run_grid
====================

Command-line utility to sweep source locations × replicate seeds, run the
risk-of-spread estimator in parallel, and append the summaries to a CSV.

Example
-------
epiflows-grid MEX,USA --replicates 5 --seed 2024 \
    --config-path config.yaml --procs 4 --output runs.csv

Seeds are spawned *up front* from one :class:`numpy.random.SeedSequence`
and bound to grid points before any work starts, so output does not depend
on how the pool schedules workers.  Rows come back in grid order.
"""
from __future__ import annotations

import itertools
import logging
import multiprocessing as mp
from pathlib import Path
from typing import Iterable, List, Tuple

import numpy as np
import pandas as pd
import typer
import yaml

from .. import io_utils
from ..simulator import simulate_engine

# --------------------------------------------------------------------------- #
# CLI set-up
# --------------------------------------------------------------------------- #
app = typer.Typer(
    add_completion=False, help="Sweep source locations × seeds and estimate risk of spread."
)

DEFAULT_OUTPUT = Path("risk_spread_runs.csv")

_LOGGER = logging.getLogger(__name__)

Job = Tuple[str, int, int, str, str]


# --------------------------------------------------------------------------- #
# Helpers
# --------------------------------------------------------------------------- #
def _parse_sources(arg: str) -> List[str]:
    """Parse a comma-separated list of location ids from the command-line."""
    vals = [x.strip() for x in arg.split(",") if x.strip()]
    if not vals:
        raise typer.BadParameter(f"'{arg}' must be a comma-separated list of location ids.")
    return vals


def build_jobs(
    sources: List[str], replicates: int, seed: int, base_yaml: str, config_dir: str
) -> List[Job]:
    """
    Grid points with their seeds.

    Each point gets its own child of ``SeedSequence(seed)``, assigned in grid
    order, so a given (source, replicate) always receives the same seed.
    """
    combos = list(itertools.product(sources, range(replicates)))
    children = np.random.SeedSequence(seed).spawn(len(combos))
    return [
        (source, replicate, int(child.generate_state(1)[0]), base_yaml, config_dir)
        for (source, replicate), child in zip(combos, children)
    ]


def _worker(args: Job) -> pd.DataFrame:
    """
    Run **one** estimation in a separate process.

    Parameters
    ----------
    args
        (source, replicate, seed, base_yaml_text, config_dir)

    Returns
    -------
    pd.DataFrame
        Summary table with ``source``, ``replicate`` and ``seed`` columns
        prepended.
    """
    source, replicate, seed, base_yaml, config_dir = args
    _LOGGER.info("Grid point %s #%d (seed=%d)", source, replicate, seed)
    cfg = yaml.safe_load(base_yaml) or {}
    cfg.update(source=source, seed=seed, return_all_simulations=False)

    container = io_utils.load_container(cfg, base_dir=config_dir)
    table = simulate_engine(cfg, container).reset_index()
    table.insert(0, "seed", seed)
    table.insert(0, "replicate", replicate)
    table.insert(0, "source", source)
    return table


# --------------------------------------------------------------------------- #
# CLI command
# --------------------------------------------------------------------------- #
@app.command("grid")
def grid(  # noqa: D401 (imperative mood is fine for CLI verbs)
    sources: str = typer.Argument(
        ...,
        metavar="SOURCES",
        help="Comma-separated list of source location ids, e.g. 'MEX,USA'.",
    ),
    config_path: Path = typer.Option(
        "config.yaml",
        "--config-path",
        "-c",
        exists=True,
        readable=True,
        help="Base YAML configuration file.",
    ),
    replicates: int = typer.Option(
        1, "--replicates", "-r", min=1, help="Independent runs per source."
    ),
    seed: int = typer.Option(
        0, "--seed", "-s", help="Root seed from which every run's seed is spawned."
    ),
    procs: int = typer.Option(
        mp.cpu_count(),
        "--procs",
        "-p",
        min=1,
        help="Number of parallel worker processes.",
    ),
    output_csv: Path = typer.Option(
        DEFAULT_OUTPUT,
        "--output",
        "-o",
        help="Destination CSV; new rows are appended if it exists.",
    ),
    dry_run: bool = typer.Option(
        False,
        "--dry-run",
        help="Construct the grid and exit without running estimations.",
    ),
) -> None:
    """
    Estimate the risk of spread once for every (source, replicate) pair.
    """
    logging.basicConfig(level=logging.WARNING)
    source_vals = _parse_sources(sources)
    jobs = build_jobs(
        source_vals,
        replicates,
        seed,
        config_path.read_text(),
        str(config_path.resolve().parent),
    )
    typer.echo(f"Grid size: {len(jobs)}")

    if dry_run:
        typer.echo("Dry-run complete — no estimations executed.")
        raise typer.Exit()

    payload: Iterable[Job] = iter(jobs)
    if procs == 1:
        results = [_worker(job) for job in payload]
    else:
        with mp.Pool(processes=procs) as pool:
            results = pool.map(_worker, payload)

    df_new = pd.concat(results, ignore_index=True)

    # Append (or create) the master CSV
    output_csv.parent.mkdir(parents=True, exist_ok=True)
    if output_csv.exists():
        df_master = pd.read_csv(output_csv)
        df_master = pd.concat([df_master, df_new], ignore_index=True)
    else:
        df_master = df_new

    df_master.to_csv(output_csv, index=False)
    typer.echo(f"Wrote {len(df_new)} new rows → {output_csv}")


if __name__ == "__main__":  # pragma: no cover
    app()
