"""
epiflows.io_utils
=================

Thin I/O façade used by the config-driven entry points:

    >>> from epiflows.io_utils import load_table, read_config
    >>> cfg = read_config("config.yaml")
    >>> flows = load_table(cfg["flows"])

Only raw reading happens here.  Schema validation is the job of
:func:`epiflows.container.make_epiflows`, which raises
:class:`~epiflows.errors.ValidationError` on malformed tables.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Sequence

import pandas as pd
import yaml

from .container import EpiflowsContainer, make_epiflows
from .errors import ValidationError

__all__ = ["load_table", "read_config", "load_container"]


def _parse_list(cell: Any, column: str) -> Any:
    if pd.isna(cell):
        return cell
    try:
        return [float(x) for x in str(cell).split(";")]
    except ValueError:
        raise ValidationError(
            f"Column '{column}' holds a malformed list of numbers: {cell!r}"
        ) from None


def load_table(path: str | Path, *, list_columns: Sequence[str] = ()) -> pd.DataFrame:
    """
    Read one CSV table.

    Parameters
    ----------
    path
        CSV file.
    list_columns
        Columns holding ``;``-separated numbers (e.g. observed stay
        durations), parsed into lists of floats.  Empty cells stay missing.

    Raises
    ------
    FileNotFoundError
        If the file is missing.
    ValidationError
        If a *list_columns* cell is not a `;`-separated list of numbers.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Expected data file not found: {path}")

    df = pd.read_csv(path)
    for col in list_columns:
        if col in df.columns:
            df[col] = df[col].map(lambda cell, col=col: _parse_list(cell, col))
    return df


def read_config(path: str | Path) -> Dict[str, Any]:
    """Parse YAML config into a plain dict (no validation beyond YAML)."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Config YAML not found: {path}")
    with path.open() as fh:
        cfg = yaml.safe_load(fh)
    return cfg or {}


def load_container(cfg: Dict[str, Any], base_dir: str | Path = ".") -> EpiflowsContainer:
    """
    Build a container from the ``flows`` / ``locations`` entries of *cfg*.

    Relative paths are taken from *base_dir*.  Optional keys: ``columns``
    (``from``/``to``/``n``/``id``), ``vars`` (semantic variable → column) and
    ``list_columns``.
    """
    try:
        flows_path = cfg["flows"]
        locations_path = cfg["locations"]
    except KeyError as e:
        raise KeyError(f"Missing required key in YAML config: {e.args[0]}") from None

    base_dir = Path(base_dir)
    columns = cfg.get("columns") or {}
    flows = load_table(base_dir / flows_path)
    locations = load_table(
        base_dir / locations_path, list_columns=cfg.get("list_columns") or ()
    )
    return make_epiflows(
        flows,
        locations,
        from_col=columns.get("from", 0),
        to_col=columns.get("to", 1),
        n_col=columns.get("n", 2),
        id_col=columns.get("id", 0),
        **(cfg.get("vars") or {}),
    )
