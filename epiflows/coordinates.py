"""
epiflows.coordinates
====================

Longitude / latitude enrichment of a container's location table.

Geocoding itself is delegated to an injected callable, typically a thin
wrapper around an online service::

    >>> def geocode(name):
    ...     return lon, lat
    >>> ef = add_coordinates(ef, geocode, loc_column="country")
    >>> get_coordinates(ef).head()

Whatever the geocoder raises propagates unchanged.  The estimator never
reads these columns.
"""

from __future__ import annotations

import logging
from typing import Callable, Sequence, Tuple

import pandas as pd

from .container import EpiflowsContainer
from .datamodel import ID_COL, LocationRecord, VariableKey
from .errors import InputError, ValidationError

__all__ = ["add_coordinates", "get_coordinates"]

_LOGGER = logging.getLogger(__name__)

Geocoder = Callable[[str], Tuple[float, float]]


def add_coordinates(
    container: EpiflowsContainer,
    geocoder: Geocoder,
    loc_column: str | None = None,
    lon_lat_columns: Sequence[str] = ("lon", "lat"),
) -> EpiflowsContainer:
    """
    Add longitude / latitude columns to the location table.

    Parameters
    ----------
    container
        Source container; left untouched.
    geocoder
        ``name -> (lon, lat)``.
    loc_column
        Column holding the names to geocode; the location id when omitted.
    lon_lat_columns
        Names of the two appended columns, longitude first.

    Returns
    -------
    EpiflowsContainer
        New container with the same flows, the enriched locations, and the
        ``lon`` / ``lat`` variables pointing at the new columns.

    Raises
    ------
    ValidationError
        If *loc_column* is not a column of the location table.
    InputError
        If *lon_lat_columns* is not exactly two strings.
    """
    if (
        isinstance(lon_lat_columns, str)
        or len(lon_lat_columns) != 2
        or not all(isinstance(c, str) and c for c in lon_lat_columns)
    ):
        raise InputError("`lon_lat_columns` should contain exactly two strings")
    if loc_column is not None and loc_column not in container.columns:
        raise ValidationError(f"`{loc_column}` is not a valid column name")

    lon_col, lat_col = lon_lat_columns
    records = []
    for loc, rec in container.locations.items():
        name = loc if loc_column is None else rec.values[loc_column]
        lon, lat = geocoder(str(name))
        values = dict(rec.values)
        values[lon_col] = float(lon)
        values[lat_col] = float(lat)
        records.append(LocationRecord(id=loc, values=values))

    vd = container.vars.copy()
    vd.set(VariableKey.lon, lon_col)
    vd.set(VariableKey.lat, lat_col)
    _LOGGER.info("Geocoded %d locations", len(records))
    return EpiflowsContainer(container.flows, records, vd)


def get_coordinates(container: EpiflowsContainer) -> pd.DataFrame:
    """``lon`` / ``lat`` per location id (resolved through the dictionary)."""
    lon_col = container.vars.resolve(VariableKey.lon, container.columns)
    lat_col = container.vars.resolve(VariableKey.lat, container.columns)
    df = pd.DataFrame(
        {
            "lon": [rec.values.get(lon_col) for rec in container.locations.values()],
            "lat": [rec.values.get(lat_col) for rec in container.locations.values()],
        },
        index=pd.Index(container.location_ids, name=ID_COL),
        dtype=float,
    )
    return df
