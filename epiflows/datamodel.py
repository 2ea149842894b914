"""
epiflows.datamodel
==================

• Central **type–contract hub** for the epiflows code-base.
• Declares the row records a container is made of (:class:`FlowRecord`,
  :class:`LocationRecord`) and the Pandera schemas used to validate the
  tables they are built from.
• Hosts small enumerations and a NumPy `Array` alias so all downstream
  modules share the *same* typing vocabulary.

Nothing in here performs I/O or heavy computation.
"""

from __future__ import annotations

# --------------------------------------------------------------------------- #
# Universal type alias
# --------------------------------------------------------------------------- #
import numpy as np

Array = np.ndarray

# --------------------------------------------------------------------------- #
# Enumerations
# --------------------------------------------------------------------------- #
from enum import Enum


class VariableKey(str, Enum):
    """Semantic variables a location table can carry."""

    pop_size = "pop_size"
    duration_stay = "duration_stay"
    num_cases = "num_cases"
    first_date = "first_date"
    last_date = "last_date"
    lon = "lon"
    lat = "lat"


class StayModel(str, Enum):
    """How the duration of stay at a destination is obtained per trial."""

    fixed = "fixed"
    exponential = "exponential"
    empirical = "empirical"


# --------------------------------------------------------------------------- #
# Row records
# --------------------------------------------------------------------------- #
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping


@dataclass(frozen=True)
class FlowRecord:
    """One flow of ``n`` travellers (or cases) from ``from_id`` to ``to_id``."""

    from_id: str
    to_id: str
    n: float


@dataclass(frozen=True)
class LocationRecord:
    """
    One row of the location table.

    ``values`` maps every non-identifier column to the row's value; it is
    wrapped in a read-only proxy so records stay immutable.
    """

    id: str
    values: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))


# --------------------------------------------------------------------------- #
# Data-frame schemas (Pandera)
# --------------------------------------------------------------------------- #
import pandera as pa
from pandera import Column, DataFrameSchema, Check

FROM_COL = "from"
TO_COL = "to"
N_COL = "n"
ID_COL = "id"

FLOWS_SCHEMA = DataFrameSchema(
    {
        FROM_COL: Column(str),
        TO_COL: Column(str),
        N_COL: Column(float, Check.greater_than_or_equal_to(0)),
    },
    strict=True,
    coerce=True,
)


def _is_stay_value(value: Any) -> bool:
    """A stay is a non-negative number or a non-empty list of them."""
    if isinstance(value, (list, tuple, np.ndarray)):
        arr = np.asarray(value, dtype=float)
        return arr.ndim == 1 and arr.size > 0 and bool(np.all(arr >= 0))
    try:
        return float(value) >= 0
    except (TypeError, ValueError):
        return False


def _variable_columns(key: VariableKey) -> Column:
    if key is VariableKey.pop_size:
        return Column(float, Check.greater_than(0), nullable=True, coerce=True)
    if key is VariableKey.duration_stay:
        return Column(
            None,
            Check(_is_stay_value, element_wise=True,
                  error="duration_stay must be >= 0 or a list of such values"),
            nullable=True,
        )
    if key is VariableKey.num_cases:
        return Column(
            float,
            [
                Check.greater_than_or_equal_to(0),
                Check(lambda s: s == np.floor(s), error="num_cases must be whole"),
            ],
            nullable=True,
            coerce=True,
        )
    if key in (VariableKey.first_date, VariableKey.last_date):
        return Column(pa.DateTime, nullable=True, coerce=True)
    return Column(float, nullable=True, coerce=True)


def location_schema(columns: Mapping[VariableKey, str]) -> DataFrameSchema:
    """
    Build the location-table schema for the semantic variables present.

    Parameters
    ----------
    columns
        Semantic variable → column name, restricted to columns that exist in
        the table being validated.

    Returns
    -------
    pandera.DataFrameSchema
        Non-strict schema: columns not listed are carried through untouched.
    """
    spec: dict[str, Column] = {ID_COL: Column(str, unique=True, coerce=True)}
    for key, column in columns.items():
        spec[column] = _variable_columns(VariableKey(key))

    checks = []
    first = columns.get(VariableKey.first_date)
    last = columns.get(VariableKey.last_date)
    if first is not None and last is not None:
        checks.append(
            Check(
                lambda df: ~(df[first] > df[last]),
                error=f"'{first}' must not be after '{last}'",
            )
        )

    return DataFrameSchema(spec, checks=checks, strict=False)


# --------------------------------------------------------------------------- #
# What this module exports
# --------------------------------------------------------------------------- #
__all__ = [
    "Array",
    "VariableKey",
    "StayModel",
    "FlowRecord",
    "LocationRecord",
    "FROM_COL",
    "TO_COL",
    "N_COL",
    "ID_COL",
    "FLOWS_SCHEMA",
    "location_schema",
]
