"""
epiflows.container
==================

The :class:`EpiflowsContainer` pairs a flow table, a location table and a
:class:`~epiflows.vardict.VariableDictionary`; it is the only object the
risk estimator consumes.

    >>> from epiflows.container import make_epiflows
    >>> ef = make_epiflows(flows_df, locations_df,
    ...                    pop_size="population", duration_stay="stay")
    >>> ef.get_vars("pop_size")
    'population'

:func:`make_epiflows` accepts arbitrary column names (or positions) at the
boundary, validates both tables with the Pandera schemas declared in
:pymod:`epiflows.datamodel`, and normalises every row into a
:class:`~epiflows.datamodel.FlowRecord` / :class:`~epiflows.datamodel.LocationRecord`.
Anything malformed raises :class:`~epiflows.errors.ValidationError`
*immediately*.
"""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple

import pandas as pd
import pandera as pa

from .datamodel import (
    FLOWS_SCHEMA,
    FROM_COL,
    ID_COL,
    N_COL,
    TO_COL,
    FlowRecord,
    LocationRecord,
    VariableKey,
    location_schema,
)
from .errors import InputError, ValidationError
from .vardict import VariableDictionary

__all__ = ["EpiflowsContainer", "make_epiflows"]

_LOGGER = logging.getLogger(__name__)

_SEMANTIC_KEYS = frozenset(k.value for k in VariableKey)


# --------------------------------------------------------------------------- #
# Container
# --------------------------------------------------------------------------- #
class EpiflowsContainer:
    """
    Flow records, location records and a variable dictionary.

    The record tables are fixed at construction; the only mutable part is the
    variable dictionary, changed through :meth:`set_vars`.

    Parameters
    ----------
    flows
        Flow records; every ``from_id`` / ``to_id`` must be a location id.
    locations
        Location records with unique ids.
    vars
        Variable dictionary (or plain mapping of overrides on top of the
        defaults).  It is copied, never shared with the caller.

    Raises
    ------
    ValidationError
        On duplicate location ids or flows referencing unknown locations.
    """

    def __init__(
        self,
        flows: Iterable[FlowRecord],
        locations: Iterable[LocationRecord],
        vars: VariableDictionary | Mapping[str, str] | None = None,
    ) -> None:
        self._flows: Tuple[FlowRecord, ...] = tuple(flows)

        locs: Dict[str, LocationRecord] = {}
        columns: Dict[str, None] = {}
        for rec in locations:
            if rec.id in locs:
                raise ValidationError(f"Duplicate location id: '{rec.id}'")
            locs[rec.id] = rec
            columns.update(dict.fromkeys(rec.values))
        self._locations: Mapping[str, LocationRecord] = MappingProxyType(locs)
        self._columns: Tuple[str, ...] = tuple(columns)

        unknown = {
            loc
            for f in self._flows
            for loc in (f.from_id, f.to_id)
            if loc not in locs
        }
        if unknown:
            raise ValidationError(
                f"Flows reference unknown location id(s): {sorted(unknown)}"
            )

        if isinstance(vars, VariableDictionary):
            self._vars = vars.copy()
        else:
            self._vars = VariableDictionary(vars)

    def __repr__(self) -> str:
        return (
            f"<EpiflowsContainer: {len(self._flows)} flows, "
            f"{len(self._locations)} locations>"
        )

    # -- read-only views -------------------------------------------------- #
    @property
    def flows(self) -> Tuple[FlowRecord, ...]:
        return self._flows

    @property
    def locations(self) -> Mapping[str, LocationRecord]:
        return self._locations

    @property
    def vars(self) -> VariableDictionary:
        return self._vars

    @property
    def location_ids(self) -> Tuple[str, ...]:
        return tuple(self._locations)

    @property
    def columns(self) -> Tuple[str, ...]:
        """Non-id columns of the location table."""
        return self._columns

    # -- variable dictionary ---------------------------------------------- #
    def get_vars(self, key: str | VariableKey | None = None) -> Any:
        """Column name for *key*, or a copy of the whole dictionary."""
        if key is None:
            return self._vars.to_dict()
        return self._vars.get(key)

    def set_vars(self, key: str | VariableKey, column: str) -> None:
        """Point *key* at *column*; the tables are left untouched."""
        self._vars.set(key, column)
        _LOGGER.debug("Variable '%s' now maps to column '%s'", key, column)

    def value(self, location_id: str, key: str | VariableKey) -> Any:
        """Value of the semantic variable *key* for one location."""
        try:
            rec = self._locations[location_id]
        except KeyError:
            raise InputError(f"Unknown location id: '{location_id}'") from None
        column = self._vars.resolve(key, self._columns)
        return rec.values.get(column)

    # -- flow access ------------------------------------------------------ #
    def get_flows(
        self, from_id: str | None = None, to_id: str | None = None
    ) -> List[FlowRecord]:
        """Flow records matching *from_id* and/or *to_id*, in table order."""
        return [
            f
            for f in self._flows
            if (from_id is None or f.from_id == from_id)
            and (to_id is None or f.to_id == to_id)
        ]

    def get_n(self, from_id: str | None = None, to_id: str | None = None) -> pd.Series:
        """Flow volumes indexed by ``(from, to)``."""
        flows = self.get_flows(from_id, to_id)
        index = pd.MultiIndex.from_arrays(
            [[f.from_id for f in flows], [f.to_id for f in flows]],
            names=[FROM_COL, TO_COL],
        )
        return pd.Series([f.n for f in flows], index=index, name=N_COL, dtype=float)

    def get_pop_size(self) -> pd.Series:
        """Population size per location (``NaN`` where unknown)."""
        column = self._vars.resolve(VariableKey.pop_size, self._columns)
        return pd.Series(
            {loc: rec.values.get(column) for loc, rec in self._locations.items()},
            name=column,
            dtype=float,
        )

    # -- tabular views ---------------------------------------------------- #
    def flows_frame(self) -> pd.DataFrame:
        return pd.DataFrame(
            [(f.from_id, f.to_id, f.n) for f in self._flows],
            columns=[FROM_COL, TO_COL, N_COL],
        )

    def locations_frame(self) -> pd.DataFrame:
        df = pd.DataFrame.from_dict(
            {loc: dict(rec.values) for loc, rec in self._locations.items()},
            orient="index",
            columns=list(self._columns),
        )
        df.index.name = ID_COL
        return df

    def subset(self, locations: Sequence[str]) -> "EpiflowsContainer":
        """
        New container restricted to *locations* and the flows among them.

        Raises
        ------
        InputError
            If any requested id is not a known location.
        """
        missing = [loc for loc in locations if loc not in self._locations]
        if missing:
            raise InputError(f"Unknown location id(s): {missing}")
        keep = set(locations)
        return EpiflowsContainer(
            [f for f in self._flows if f.from_id in keep and f.to_id in keep],
            [rec for loc, rec in self._locations.items() if loc in keep],
            self._vars,
        )


# --------------------------------------------------------------------------- #
# Builder
# --------------------------------------------------------------------------- #
ColumnRef = str | int


def _pick_column(df: pd.DataFrame, ref: ColumnRef, what: str) -> str:
    """Resolve a column given by name or position."""
    if isinstance(ref, int) and not isinstance(ref, bool):
        if not 0 <= ref < len(df.columns):
            raise ValidationError(
                f"`{what}`: column position {ref} out of range "
                f"(table has {len(df.columns)} columns)"
            )
        return df.columns[ref]
    if ref not in df.columns:
        raise ValidationError(f"`{what}`: '{ref}' is not a valid column name")
    return ref


def _validate(schema: pa.DataFrameSchema, df: pd.DataFrame, what: str) -> pd.DataFrame:
    try:
        return schema.validate(df, lazy=True)
    except pa.errors.SchemaErrors as err:
        raise ValidationError(f"{what} table failed schema validation") from err


def make_epiflows(
    flows: pd.DataFrame,
    locations: pd.DataFrame,
    from_col: ColumnRef = 0,
    to_col: ColumnRef = 1,
    n_col: ColumnRef = 2,
    id_col: ColumnRef = 0,
    **var_columns: str,
) -> EpiflowsContainer:
    """
    Build and validate an :class:`EpiflowsContainer`.

    Parameters
    ----------
    flows
        At least three columns: origin id, destination id, flow volume.
    locations
        One row per location; must contain the id column plus any variable
        columns named below.
    from_col, to_col, n_col, id_col
        Column names or positions in *flows* / *locations*.
    **var_columns
        Semantic variable → column in *locations*, e.g.
        ``pop_size="population"``, ``duration_stay="length_of_stay"``,
        ``num_cases="cases"``, ``first_date="first"``, ``last_date="last"``.
        Each named column must exist.

    Returns
    -------
    EpiflowsContainer

    Raises
    ------
    ValidationError
        Missing columns, duplicate location ids, flows referencing unknown
        locations, or values failing schema checks.
    """
    if not isinstance(flows, pd.DataFrame) or not isinstance(locations, pd.DataFrame):
        raise ValidationError("`flows` and `locations` must be pandas DataFrames")
    if flows.shape[1] < 3:
        raise ValidationError("`flows` needs at least three columns (from, to, n)")

    # ------------------------------------------------------------------ #
    # 1. Flows: pick, rename, validate
    # ------------------------------------------------------------------ #
    picked = [
        _pick_column(flows, from_col, "from_col"),
        _pick_column(flows, to_col, "to_col"),
        _pick_column(flows, n_col, "n_col"),
    ]
    flows_df = flows[picked].copy()
    flows_df.columns = [FROM_COL, TO_COL, N_COL]
    flows_df = _validate(FLOWS_SCHEMA, flows_df, "Flows")

    # ------------------------------------------------------------------ #
    # 2. Variable dictionary: explicit columns must exist right now
    # ------------------------------------------------------------------ #
    vd = VariableDictionary()
    for key, column in var_columns.items():
        if column is None:
            continue
        if column not in locations.columns:
            raise ValidationError(f"`{key}`: '{column}' is not a valid column name")
        vd.set(key, column)

    # ------------------------------------------------------------------ #
    # 3. Locations: normalise id column, validate known variables
    # ------------------------------------------------------------------ #
    id_name = _pick_column(locations, id_col, "id_col")
    loc_df = locations.copy()
    if id_name != ID_COL:
        if ID_COL in loc_df.columns:
            raise ValidationError(
                f"Location table has both '{id_name}' (id) and '{ID_COL}' columns"
            )
        loc_df = loc_df.rename(columns={id_name: ID_COL})

    present = {
        VariableKey(key): column
        for key, column in vd.items()
        if key in _SEMANTIC_KEYS
        and column in loc_df.columns
        and column != ID_COL
    }
    loc_df = _validate(location_schema(present), loc_df, "Locations")

    # ------------------------------------------------------------------ #
    # 4. Records
    # ------------------------------------------------------------------ #
    flow_records = [
        FlowRecord(from_id=f, to_id=t, n=float(n))
        for f, t, n in zip(flows_df[FROM_COL], flows_df[TO_COL], flows_df[N_COL])
    ]
    value_cols = [c for c in loc_df.columns if c != ID_COL]
    location_records = [
        LocationRecord(id=row[ID_COL], values={c: row[c] for c in value_cols})
        for row in loc_df.to_dict(orient="records")
    ]

    container = EpiflowsContainer(flow_records, location_records, vd)
    _LOGGER.debug("Built %r", container)
    return container
