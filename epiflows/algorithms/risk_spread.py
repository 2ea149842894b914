"""
algorithms.risk_spread
~~~~~~~~~~~~~~~~~~~~~~
Monte-Carlo estimate of the number of infectious travellers leaving a source
location for each of its directly connected destinations.

Key API
-------
estimate(container, source_location, r_incubation, r_infectious,
         n_sim=1000, overrides=None, return_all_simulations=False, *,
         stay_model="fixed", rng=None, probability=infectious_probability
) -> pd.DataFrame

Model
-----
For the source location the reported cases over the observation window give
a *daily incidence* per person, corrected for under-reporting::

    incidence = (num_cases / reporting_rate) / (pop_size * window_days)
    window_days = last_date - first_date + 1

This factor is deterministic.  Each trial then draws a duration of stay
*s*, an incubation period *a* and an infectious period *b*.  A traveller is
still infectious when leaving if they were infected during the last
``a + b`` days of their stay, so the exposure window is ``min(s, a + b)``::

    p = clip(incidence * min(s, a + b), 0, 1)
    cases = n_travellers * p

Notes
-----
* The function holds no random state.  Draws come from the injected samplers
  and, for stochastic stay models, from *rng* (default: the global
  ``numpy.random`` state); seed them beforehand for reproducible output.
* Samplers are called once per destination with ``n_sim``, in destination
  order, so raw and summary runs consume identical draws under one seed.
* Validation happens before any sampling where possible; a failed call
  returns nothing (no partial tables).

Examples
--------
>>> import numpy as np
>>> from epiflows.simulator import samplers
>>> np.random.seed(1)
>>> res = estimate(ef, "MEX",
...                r_incubation=samplers.lognormal(1.46, 0.35),
...                r_infectious=samplers.normal(4.5, 1.5),
...                n_sim=10_000)
>>> list(res.columns)
['mean_cases', 'lower_limit_95CI', 'upper_limit_95CI']
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Final, Mapping

import numpy as np
import pandas as pd

from ..container import EpiflowsContainer
from ..datamodel import Array, StayModel, VariableKey
from ..errors import InputError, ValidationError
from ..network import outbound_flows
from ..vardict import VariableDictionary
from . import stats

__all__ = ["estimate", "daily_incidence", "infectious_probability", "OVERRIDE_KEYS"]

_LOGGER = logging.getLogger(__name__)

REPORTING_RATE: Final[str] = "reporting_rate"

OVERRIDE_KEYS: Final[frozenset[str]] = frozenset(
    {
        VariableKey.duration_stay.value,
        VariableKey.pop_size.value,
        VariableKey.num_cases.value,
        VariableKey.first_date.value,
        VariableKey.last_date.value,
        REPORTING_RATE,
    }
)


# --------------------------------------------------------------------------- #
# Formula
# --------------------------------------------------------------------------- #
def daily_incidence(
    pop_size: float,
    num_cases: float,
    first_date: Any,
    last_date: Any,
    reporting_rate: float = 1.0,
) -> float:
    """
    Per-person daily incidence at the source, corrected for reporting.

    Raises
    ------
    InputError
        Non-positive population, negative cases, unparsable or inverted
        dates, reporting rate outside ``(0, 1]``.
    """
    try:
        pop_size = float(pop_size)
        num_cases = float(num_cases)
        reporting_rate = float(reporting_rate)
    except (TypeError, ValueError) as exc:
        raise InputError(f"Non-numeric incidence parameter: {exc}") from exc
    if not pop_size > 0:
        raise InputError(f"Population size must be positive; got {pop_size}")
    if not num_cases >= 0:
        raise InputError(f"Number of cases must be non-negative; got {num_cases}")
    if not 0.0 < reporting_rate <= 1.0:
        raise InputError(f"Reporting rate must lie in (0, 1]; got {reporting_rate}")

    try:
        first = pd.Timestamp(first_date).normalize()
        last = pd.Timestamp(last_date).normalize()
    except (TypeError, ValueError) as exc:
        raise InputError(f"Invalid observation window dates: {exc}") from exc
    if pd.isna(first) or pd.isna(last):
        raise InputError("Observation window dates must not be missing")
    if last < first:
        raise InputError(
            f"first_date ({first.date()}) is after last_date ({last.date()})"
        )
    window_days = (last - first).days + 1

    return (num_cases / reporting_rate) / (pop_size * window_days)


def infectious_probability(
    incidence: float, stay: Array, incubation: Array, infectious: Array
) -> Array:
    """Probability a departing traveller is infectious, per trial."""
    exposure = np.minimum(stay, incubation + infectious)
    return np.clip(incidence * exposure, 0.0, 1.0)


# --------------------------------------------------------------------------- #
# Parameter resolution
# --------------------------------------------------------------------------- #
def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, (list, tuple, np.ndarray)):
        return False
    return bool(pd.isna(value))


def _location_value(
    container: EpiflowsContainer,
    vd: VariableDictionary,
    location: str,
    key: VariableKey,
) -> Any:
    column = vd.resolve(key, container.columns)
    value = container.locations[location].values.get(column)
    if _is_missing(value):
        raise ValidationError(
            f"Location '{location}' has no value for '{key.value}' (column '{column}')"
        )
    return value


def _source_incidence(
    container: EpiflowsContainer,
    vd: VariableDictionary,
    source: str,
    overrides: Mapping[str, Any],
) -> float:
    params: Dict[str, Any] = {}
    for key in (
        VariableKey.pop_size,
        VariableKey.num_cases,
        VariableKey.first_date,
        VariableKey.last_date,
    ):
        if key.value in overrides:
            params[key.value] = overrides[key.value]
        else:
            params[key.value] = _location_value(container, vd, source, key)
    params[REPORTING_RATE] = overrides.get(REPORTING_RATE, 1.0)
    return daily_incidence(**params)


def _check_vector(values: Any, n_sim: int, what: str) -> Array:
    try:
        arr = np.asarray(values, dtype=float)
    except (TypeError, ValueError) as exc:
        raise InputError(f"{what} must be numeric: {exc}") from exc
    if arr.ndim == 0:
        arr = np.full(n_sim, float(arr))
    if arr.shape != (n_sim,):
        raise InputError(
            f"{what} must provide {n_sim} values; got shape {arr.shape}"
        )
    if not np.isfinite(arr).all() or (arr < 0).any():
        raise InputError(f"{what} must be finite and non-negative")
    return arr


def _stay_override(override: Any, dest: str) -> Any:
    """Per-destination entry of a ``duration_stay`` override, if any."""
    if isinstance(override, Mapping):
        return override.get(dest)
    return override


def _stay_draws(
    value: Any,
    model: StayModel,
    n_sim: int,
    rng: np.random.Generator | None,
) -> Array:
    """Per-trial stays from a location-table stay value (number or list)."""
    observed = np.atleast_1d(np.asarray(value, dtype=float))
    source = np.random if rng is None else rng

    if model is StayModel.empirical:
        return source.choice(observed, size=n_sim, replace=True)
    mean_stay = float(observed.mean())
    if model is StayModel.exponential:
        return source.exponential(scale=mean_stay, size=n_sim)
    return np.full(n_sim, mean_stay)


def _draw(sampler: Callable[[int], Any], n_sim: int, what: str) -> Array:
    if not callable(sampler):
        raise InputError(f"`{what}` must be callable")
    return _check_vector_strict(sampler(n_sim), n_sim, what)


def _check_vector_strict(values: Any, n_sim: int, what: str) -> Array:
    """Like :func:`_check_vector` but scalars are rejected (wrong length)."""
    if np.ndim(values) == 0:
        raise InputError(f"`{what}` returned a scalar; expected {n_sim} draws")
    return _check_vector(values, n_sim, f"`{what}` output")


def _check_n_sim(n_sim: Any) -> int:
    if isinstance(n_sim, bool) or not isinstance(n_sim, (int, np.integer)):
        raise InputError(f"`n_sim` must be an integer; got {type(n_sim).__name__}")
    if n_sim <= 0:
        raise InputError(f"`n_sim` must be positive; got {n_sim}")
    return int(n_sim)


# --------------------------------------------------------------------------- #
# Public API
# --------------------------------------------------------------------------- #
def estimate(
    container: EpiflowsContainer,
    source_location: str,
    r_incubation: Callable[[int], Any],
    r_infectious: Callable[[int], Any],
    n_sim: int = 1000,
    overrides: Mapping[str, Any] | None = None,
    return_all_simulations: bool = False,
    *,
    stay_model: StayModel | str = StayModel.fixed,
    rng: np.random.Generator | None = None,
    probability: Callable[[float, Array, Array, Array], Array] = infectious_probability,
) -> pd.DataFrame:
    """
    Estimate the risk of spread from *source_location* to its destinations.

    Parameters
    ----------
    container
        Validated :class:`~epiflows.container.EpiflowsContainer`.
    source_location
        Location id; must have at least one outbound flow.
    r_incubation, r_infectious
        Samplers: ``f(n) -> n`` non-negative period draws (days).
    n_sim
        Number of simulations per destination (positive integer).
    overrides
        Values used instead of the container's for this run only:
        ``duration_stay`` (scalar, vector of ``n_sim`` per-trial values, or a
        mapping destination → either), ``pop_size``, ``num_cases``,
        ``first_date``, ``last_date`` (source values) and ``reporting_rate``.
    return_all_simulations
        Return every simulation instead of the summary.
    stay_model
        How container stay values become per-trial stays (see
        :class:`~epiflows.datamodel.StayModel`).  Overridden stays are always
        used as given.
    rng
        Generator for stochastic stay models; the global ``numpy.random``
        state when omitted.
    probability
        ``f(incidence, stay, incubation, infectious) -> p`` per trial.

    Returns
    -------
    pandas.DataFrame
        Summary (``mean_cases``, ``lower_limit_95CI``, ``upper_limit_95CI``
        indexed by destination) or, with *return_all_simulations*, one column
        per destination and one row per simulation.

    Raises
    ------
    InputError
        Invalid ``n_sim``, unknown source, source without flows, bad
        overrides or malformed sampler output.
    ValidationError
        A needed variable resolves to a missing column or an empty value.
    """
    n_sim = _check_n_sim(n_sim)
    try:
        stay_model = StayModel(stay_model)
    except ValueError:
        raise InputError(
            f"Unknown stay model '{stay_model}'. "
            f"Allowed values are {[m.value for m in StayModel]}."
        ) from None

    overrides = dict(overrides or {})
    unknown = set(overrides) - OVERRIDE_KEYS
    if unknown:
        raise InputError(
            f"Unknown override(s) {sorted(unknown)}; allowed: {sorted(OVERRIDE_KEYS)}"
        )

    destinations = outbound_flows(container, source_location)

    # Snapshot: later set_vars() calls cannot affect this run.
    vd = container.vars.copy()
    incidence = _source_incidence(container, vd, source_location, overrides)

    # Resolve every destination's stay before sampling anything.
    stay_key = VariableKey.duration_stay
    stay_override = overrides.get(stay_key.value)
    if isinstance(stay_override, Mapping):
        extra = set(stay_override) - {dest for dest, _ in destinations}
        if extra:
            raise InputError(
                f"duration_stay override names non-destination(s) {sorted(map(str, extra))} "
                f"of '{source_location}'"
            )
    overridden: Dict[str, Array] = {}
    observed: Dict[str, Any] = {}
    for dest, _ in destinations:
        given = _stay_override(stay_override, dest)
        if given is not None:
            overridden[dest] = _check_vector(
                given, n_sim, f"duration_stay override for '{dest}'"
            )
        else:
            observed[dest] = _location_value(container, vd, dest, stay_key)

    _LOGGER.debug(
        "Source %s: daily incidence %.3g, %d destination(s)",
        source_location, incidence, len(destinations),
    )

    # ------------------------------------------------------------------ #
    # Monte-Carlo loop
    # ------------------------------------------------------------------ #
    draws: Dict[str, Array] = {}
    for dest, volume in destinations:
        if dest in overridden:
            stay = overridden[dest]
        else:
            stay = _stay_draws(observed[dest], stay_model, n_sim, rng)

        incubation = _draw(r_incubation, n_sim, "r_incubation")
        infectious = _draw(r_infectious, n_sim, "r_infectious")

        p = np.asarray(probability(incidence, stay, incubation, infectious), dtype=float)
        if p.shape != (n_sim,):
            raise InputError(f"`probability` returned shape {p.shape}; expected ({n_sim},)")
        if not np.isfinite(p).all() or (p < 0).any() or (p > 1).any():
            raise InputError("`probability` must return finite values in [0, 1]")
        if np.any(p >= 1.0):
            _LOGGER.warning(
                "Probability of infection reached 1 for %s → %s; check incidence inputs",
                source_location, dest,
            )
        draws[dest] = volume * p
        _LOGGER.debug("%s → %s: volume %.6g, mean %.6g", source_location, dest, volume, draws[dest].mean())

    _LOGGER.info(
        "Estimated risk of spread from %s to %d destination(s) with %d simulations",
        source_location, len(draws), n_sim,
    )

    if return_all_simulations:
        return stats.raw_table(draws)
    return stats.summarise(draws)
