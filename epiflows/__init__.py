"""
epiflows
========

Flows of cases between locations and Monte-Carlo estimates of the risk of
onward disease spread.

>>> import epiflows as ef
>>> flows = ef.make_epiflows(flows_df, locations_df, pop_size="population",
...                          duration_stay="stay", num_cases="cases",
...                          first_date="first", last_date="last")
>>> ef.estimate_risk_spread(flows, "MEX",
...                         r_incubation=ef.samplers.lognormal(1.46, 0.35),
...                         r_infectious=ef.samplers.normal(4.5, 1.5),
...                         n_sim=10_000)
"""

from __future__ import annotations

from .algorithms.risk_spread import estimate as estimate_risk_spread  # noqa: F401
from .container import EpiflowsContainer, make_epiflows  # noqa: F401
from .coordinates import add_coordinates, get_coordinates  # noqa: F401
from .datamodel import FlowRecord, LocationRecord, StayModel, VariableKey  # noqa: F401
from .errors import (  # noqa: F401
    EpiflowsError,
    InputError,
    UnknownVariableError,
    ValidationError,
)
from .simulator import Sampler, samplers  # noqa: F401
from .vardict import VariableDictionary, default_vars  # noqa: F401

__version__ = "0.1.0"

__all__ = [
    "estimate_risk_spread",
    "EpiflowsContainer",
    "make_epiflows",
    "add_coordinates",
    "get_coordinates",
    "FlowRecord",
    "LocationRecord",
    "StayModel",
    "VariableKey",
    "EpiflowsError",
    "InputError",
    "UnknownVariableError",
    "ValidationError",
    "Sampler",
    "samplers",
    "VariableDictionary",
    "default_vars",
]
