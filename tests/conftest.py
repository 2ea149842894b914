import pandas as pd
import pytest

from epiflows import make_epiflows


def _locations(**changes):
    df = pd.DataFrame(
        {
            "location": ["A", "B", "C"],
            "population": [1_000_000, 500_000, 250_000],
            "stay": [5.0, 5.0, 5.0],
            "cases": [1000, 0, 0],
            "first_case": ["2009-03-01", "2009-03-01", "2009-03-01"],
            "last_case": ["2009-03-10", "2009-03-10", "2009-03-10"],
        }
    )
    for col, values in changes.items():
        df[col] = values
    return df


def _flows():
    return pd.DataFrame(
        {"origin": ["A", "A"], "destination": ["B", "C"], "travellers": [100, 50]}
    )


VARS = dict(
    pop_size="population",
    duration_stay="stay",
    num_cases="cases",
    first_date="first_case",
    last_date="last_case",
)

#: 1000 cases / (1e6 people * 10 days)
INCIDENCE = 1e-4


@pytest.fixture
def locations_df():
    return _locations()


@pytest.fixture
def flows_df():
    return _flows()


@pytest.fixture
def container(flows_df, locations_df):
    """Three locations; A → B (100) and A → C (50)."""
    return make_epiflows(flows_df, locations_df, **VARS)


@pytest.fixture
def make_container():
    def _make(flows=None, **location_changes):
        return make_epiflows(
            _flows() if flows is None else flows, _locations(**location_changes), **VARS
        )

    return _make


class Recording:
    """Sampler wrapper keeping every output it hands out."""

    def __init__(self, sampler):
        self.sampler = sampler
        self.calls = []

    def __call__(self, n):
        out = self.sampler(n)
        self.calls.append(out)
        return out


@pytest.fixture
def recording():
    return Recording
