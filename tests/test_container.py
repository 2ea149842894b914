import pandas as pd
import pytest

from epiflows import (
    EpiflowsContainer,
    FlowRecord,
    InputError,
    LocationRecord,
    ValidationError,
    make_epiflows,
)


def test_records_and_vars(container):
    assert container.flows == (
        FlowRecord("A", "B", 100.0),
        FlowRecord("A", "C", 50.0),
    )
    assert container.location_ids == ("A", "B", "C")
    assert container.get_vars("pop_size") == "population"
    assert container.value("A", "num_cases") == 1000
    assert container.value("B", "first_date") == pd.Timestamp("2009-03-01")
    assert "location" not in container.columns


def test_named_columns(flows_df, locations_df):
    shuffled = flows_df[["travellers", "destination", "origin"]]
    ef = make_epiflows(
        shuffled,
        locations_df,
        from_col="origin",
        to_col="destination",
        n_col="travellers",
        id_col="location",
    )
    assert ef.get_flows(from_id="A", to_id="C") == [FlowRecord("A", "C", 50.0)]


def test_fractional_flows(flows_df, locations_df):
    flows_df["travellers"] = [10.5, 0.25]
    ef = make_epiflows(flows_df, locations_df)
    assert [f.n for f in ef.flows] == [10.5, 0.25]


@pytest.mark.parametrize(
    "kwargs",
    [
        dict(pop_size="pop"),
        dict(n_col=7),
        dict(from_col="nope"),
    ],
)
def test_missing_columns(flows_df, locations_df, kwargs):
    with pytest.raises(ValidationError):
        make_epiflows(flows_df, locations_df, **kwargs)


def test_duplicate_location_ids(flows_df, locations_df):
    locations_df.loc[2, "location"] = "B"
    with pytest.raises(ValidationError):
        make_epiflows(flows_df, locations_df)


def test_unknown_flow_ids(flows_df, locations_df):
    flows_df.loc[1, "destination"] = "Z"
    with pytest.raises(ValidationError, match="Z"):
        make_epiflows(flows_df, locations_df)


def test_negative_flows(flows_df, locations_df):
    flows_df.loc[0, "travellers"] = -1
    with pytest.raises(ValidationError):
        make_epiflows(flows_df, locations_df)


def test_bad_location_values(make_container):
    with pytest.raises(ValidationError):
        make_container(population=[1000, 0, 10])
    with pytest.raises(ValidationError):
        make_container(cases=[1.5, 0, 0])
    with pytest.raises(ValidationError):
        make_container(first_case=["2009-03-11", "2009-03-01", "2009-03-01"])


def test_missing_values_are_allowed_at_build_time(make_container):
    ef = make_container(population=[1_000_000, None, None])
    assert ef.get_pop_size().isna().tolist() == [False, True, True]


def test_stay_lists(make_container):
    ef = make_container(stay=[5.0, [4.0, 6.0], [1.0, 2.0, 3.0]])
    assert list(ef.value("C", "duration_stay")) == [1.0, 2.0, 3.0]

    with pytest.raises(ValidationError):
        make_container(stay=[5.0, [4.0, -6.0], 1.0])


def test_set_vars_only_touches_the_dictionary(container):
    before = container.locations_frame()
    container.set_vars("pop_size", "stay")
    assert container.get_vars("pop_size") == "stay"
    pd.testing.assert_frame_equal(container.locations_frame(), before)

    container.set_vars("pop_size", "absent")
    with pytest.raises(ValidationError):
        container.value("A", "pop_size")


def test_direct_construction_checks_invariants():
    locs = [LocationRecord("A"), LocationRecord("B")]
    with pytest.raises(ValidationError):
        EpiflowsContainer([], locs + [LocationRecord("A")])
    with pytest.raises(ValidationError):
        EpiflowsContainer([FlowRecord("A", "X", 1.0)], locs)


def test_records_are_read_only(container):
    with pytest.raises(TypeError):
        container.locations["A"].values["population"] = 1
    with pytest.raises(TypeError):
        container.locations["Z"] = LocationRecord("Z")


def test_get_n_and_frames(container):
    n = container.get_n(from_id="A")
    assert n.loc[("A", "B")] == 100.0
    assert container.get_n(to_id="A").empty

    flows = container.flows_frame()
    assert list(flows.columns) == ["from", "to", "n"]
    assert container.locations_frame().index.name == "id"


def test_subset(container):
    sub = container.subset(["A", "B"])
    assert sub.location_ids == ("A", "B")
    assert sub.flows == (FlowRecord("A", "B", 100.0),)
    assert sub.get_vars() == container.get_vars()

    with pytest.raises(InputError):
        container.subset(["A", "Q"])
