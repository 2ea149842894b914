import pandas as pd
import pytest

from epiflows import InputError
from epiflows.network import outbound_flows, to_graph


def test_graph_keeps_isolated_nodes_and_sums_edges(make_container):
    flows = pd.DataFrame({"from": ["A", "A"], "to": ["B", "B"], "n": [1.0, 2.5]})
    G = to_graph(make_container(flows=flows))
    assert set(G.nodes) == {"A", "B", "C"}
    assert G["A"]["B"]["weight"] == pytest.approx(3.5)


def test_outbound_flows(container):
    assert outbound_flows(container, "A") == [("B", 100.0), ("C", 50.0)]
    with pytest.raises(InputError):
        outbound_flows(container, "B")
    with pytest.raises(InputError):
        outbound_flows(container, "nowhere")
