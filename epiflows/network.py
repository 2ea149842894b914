"""
epiflows.network
================

Converters that turn a container's flow records into algorithm-friendly
structures:

* NetworkX `DiGraph` with edge attribute ``'weight'`` (summed flow volume)
* ordered ``(destination, volume)`` pairs for a single source

These utilities sit between the data layer (:pymod:`epiflows.container`)
and the algorithm layer (:pymod:`epiflows.algorithms.risk_spread`).
"""

from __future__ import annotations

from typing import List, Tuple

import networkx as nx

from .container import EpiflowsContainer
from .errors import InputError

__all__ = ["to_graph", "outbound_flows"]


def to_graph(container: EpiflowsContainer) -> nx.DiGraph:
    """
    Build a directed graph where each edge carries a 'weight' attribute.

    Returns
    -------
    networkx.DiGraph
        Nodes are **all** location ids, isolated ones included.
        Edges: origin ➜ destination.  Repeated flow records between the same
        pair are summed; edges keep the order in which each pair first
        appears in the flow table.
    """
    G = nx.DiGraph()
    G.add_nodes_from(container.location_ids)

    for f in container.flows:
        if G.has_edge(f.from_id, f.to_id):
            G[f.from_id][f.to_id]["weight"] += f.n
        else:
            G.add_edge(f.from_id, f.to_id, weight=f.n)

    return G


def outbound_flows(
    container: EpiflowsContainer, source: str
) -> List[Tuple[str, float]]:
    """
    Destinations reachable in one hop from *source*, with their volumes.

    Returns
    -------
    list of (destination, volume)
        In the order destinations first appear among *source*'s flows.

    Raises
    ------
    InputError
        If *source* is not a location, or has no outbound flow records.
    """
    if source not in container.locations:
        raise InputError(f"Source location '{source}' is not in the location table")

    G = to_graph(container)
    out = [(dest, float(G[source][dest]["weight"])) for dest in G.successors(source)]
    if not out:
        raise InputError(f"No flows from source '{source}'")
    return out
