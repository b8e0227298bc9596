"""Structural analysis functions for vessel networks."""

from typing import Dict, List
import networkx as nx
from ..core.network import VesselNetwork
from ..adapters.networkx_adapter import to_networkx_graph


def compute_branch_stats(network: VesselNetwork) -> Dict:
    """
    Compute vessel-level branching statistics.

    Degree is the number of distinct vessels meeting at a node; interior
    nodes of a vessel have degree 1 and are skipped.

    Parameters
    ----------
    network : VesselNetwork
        Network to analyze

    Returns
    -------
    stats : dict
        Dictionary with degree_histogram, num_bifurcations, num_pass_through
    """
    degree_histogram = {}
    for node in network.get_vessel_end_nodes():
        degree = network.get_node_degree(node)
        degree_histogram[degree] = degree_histogram.get(degree, 0) + 1

    stats = {
        'degree_histogram': degree_histogram,
        'num_bifurcations': sum(n for d, n in degree_histogram.items() if d >= 3),
        'num_pass_through': degree_histogram.get(2, 0),
        'num_terminals': degree_histogram.get(1, 0),
    }

    return stats


def get_connected_components(network: VesselNetwork) -> List[List[int]]:
    """
    Group vessels into connected components.

    Returns
    -------
    components : list of list of int
        Vessel IDs per component, largest component first
    """
    G, _ = to_networkx_graph(network)

    components = []
    for comp_nodes in nx.connected_components(G):
        vessel_ids = {
            data['vessel_id']
            for _, _, data in G.subgraph(comp_nodes).edges(data=True)
            if data['vessel_id'] is not None
        }
        if vessel_ids:
            components.append(sorted(vessel_ids))

    components.sort(key=len, reverse=True)
    return components
