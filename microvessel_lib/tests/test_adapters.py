"""
Tests for the NetworkX adapter and graph-based analysis.
"""

import networkx as nx
import pytest
from microvessel_lib.core.network import VesselNetwork
from microvessel_lib.adapters.networkx_adapter import to_networkx_graph, from_networkx_graph
from microvessel_lib.analysis.structure import compute_branch_stats, get_connected_components
from microvessel_lib.analysis.query import (
    get_input_nodes,
    get_output_nodes,
    measure_vessel_lengths,
    summarize_haematocrit,
)
from microvessel_lib.analysis.haematocrit import HaematocritSolver


def test_to_networkx(y_bifurcation):
    network, parent, daughter_a, daughter_b = y_bifurcation

    G, node_id_map = to_networkx_graph(network)

    assert G.number_of_nodes() == 4
    assert G.number_of_edges() == 3
    inlet = parent.get_start_node()
    assert G.nodes[node_id_map[inlet.id]]["is_input"]
    junction_nx = node_id_map[parent.get_end_node().id]
    assert G.degree[junction_nx] == 3
    lengths = sorted(d["length"] for _, _, d in G.edges(data=True))
    assert lengths[0] == pytest.approx(1.0)


def test_from_networkx_builds_solvable_network():
    G = nx.Graph()
    G.add_node("in", coord=[0, 0, 0], is_input=True)
    G.add_node("j", coord=[1, 0, 0])
    G.add_node("a", coord=[2, 1, 0], is_output=True)
    G.add_node("b", coord=[2, -1, 0], is_output=True)
    G.add_edge("in", "j", radius=1.0, flow_rate=2.0)
    G.add_edge("j", "a", radius=1.0, flow_rate=1.0)
    G.add_edge("j", "b", radius=1.0, flow_rate=1.0)

    network, mapping = from_networkx_graph(G)

    assert network.get_number_of_vessels() == 3
    assert network.get_node(mapping["in"]).flow_properties.is_input_node
    assert network.is_bifurcation(mapping["j"])

    HaematocritSolver(network).calculate()
    for vessel in network.get_vessels():
        assert vessel.flow_properties.haematocrit == pytest.approx(0.45)


def test_networkx_roundtrip_keeps_flow(y_bifurcation):
    network, parent, daughter_a, daughter_b = y_bifurcation

    G, _ = to_networkx_graph(network)
    rebuilt, _ = from_networkx_graph(G)

    flows = sorted(v.flow_properties.flow_rate for v in rebuilt.get_vessels())
    assert flows == pytest.approx([1.0, 1.0, 2.0])


def test_connected_components():
    network = VesselNetwork()
    a, b, c = (network.add_node((float(x), 0, 0)) for x in range(3))
    v0 = network.add_vessel_from_nodes([a, b])
    v1 = network.add_vessel_from_nodes([b, c])
    d, e = network.add_node((0, 5, 0)), network.add_node((1, 5, 0))
    v2 = network.add_vessel_from_nodes([d, e])

    components = get_connected_components(network)

    assert components == [[v0.id, v1.id], [v2.id]]


def test_branch_stats(y_bifurcation):
    network, parent, daughter_a, daughter_b = y_bifurcation

    stats = compute_branch_stats(network)

    assert stats["num_bifurcations"] == 1
    assert stats["num_terminals"] == 3
    assert stats["num_pass_through"] == 0


def test_branch_stats_ignores_interior_nodes():
    network = VesselNetwork()
    nodes = [network.add_node((float(x), 0, 0)) for x in range(5)]
    network.add_vessel_from_nodes(nodes)

    stats = compute_branch_stats(network)

    assert stats["degree_histogram"] == {1: 2}


def test_boundary_node_queries(y_bifurcation):
    network, parent, daughter_a, daughter_b = y_bifurcation

    assert get_input_nodes(network) == [parent.get_start_node().id]
    assert set(get_output_nodes(network)) == {
        daughter_a.get_end_node().id,
        daughter_b.get_end_node().id,
    }


def test_vessel_length_stats(linear_chain):
    network, vessels = linear_chain

    stats = measure_vessel_lengths(network)

    assert stats["count"] == 3
    assert stats["total"] == pytest.approx(3.0)
    assert stats["mean"] == pytest.approx(1.0)


def test_haematocrit_summary(y_bifurcation):
    network, parent, daughter_a, daughter_b = y_bifurcation
    HaematocritSolver(network).calculate()

    summary = summarize_haematocrit(network)

    assert summary["count"] == 3
    assert summary["mean"] == pytest.approx(0.45)
    assert summary["flow_weighted_mean"] == pytest.approx(0.45)


def test_haematocrit_summary_empty():
    summary = summarize_haematocrit(VesselNetwork())

    assert summary["count"] == 0
    assert summary["flow_weighted_mean"] == 0.0


def test_parallel_vessels_kept_apart():
    """Two vessels joining the same pair of nodes stay separate edges."""
    network = VesselNetwork()
    a = network.add_node((0, 0, 0))
    b = network.add_node((1, 0, 0))
    v0 = network.add_vessel_from_nodes([a, b])
    v1 = network.add_vessel_from_nodes([a, b])
    v1.flow_properties.flow_rate = 2.0

    G, _ = to_networkx_graph(network)

    assert G.number_of_edges() == 2
    assert {d["vessel_id"] for _, _, d in G.edges(data=True)} == {v0.id, v1.id}
    assert get_connected_components(network) == [[v0.id, v1.id]]

    rebuilt, _ = from_networkx_graph(G)
    assert rebuilt.get_number_of_vessels() == 2
    flows = sorted(v.flow_properties.flow_rate for v in rebuilt.get_vessels())
    assert flows == pytest.approx([0.0, 2.0])
