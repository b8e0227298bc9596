"""
Adapter for converting between VesselNetwork and NetworkX graphs.

Each segment becomes one graph edge, so interior vessel nodes appear as
degree-2 graph nodes. Graphs are multigraphs keyed by segment ID because two
vessels may join the same pair of nodes.
"""

import networkx as nx
from typing import Dict, Tuple, Optional
from ..core.network import VesselNetwork


def to_networkx_graph(network: VesselNetwork) -> Tuple[nx.MultiGraph, Dict[int, int]]:
    """
    Convert VesselNetwork to a NetworkX multigraph with one edge per segment.

    The resulting graph has node attributes:
    - 'coord': [x, y, z] position as list
    - 'is_input', 'is_output': boundary flags
    - 'pressure': float
    - 'original_id': int node ID in the network

    And edge attributes:
    - 'length': float segment length
    - 'radius': float segment radius
    - 'segment_id': int original segment ID
    - 'vessel_id': int or None owning vessel
    - 'haematocrit', 'flow_rate': segment flow values

    Parameters
    ----------
    network : VesselNetwork
        The vessel network to convert

    Returns
    -------
    G : nx.MultiGraph
        NetworkX graph representation, edge keys are segment IDs
    node_id_map : dict
        Mapping from VesselNetwork node IDs to NetworkX node IDs
    """
    G = nx.MultiGraph()
    node_id_map = {}

    for node_id, node in network.nodes.items():
        nx_id = len(node_id_map)
        node_id_map[node_id] = nx_id

        G.add_node(
            nx_id,
            coord=[node.position.x, node.position.y, node.position.z],
            is_input=node.flow_properties.is_input_node,
            is_output=node.flow_properties.is_output_node,
            pressure=node.flow_properties.pressure,
            original_id=node_id,
        )

    for seg_id, segment in network.segments.items():
        start_nx = node_id_map[segment.node_ids[0]]
        end_nx = node_id_map[segment.node_ids[1]]

        G.add_edge(
            start_nx,
            end_nx,
            key=seg_id,
            length=segment.get_length(),
            radius=segment.radius,
            segment_id=seg_id,
            vessel_id=segment.vessel_id,
            haematocrit=segment.flow_properties.haematocrit,
            flow_rate=segment.flow_properties.flow_rate,
        )

    return G, node_id_map


def from_networkx_graph(
    G: nx.Graph,
    metadata: Optional[dict] = None,
    default_radius: float = 1.0,
) -> Tuple[VesselNetwork, Dict[int, int]]:
    """
    Convert NetworkX graph to VesselNetwork.

    Every edge becomes a single-segment vessel, parallel multigraph edges
    included. For an edge ``(u, v)`` the vessel runs from ``u`` to ``v``; a
    'flow_rate' edge attribute is taken as signed in that direction.

    Parameters
    ----------
    G : nx.Graph or nx.MultiGraph
        NetworkX graph with node attribute 'coord'
    metadata : dict, optional
        Metadata for the new network
    default_radius : float
        Radius used for edges without a 'radius' attribute

    Returns
    -------
    network : VesselNetwork
        Reconstructed vessel network
    nx_to_network : dict
        Mapping from NetworkX node IDs to VesselNetwork node IDs
    """
    network = VesselNetwork(metadata=metadata)
    nx_to_network = {}

    for nx_id in G.nodes():
        node_data = G.nodes[nx_id]
        node = network.add_node(
            node_data.get('coord', [0.0, 0.0, 0.0]),
            is_input=node_data.get('is_input', False),
            is_output=node_data.get('is_output', False),
            pressure=node_data.get('pressure', 0.0),
        )
        nx_to_network[nx_id] = node.id

    for u, v, edge_data in G.edges(data=True):
        vessel = network.add_vessel_from_nodes(
            [nx_to_network[u], nx_to_network[v]],
            radius=edge_data.get('radius', default_radius),
        )
        vessel.flow_properties.flow_rate = edge_data.get('flow_rate', 0.0)
        vessel.flow_properties.haematocrit = edge_data.get('haematocrit', 0.0)

    return network, nx_to_network
