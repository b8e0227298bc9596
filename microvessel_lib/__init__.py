"""
Microvessel Library - vessel network topology and haematocrit distribution

Vessel networks for tissue and tumour growth simulations: nodes, segments and
vessels in a mutable graph with strict connectivity checks, and an iterative
solver that splits red blood cells across bifurcations.

Key Features:
- Arena-backed network with stable IDs for nodes, segments and vessels
- Vessel editing (append, prepend, divide, trim) that preserves simple paths
- Haematocrit solver with a phase-separation rule at bifurcations
- Structured results and error codes

Example Usage:
    from microvessel_lib import create_network, add_input_node, add_vessel
    from microvessel_lib import assign_flow_rates, solve_haematocrit

    network = create_network()
    inlet = add_input_node(network, position=(0, 0, 0)).new_ids['node']
    vessel_id = add_vessel(network, [inlet, (100, 0, 0)], radius=10.0).new_ids['vessel']

    assign_flow_rates(network, {vessel_id: 1.0e-12})
    result = solve_haematocrit(network, arterial_haematocrit=0.45)
"""

__version__ = "1.0.0"

from .core.types import Point3D
from .core.network import VesselNode, VesselSegment, VesselNetwork
from .core.vessel import Vessel, SegmentLocation
from .core.result import OperationResult, OperationStatus, ErrorCode
from .core.errors import (
    VesselNetworkError,
    StructuralError,
    UnsupportedTopologyError,
    ConvergenceError,
)

from .ops.build import (
    create_network,
    add_input_node,
    add_output_node,
    add_vessel,
    extend_vessel,
    trim_vessel,
    divide_vessel_segment,
    assign_flow_rates,
)

from .analysis.haematocrit import HaematocritSolver, HaematocritSolverParams, solve_haematocrit
from .analysis.query import measure_vessel_lengths, summarize_haematocrit
from .analysis.structure import compute_branch_stats, get_connected_components

from .adapters.networkx_adapter import to_networkx_graph, from_networkx_graph

__all__ = [
    "Point3D",
    "VesselNode",
    "VesselSegment",
    "VesselNetwork",
    "Vessel",
    "SegmentLocation",
    "OperationResult",
    "OperationStatus",
    "ErrorCode",
    "VesselNetworkError",
    "StructuralError",
    "UnsupportedTopologyError",
    "ConvergenceError",
    "create_network",
    "add_input_node",
    "add_output_node",
    "add_vessel",
    "extend_vessel",
    "trim_vessel",
    "divide_vessel_segment",
    "assign_flow_rates",
    "HaematocritSolver",
    "HaematocritSolverParams",
    "solve_haematocrit",
    "measure_vessel_lengths",
    "summarize_haematocrit",
    "compute_branch_stats",
    "get_connected_components",
    "to_networkx_graph",
    "from_networkx_graph",
]
