"""
Construction operations for building vessel networks.

These wrap the core network methods and report structural problems as
failure results instead of raising.
"""

import logging
from numbers import Integral
from typing import Dict, Optional, Sequence, Union

from ..core.types import PointLike, as_point
from ..core.network import VesselNetwork, VesselNode
from ..core.vessel import SegmentLocation
from ..core.errors import VesselNetworkError
from ..core.result import OperationResult, ErrorCode

logger = logging.getLogger(__name__)


def create_network(metadata: Optional[dict] = None) -> VesselNetwork:
    """
    Create a new empty vessel network.

    Parameters
    ----------
    metadata : dict, optional
        Network metadata (name, units, etc.)

    Returns
    -------
    network : VesselNetwork
        New empty network

    Example
    -------
    >>> from microvessel_lib import create_network
    >>> network = create_network({"name": "tumour bed"})
    """
    if metadata is None:
        metadata = {
            "name": "Vessel Network",
            "units": "micrometers",
        }

    return VesselNetwork(metadata=metadata)


def add_input_node(
    network: VesselNetwork,
    position: PointLike,
    pressure: float = 0.0,
) -> OperationResult:
    """
    Add a flow input node to the network.

    Returns
    -------
    result : OperationResult
        Result with new_ids['node'] containing the input node ID
    """
    point = as_point(position)
    node = network.add_node(point, is_input=True, pressure=pressure)

    return OperationResult.success(
        message=f"Added input node at {point.to_tuple()}",
        new_ids={"node": node.id},
    )


def add_output_node(
    network: VesselNetwork,
    position: PointLike,
    pressure: float = 0.0,
) -> OperationResult:
    """
    Add a flow output node to the network.

    Returns
    -------
    result : OperationResult
        Result with new_ids['node'] containing the output node ID
    """
    point = as_point(position)
    node = network.add_node(point, is_output=True, pressure=pressure)

    return OperationResult.success(
        message=f"Added output node at {point.to_tuple()}",
        new_ids={"node": node.id},
    )


def add_vessel(
    network: VesselNetwork,
    path: Sequence[Union[int, VesselNode, PointLike]],
    radius: float,
) -> OperationResult:
    """
    Add a vessel along a path of existing node IDs and/or new positions.

    Positions in ``path`` create new internal nodes; integers and nodes
    refer to existing nodes, which is how vessels are joined at junctions.

    Parameters
    ----------
    network : VesselNetwork
        Network to modify
    path : sequence
        At least two entries, start to end
    radius : float
        Radius of every segment

    Returns
    -------
    result : OperationResult
        Result with new_ids['vessel'], new_ids['nodes'] (created node IDs)
        and new_ids['segments']

    Example
    -------
    >>> inlet = add_input_node(network, (0, 0, 0)).new_ids['node']
    >>> result = add_vessel(network, [inlet, (50, 0, 0), (100, 0, 0)], radius=10.0)
    """
    if len(path) < 2:
        return OperationResult.failure(
            message="A vessel path needs at least two points",
            errors=["Insufficient number of nodes to define a segment."],
            error_codes=[ErrorCode.STRUCTURAL_ERROR.value],
        )
    if radius <= 0:
        return OperationResult.failure(
            message=f"Vessel radius must be positive, got {radius}",
            error_codes=[ErrorCode.INVALID_PARAMETER.value],
        )

    created = []
    nodes = []
    try:
        for entry in path:
            if isinstance(entry, (Integral, VesselNode)):
                nodes.append(network.get_node(entry))
            else:
                node = network.add_node(entry)
                created.append(node)
                nodes.append(node)
        vessel = network.add_vessel_from_nodes(nodes, radius=radius)
    except VesselNetworkError as e:
        for node in created:
            network.remove_node(node)
        return OperationResult.from_error("Could not add vessel", e)

    return OperationResult.success(
        message=f"Added vessel {vessel.id} with {vessel.get_number_of_segments()} segments",
        new_ids={
            "vessel": vessel.id,
            "nodes": [node.id for node in created],
            "segments": vessel.segment_ids,
        },
        metadata={"length": vessel.get_length()},
    )


def extend_vessel(
    network: VesselNetwork,
    vessel_id: int,
    position: PointLike,
    at_end: bool = True,
    radius: Optional[float] = None,
) -> OperationResult:
    """
    Grow a vessel by one segment from its start or end node.

    Parameters
    ----------
    vessel_id : int
        Vessel to extend
    position : tuple or Point3D
        Location of the new end node
    at_end : bool
        Extend from the end node (True) or the start node (False)
    radius : float, optional
        Radius of the new segment; defaults to the vessel's mean radius

    Returns
    -------
    result : OperationResult
        Result with new_ids['node'] and new_ids['segment']
    """
    try:
        vessel = network.get_vessel(vessel_id)
        anchor = vessel.get_end_node() if at_end else vessel.get_start_node()
        node = network.add_node(position)
        segment = network.add_segment(anchor, node, radius=radius or vessel.get_radius())
        segment.flow_properties = vessel.get_segment(
            vessel.get_number_of_segments() - 1 if at_end else 0
        ).flow_properties.copy()
        try:
            vessel.add_segment(segment)
        except VesselNetworkError:
            network.remove_segment(segment)
            network.remove_node(node)
            raise
    except VesselNetworkError as e:
        return OperationResult.from_error(f"Could not extend vessel {vessel_id}", e)

    return OperationResult.success(
        message=f"Extended vessel {vessel_id} to {as_point(position).to_tuple()}",
        new_ids={"node": node.id, "segment": segment.id},
    )


def trim_vessel(network: VesselNetwork, vessel_id: int, at_end: bool = True) -> OperationResult:
    """Remove the last (or first) segment of a vessel."""
    try:
        vessel = network.get_vessel(vessel_id)
        vessel.remove_segments(SegmentLocation.END if at_end else SegmentLocation.START)
    except VesselNetworkError as e:
        return OperationResult.from_error(f"Could not trim vessel {vessel_id}", e)

    return OperationResult.success(
        message=f"Trimmed vessel {vessel_id}",
        metadata={"num_segments": vessel.get_number_of_segments()},
    )


def divide_vessel_segment(
    network: VesselNetwork,
    vessel_id: int,
    location: PointLike,
    distance_tolerance: float = 1e-6,
) -> OperationResult:
    """
    Insert a node into a vessel at a location on one of its segments.

    Returns
    -------
    result : OperationResult
        Result with new_ids['node'] (the new node, or an existing end node
        when ``location`` coincides with one)
    """
    try:
        vessel = network.get_vessel(vessel_id)
        node = vessel.divide_segment(location, distance_tolerance=distance_tolerance)
    except VesselNetworkError as e:
        return OperationResult.from_error(f"Could not divide vessel {vessel_id}", e)

    return OperationResult.success(
        message=f"Divided vessel {vessel_id} at node {node.id}",
        new_ids={"node": node.id},
        metadata={"num_segments": vessel.get_number_of_segments()},
    )


def assign_flow_rates(network: VesselNetwork, flow_rates: Dict[int, float]) -> OperationResult:
    """
    Write externally computed flow rates onto vessels.

    Parameters
    ----------
    flow_rates : dict
        Signed flow rate per vessel ID, positive from start node to end node

    Returns
    -------
    result : OperationResult
        Success, with a warning for every network vessel left without a rate
    """
    for vessel_id in flow_rates:
        if vessel_id not in network.vessels:
            return OperationResult.failure(
                message=f"Vessel {vessel_id} not in network",
                error_codes=[ErrorCode.VESSEL_NOT_FOUND.value],
            )

    for vessel_id, flow_rate in flow_rates.items():
        network.vessels[vessel_id].flow_properties.flow_rate = flow_rate

    result = OperationResult.success(
        message=f"Assigned flow rates to {len(flow_rates)} vessels",
    )
    for vessel_id in network.vessels:
        if vessel_id not in flow_rates:
            result.add_warning(
                f"Vessel {vessel_id} has no assigned flow rate", ErrorCode.MISSING_FLOW
            )
    if result.warnings:
        logger.debug("%d vessels left without flow rates", len(result.warnings))

    return result
