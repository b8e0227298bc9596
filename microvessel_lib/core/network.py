"""
Core network data structures.

The network is an arena: nodes, segments and vessels live in tables owned by
``VesselNetwork`` and refer to each other through stable integer IDs.
"""

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Any, Sequence, Tuple, Union

from .types import Point3D, PointLike, as_point, point_segment_distance
from .ids import IDGenerator
from .flow import NodeFlowProperties, SegmentFlowProperties
from .errors import StructuralError
from .vessel import Vessel

logger = logging.getLogger(__name__)

COINCIDENCE_TOLERANCE = 1e-6


@dataclass(eq=False)
class VesselNode:
    """
    Point in a vessel network.

    Nodes compare by identity only; two nodes at the same location are
    still different nodes.
    """

    id: int
    position: Point3D
    flow_properties: NodeFlowProperties = field(default_factory=NodeFlowProperties)
    reference_length_scale: float = 1.0
    segment_ids: List[int] = field(default_factory=list)
    attributes: Dict[str, Any] = field(default_factory=dict)
    _network: Optional["VesselNetwork"] = field(default=None, repr=False)

    def _require_network(self) -> "VesselNetwork":
        if self._network is None:
            raise StructuralError(f"Node {self.id} is not attached to a network")
        return self._network

    def get_segments(self) -> List["VesselSegment"]:
        """Get the segments attached to this node."""
        network = self._require_network()
        return [network.segments[sid] for sid in self.segment_ids]

    def get_segment(self, index: int) -> "VesselSegment":
        if index < 0 or index >= len(self.segment_ids):
            raise StructuralError("Requested segment index out of range")
        return self._require_network().segments[self.segment_ids[index]]

    def get_number_of_segments(self) -> int:
        return len(self.segment_ids)

    def get_vessels(self) -> List[Vessel]:
        """Get the distinct vessels owning segments attached to this node."""
        network = self._require_network()
        vessels = []
        seen = set()
        for seg in self.get_segments():
            if seg.vessel_id is None or seg.vessel_id in seen:
                continue
            seen.add(seg.vessel_id)
            vessels.append(network.vessels[seg.vessel_id])
        return vessels

    def get_distance(self, location: PointLike) -> float:
        return self.position.distance_to(as_point(location))

    def is_coincident(self, location: PointLike) -> bool:
        """Check whether a location coincides with this node."""
        return self.get_distance(location) / self.reference_length_scale < COINCIDENCE_TOLERANCE

    def set_location(self, location: PointLike) -> None:
        point = as_point(location)
        self.position = Point3D(point.x, point.y, point.z)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "position": self.position.to_dict(),
            "flow_properties": self.flow_properties.to_dict(),
            "reference_length_scale": self.reference_length_scale,
            "attributes": self.attributes,
        }


@dataclass(eq=False)
class VesselSegment:
    """
    Straight tube between exactly two nodes.

    A segment belongs to at most one vessel at a time.
    """

    id: int
    node_ids: Tuple[int, int]
    radius: float = 1.0
    flow_properties: SegmentFlowProperties = field(default_factory=SegmentFlowProperties)
    vessel_id: Optional[int] = None
    attributes: Dict[str, Any] = field(default_factory=dict)
    _network: Optional["VesselNetwork"] = field(default=None, repr=False)

    def _require_network(self) -> "VesselNetwork":
        if self._network is None:
            raise StructuralError(f"Segment {self.id} is not attached to a network")
        return self._network

    def get_node(self, index: int) -> VesselNode:
        if index not in (0, 1):
            raise StructuralError("A segment only has nodes at index 0 and 1")
        return self._require_network().nodes[self.node_ids[index]]

    def get_nodes(self) -> Tuple[VesselNode, VesselNode]:
        return self.get_node(0), self.get_node(1)

    def has_node(self, node: Union[VesselNode, int]) -> bool:
        node_id = node.id if isinstance(node, VesselNode) else node
        return node_id in self.node_ids

    def is_connected_to(self, other: "VesselSegment") -> bool:
        """True if the two segments share a node."""
        if other is self:
            return False
        return bool(set(self.node_ids) & set(other.node_ids))

    def get_opposite_node(self, node: Union[VesselNode, int]) -> VesselNode:
        node_id = node.id if isinstance(node, VesselNode) else node
        if node_id == self.node_ids[0]:
            return self.get_node(1)
        if node_id == self.node_ids[1]:
            return self.get_node(0)
        raise StructuralError(f"Node {node_id} is not on segment {self.id}")

    def get_length(self) -> float:
        start, end = self.get_nodes()
        return start.position.distance_to(end.position)

    def get_distance(self, location: PointLike) -> float:
        """Distance from a location to this segment."""
        start, end = self.get_nodes()
        return point_segment_distance(as_point(location), start.position, end.position)

    def get_midpoint(self) -> Point3D:
        start, end = self.get_nodes()
        return Point3D.from_array((start.position.to_array() + end.position.to_array()) / 2.0)

    def get_vessel(self) -> Optional[Vessel]:
        if self.vessel_id is None:
            return None
        return self._require_network().vessels.get(self.vessel_id)

    def copy_data_from(self, other: "VesselSegment") -> None:
        """Copy radius, flow properties and attributes from another segment."""
        self.radius = other.radius
        self.flow_properties = other.flow_properties.copy()
        self.attributes = dict(other.attributes)

    def remove(self) -> None:
        """Detach from vessel and nodes and drop from the network."""
        self._require_network().remove_segment(self)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "node_ids": list(self.node_ids),
            "radius": self.radius,
            "flow_properties": self.flow_properties.to_dict(),
            "vessel_id": self.vessel_id,
            "attributes": self.attributes,
        }


NodeRef = Union[VesselNode, int]
SegmentRef = Union[VesselSegment, int]
VesselRef = Union[Vessel, int]


class VesselNetwork:
    """
    Vessel network: owned tables of nodes, segments and vessels.

    Bifurcations are implicit wherever vessels share a node.
    """

    def __init__(self, metadata: Optional[Dict[str, Any]] = None):
        """
        Initialize vessel network.

        Parameters
        ----------
        metadata : dict, optional
            Network metadata (name, units, etc.)
        """
        self.nodes: Dict[int, VesselNode] = {}
        self.segments: Dict[int, VesselSegment] = {}
        self.vessels: Dict[int, Vessel] = {}
        self.metadata = metadata or {}
        self.id_gen = IDGenerator()

    # ------------------------------------------------------------------
    # lookups

    def get_node(self, node: NodeRef) -> VesselNode:
        """Get node by ID (or validate a node object belongs here)."""
        node_id = node.id if isinstance(node, VesselNode) else node
        found = self.nodes.get(node_id)
        if found is None or (isinstance(node, VesselNode) and found is not node):
            raise StructuralError(f"Node {node_id} not in network")
        return found

    def get_segment(self, segment: SegmentRef) -> VesselSegment:
        """Get segment by ID (or validate a segment object belongs here)."""
        seg_id = segment.id if isinstance(segment, VesselSegment) else segment
        found = self.segments.get(seg_id)
        if found is None or (isinstance(segment, VesselSegment) and found is not segment):
            raise StructuralError(f"Segment {seg_id} not in network")
        return found

    def get_vessel(self, vessel: VesselRef) -> Vessel:
        """Get vessel by ID (or validate a vessel object belongs here)."""
        vessel_id = vessel.id if isinstance(vessel, Vessel) else vessel
        found = self.vessels.get(vessel_id)
        if found is None or (isinstance(vessel, Vessel) and found is not vessel):
            raise StructuralError(f"Vessel {vessel_id} not in network")
        return found

    def get_nodes(self) -> List[VesselNode]:
        return list(self.nodes.values())

    def get_segments(self) -> List[VesselSegment]:
        return list(self.segments.values())

    def get_vessels(self) -> List[Vessel]:
        """Vessels in insertion order."""
        return list(self.vessels.values())

    def get_number_of_nodes(self) -> int:
        return len(self.nodes)

    def get_number_of_vessels(self) -> int:
        return len(self.vessels)

    # ------------------------------------------------------------------
    # nodes

    def add_node(
        self,
        position: PointLike,
        is_input: bool = False,
        is_output: bool = False,
        pressure: float = 0.0,
        reference_length_scale: float = 1.0,
        attributes: Optional[Dict[str, Any]] = None,
    ) -> VesselNode:
        """
        Add a standalone node to the network.

        Parameters
        ----------
        position : Point3D or sequence
            Node location
        is_input, is_output : bool
            Flow boundary flags
        pressure : float
            Nodal pressure, if known
        reference_length_scale : float
            Length scale used to make distance tolerances dimensionless
        attributes : dict, optional
            Free-form node attributes

        Returns
        -------
        VesselNode
            The new node
        """
        if reference_length_scale <= 0:
            raise ValueError("reference_length_scale must be positive")
        point = as_point(position)
        node = VesselNode(
            id=self.id_gen.next_node_id(),
            position=Point3D(point.x, point.y, point.z),
            flow_properties=NodeFlowProperties(
                is_input_node=is_input,
                is_output_node=is_output,
                pressure=pressure,
            ),
            reference_length_scale=reference_length_scale,
            attributes=dict(attributes or {}),
            _network=self,
        )
        self.nodes[node.id] = node
        return node

    def copy_node(self, node: NodeRef) -> VesselNode:
        """Create a new node with the same location and properties, but no segments."""
        source = self.get_node(node)
        copy = VesselNode(
            id=self.id_gen.next_node_id(),
            position=Point3D(source.position.x, source.position.y, source.position.z),
            flow_properties=source.flow_properties.copy(),
            reference_length_scale=source.reference_length_scale,
            attributes=dict(source.attributes),
            _network=self,
        )
        self.nodes[copy.id] = copy
        return copy

    def remove_node(self, node: NodeRef) -> None:
        """Remove a node that no segment references."""
        target = self.get_node(node)
        if target.segment_ids:
            raise StructuralError(
                f"Node {target.id} is still referenced by segments {target.segment_ids}"
            )
        del self.nodes[target.id]
        target._network = None

    def prune_orphan_nodes(self) -> List[int]:
        """Remove every node without attached segments, returning their IDs."""
        orphan_ids = [nid for nid, node in self.nodes.items() if not node.segment_ids]
        for nid in orphan_ids:
            self.remove_node(nid)
        if orphan_ids:
            logger.debug("Pruned %d orphan nodes", len(orphan_ids))
        return orphan_ids

    # ------------------------------------------------------------------
    # segments

    def add_segment(self, node0: NodeRef, node1: NodeRef, radius: float = 1.0) -> VesselSegment:
        """Create a segment between two nodes and attach it to both."""
        first = self.get_node(node0)
        second = self.get_node(node1)
        if first is second:
            raise StructuralError("A segment needs two distinct nodes")
        if radius <= 0:
            raise ValueError(f"Segment radius must be positive, got {radius}")
        segment = VesselSegment(
            id=self.id_gen.next_segment_id(),
            node_ids=(first.id, second.id),
            radius=float(radius),
            _network=self,
        )
        self.segments[segment.id] = segment
        first.segment_ids.append(segment.id)
        second.segment_ids.append(segment.id)
        return segment

    def remove_segment(self, segment: SegmentRef) -> None:
        """Detach a segment from its nodes and drop it. Nodes are kept."""
        target = self.get_segment(segment)
        if target.vessel_id is not None:
            owner = self.vessels.get(target.vessel_id)
            if owner is not None and target.id in owner.segment_ids:
                raise StructuralError(
                    f"Segment {target.id} is still part of vessel {owner.id}"
                )
        target.vessel_id = None
        for nid in target.node_ids:
            node = self.nodes.get(nid)
            if node is not None and target.id in node.segment_ids:
                node.segment_ids.remove(target.id)
        del self.segments[target.id]
        target._network = None

    # ------------------------------------------------------------------
    # vessels

    def add_vessel(self, segments: Union[SegmentRef, Sequence[SegmentRef]]) -> Vessel:
        """
        Create a vessel from one segment or an ordered list of connected segments.

        Raises
        ------
        StructuralError
            If the segments are not a simple connected chain or already
            belong to a vessel.
        """
        if isinstance(segments, (VesselSegment, int)):
            segments = [segments]
        resolved = [self.get_segment(s) for s in segments]
        for seg in resolved:
            if seg.vessel_id is not None:
                raise StructuralError(
                    f"Segment {seg.id} already belongs to vessel {seg.vessel_id}"
                )
        vessel = Vessel(self.id_gen.next_vessel_id(), self, [seg.id for seg in resolved])
        for seg in resolved:
            seg.vessel_id = vessel.id
        self.vessels[vessel.id] = vessel
        logger.debug("Added vessel %d with %d segments", vessel.id, len(resolved))
        return vessel

    def add_vessel_from_nodes(self, nodes: Sequence[NodeRef], radius: float = 1.0) -> Vessel:
        """Create a vessel with one new segment per consecutive node pair."""
        if len(nodes) < 2:
            raise StructuralError("Insufficient number of nodes to define a segment.")
        resolved = [self.get_node(n) for n in nodes]
        segments: List[VesselSegment] = []
        try:
            for i in range(1, len(resolved)):
                segments.append(self.add_segment(resolved[i - 1], resolved[i], radius=radius))
            return self.add_vessel(segments)
        except (StructuralError, ValueError):
            for seg in segments:
                self.remove_segment(seg)
            raise

    def remove_vessel(self, vessel: VesselRef, delete_segments: bool = True) -> None:
        """
        Remove a vessel from the network.

        With ``delete_segments`` the vessel's segments are detached from their
        nodes and dropped; otherwise they stay in the network unowned.
        """
        target = self.get_vessel(vessel)
        if delete_segments:
            target.remove()
        else:
            target.release_segments()
        del self.vessels[target.id]
        logger.debug("Removed vessel %d", target.id)

    # ------------------------------------------------------------------
    # topology queries

    def get_node_degree(self, node: NodeRef) -> int:
        """Number of distinct vessels meeting at a node."""
        return len(self.get_node(node).get_vessels())

    def is_bifurcation(self, node: NodeRef) -> bool:
        return self.get_node_degree(node) >= 3

    def get_bifurcation_nodes(self) -> List[VesselNode]:
        return [node for node in self.nodes.values() if self.is_bifurcation(node)]

    def get_vessel_end_nodes(self) -> List[VesselNode]:
        """Distinct start/end nodes over all vessels."""
        end_nodes = []
        seen = set()
        for vessel in self.vessels.values():
            if vessel.get_number_of_segments() == 0:
                continue
            for node in (vessel.get_start_node(), vessel.get_end_node()):
                if node.id not in seen:
                    seen.add(node.id)
                    end_nodes.append(node)
        return end_nodes

    def get_input_nodes(self) -> List[VesselNode]:
        return [n for n in self.nodes.values() if n.flow_properties.is_input_node]

    def get_output_nodes(self) -> List[VesselNode]:
        return [n for n in self.nodes.values() if n.flow_properties.is_output_node]

    # ------------------------------------------------------------------
    # serialization

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "schema_version": "1.0",
            "nodes": {nid: node.to_dict() for nid, node in self.nodes.items()},
            "segments": {sid: seg.to_dict() for sid, seg in self.segments.items()},
            "vessels": {vid: vessel.to_dict() for vid, vessel in self.vessels.items()},
            "metadata": self.metadata,
            "id_gen_state": self.id_gen.get_state(),
        }

    @classmethod
    def from_dict(cls, d: dict) -> "VesselNetwork":
        """Create from dictionary."""
        network = cls(metadata=dict(d.get("metadata", {})))

        for nid, node_dict in d["nodes"].items():
            node = VesselNode(
                id=int(nid),
                position=Point3D.from_dict(node_dict["position"]),
                flow_properties=NodeFlowProperties.from_dict(node_dict.get("flow_properties", {})),
                reference_length_scale=node_dict.get("reference_length_scale", 1.0),
                attributes=dict(node_dict.get("attributes", {})),
                _network=network,
            )
            network.nodes[node.id] = node
            network.id_gen.reserve("node", node.id)

        for sid, seg_dict in d["segments"].items():
            n0, n1 = (int(n) for n in seg_dict["node_ids"])
            segment = VesselSegment(
                id=int(sid),
                node_ids=(n0, n1),
                radius=seg_dict.get("radius", 1.0),
                flow_properties=SegmentFlowProperties.from_dict(seg_dict.get("flow_properties", {})),
                attributes=dict(seg_dict.get("attributes", {})),
                _network=network,
            )
            network.segments[segment.id] = segment
            network.get_node(n0).segment_ids.append(segment.id)
            network.get_node(n1).segment_ids.append(segment.id)
            network.id_gen.reserve("segment", segment.id)

        for vid, vessel_dict in d.get("vessels", {}).items():
            seg_ids = [int(s) for s in vessel_dict["segment_ids"]]
            for sid in seg_ids:
                network.get_segment(sid)
            vessel = Vessel(int(vid), network, seg_ids)
            vessel.attributes = dict(vessel_dict.get("attributes", {}))
            for sid in seg_ids:
                network.segments[sid].vessel_id = vessel.id
            network.vessels[vessel.id] = vessel
            network.id_gen.reserve("vessel", vessel.id)

        if "id_gen_state" in d:
            network.id_gen.set_state(d["id_gen_state"])

        return network
