"""
Vessel: an ordered chain of segments forming one simple, non-branching path.

Branching only ever happens between different vessels that share a node,
never inside a single vessel.
"""

import logging
from enum import Enum
from typing import Dict, List, Optional, Any, Sequence, TYPE_CHECKING

from .types import PointLike, as_point
from .flow import VesselFlowProperties
from .errors import StructuralError

if TYPE_CHECKING:
    from .network import VesselNetwork, VesselNode, VesselSegment

logger = logging.getLogger(__name__)


class SegmentLocation(Enum):
    """End of a vessel that segments can be removed from."""
    START = "start"
    END = "end"


def check_segment_order(segments: Sequence["VesselSegment"]) -> None:
    """Raise if neighbouring segments do not share a node or duplicate each other."""
    for i in range(1, len(segments)):
        if not segments[i].is_connected_to(segments[i - 1]):
            raise StructuralError("Input vessel segments are not attached in the correct order.")
        if set(segments[i].node_ids) == set(segments[i - 1].node_ids):
            raise StructuralError("Input vessel segments duplicate the same connection.")


def check_non_adjacent_connections(segments: Sequence["VesselSegment"]) -> None:
    """Raise if two non-neighbouring segments share a node (loop or branch)."""
    for i in range(len(segments)):
        for j in range(i + 2, len(segments)):
            if segments[i].is_connected_to(segments[j]):
                raise StructuralError("Input vessel segments are not correctly connected.")


class Vessel:
    """
    Ordered chain of connected segments.

    The start-to-end node sequence is a cached view of the segment list.
    It is rebuilt lazily by the node accessors after any change to the
    segments.
    """

    def __init__(self, vessel_id: int, network: "VesselNetwork", segment_ids: Sequence[int]):
        """
        Create a vessel over existing segments.

        Use ``VesselNetwork.add_vessel`` rather than calling this directly;
        the network assigns IDs and segment ownership.
        """
        self.id = vessel_id
        self._network = network
        self._segment_ids: List[int] = list(segment_ids)
        self._node_ids: List[int] = []
        self._nodes_up_to_date = False
        self.attributes: Dict[str, Any] = {}
        self.flow_properties = VesselFlowProperties()

        if not self._segment_ids:
            raise StructuralError("A vessel needs at least one segment.")
        if len(set(self._segment_ids)) != len(self._segment_ids):
            raise StructuralError("Input vessel segments contain duplicates.")

        segments = self._lookup(self._segment_ids)
        check_segment_order(segments)
        check_non_adjacent_connections(segments)
        self.flow_properties.update_segments(segments)

    def __repr__(self) -> str:
        return f"Vessel(id={self.id}, segment_ids={self._segment_ids})"

    # ------------------------------------------------------------------
    # internals

    def _lookup(self, segment_ids: Sequence[int]) -> List["VesselSegment"]:
        return [self._network.get_segment(sid) for sid in segment_ids]

    def _segments(self) -> List["VesselSegment"]:
        return self._lookup(self._segment_ids)

    def _mark_modified(self) -> None:
        self._nodes_up_to_date = False
        self.flow_properties.update_segments(self._segments())

    def _claim(self, segments: Sequence["VesselSegment"]) -> None:
        for seg in segments:
            seg.vessel_id = self.id

    def _check_can_take(self, segment: "VesselSegment") -> None:
        if segment.id in self._segment_ids:
            raise StructuralError(f"Segment {segment.id} is already in vessel {self.id}")
        if segment.vessel_id is not None and segment.vessel_id != self.id:
            raise StructuralError(
                f"Segment {segment.id} already belongs to vessel {segment.vessel_id}"
            )

    def _commit(self, segments: List["VesselSegment"]) -> None:
        check_segment_order(segments)
        check_non_adjacent_connections(segments)
        self._segment_ids = [seg.id for seg in segments]

    def _update_nodes(self) -> None:
        segments = self._segments()
        node_ids: List[int] = []

        if len(segments) == 1:
            node_ids = list(segments[0].node_ids)
        elif len(segments) > 1:
            first, second = segments[0], segments[1]
            if second.has_node(first.node_ids[1]):
                node_ids = [first.node_ids[0], first.node_ids[1]]
            elif second.has_node(first.node_ids[0]):
                node_ids = [first.node_ids[1], first.node_ids[0]]
            else:
                raise StructuralError("Input vessel segments are not attached in the correct order.")

            for idx in range(1, len(segments)):
                n0, n1 = segments[idx].node_ids
                if node_ids[idx] == n0:
                    node_ids.append(n1)
                elif node_ids[idx] == n1:
                    node_ids.append(n0)
                else:
                    raise StructuralError("Input vessel segments are not attached in the correct order.")

        self._node_ids = node_ids
        self._nodes_up_to_date = True

    def _node_id_list(self) -> List[int]:
        if not self._nodes_up_to_date:
            self._update_nodes()
        return self._node_ids

    # ------------------------------------------------------------------
    # mutation

    def add_segment(self, segment) -> None:
        """
        Add a segment at the start or end of the vessel.

        Raises
        ------
        StructuralError
            If the segment does not touch either end of the vessel.
        """
        segment = self._network.get_segment(segment)
        self._check_can_take(segment)
        segments = self._segments()

        if len(segments) == 1:
            existing = segments[0]
            if segment.has_node(existing.node_ids[0]):
                candidate = [segment] + segments
            elif segment.has_node(existing.node_ids[1]):
                candidate = segments + [segment]
            else:
                raise StructuralError("Input vessel segment does not coincide with any end of the vessel.")
        else:
            if segment.is_connected_to(segments[-1]):
                candidate = segments + [segment]
            elif segment.is_connected_to(segments[0]):
                candidate = [segment] + segments
            else:
                raise StructuralError(
                    "Input vessel segment does not coincide with any end of the multi-segment vessel."
                )

        self._commit(candidate)
        self._claim([segment])
        self._mark_modified()

    def add_segments(self, segments: Sequence) -> None:
        """
        Splice a connected chain of segments onto either end of the vessel.

        The chain is reversed when it meets the vessel back-to-back or
        front-to-front.
        """
        if not segments:
            raise StructuralError("No segments given to add to vessel.")
        new_segments = [self._network.get_segment(s) for s in segments]
        for seg in new_segments:
            self._check_can_take(seg)
        current = self._segments()

        if new_segments[0].is_connected_to(current[-1]):
            candidate = current + new_segments
        elif new_segments[-1].is_connected_to(current[0]):
            candidate = new_segments + current
        elif new_segments[0].is_connected_to(current[0]):
            candidate = list(reversed(new_segments)) + current
        elif new_segments[-1].is_connected_to(current[-1]):
            candidate = current + list(reversed(new_segments))
        else:
            raise StructuralError("Input vessel segments do not coincide with any end of the vessel.")

        self._commit(candidate)
        self._claim(new_segments)
        self._mark_modified()

    def divide_segment(self, location: PointLike, distance_tolerance: float = 1e-6) -> "VesselNode":
        """
        Split the segment under ``location`` in two, adding a node there.

        Parameters
        ----------
        location : Point3D or sequence
            Where to divide
        distance_tolerance : float
            Maximum distance from a segment, in units of the segment's first
            node reference length scale

        Returns
        -------
        VesselNode
            The new node, or the existing end node if ``location`` coincides
            with one.
        """
        location = as_point(location)
        segments = self._segments()

        target: Optional["VesselSegment"] = None
        best_distance = float("inf")
        for seg in segments:
            distance = seg.get_distance(location) / seg.get_node(0).reference_length_scale
            if distance <= distance_tolerance:
                for node in seg.get_nodes():
                    if node.is_coincident(location):
                        return node
                if distance < best_distance:
                    best_distance = distance
                    target = seg

        if target is None:
            raise StructuralError("Specified location is not on a segment in this vessel.")

        check_non_adjacent_connections(segments)

        node0, node1 = target.get_nodes()
        closest = node0 if node0.get_distance(location) <= node1.get_distance(location) else node1

        new_node = self._network.copy_node(closest)
        new_node.set_location(location)
        new_node.flow_properties.is_input_node = False
        new_node.flow_properties.is_output_node = False

        new_segment0 = self._network.add_segment(node0, new_node, radius=target.radius)
        new_segment1 = self._network.add_segment(new_node, node1, radius=target.radius)
        new_segment0.copy_data_from(target)
        new_segment1.copy_data_from(target)

        index = self._segment_ids.index(target.id)

        if len(segments) == 1:
            replacement = [new_segment0, new_segment1]
        elif index == 0:
            if segments[1].is_connected_to(new_segment1):
                replacement = [new_segment0, new_segment1]
            else:
                replacement = [new_segment1, new_segment0]
        elif segments[index - 1].is_connected_to(new_segment0):
            replacement = [new_segment0, new_segment1]
        else:
            replacement = [new_segment1, new_segment0]

        candidate = segments[:index] + replacement + segments[index + 1:]
        try:
            self._commit(candidate)
        except StructuralError:
            self._network.remove_segment(new_segment0)
            self._network.remove_segment(new_segment1)
            self._network.remove_node(new_node)
            raise

        self._claim(replacement)
        target.vessel_id = None
        self._network.remove_segment(target)
        self._mark_modified()
        logger.debug("Divided segment %d of vessel %d at node %d", target.id, self.id, new_node.id)
        return new_node

    def remove_segments(self, location: SegmentLocation) -> None:
        """
        Remove the first or last segment.

        The removed segment is detached from its nodes and dropped from the
        network.
        """
        if len(self._segment_ids) == 1:
            raise StructuralError("Vessel must have at least one segment.")
        if location == SegmentLocation.START:
            seg_id = self._segment_ids.pop(0)
        elif location == SegmentLocation.END:
            seg_id = self._segment_ids.pop()
        else:
            raise StructuralError("You can only remove segments from the start or end of vessels.")

        segment = self._network.get_segment(seg_id)
        segment.vessel_id = None
        self._network.remove_segment(segment)
        self._mark_modified()

    def release_segments(self) -> List[int]:
        """Drop ownership of all segments without detaching them from their nodes."""
        released = self._segment_ids
        self._segment_ids = []
        for sid in released:
            seg = self._network.segments.get(sid)
            if seg is not None:
                seg.vessel_id = None
        self._nodes_up_to_date = False
        self.flow_properties.update_segments([])
        return released

    def remove(self) -> None:
        """Detach all segments from their nodes and drop them."""
        for sid in self.release_segments():
            if sid in self._network.segments:
                self._network.remove_segment(sid)

    def set_radius(self, radius: float) -> None:
        """Set the radius of every segment."""
        if radius <= 0:
            raise ValueError(f"Vessel radius must be positive, got {radius}")
        for seg in self._segments():
            seg.radius = float(radius)

    # ------------------------------------------------------------------
    # queries

    @property
    def segment_ids(self) -> List[int]:
        return list(self._segment_ids)

    def get_segments(self) -> List["VesselSegment"]:
        return self._segments()

    def get_segment(self, index: int) -> "VesselSegment":
        if index < 0 or index >= len(self._segment_ids):
            raise StructuralError("Requested segment index out of range")
        return self._network.get_segment(self._segment_ids[index])

    def get_number_of_segments(self) -> int:
        return len(self._segment_ids)

    def get_nodes(self) -> List["VesselNode"]:
        """Nodes from start to end."""
        return [self._network.nodes[nid] for nid in self._node_id_list()]

    def get_node(self, index: int) -> "VesselNode":
        node_ids = self._node_id_list()
        if index < 0 or index >= len(node_ids):
            raise StructuralError("Out of bounds node index requested")
        return self._network.nodes[node_ids[index]]

    def get_number_of_nodes(self) -> int:
        return len(self._node_id_list())

    def get_start_node(self) -> "VesselNode":
        node_ids = self._node_id_list()
        if not node_ids:
            raise StructuralError(f"Vessel {self.id} has no segments")
        return self._network.nodes[node_ids[0]]

    def get_end_node(self) -> "VesselNode":
        node_ids = self._node_id_list()
        if not node_ids:
            raise StructuralError(f"Vessel {self.id} has no segments")
        return self._network.nodes[node_ids[-1]]

    def get_node_at_opposite_end(self, node) -> "VesselNode":
        node_id = node if isinstance(node, int) else node.id
        start = self.get_start_node()
        end = self.get_end_node()
        if node_id == start.id:
            return end
        if node_id == end.id:
            return start
        raise StructuralError("Query node is not at either end of the vessel.")

    def get_length(self) -> float:
        """Sum of segment lengths."""
        return float(sum(seg.get_length() for seg in self._segments()))

    def get_radius(self) -> float:
        """Average segment radius."""
        segments = self._segments()
        if not segments:
            return 0.0
        return float(sum(seg.radius for seg in segments) / len(segments))

    def get_distance(self, location: PointLike) -> float:
        """Distance to the nearest segment."""
        location = as_point(location)
        return min((seg.get_distance(location) for seg in self._segments()), default=float("inf"))

    def get_closest_end_node_distance(self, location: PointLike) -> float:
        return min(
            self.get_start_node().get_distance(location),
            self.get_end_node().get_distance(location),
        )

    def get_connected_vessels(self) -> List["Vessel"]:
        """Other vessels sharing either end node."""
        connected = []
        for node in (self.get_start_node(), self.get_end_node()):
            for vessel in node.get_vessels():
                if vessel is not self and vessel not in connected:
                    connected.append(vessel)
        return connected

    def is_connected_to(self, other: "Vessel") -> bool:
        """True if the two vessels share an end node."""
        if other is self:
            return False
        ends = {self.get_start_node().id, self.get_end_node().id}
        return bool(ends & {other.get_start_node().id, other.get_end_node().id})

    def get_output_data(self) -> dict:
        """Summary values for reporting."""
        return {
            "Vessel Id": self.id,
            "Vessel Radius": self.get_radius(),
            "Vessel Length": self.get_length(),
            "Vessel Haematocrit": self.flow_properties.haematocrit,
            "Vessel Flow Rate": self.flow_properties.flow_rate,
        }

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "segment_ids": list(self._segment_ids),
            "attributes": self.attributes,
        }
