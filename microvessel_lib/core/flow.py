"""
Flow property records attached to nodes, segments and vessels.
"""

from dataclasses import dataclass
from typing import List, TYPE_CHECKING
import numpy as np

if TYPE_CHECKING:
    from .network import VesselSegment


@dataclass
class NodeFlowProperties:
    """Boundary role and pressure of a node."""

    is_input_node: bool = False
    is_output_node: bool = False
    pressure: float = 0.0

    @property
    def role(self) -> int:
        """Signed boundary role: +1 input, -1 output, 0 internal."""
        if self.is_input_node:
            return 1
        if self.is_output_node:
            return -1
        return 0

    def copy(self) -> "NodeFlowProperties":
        return NodeFlowProperties(
            is_input_node=self.is_input_node,
            is_output_node=self.is_output_node,
            pressure=self.pressure,
        )

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "is_input_node": self.is_input_node,
            "is_output_node": self.is_output_node,
            "pressure": self.pressure,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "NodeFlowProperties":
        """Create from dictionary."""
        return cls(
            is_input_node=d.get("is_input_node", False),
            is_output_node=d.get("is_output_node", False),
            pressure=d.get("pressure", 0.0),
        )


@dataclass
class SegmentFlowProperties:
    """Haematocrit and signed volumetric flow rate of a segment."""

    haematocrit: float = 0.0
    flow_rate: float = 0.0

    def copy(self) -> "SegmentFlowProperties":
        return SegmentFlowProperties(haematocrit=self.haematocrit, flow_rate=self.flow_rate)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"haematocrit": self.haematocrit, "flow_rate": self.flow_rate}

    @classmethod
    def from_dict(cls, d: dict) -> "SegmentFlowProperties":
        """Create from dictionary."""
        return cls(haematocrit=d.get("haematocrit", 0.0), flow_rate=d.get("flow_rate", 0.0))


class VesselFlowProperties:
    """
    Vessel-level flow values derived from the vessel's segments.

    Reads average over the current segment set; writes are pushed to every
    segment. ``update_segments`` must be called whenever the vessel's
    segment list changes.
    """

    def __init__(self, segments: List["VesselSegment"] = None):
        self._segments: List["VesselSegment"] = list(segments or [])

    def update_segments(self, segments: List["VesselSegment"]) -> None:
        self._segments = list(segments)

    def _mean(self, name: str) -> float:
        if not self._segments:
            return 0.0
        return float(np.mean([getattr(seg.flow_properties, name) for seg in self._segments]))

    @property
    def haematocrit(self) -> float:
        return self._mean("haematocrit")

    @haematocrit.setter
    def haematocrit(self, value: float) -> None:
        for seg in self._segments:
            seg.flow_properties.haematocrit = float(value)

    @property
    def flow_rate(self) -> float:
        return self._mean("flow_rate")

    @flow_rate.setter
    def flow_rate(self, value: float) -> None:
        for seg in self._segments:
            seg.flow_properties.flow_rate = float(value)

    def to_dict(self) -> dict:
        return {"haematocrit": self.haematocrit, "flow_rate": self.flow_rate}
