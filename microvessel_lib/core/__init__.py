"""Core data structures for vessel networks."""

from .types import Point3D, as_point, point_segment_distance
from .flow import NodeFlowProperties, SegmentFlowProperties, VesselFlowProperties
from .vessel import Vessel, SegmentLocation
from .network import VesselNode, VesselSegment, VesselNetwork
from .result import OperationResult, OperationStatus, ErrorCode
from .errors import (
    VesselNetworkError,
    StructuralError,
    UnsupportedTopologyError,
    ConvergenceError,
)
from .ids import IDGenerator

__all__ = [
    "Point3D",
    "as_point",
    "point_segment_distance",
    "NodeFlowProperties",
    "SegmentFlowProperties",
    "VesselFlowProperties",
    "Vessel",
    "SegmentLocation",
    "VesselNode",
    "VesselSegment",
    "VesselNetwork",
    "OperationResult",
    "OperationStatus",
    "ErrorCode",
    "VesselNetworkError",
    "StructuralError",
    "UnsupportedTopologyError",
    "ConvergenceError",
    "IDGenerator",
]
