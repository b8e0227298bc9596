"""
Geometric primitive types for vessel networks.
"""

from dataclasses import dataclass
from typing import Sequence, Tuple, Union
import numpy as np


@dataclass
class Point3D:
    """3D point in space."""

    x: float
    y: float
    z: float = 0.0

    def to_array(self) -> np.ndarray:
        """Convert to numpy array."""
        return np.array([self.x, self.y, self.z], dtype=float)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> "Point3D":
        """Create from numpy array."""
        return cls(float(arr[0]), float(arr[1]), float(arr[2]))

    def to_tuple(self) -> Tuple[float, float, float]:
        """Convert to tuple."""
        return (self.x, self.y, self.z)

    @classmethod
    def from_tuple(cls, t: Sequence[float]) -> "Point3D":
        """Create from a 2- or 3-tuple (2D points get z=0)."""
        if len(t) == 2:
            return cls(float(t[0]), float(t[1]), 0.0)
        return cls(float(t[0]), float(t[1]), float(t[2]))

    def distance_to(self, other: "Point3D") -> float:
        """Compute Euclidean distance to another point."""
        dx = self.x - other.x
        dy = self.y - other.y
        dz = self.z - other.z
        return float(np.sqrt(dx**2 + dy**2 + dz**2))

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {"x": self.x, "y": self.y, "z": self.z}

    @classmethod
    def from_dict(cls, d: dict) -> "Point3D":
        """Create from dictionary."""
        return cls(d["x"], d["y"], d.get("z", 0.0))


PointLike = Union[Point3D, Sequence[float], np.ndarray]


def as_point(location: PointLike) -> Point3D:
    """Coerce a tuple, list or array into a Point3D."""
    if isinstance(location, Point3D):
        return location
    return Point3D.from_tuple(list(location))


def point_segment_distance(point: Point3D, start: Point3D, end: Point3D) -> float:
    """
    Distance from a point to the closed line segment [start, end].

    Degenerate segments (start == end) fall back to point distance.
    """
    p = point.to_array()
    a = start.to_array()
    b = end.to_array()
    ab = b - a
    denom = float(np.dot(ab, ab))
    if denom == 0.0:
        return float(np.linalg.norm(p - a))
    t = np.clip(np.dot(p - a, ab) / denom, 0.0, 1.0)
    projection = a + t * ab
    return float(np.linalg.norm(p - projection))
