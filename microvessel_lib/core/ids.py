"""
ID generation for vessel network elements.
"""

from typing import Dict


class IDGenerator:
    """Stable, per-kind ID generator for nodes, segments and vessels."""

    KINDS = ("node", "segment", "vessel")

    def __init__(self, start_id: int = 0):
        """
        Initialize ID generator.

        Parameters
        ----------
        start_id : int
            Starting ID value for every kind (default: 0)
        """
        self.counters: Dict[str, int] = {kind: start_id for kind in self.KINDS}

    def next_id(self, kind: str) -> int:
        """Get next ID for the given element kind."""
        if kind not in self.counters:
            raise ValueError(f"Unknown id kind '{kind}'. Supported: {list(self.KINDS)}")
        id_val = self.counters[kind]
        self.counters[kind] += 1
        return id_val

    def next_node_id(self) -> int:
        return self.next_id("node")

    def next_segment_id(self) -> int:
        return self.next_id("segment")

    def next_vessel_id(self) -> int:
        return self.next_id("vessel")

    def peek_next_id(self, kind: str) -> int:
        """Peek at next ID without consuming it."""
        return self.counters[kind]

    def reserve(self, kind: str, used_id: int) -> None:
        """Make sure future IDs of this kind never collide with ``used_id``."""
        if used_id >= self.counters[kind]:
            self.counters[kind] = used_id + 1

    def get_state(self) -> dict:
        """Get current state for serialization."""
        return {"counters": dict(self.counters)}

    def set_state(self, state: dict) -> None:
        """Restore state from serialization."""
        for kind in self.KINDS:
            self.counters[kind] = int(state["counters"].get(kind, 0))
