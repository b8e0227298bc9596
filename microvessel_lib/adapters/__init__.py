"""Adapters for converting vessel networks to and from other graph libraries."""

from .networkx_adapter import to_networkx_graph, from_networkx_graph

__all__ = [
    "to_networkx_graph",
    "from_networkx_graph",
]
