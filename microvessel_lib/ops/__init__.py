"""Operations for building and modifying vessel networks."""

from .build import (
    create_network,
    add_input_node,
    add_output_node,
    add_vessel,
    extend_vessel,
    trim_vessel,
    divide_vessel_segment,
    assign_flow_rates,
)

__all__ = [
    "create_network",
    "add_input_node",
    "add_output_node",
    "add_vessel",
    "extend_vessel",
    "trim_vessel",
    "divide_vessel_segment",
    "assign_flow_rates",
]
