"""Analysis and solver functions for vessel networks."""

from .linear_system import LinearSystem
from .haematocrit import (
    HaematocritSolver,
    HaematocritSolverParams,
    solve_haematocrit,
    phase_separation_coefficient,
)
from .query import (
    get_input_nodes,
    get_output_nodes,
    measure_vessel_lengths,
    summarize_haematocrit,
)
from .structure import compute_branch_stats, get_connected_components

__all__ = [
    "LinearSystem",
    "HaematocritSolver",
    "HaematocritSolverParams",
    "solve_haematocrit",
    "phase_separation_coefficient",
    "get_input_nodes",
    "get_output_nodes",
    "measure_vessel_lengths",
    "summarize_haematocrit",
    "compute_branch_stats",
    "get_connected_components",
]
