"""
Haematocrit distribution in branching vessel networks.

Haematocrit is split at bifurcations with the phase-separation rule of
Betteridge et al. (2006), Networks and Heterogeneous Media, 1(4), 515-535.
Because the split depends on the parent vessel's current haematocrit, the
system is solved as a fixed-point iteration over a sparse linear system with
one unknown per vessel.

Flow rates must already be assigned to the vessels (signed, positive from
start node to end node).
"""

import logging
from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

import numpy as np
from tqdm import tqdm

from ..core.network import VesselNetwork, VesselNode
from ..core.vessel import Vessel
from ..core.errors import ConvergenceError, UnsupportedTopologyError
from ..core.result import OperationResult
from .linear_system import LinearSystem

logger = logging.getLogger(__name__)


@dataclass
class HaematocritSolverParams:
    """Parameters for the haematocrit solver."""

    arterial_haematocrit: float = 0.45  # Haematocrit of vessels fed by an input node
    threshold_velocity_ratio: float = 2.5  # Velocity ratio above which all cells enter the faster branch
    partition_coefficient: float = 0.5  # Haematocrit partition coefficient
    tolerance: float = 1e-3  # Max absolute haematocrit change between iterations
    max_iterations: int = 1000
    max_vessels_per_branch: int = 5  # Expected non-zeros per matrix row
    show_progress: bool = False

    def check(self) -> None:
        """Raise ValueError for values the solver cannot run with."""
        if not 0.0 <= self.arterial_haematocrit <= 1.0:
            raise ValueError(
                f"arterial_haematocrit must be in [0, 1], got {self.arterial_haematocrit}"
            )
        if self.threshold_velocity_ratio <= 0:
            raise ValueError("threshold_velocity_ratio must be positive")
        if self.partition_coefficient < 0:
            raise ValueError("partition_coefficient must be non-negative")
        if self.tolerance <= 0:
            raise ValueError("tolerance must be positive")
        if self.max_iterations < 1:
            raise ValueError("max_iterations must be at least 1")
        if self.max_vessels_per_branch < 1:
            raise ValueError("max_vessels_per_branch must be at least 1")

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "arterial_haematocrit": self.arterial_haematocrit,
            "threshold_velocity_ratio": self.threshold_velocity_ratio,
            "partition_coefficient": self.partition_coefficient,
            "tolerance": self.tolerance,
            "max_iterations": self.max_iterations,
            "max_vessels_per_branch": self.max_vessels_per_branch,
            "show_progress": self.show_progress,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "HaematocritSolverParams":
        """Create from dictionary."""
        return cls(
            arterial_haematocrit=d.get("arterial_haematocrit", 0.45),
            threshold_velocity_ratio=d.get("threshold_velocity_ratio", 2.5),
            partition_coefficient=d.get("partition_coefficient", 0.5),
            tolerance=d.get("tolerance", 1e-3),
            max_iterations=d.get("max_iterations", 1000),
            max_vessels_per_branch=d.get("max_vessels_per_branch", 5),
            show_progress=d.get("show_progress", False),
        )


@dataclass
class BifurcationUpdate:
    """Row/column indices of a phase-separation coefficient to refresh each iteration."""

    vessel_index: int
    parent_index: int
    competitor_index: int


def _velocity(vessel: Vessel) -> float:
    radius = vessel.get_radius()
    return abs(vessel.flow_properties.flow_rate) / (np.pi * radius * radius)


def phase_separation_coefficient(vessel: Vessel, parent: Vessel, competitor: Vessel) -> float:
    """
    Matrix coefficient linking a daughter vessel to its parent at a bifurcation.

    The faster daughter branch receives a larger share of red cells; the
    strength of the skew grows with the plasma fraction of the parent.
    """
    flow_rate = vessel.flow_properties.flow_rate
    my_velocity = _velocity(vessel)
    competitor_velocity = _velocity(competitor)

    alpha = 1.0 - parent.flow_properties.haematocrit
    flow_ratio_pm = abs(parent.flow_properties.flow_rate) / abs(flow_rate)
    flow_ratio_cm = abs(competitor.flow_properties.flow_rate) / abs(flow_rate)

    if my_velocity >= competitor_velocity:
        term = alpha * (my_velocity / competitor_velocity - 1.0)
        denom = 1.0 + flow_ratio_cm * (1.0 / (1.0 + term))
    else:
        term = alpha * (competitor_velocity / my_velocity - 1.0)
        denom = 1.0 + flow_ratio_cm * (1.0 + term)

    return -flow_ratio_pm / denom


def classify_junction(vessel: Vessel, inflow_node: VesselNode) -> Tuple[List[Vessel], List[Vessel]]:
    """
    Split the other vessels at ``inflow_node`` into parents and competitors.

    Parents carry flow into the node; competitors carry flow out of it, like
    ``vessel`` itself. Vessels without flow are neither.
    """
    parents: List[Vessel] = []
    competitors: List[Vessel] = []
    for other in inflow_node.get_vessels():
        if other is vessel:
            continue
        flow_rate = other.flow_properties.flow_rate
        if other.get_end_node() is inflow_node:
            if flow_rate > 0.0:
                parents.append(other)
            elif flow_rate < 0.0:
                competitors.append(other)
        if other.get_start_node() is inflow_node:
            if flow_rate > 0.0:
                competitors.append(other)
            elif flow_rate < 0.0:
                parents.append(other)
    return parents, competitors


class HaematocritSolver:
    """
    Iterative haematocrit solver for vessel networks with 3-way bifurcations.

    Example
    -------
    >>> solver = HaematocritSolver(network)
    >>> solver.set_arterial_haematocrit(0.45)
    >>> result = solver.calculate()
    >>> result.metadata["iterations"]
    """

    def __init__(
        self,
        network: Optional[VesselNetwork] = None,
        params: Optional[HaematocritSolverParams] = None,
    ):
        self.network = network
        self.params = params if params is not None else HaematocritSolverParams()
        self.params.check()

    def set_network(self, network: VesselNetwork) -> None:
        self.network = network

    def set_arterial_haematocrit(self, haematocrit: float) -> None:
        self.params = replace(self.params, arterial_haematocrit=haematocrit)
        self.params.check()

    def set_threshold_velocity_ratio(self, ratio: float) -> None:
        self.params = replace(self.params, threshold_velocity_ratio=ratio)
        self.params.check()

    def set_partition_coefficient(self, coefficient: float) -> None:
        self.params = replace(self.params, partition_coefficient=coefficient)
        self.params.check()

    def _build_system(self, vessels: List[Vessel]) -> Tuple[LinearSystem, List[BifurcationUpdate]]:
        index = {vessel.id: idx for idx, vessel in enumerate(vessels)}
        bandwidth = min(self.params.max_vessels_per_branch, len(vessels))
        system = LinearSystem(len(vessels), bandwidth)
        updates: List[BifurcationUpdate] = []

        for idx, vessel in enumerate(vessels):
            # Diagonal is always present; with an empty rhs the default is zero haematocrit
            system.set_matrix_element(idx, idx, 1.0)
            start_node = vessel.get_start_node()
            end_node = vessel.get_end_node()
            flow_rate = vessel.flow_properties.flow_rate

            if start_node.flow_properties.is_input_node or end_node.flow_properties.is_input_node:
                system.set_rhs_vector_element(idx, self.params.arterial_haematocrit)
                continue
            if flow_rate == 0.0:
                system.set_rhs_vector_element(idx, 0.0)
                continue

            inflow_node = start_node if flow_rate > 0.0 else end_node
            if inflow_node.get_number_of_segments() <= 1:
                continue

            parents, competitors = classify_junction(vessel, inflow_node)

            if not competitors or competitors[0].flow_properties.flow_rate == 0.0:
                # Converging junction: haematocrit follows from conservation
                for parent in parents:
                    coefficient = -abs(parent.flow_properties.flow_rate / flow_rate)
                    system.set_matrix_element(idx, index[parent.id], coefficient)
                continue

            if len(competitors) > 1 or len(parents) > 1:
                raise UnsupportedTopologyError(
                    "This solver can only work with branches with connectivity 3"
                )

            parent, competitor = parents[0], competitors[0]
            system.set_matrix_element(
                idx, index[parent.id], phase_separation_coefficient(vessel, parent, competitor)
            )
            updates.append(BifurcationUpdate(idx, index[parent.id], index[competitor.id]))

        return system, updates

    def calculate(self) -> OperationResult:
        """
        Compute haematocrit for every vessel and write it onto the segments.

        Returns
        -------
        OperationResult
            Success result with ``iterations``, ``residual``, ``num_vessels``
            and ``num_bifurcations`` in its metadata.

        Raises
        ------
        UnsupportedTopologyError
            If a bifurcation has more than one parent or competitor.
        ConvergenceError
            If the iteration cap is reached, or the system cannot be solved.
        """
        if self.network is None:
            raise ValueError("No network set on the haematocrit solver")

        vessels = self.network.get_vessels()
        if not vessels:
            return OperationResult.success(
                "Empty network, nothing to solve",
                metadata={"iterations": 0, "residual": 0.0, "num_vessels": 0, "num_bifurcations": 0},
            )

        system, updates = self._build_system(vessels)
        logger.info(
            "Haematocrit system assembled: %d vessels, %d bifurcations",
            len(vessels), len(updates),
        )

        tolerance = self.params.tolerance
        max_iterations = self.params.max_iterations
        residual = float("inf")
        iterations = 0

        pbar = tqdm(
            total=max_iterations,
            desc="Haematocrit",
            unit="iter",
            disable=not self.params.show_progress,
        )
        try:
            while residual > tolerance and iterations < max_iterations:
                if iterations > 0:
                    for update in updates:
                        coefficient = phase_separation_coefficient(
                            vessels[update.vessel_index],
                            vessels[update.parent_index],
                            vessels[update.competitor_index],
                        )
                        system.set_matrix_element(update.vessel_index, update.parent_index, coefficient)

                try:
                    solution = system.solve()
                except np.linalg.LinAlgError as e:
                    raise ConvergenceError(f"Haematocrit linear solve failed: {e}") from e

                residual = 0.0
                for idx, vessel in enumerate(vessels):
                    residual = max(residual, abs(vessel.flow_properties.haematocrit - solution[idx]))

                for idx, vessel in enumerate(vessels):
                    vessel.flow_properties.haematocrit = solution[idx]

                iterations += 1
                pbar.update(1)
                pbar.set_postfix(residual=f"{residual:.2e}")
                logger.debug("Haematocrit iteration %d: residual %.3e", iterations, residual)

                # Without bifurcations the system is linear and the first solve is exact
                if not updates:
                    break
                if residual > tolerance and iterations == max_iterations:
                    raise ConvergenceError("Haematocrit calculation failed to converge.")
        finally:
            pbar.close()

        logger.info("Haematocrit converged in %d iterations (residual %.3e)", iterations, residual)
        return OperationResult.success(
            f"Haematocrit converged in {iterations} iterations",
            metadata={
                "iterations": iterations,
                "residual": float(residual),
                "num_vessels": len(vessels),
                "num_bifurcations": len(updates),
            },
        )


def solve_haematocrit(
    network: VesselNetwork,
    params: Optional[HaematocritSolverParams] = None,
    **overrides,
) -> OperationResult:
    """
    Run the haematocrit solver on a network.

    Parameters
    ----------
    network : VesselNetwork
        Network with flow rates already assigned
    params : HaematocritSolverParams, optional
        Solver parameters (defaults if omitted)
    **overrides
        Individual parameter overrides, e.g. ``arterial_haematocrit=0.4``

    Returns
    -------
    OperationResult
        Result from ``HaematocritSolver.calculate``
    """
    params = params if params is not None else HaematocritSolverParams()
    if overrides:
        params = replace(params, **overrides)
    return HaematocritSolver(network, params).calculate()
