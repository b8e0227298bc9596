"""
Query functions over vessel networks.
"""

from typing import List, Dict
import numpy as np
from ..core.network import VesselNetwork


def get_input_nodes(network: VesselNetwork) -> List[int]:
    """IDs of nodes flagged as flow inputs."""
    return [node.id for node in network.get_input_nodes()]


def get_output_nodes(network: VesselNetwork) -> List[int]:
    """IDs of nodes flagged as flow outputs."""
    return [node.id for node in network.get_output_nodes()]


def _stats(values: List[float]) -> Dict[str, float]:
    if not values:
        return {
            "mean": 0.0,
            "std": 0.0,
            "min": 0.0,
            "max": 0.0,
            "total": 0.0,
            "count": 0,
        }

    arr = np.array(values)

    return {
        "mean": float(np.mean(arr)),
        "std": float(np.std(arr)),
        "min": float(np.min(arr)),
        "max": float(np.max(arr)),
        "total": float(np.sum(arr)),
        "count": len(values),
    }


def measure_vessel_lengths(network: VesselNetwork) -> Dict[str, float]:
    """
    Measure vessel length statistics.

    Parameters
    ----------
    network : VesselNetwork
        Network to query

    Returns
    -------
    stats : dict
        Dictionary with keys: mean, std, min, max, total, count
    """
    return _stats([vessel.get_length() for vessel in network.get_vessels()])


def summarize_haematocrit(network: VesselNetwork) -> Dict[str, float]:
    """
    Haematocrit statistics over vessels, plus the flow-weighted mean.

    The flow-weighted mean uses absolute flow rates; it is 0 when no vessel
    carries flow.
    """
    vessels = network.get_vessels()
    haematocrits = [v.flow_properties.haematocrit for v in vessels]
    stats = _stats(haematocrits)
    stats.pop("total")

    flows = np.array([abs(v.flow_properties.flow_rate) for v in vessels])
    if flows.size and flows.sum() > 0:
        stats["flow_weighted_mean"] = float(np.dot(flows, haematocrits) / flows.sum())
    else:
        stats["flow_weighted_mean"] = 0.0
    return stats
