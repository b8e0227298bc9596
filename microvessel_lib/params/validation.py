"""Parameter validation with bounds checking.

This module validates HaematocritSolverParams against physiologically and
numerically reasonable ranges. Values outside these ranges are not
necessarily fatal; use ``HaematocritSolverParams.check`` for hard limits.
"""

import logging
from typing import List, Tuple
from ..analysis.haematocrit import HaematocritSolverParams

logger = logging.getLogger(__name__)


PARAM_BOUNDS = {
    "arterial_haematocrit": (0.1, 0.7, "fraction"),
    "threshold_velocity_ratio": (1.0, 10.0, "ratio"),
    "partition_coefficient": (0.0, 1.0, "ratio"),
    "tolerance": (1e-12, 1e-1, "fraction"),
    "max_iterations": (1, 100000, "iterations"),
    "max_vessels_per_branch": (1, 50, "count"),
}


def validate_params(params: HaematocritSolverParams) -> Tuple[bool, List[str]]:
    """
    Validate HaematocritSolverParams against bounds.

    Parameters
    ----------
    params : HaematocritSolverParams
        Parameters to validate

    Returns
    -------
    is_valid : bool
        True if all parameters are valid
    warnings : list of str
        List of validation warnings/errors
    """
    warnings = []

    for param_name, (min_val, max_val, unit) in PARAM_BOUNDS.items():
        value = getattr(params, param_name, None)

        if value is None:
            continue

        if value < min_val:
            warnings.append(
                f"{param_name} = {value} {unit} is below minimum {min_val} {unit}"
            )
        elif value > max_val:
            warnings.append(
                f"{param_name} = {value} {unit} exceeds maximum {max_val} {unit}"
            )

    if params.max_vessels_per_branch < 3:
        warnings.append(
            f"max_vessels_per_branch = {params.max_vessels_per_branch} is below the 3 entries "
            "a bifurcation row needs"
        )

    if params.tolerance >= params.arterial_haematocrit:
        warnings.append(
            f"tolerance ({params.tolerance}) is not smaller than arterial_haematocrit "
            f"({params.arterial_haematocrit}), convergence is meaningless"
        )

    is_valid = len(warnings) == 0
    return is_valid, warnings


def validate_and_warn(params: HaematocritSolverParams) -> HaematocritSolverParams:
    """
    Validate parameters and log warnings.

    Parameters
    ----------
    params : HaematocritSolverParams
        Parameters to validate

    Returns
    -------
    params : HaematocritSolverParams
        Same parameters (for chaining)
    """
    is_valid, warnings = validate_params(params)

    if not is_valid:
        logger.warning("Parameter validation warnings (%d):", len(warnings))
        for warning in warnings:
            logger.warning("  - %s", warning)

    return params
