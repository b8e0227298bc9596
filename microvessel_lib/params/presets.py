"""Parameter presets for the haematocrit solver.

Named configurations for common physiological settings and for runs that
need tighter convergence than the default.
"""

from ..analysis.haematocrit import HaematocritSolverParams


def default() -> HaematocritSolverParams:
    """
    Standard systemic blood.

    Characteristics:
    - Arterial haematocrit 0.45
    - Convergence to 1e-3 within 1000 iterations
    """
    return HaematocritSolverParams()


def strict_convergence() -> HaematocritSolverParams:
    """
    Tighter convergence for sensitivity studies.

    Characteristics:
    - Residual tolerance 1e-6
    - Larger iteration cap
    """
    return HaematocritSolverParams(
        tolerance=1e-6,
        max_iterations=5000,
    )


def anaemic() -> HaematocritSolverParams:
    """Reduced systemic haematocrit."""
    return HaematocritSolverParams(
        arterial_haematocrit=0.30,
    )


def polycythaemic() -> HaematocritSolverParams:
    """Raised systemic haematocrit."""
    return HaematocritSolverParams(
        arterial_haematocrit=0.60,
    )


PRESETS = {
    "default": default,
    "strict_convergence": strict_convergence,
    "anaemic": anaemic,
    "polycythaemic": polycythaemic,
}


def get_preset(name: str) -> HaematocritSolverParams:
    """
    Get a parameter preset by name.

    Parameters
    ----------
    name : str
        Preset name (e.g., "default", "anaemic")

    Returns
    -------
    HaematocritSolverParams
        Parameter configuration

    Raises
    ------
    ValueError
        If preset name is not recognized
    """
    if name not in PRESETS:
        available = ", ".join(PRESETS.keys())
        raise ValueError(f"Unknown preset '{name}'. Available: {available}")

    return PRESETS[name]()


def list_presets() -> list:
    """List all available preset names."""
    return list(PRESETS.keys())
