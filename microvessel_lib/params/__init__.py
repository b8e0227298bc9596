"""Parameter presets and validation for the haematocrit solver."""

from .presets import (
    default,
    strict_convergence,
    anaemic,
    polycythaemic,
    get_preset,
    list_presets,
    PRESETS,
)

from .validation import (
    validate_params,
    validate_and_warn,
    PARAM_BOUNDS,
)

__all__ = [
    # Presets
    "default",
    "strict_convergence",
    "anaemic",
    "polycythaemic",
    "get_preset",
    "list_presets",
    "PRESETS",
    # Validation
    "validate_params",
    "validate_and_warn",
    "PARAM_BOUNDS",
]
