"""
Exceptions raised by the vessel network and haematocrit solver.

All of them are unrecoverable at the point they are raised; callers are
expected to abort the current simulation step.
"""

from .result import ErrorCode


class VesselNetworkError(Exception):
    """Base class for vessel network errors."""

    code = ErrorCode.STRUCTURAL_ERROR


class StructuralError(VesselNetworkError):
    """Broken connectivity, malformed construction, bad index or missing element."""

    code = ErrorCode.STRUCTURAL_ERROR


class UnsupportedTopologyError(VesselNetworkError):
    """Junction degree is beyond what the haematocrit solver supports."""

    code = ErrorCode.UNSUPPORTED_TOPOLOGY


class ConvergenceError(VesselNetworkError):
    """Iterative solve did not reach tolerance within the iteration cap."""

    code = ErrorCode.CONVERGENCE_FAILED
