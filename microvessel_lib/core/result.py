"""
Structured results returned by the network-building operations.

Builders in ``ops`` report failures through these records instead of
raising, carrying the same ``ErrorCode`` values as the exception classes.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Any, Optional
from enum import Enum


class OperationStatus(Enum):
    SUCCESS = "success"
    FAILURE = "failure"


class ErrorCode(Enum):
    """Machine-readable failure reasons shared by results and exceptions."""
    STRUCTURAL_ERROR = "STRUCTURAL_ERROR"
    UNSUPPORTED_TOPOLOGY = "UNSUPPORTED_TOPOLOGY"
    CONVERGENCE_FAILED = "CONVERGENCE_FAILED"
    VESSEL_NOT_FOUND = "VESSEL_NOT_FOUND"
    INVALID_PARAMETER = "INVALID_PARAMETER"
    MISSING_FLOW = "MISSING_FLOW"


@dataclass
class OperationResult:
    """
    Outcome of a builder operation.

    ``new_ids`` holds the IDs of created elements keyed by kind ('node',
    'vessel', 'segments', ...). ``error_codes`` holds ``ErrorCode`` values for
    both errors and warnings.
    """

    status: OperationStatus
    message: str = ""
    new_ids: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    error_codes: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def success(cls, message: str = "", **kwargs) -> "OperationResult":
        return cls(status=OperationStatus.SUCCESS, message=message, **kwargs)

    @classmethod
    def failure(cls, message: str = "", **kwargs) -> "OperationResult":
        return cls(status=OperationStatus.FAILURE, message=message, **kwargs)

    @classmethod
    def from_error(cls, context: str, error: Exception) -> "OperationResult":
        """
        Failure result for a caught exception.

        The code comes from the exception's ``code`` attribute, as carried by
        ``VesselNetworkError`` and its subclasses.
        """
        code = getattr(error, "code", ErrorCode.STRUCTURAL_ERROR)
        return cls.failure(
            message=f"{context}: {error}",
            errors=[str(error)],
            error_codes=[code.value],
        )

    def is_success(self) -> bool:
        return self.status == OperationStatus.SUCCESS

    def is_failure(self) -> bool:
        return self.status == OperationStatus.FAILURE

    def add_warning(self, warning: str, code: Optional[ErrorCode] = None) -> None:
        """Record a non-fatal problem, optionally tagged with an error code."""
        self.warnings.append(warning)
        if code is not None:
            self.error_codes.append(code.value)

    def to_dict(self) -> dict:
        """Convert to a JSON-safe dictionary."""
        return {
            "status": self.status.value,
            "message": self.message,
            "new_ids": self.new_ids,
            "warnings": self.warnings,
            "errors": self.errors,
            "error_codes": self.error_codes,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, d: dict) -> "OperationResult":
        """Create from dictionary."""
        return cls(
            status=OperationStatus(d["status"]),
            message=d.get("message", ""),
            new_ids=d.get("new_ids", {}),
            warnings=d.get("warnings", []),
            errors=d.get("errors", []),
            error_codes=d.get("error_codes", []),
            metadata=d.get("metadata", {}),
        )
