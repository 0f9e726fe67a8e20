"""Exceptions raised by the planning core.

Only caller errors are raised. Degraded data (cycles, thin calibration
history, missing self-assessment) is reported in return values instead.
"""

from typing import Dict, Optional


class PlanningCoreError(Exception):
    """Base exception for all planning core errors."""

    def __init__(self, message: str, *, details: Optional[Dict[str, object]] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnknownWorkItemError(PlanningCoreError):
    """Raised when a dependency edge references an unregistered work item."""

    def __init__(self, item_id: str, referenced_by: Optional[str] = None) -> None:
        if referenced_by:
            message = f"Work item not registered: {item_id} (referenced by {referenced_by})"
        else:
            message = f"Work item not registered: {item_id}"
        super().__init__(
            message,
            details={"item_id": item_id, "referenced_by": referenced_by},
        )
        self.item_id = item_id


class InvalidEstimateError(PlanningCoreError):
    """Raised when an estimate cannot be recorded."""


class ConfigError(PlanningCoreError):
    """Raised when a configuration file cannot be used."""
