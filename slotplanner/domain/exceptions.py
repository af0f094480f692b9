"""
Domain-specific exception hierarchy for the slot planner.
"""

from __future__ import annotations

from typing import List, Optional, Sequence, TYPE_CHECKING

if TYPE_CHECKING:
    from .models import ValidationError


class SlotPlannerError(Exception):
    """Base class for all application-level errors."""


class GenerationError(SlotPlannerError):
    """Raised when a slot collection cannot be generated from a configuration."""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class InvalidConfigError(SlotPlannerError):
    """Raised by the service layer when a configuration fails validation."""

    def __init__(self, errors: Sequence["ValidationError"]):
        self.errors: List["ValidationError"] = list(errors)
        summary = "; ".join(f"{error.field}: {error.message}" for error in self.errors)
        super().__init__(f"Invalid slot configuration: {summary}")


class StorageError(SlotPlannerError):
    """Raised when the blob store fails to read, write or remove data."""
