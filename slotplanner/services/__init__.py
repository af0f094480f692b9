"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .slot_planner import SlotPlannerService
from .slot_repository import SlotRepository, StorageStats

__all__ = ["SlotPlannerService", "SlotRepository", "StorageStats"]
