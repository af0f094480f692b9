"""
Persistence of the slot configuration and the generated slot collection.

Both live as JSON text in a blob store under keys sharing one namespace
prefix. Instants are written as ISO-8601 UTC strings.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pendulum
from pydantic import ValidationError as PydanticValidationError

from ..adapters.blob_store import BlobStoreProtocol
from ..domain.exceptions import StorageError
from ..domain.models import Slot, SlotConfig
from ..domain.timezone import to_utc

DEFAULT_NAMESPACE = "@slotplanner_v1:"
CONFIG_KEY = "slot_config"
SLOTS_KEY = "generated_slots"


@dataclass(frozen=True)
class StorageStats:
    """What the namespace currently holds."""
    has_config: bool
    slots_count: int
    total_keys: int


def serialize_slot(slot: Slot) -> Dict[str, Any]:
    return {
        "id": slot.id,
        "startTime": to_utc(slot.start).isoformat(),
        "endTime": to_utc(slot.end).isoformat(),
        "isAvailable": slot.is_available,
    }


def parse_instant(value: Any) -> datetime:
    """Parse an ISO-8601 timestamp into an aware datetime."""
    if not isinstance(value, str):
        raise ValueError(f"Expected an ISO-8601 string, got {value!r}")
    parsed = pendulum.parse(value)
    if not isinstance(parsed, datetime):
        raise ValueError(f"Not a timestamp: {value!r}")
    return parsed


def deserialize_slot(record: Any) -> Optional[Slot]:
    """Rebuild a slot; return None for records that do not describe one."""
    try:
        return Slot(
            id=str(record["id"]),
            start=parse_instant(record["startTime"]),
            end=parse_instant(record["endTime"]),
            is_available=bool(record.get("isAvailable", True)),
        )
    except (KeyError, TypeError, AttributeError, ValueError):
        return None


class SlotRepository:
    """
    Loads and saves planner data through an injected blob store.

    Store failures are wrapped in ``StorageError``. A stored blob that is not
    valid JSON, or not the expected shape, loads as absent instead.
    """

    def __init__(
        self,
        store: BlobStoreProtocol,
        namespace: str = DEFAULT_NAMESPACE,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._store = store
        self.namespace = namespace
        self._logger = logger or logging.getLogger(__name__)

    @property
    def config_key(self) -> str:
        return f"{self.namespace}{CONFIG_KEY}"

    @property
    def slots_key(self) -> str:
        return f"{self.namespace}{SLOTS_KEY}"

    async def save_config(self, config: SlotConfig) -> None:
        await self._put(self.config_key, json.dumps(config.to_record()))

    async def load_config(self) -> Optional[SlotConfig]:
        """Return the saved configuration, or None when absent or corrupt."""
        data = await self._get_json(self.config_key)
        if data is None:
            return None

        try:
            config = SlotConfig.model_validate(data)
        except PydanticValidationError as exc:
            self._logger.warning("Stored slot configuration is invalid, ignoring it: %s", exc)
            return None

        if not config.start_date or not config.end_date or not config.time_zone:
            self._logger.warning("Stored slot configuration lacks required fields, ignoring it")
            return None
        return config

    async def save_slots(self, slots: Sequence[Slot]) -> None:
        payload = [serialize_slot(slot) for slot in slots]
        await self._put(self.slots_key, json.dumps(payload))
        self._logger.debug("Saved %d slots under %s", len(payload), self.slots_key)

    async def load_slots(self) -> List[Slot]:
        """
        Return the saved slots in stored order.

        Records that do not parse into two valid instants are skipped.
        """
        data = await self._get_json(self.slots_key)
        if not isinstance(data, list):
            if data is not None:
                self._logger.warning("Stored slots under %s are not a list, ignoring them", self.slots_key)
            return []

        slots: List[Slot] = []
        for record in data:
            slot = deserialize_slot(record)
            if slot is None:
                self._logger.warning("Skipping invalid slot during load: %r", record)
                continue
            slots.append(slot)
        return slots

    async def clear_slots(self) -> None:
        """Remove the configuration and slot keys."""
        await self._remove(self.slots_key)
        await self._remove(self.config_key)

    async def clear(self) -> int:
        """
        Remove every key under the namespace; other keys are left alone.

        Returns:
            Number of keys removed
        """
        keys = [key for key in await self._keys() if key.startswith(self.namespace)]
        for key in keys:
            await self._remove(key)
        self._logger.debug("Cleared %d key(s) under %s", len(keys), self.namespace)
        return len(keys)

    async def storage_stats(self) -> StorageStats:
        config = await self._get_json(self.config_key)
        slots = await self._get_json(self.slots_key)
        keys = [key for key in await self._keys() if key.startswith(self.namespace)]

        return StorageStats(
            has_config=config is not None,
            slots_count=len(slots) if isinstance(slots, list) else 0,
            total_keys=len(keys),
        )

    async def _get_json(self, key: str) -> Any:
        raw = await self._get(key)
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (json.JSONDecodeError, TypeError) as exc:
            self._logger.warning("Invalid JSON data for key %s, treating it as absent: %s", key, exc)
            return None

    async def _put(self, key: str, value: str) -> None:
        try:
            await self._store.put(key, value)
        except Exception as exc:
            raise StorageError(f"Failed to save data for key {key}: {exc}") from exc

    async def _get(self, key: str) -> Optional[str]:
        try:
            return await self._store.get(key)
        except Exception as exc:
            raise StorageError(f"Failed to retrieve data for key {key}: {exc}") from exc

    async def _remove(self, key: str) -> None:
        try:
            await self._store.remove(key)
        except Exception as exc:
            raise StorageError(f"Failed to remove data for key {key}: {exc}") from exc

    async def _keys(self) -> List[str]:
        try:
            return await self._store.keys()
        except Exception as exc:
            raise StorageError(f"Failed to list stored keys: {exc}") from exc
