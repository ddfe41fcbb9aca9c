"""
Local durable key-value storage.

The store is a single JSON file mapping slot names to strings. Each slot holds
a full JSON-serialised array and is overwritten on every save, so a slot can be
read back independently of the others.
"""
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, TypeAdapter, ValidationError

from pickup_manager.core.constants import INITIAL_INVENTORY
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import LocalPickupRequest

logger = logging.getLogger(__name__)

_inventory_adapter = TypeAdapter(List[InventoryItem])
_requests_adapter = TypeAdapter(List[LocalPickupRequest])


class WriteResult(BaseModel):
    """Outcome of a synchronous write to the local store."""
    ok: bool
    slot: str
    error: Optional[str] = None


def default_inventory() -> List[InventoryItem]:
    return _inventory_adapter.validate_python(INITIAL_INVENTORY)


class LocalStore:
    """
    JSON-file backed slots for inventory, queued requests and contacts.
    Reads never raise; writes report failure through WriteResult.
    """

    INVENTORY_SLOT = "inventory"
    REQUESTS_SLOT = "pickupRequests"
    CONTACTS_SLOT = "mdr_contacts"

    def __init__(self, path: str):
        self.path = Path(path)

    # Raw slot access

    def _read_slots(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as f:
                slots = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to read local store {self.path}: {str(e)}")
            return {}
        if not isinstance(slots, dict):
            logger.error(f"Local store {self.path} does not hold an object, ignoring it")
            return {}
        return {key: value for key, value in slots.items() if isinstance(value, str)}

    def _write_slots(self, slots: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(self.path.parent), prefix=".local_store.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(slots, f, ensure_ascii=False)
            os.replace(tmp_name, self.path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def get_item(self, slot: str) -> Optional[str]:
        return self._read_slots().get(slot)

    def set_item(self, slot: str, value: str) -> WriteResult:
        try:
            slots = self._read_slots()
            slots[slot] = value
            self._write_slots(slots)
        except OSError as e:
            logger.error(f"Failed to write slot '{slot}' to local store: {str(e)}")
            return WriteResult(ok=False, slot=slot, error=str(e))
        return WriteResult(ok=True, slot=slot)

    def remove_item(self, slot: str) -> WriteResult:
        try:
            slots = self._read_slots()
            if slot in slots:
                del slots[slot]
                self._write_slots(slots)
        except OSError as e:
            logger.error(f"Failed to remove slot '{slot}' from local store: {str(e)}")
            return WriteResult(ok=False, slot=slot, error=str(e))
        return WriteResult(ok=True, slot=slot)

    def load_json(self, slot: str, default: Any) -> Any:
        raw = self.get_item(slot)
        if raw is None:
            return default
        try:
            return json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to parse slot '{slot}' from local store: {str(e)}")
            return default

    def save_json(self, slot: str, payload: Any) -> WriteResult:
        return self.set_item(slot, json.dumps(payload, ensure_ascii=False))

    # Typed collections

    def load_inventory(self) -> List[InventoryItem]:
        """Saved inventory, or the factory default when absent or unreadable."""
        raw = self.get_item(self.INVENTORY_SLOT)
        if raw is None:
            return default_inventory()
        try:
            return _inventory_adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Failed to parse inventory from local store: {str(e)}")
            return default_inventory()

    def has_inventory(self) -> bool:
        return self.get_item(self.INVENTORY_SLOT) is not None

    def save_inventory(self, items: List[InventoryItem]) -> WriteResult:
        return self.set_item(
            self.INVENTORY_SLOT,
            _inventory_adapter.dump_json(list(items)).decode("utf-8"),
        )

    def load_requests(self) -> List[LocalPickupRequest]:
        """Queued local requests, or an empty list when absent or unreadable."""
        raw = self.get_item(self.REQUESTS_SLOT)
        if raw is None:
            return []
        try:
            return _requests_adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Failed to parse pickup requests from local store: {str(e)}")
            return []

    def save_requests(self, items: List[LocalPickupRequest]) -> WriteResult:
        return self.set_item(
            self.REQUESTS_SLOT,
            _requests_adapter.dump_json(list(items)).decode("utf-8"),
        )

    def clear_requests(self) -> WriteResult:
        return self.remove_item(self.REQUESTS_SLOT)
