"""
Inventory repository for database operations.
"""
import logging
from typing import List

from pymongo import ReplaceOne
from pymongo.errors import PyMongoError

from pickup_manager.core.constants import MAX_BATCH_OPERATIONS
from pickup_manager.core.exceptions import RemoteStoreError
from pickup_manager.db.base_repository import BaseRepository
from pickup_manager.db.mongodb import get_inventory_collection
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.utils.datetime_handler import DateTimeHandler

logger = logging.getLogger(__name__)


class InventoryRepository(BaseRepository):
    """
    Repository for inventory items, keyed by the item id.
    """

    def __init__(self, collection=None):
        """Initialize with inventory collection."""
        super().__init__(collection if collection is not None else get_inventory_collection())

    async def get_inventory(self) -> List[InventoryItem]:
        """
        Read the whole inventory collection.

        Returns:
            List of inventory items
        """
        documents = await self.find_many()
        items = []
        for document in documents:
            data = dict(document)
            data["id"] = str(data.pop("_id"))
            items.append(InventoryItem.model_validate(data))
        return items

    async def replace_inventory(self, items: List[InventoryItem]) -> None:
        """
        Overwrite the collection with the given items.

        Every item is rewritten with a fresh timestamp whether it changed or
        not. Writes are chunked to respect the batch limit, and documents not
        in the list are removed afterwards.

        Raises:
            RemoteStoreError: If any batch fails
        """
        now = DateTimeHandler.get_current_datetime()
        operations = [
            ReplaceOne(
                {"_id": item.id},
                {
                    "name": item.name,
                    "quantity": item.quantity,
                    "location": item.location,
                    "updated_at": now,
                },
                upsert=True,
            )
            for item in items
        ]

        try:
            for start in range(0, len(operations), MAX_BATCH_OPERATIONS):
                await self.collection.bulk_write(operations[start:start + MAX_BATCH_OPERATIONS])

            await self.collection.delete_many({"_id": {"$nin": [item.id for item in items]}})
        except PyMongoError as e:
            raise RemoteStoreError(f"Error updating inventory: {str(e)}", e)

        logger.debug(f"Replaced remote inventory with {len(items)} items")
