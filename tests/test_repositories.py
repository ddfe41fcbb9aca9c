"""
Unit tests for the MongoDB repositories, using mocked Motor collections.
"""
import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from bson import ObjectId
from pymongo.errors import PyMongoError

from pickup_manager.core.config import Settings, is_placeholder
from pickup_manager.core.constants import LOCATIONS
from pickup_manager.core.exceptions import RemoteStoreError, RequestNotFoundError
from pickup_manager.domains.inventory.repository import InventoryRepository
from pickup_manager.domains.requests.repository import REQUEST_COUNTER_ID, RequestRepository
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import RequestStatus

SITE = LOCATIONS[0]


def requests_collection():
    """A collection mock that stores inserted documents in a dict."""
    documents = {}
    collection = MagicMock()

    async def insert_one(document):
        oid = ObjectId()
        documents[oid] = {**document, "_id": oid}
        return MagicMock(inserted_id=oid)

    async def find_one(query):
        document = documents.get(query["_id"])
        return dict(document) if document else None

    collection.insert_one = AsyncMock(side_effect=insert_one)
    collection.find_one = AsyncMock(side_effect=find_one)
    collection.update_one = AsyncMock()
    return collection, documents


def request_data():
    return {
        "location": SITE,
        "items": [{"name": "Bac A", "quantity": 1, "location": SITE, "custom": False, "replace_bin": False}],
        "date": "2024-05-01T12:00:00+00:00",
        "contact_name": "Marie",
        "contact_phone": "418",
        "status": RequestStatus.PENDING,
    }


class TestRequestRepository:
    """Tests for request numbering and storage."""

    def test_counter_increment(self):
        """The counter is incremented atomically with an upsert."""
        counters = MagicMock()
        counters.find_one_and_update = AsyncMock(return_value={"_id": REQUEST_COUNTER_ID, "value": 7})
        repository = RequestRepository(counters, MagicMock())

        number = asyncio.run(repository.next_sequential_number())

        assert number.value == 7
        assert not number.fallback
        args, kwargs = counters.find_one_and_update.call_args
        assert args[0] == {"_id": REQUEST_COUNTER_ID}
        assert args[1]["$inc"] == {"value": 1}
        assert kwargs["upsert"] is True

    def test_counter_failure_uses_flagged_timestamp(self):
        """A failing counter gives a flagged timestamp number."""
        counters = MagicMock()
        counters.find_one_and_update = AsyncMock(side_effect=PyMongoError("counter unavailable"))
        repository = RequestRepository(counters, MagicMock())

        number = asyncio.run(repository.next_sequential_number())

        assert number.fallback
        assert number.value > 1_600_000_000_000

    def test_add_request_stores_number_and_raw_status(self):
        """New documents carry their number and plain enum values."""
        counters = MagicMock()
        counters.find_one_and_update = AsyncMock(return_value={"value": 3})
        collection, documents = requests_collection()
        repository = RequestRepository(counters, collection)

        request = asyncio.run(repository.add_request(request_data()))

        stored = next(iter(documents.values()))
        assert stored["sequential_number"] == 3
        assert stored["number_is_fallback"] is False
        assert stored["status"] == "pending"
        assert request.origin == "remote"
        assert request.display_number == "#3"
        assert request.id == str(stored["_id"])

    def test_insert_failure_raises_remote_store_error(self):
        """Driver errors surface as RemoteStoreError."""
        counters = MagicMock()
        counters.find_one_and_update = AsyncMock(return_value={"value": 1})
        collection = MagicMock()
        collection.insert_one = AsyncMock(side_effect=PyMongoError("write refused"))
        repository = RequestRepository(counters, collection)

        with pytest.raises(RemoteStoreError):
            asyncio.run(repository.add_request(request_data()))

    def test_update_missing_request(self):
        """Updating an unknown id raises RequestNotFoundError."""
        collection, _ = requests_collection()
        repository = RequestRepository(MagicMock(), collection)

        with pytest.raises(RequestNotFoundError):
            asyncio.run(repository.update_request(str(ObjectId()), {"status": RequestStatus.COMPLETED}))


class TestInventoryRepository:
    """Tests for the chunked inventory overwrite."""

    def test_writes_are_chunked(self):
        """Large inventories are written in batches, then stale rows are removed."""
        collection = MagicMock()
        collection.bulk_write = AsyncMock()
        collection.delete_many = AsyncMock()
        items = [InventoryItem(id=str(n), name=f"Bac {n}", quantity=1, location=SITE) for n in range(1001)]

        asyncio.run(InventoryRepository(collection).replace_inventory(items))

        batch_sizes = [len(call.args[0]) for call in collection.bulk_write.call_args_list]
        assert batch_sizes == [500, 500, 1]
        kept = collection.delete_many.call_args.args[0]["_id"]["$nin"]
        assert len(kept) == 1001

    def test_batch_failure_raises(self):
        """A failing batch surfaces as RemoteStoreError."""
        collection = MagicMock()
        collection.bulk_write = AsyncMock(side_effect=PyMongoError("batch refused"))
        collection.delete_many = AsyncMock()
        items = [InventoryItem(id="1", name="Bac", quantity=1, location=SITE)]

        with pytest.raises(RemoteStoreError):
            asyncio.run(InventoryRepository(collection).replace_inventory(items))
        collection.delete_many.assert_not_called()


class TestRemoteConfiguration:
    """Tests for the remote credential check."""

    @pytest.mark.parametrize("value", [None, "", "  ", "undefined", "null", "your-mongodb-url", "CHANGEME"])
    def test_placeholders(self, value):
        """Missing and sample values count as unconfigured."""
        assert is_placeholder(value)

    def test_real_values(self):
        """Both values must be real for the remote store to be used."""
        assert not is_placeholder("mongodb://db.example:27017")
        assert Settings(MONGODB_URL="mongodb://db.example:27017", MONGODB_DB="pickups").remote_configured
        assert not Settings(MONGODB_URL="mongodb://db.example:27017", MONGODB_DB="undefined").remote_configured
