"""
Pickup request repository for database operations.
"""
import logging
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from pymongo import ReturnDocument
from pymongo.errors import PyMongoError

from pickup_manager.core.exceptions import RemoteStoreError, RequestNotFoundError
from pickup_manager.db.base_repository import BaseRepository
from pickup_manager.db.mongodb import get_counters_collection, get_pickup_requests_collection
from pickup_manager.models.pickup_request import RemotePickupRequest
from pickup_manager.utils.datetime_handler import DateTimeHandler
from pickup_manager.utils.id_handler import IdHandler

logger = logging.getLogger(__name__)

REQUEST_COUNTER_ID = "requestNumber"


class SequenceNumber(BaseModel):
    """A request number and whether it came from the timestamp fallback."""
    value: int
    fallback: bool = False


def to_document(value: Any) -> Any:
    """Convert enums nested in a payload to their raw values for BSON encoding."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {key: to_document(item) for key, item in value.items()}
    if isinstance(value, list):
        return [to_document(item) for item in value]
    return value


def to_remote_request(document: Dict[str, Any]) -> RemotePickupRequest:
    data = dict(document)
    data["id"] = IdHandler.id_to_str(data.pop("_id"))
    data["origin"] = "remote"
    return RemotePickupRequest.model_validate(data)


class RequestRepository(BaseRepository):
    """
    Repository for pickup request documents.
    Extends BaseRepository with request numbering and attachment fields.
    """

    def __init__(self, counters_collection=None, requests_collection=None):
        """Initialize with the requests and counters collections."""
        super().__init__(requests_collection if requests_collection is not None else get_pickup_requests_collection())
        self.counters = counters_collection if counters_collection is not None else get_counters_collection()

    async def next_sequential_number(self) -> SequenceNumber:
        """
        Atomically increment the request counter.
        The upsert creates the counter at 1 when it does not exist yet.
        Any failure falls back to the current timestamp in milliseconds, which
        is not guaranteed unique; such numbers are flagged.
        """
        try:
            counter = await self.counters.find_one_and_update(
                {"_id": REQUEST_COUNTER_ID},
                {
                    "$inc": {"value": 1},
                    "$set": {"updated_at": DateTimeHandler.get_current_datetime()},
                },
                upsert=True,
                return_document=ReturnDocument.AFTER,
            )
            return SequenceNumber(value=int(counter["value"]))
        except (PyMongoError, KeyError, TypeError, ValueError) as e:
            fallback = DateTimeHandler.timestamp_millis()
            logger.warning(f"Error getting next request number, using fallback {fallback}: {str(e)}")
            return SequenceNumber(value=fallback, fallback=True)

    async def add_request(self, data: Dict[str, Any]) -> RemotePickupRequest:
        """
        Number and insert a new request.

        Args:
            data: Request fields without id, number or timestamps

        Returns:
            The stored request
        """
        number = await self.next_sequential_number()
        document = to_document({k: v for k, v in data.items() if k not in ("id", "_id", "origin")})
        document["sequential_number"] = number.value
        document["number_is_fallback"] = number.fallback

        created = await self.create(document)
        logger.info(f"Created pickup request #{number.value}")
        return to_remote_request(created)

    async def update_request(self, request_id: str, fields: Dict[str, Any]) -> RemotePickupRequest:
        """
        Merge fields into an existing request.

        Raises:
            RequestNotFoundError: If the request does not exist
            RemoteStoreError: If the store rejects the write
        """
        protected = {"sequential_number", "number_is_fallback", "created_at", "origin"}
        update_data = to_document({k: v for k, v in fields.items() if k not in protected})

        updated = await self.update(request_id, update_data)
        if not updated:
            raise RequestNotFoundError(request_id)
        return to_remote_request(updated)

    async def get_request(self, request_id: str) -> Optional[RemotePickupRequest]:
        document = await self.find_by_id(request_id)
        return to_remote_request(document) if document else None

    async def list_requests(self) -> List[RemotePickupRequest]:
        """All requests, highest sequential number first."""
        documents = await self.find_many(sort_by="sequential_number", sort_desc=True)
        return [to_remote_request(document) for document in documents]

    async def delete_request(self, request_id: str) -> bool:
        return await self.delete(request_id)

    async def push_image(self, request_id: str, url: str) -> RemotePickupRequest:
        """Append an image URL to the request."""
        try:
            document, doc_id = await IdHandler.find_document_by_id(self.collection, request_id)
            if not document:
                raise RequestNotFoundError(request_id)
            await self.collection.update_one(
                {"_id": doc_id},
                {
                    "$push": {"images": url},
                    "$set": {"updated_at": DateTimeHandler.get_current_datetime()},
                },
            )
        except PyMongoError as e:
            raise RemoteStoreError(f"Error attaching image to request {request_id}: {str(e)}", e)

        return await self.get_request(request_id)

    async def set_invoice(self, request_id: str, url: str) -> RemotePickupRequest:
        """Overwrite the invoice URL of the request."""
        return await self.update_request(request_id, {"invoice_url": url})
