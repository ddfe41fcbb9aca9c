"""
Shared fixtures: a local store in a temporary directory and an in-memory remote store.
"""
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from pickup_manager.core.exceptions import RemoteStoreError, RequestNotFoundError
from pickup_manager.db.local_store import LocalStore
from pickup_manager.domains.requests.repository import SequenceNumber
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import RemotePickupRequest
from pickup_manager.utils.datetime_handler import DateTimeHandler
from pickup_manager.utils.id_handler import IdHandler


class FakeRemoteStore:
    """
    In-memory stand-in for RemoteRequestStore.

    fail_on: method names that raise RemoteStoreError
    fail_contacts: contact names whose add_request raises RemoteStoreError
    """

    def __init__(self, inventory: Optional[List[InventoryItem]] = None):
        self.inventory: List[InventoryItem] = list(inventory or [])
        self.requests: Dict[str, RemotePickupRequest] = {}
        self.attachments: Dict[str, Tuple[bytes, str, str]] = {}
        self.counter = 0
        self.fail_on: Set[str] = set()
        self.fail_contacts: Set[str] = set()
        self.replace_calls = 0

    def _check(self, operation: str):
        if operation in self.fail_on:
            raise RemoteStoreError(f"{operation} unavailable")

    async def next_sequential_number(self) -> SequenceNumber:
        self.counter += 1
        return SequenceNumber(value=self.counter)

    async def add_request(self, data: Dict[str, Any]) -> RemotePickupRequest:
        self._check("add_request")
        if data.get("contact_name") in self.fail_contacts:
            raise RemoteStoreError(f"rejected request from {data['contact_name']}")
        number = await self.next_sequential_number()
        now = DateTimeHandler.get_current_datetime()
        request = RemotePickupRequest(
            **{k: v for k, v in data.items() if k not in ("id", "origin")},
            id=IdHandler.generate_id(),
            sequential_number=number.value,
            created_at=now,
            updated_at=now,
        )
        self.requests[request.id] = request
        return request

    async def update_request(self, request_id: str, fields: Dict[str, Any]) -> RemotePickupRequest:
        self._check("update_request")
        if request_id not in self.requests:
            raise RequestNotFoundError(request_id)
        current = self.requests[request_id]
        updated = RemotePickupRequest.model_validate({
            **current.model_dump(),
            **fields,
            "updated_at": DateTimeHandler.get_current_datetime(),
        })
        self.requests[request_id] = updated
        return updated

    async def get_request(self, request_id: str) -> Optional[RemotePickupRequest]:
        return self.requests.get(request_id)

    async def delete_request(self, request_id: str) -> bool:
        self._check("delete_request")
        return self.requests.pop(request_id, None) is not None

    async def list_requests(self) -> List[RemotePickupRequest]:
        self._check("list_requests")
        return sorted(self.requests.values(), key=lambda r: r.sequential_number, reverse=True)

    async def get_inventory(self) -> List[InventoryItem]:
        self._check("get_inventory")
        return list(self.inventory)

    async def replace_inventory(self, items: List[InventoryItem]) -> None:
        self._check("replace_inventory")
        self.replace_calls += 1
        self.inventory = list(items)

    async def add_attachment(self, request_id, filename, content_type, data, kind):
        self._check("add_attachment")
        file_id = IdHandler.generate_id()
        self.attachments[file_id] = (data, content_type, filename)
        url = f"/api/v1/requests/{request_id}/attachments/{file_id}"
        if kind == "image":
            fields = {"images": [*self.requests[request_id].images, url]}
        else:
            fields = {"invoice_url": url}
        return url, await self.update_request(request_id, fields)

    async def open_attachment(self, file_id: str):
        return self.attachments[file_id]


@pytest.fixture
def store_path(tmp_path):
    return tmp_path / "local_store.json"


@pytest.fixture
def local_store(store_path):
    return LocalStore(str(store_path))


@pytest.fixture
def remote_store():
    return FakeRemoteStore()
