"""
Remote request store: the hosted document store as seen by the sync controller.
"""
from typing import Any, Dict, List, Optional, Tuple

from pickup_manager.core.config import settings
from pickup_manager.domains.attachments.repository import AttachmentRepository
from pickup_manager.domains.inventory.repository import InventoryRepository
from pickup_manager.domains.requests.repository import RequestRepository, SequenceNumber
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import RemotePickupRequest

ATTACHMENT_KINDS = ("image", "invoice")


class RemoteRequestStore:
    """
    Facade over the request, inventory and attachment repositories.
    Every method may raise RemoteStoreError.
    """

    def __init__(
            self,
            request_repo: Optional[RequestRepository] = None,
            inventory_repo: Optional[InventoryRepository] = None,
            attachment_repo: Optional[AttachmentRepository] = None,
    ):
        self.request_repo = request_repo or RequestRepository()
        self.inventory_repo = inventory_repo or InventoryRepository()
        self.attachment_repo = attachment_repo or AttachmentRepository()

    async def next_sequential_number(self) -> SequenceNumber:
        return await self.request_repo.next_sequential_number()

    async def add_request(self, data: Dict[str, Any]) -> RemotePickupRequest:
        return await self.request_repo.add_request(data)

    async def update_request(self, request_id: str, fields: Dict[str, Any]) -> RemotePickupRequest:
        return await self.request_repo.update_request(request_id, fields)

    async def get_request(self, request_id: str) -> Optional[RemotePickupRequest]:
        return await self.request_repo.get_request(request_id)

    async def delete_request(self, request_id: str) -> bool:
        return await self.request_repo.delete_request(request_id)

    async def list_requests(self) -> List[RemotePickupRequest]:
        return await self.request_repo.list_requests()

    async def get_inventory(self) -> List[InventoryItem]:
        return await self.inventory_repo.get_inventory()

    async def replace_inventory(self, items: List[InventoryItem]) -> None:
        await self.inventory_repo.replace_inventory(items)

    async def add_attachment(
            self,
            request_id: str,
            filename: str,
            content_type: str,
            data: bytes,
            kind: str,
    ) -> Tuple[str, RemotePickupRequest]:
        """
        Upload a blob and patch the owning request with its URL.
        Images are appended to the request's list, an invoice replaces the previous one.

        Returns:
            Tuple of (url, updated request)
        """
        file_id = await self.attachment_repo.upload(request_id, filename, content_type, data, kind)
        url = f"{settings.API_V1_STR}/requests/{request_id}/attachments/{file_id}"

        if kind == "image":
            updated = await self.request_repo.push_image(request_id, url)
        else:
            updated = await self.request_repo.set_invoice(request_id, url)
        return url, updated

    async def open_attachment(self, file_id: str) -> Tuple[bytes, str, str]:
        return await self.attachment_repo.download(file_id)
