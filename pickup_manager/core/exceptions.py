"""
Domain exceptions raised by the services and translated to HTTP errors by the routers.
"""
from typing import List, Optional


class PickupManagerError(Exception):
    """Base class for all application errors."""


class RequestValidationError(PickupManagerError):
    """A submission or edit was rejected before any state was touched."""

    def __init__(self, messages: List[str]):
        self.messages = list(messages)
        super().__init__("; ".join(self.messages))


class RequestNotFoundError(PickupManagerError):
    def __init__(self, request_id: str):
        self.request_id = request_id
        super().__init__(f"Pickup request with ID {request_id} not found")


class InventoryItemNotFoundError(PickupManagerError):
    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Inventory item with ID {item_id} not found")


class RemoteStoreError(PickupManagerError):
    """The remote document store rejected or failed an operation."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class AttachmentRejectedError(PickupManagerError):
    """Uploaded file is too large or of the wrong type."""
