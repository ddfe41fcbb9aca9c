"""
Application state snapshot.

The sync controller owns the only live AppState of the process. Snapshots are
frozen; every mutator returns a new one.
"""
from enum import Enum
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel, Field

from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import LocalPickupRequest, RemotePickupRequest

AnyPickupRequest = Union[RemotePickupRequest, LocalPickupRequest]


class SyncMode(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOCAL_ONLY = "local_only"
    REMOTE_BACKED = "remote_backed"


class ActiveView(str, Enum):
    INVENTORY = "inventory"
    NEW_REQUEST = "new_request"
    HISTORY = "history"
    DASHBOARD = "dashboard"


class AppState(BaseModel):
    """Everything the application shows, as one immutable value."""
    mode: SyncMode = SyncMode.UNINITIALIZED
    active_view: ActiveView = ActiveView.INVENTORY
    inventory: Tuple[InventoryItem, ...] = ()
    remote_requests: Tuple[RemotePickupRequest, ...] = ()
    local_requests: Tuple[LocalPickupRequest, ...] = ()
    # Bumped whenever inventory changes so derived views know when to recompute
    inventory_version: int = 0

    model_config = {"frozen": True}

    @property
    def all_requests(self) -> List[AnyPickupRequest]:
        """Remote requests first, then locally queued ones, with no re-sorting."""
        return [*self.remote_requests, *self.local_requests]

    def find_request(self, request_id: str) -> Optional[AnyPickupRequest]:
        for request in self.all_requests:
            if request.id == request_id:
                return request
        return None

    def find_inventory_item(self, item_id: str) -> Optional[InventoryItem]:
        for item in self.inventory:
            if item.id == item_id:
                return item
        return None

    # Mutators

    def with_mode(self, mode: SyncMode) -> "AppState":
        return self.model_copy(update={"mode": mode})

    def with_view(self, view: ActiveView) -> "AppState":
        return self.model_copy(update={"active_view": view})

    def with_inventory(self, inventory: List[InventoryItem]) -> "AppState":
        return self.model_copy(update={
            "inventory": tuple(inventory),
            "inventory_version": self.inventory_version + 1,
        })

    def with_remote_requests(self, requests: List[RemotePickupRequest]) -> "AppState":
        return self.model_copy(update={"remote_requests": tuple(requests)})

    def with_local_requests(self, requests: List[LocalPickupRequest]) -> "AppState":
        return self.model_copy(update={"local_requests": tuple(requests)})

    def with_request(self, request: AnyPickupRequest) -> "AppState":
        """Replace the request with the same id, keeping its position."""
        if isinstance(request, RemotePickupRequest):
            return self.with_remote_requests(
                [request if r.id == request.id else r for r in self.remote_requests]
            )
        return self.with_local_requests(
            [request if r.id == request.id else r for r in self.local_requests]
        )

    def without_request(self, request_id: str) -> "AppState":
        return self.model_copy(update={
            "remote_requests": tuple(r for r in self.remote_requests if r.id != request_id),
            "local_requests": tuple(r for r in self.local_requests if r.id != request_id),
        })

    def prepend_remote_request(self, request: RemotePickupRequest) -> "AppState":
        return self.with_remote_requests([request, *self.remote_requests])

    def prepend_local_request(self, request: LocalPickupRequest) -> "AppState":
        return self.with_local_requests([request, *self.local_requests])
