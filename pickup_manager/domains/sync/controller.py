"""
Synchronization controller.

Owns the application state, decides at startup whether the remote document
store is usable, and routes every mutation to the remote store or to the
local store accordingly.
"""
import asyncio
import base64
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pickup_manager.core.config import settings
from pickup_manager.core.exceptions import (
    AttachmentRejectedError,
    InventoryItemNotFoundError,
    RemoteStoreError,
    RequestNotFoundError,
    RequestValidationError,
)
from pickup_manager.db.local_store import LocalStore, default_inventory
from pickup_manager.domains.contacts.service import ContactService
from pickup_manager.domains.inventory.reconciliation import apply_decrements, restore_quantities, set_quantity
from pickup_manager.domains.optimistic import apply_optimistic
from pickup_manager.domains.requests.costs import distribute_costs
from pickup_manager.domains.requests.remote_store import ATTACHMENT_KINDS, RemoteRequestStore
from pickup_manager.domains.requests.validation import (
    check_contact,
    validate_edit,
    validate_multi_submission,
    validate_new_inventory_item,
    validate_submission,
)
from pickup_manager.domains.state import ActiveView, AnyPickupRequest, AppState, SyncMode
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import (
    LocalPickupRequest,
    RemotePickupRequest,
    RequestedItem,
    RequestStatus,
)
from pickup_manager.schemas.inventory import InventoryItemCreate
from pickup_manager.schemas.pickup_request import (
    ContactInfo,
    MultiPickupRequestCreate,
    PickupRequestCreate,
    PickupRequestUpdate,
)
from pickup_manager.utils.datetime_handler import DateTimeHandler
from pickup_manager.utils.id_handler import IdHandler

logger = logging.getLogger(__name__)


class SyncController:
    """
    Single owner of the application state.

    Mode is uninitialized until initialize() runs, then local_only or
    remote_backed for the rest of the process.
    """

    def __init__(
            self,
            local_store: LocalStore,
            remote_store: Optional[RemoteRequestStore] = None,
            contacts: Optional[ContactService] = None,
    ):
        self.local_store = local_store
        self.remote_store = remote_store
        self.contacts = contacts or ContactService(local_store)
        self.last_write_error: Optional[str] = None
        self._submit_lock = asyncio.Lock()
        self._state = AppState(
            inventory=tuple(local_store.load_inventory()),
            local_requests=tuple(local_store.load_requests()),
        )

    @property
    def state(self) -> AppState:
        return self._state

    def _publish(self, state: AppState) -> None:
        self._state = state

    @property
    def mode(self) -> SyncMode:
        return self._state.mode

    @property
    def remote_backed(self) -> bool:
        return self._state.mode == SyncMode.REMOTE_BACKED

    # Startup

    async def initialize(self) -> SyncMode:
        """
        Pick the operating mode and reconcile local data into the remote store.

        Nothing from the remote store is adopted unless every step succeeds;
        any failure leaves the local inventory and queue as they were.

        Returns:
            The mode the controller ended in
        """
        if self._state.mode != SyncMode.UNINITIALIZED:
            return self._state.mode

        if self.remote_store is None:
            logger.info("Remote store not configured, running in local-only mode")
            self._publish(self._state.with_mode(SyncMode.LOCAL_ONLY))
            return self._state.mode

        try:
            inventory = await self._load_remote_inventory()
            remote_requests = await self.remote_store.list_requests()
            remote_requests, remaining = await self._drain_local_queue(remote_requests)
        except Exception as e:
            logger.error(f"Remote synchronization failed, falling back to local-only mode: {str(e)}")
            self._publish(self._state.with_mode(SyncMode.LOCAL_ONLY))
            return self._state.mode

        if len(remaining) != len(self._state.local_requests):
            self._save_local_requests(remaining)

        self._publish(
            self._state
            .with_inventory(inventory)
            .with_remote_requests(remote_requests)
            .with_local_requests(remaining)
            .with_mode(SyncMode.REMOTE_BACKED)
        )
        logger.info(
            f"Remote store ready: {len(inventory)} inventory items, "
            f"{len(remote_requests)} requests, {len(remaining)} still queued locally"
        )
        return self._state.mode

    async def _load_remote_inventory(self) -> List[InventoryItem]:
        inventory = await self.remote_store.get_inventory()
        if inventory:
            return inventory

        seed = list(self._state.inventory) or default_inventory()
        logger.info(f"Remote inventory is empty, seeding it with {len(seed)} items")
        await self.remote_store.replace_inventory(seed)
        return seed

    async def _drain_local_queue(
            self,
            remote_requests: List[RemotePickupRequest],
    ) -> Tuple[List[RemotePickupRequest], List[LocalPickupRequest]]:
        """
        Resubmit queued local requests as new remote documents.

        Returns:
            Tuple of (refreshed remote requests, requests still queued)
        """
        queued = list(self._state.local_requests)
        if not queued:
            return remote_requests, []

        logger.info(f"Synchronizing {len(queued)} locally queued requests")
        remaining = []
        synced = 0
        for request in queued:
            try:
                await self.remote_store.add_request(self._request_payload(request))
                synced += 1
            except Exception as e:
                logger.error(f"Failed to synchronize queued request {request.id}: {str(e)}")
                remaining.append(request)

        logger.info(f"Synchronized {synced} of {len(queued)} queued requests")
        if synced:
            remote_requests = await self.remote_store.list_requests()
        return remote_requests, remaining

    # Persistence

    def _save_local_requests(self, requests: Sequence[LocalPickupRequest]) -> None:
        if requests:
            result = self.local_store.save_requests(list(requests))
        else:
            result = self.local_store.clear_requests()
        self.last_write_error = None if result.ok else result.error

    async def _persist_inventory(self, inventory: Sequence[InventoryItem]) -> None:
        """Write inventory to the active store, falling back to the local one."""
        if self.remote_backed:
            try:
                await self.remote_store.replace_inventory(list(inventory))
                return
            except RemoteStoreError as e:
                logger.warning(f"Remote inventory write failed, saving locally instead: {str(e)}")

        result = self.local_store.save_inventory(list(inventory))
        self.last_write_error = None if result.ok else result.error

    @staticmethod
    def _request_payload(request: AnyPickupRequest) -> Dict[str, Any]:
        """Fields of a request that a new remote document is created from."""
        return request.model_dump(
            exclude={"id", "origin", "sequential_number", "number_is_fallback", "created_at", "updated_at"}
        )

    # Submission

    def set_view(self, view: ActiveView) -> AppState:
        self._publish(self._state.with_view(view))
        return self._state

    async def submit_request(self, draft: PickupRequestCreate) -> AnyPickupRequest:
        """
        Validate and store a single-site request, then take its items out of inventory.

        Raises:
            RequestValidationError: If the draft is rejected
            RemoteStoreError: If the remote store refuses the request
        """
        async with self._submit_lock:
            existing = self._find_by_submission_key(draft.submission_key)
            if existing:
                logger.info(f"Submission {draft.submission_key} already stored as {existing.id}")
                return existing

            validate_submission(draft, self._state.inventory)
            items = [
                RequestedItem(
                    name=item.name.strip(),
                    quantity=item.quantity,
                    location=draft.location,
                    custom=item.custom,
                    replace_bin=item.replace_bin,
                )
                for item in draft.items
            ]
            return await self._store_new_request(draft, draft.location, items, {})

    async def submit_multi_request(self, draft: MultiPickupRequestCreate) -> AnyPickupRequest:
        """
        Validate and store a request covering several sites.
        The request location is the comma-joined list of its sites.

        Raises:
            RequestValidationError: If the draft is rejected
            RemoteStoreError: If the remote store refuses the request
        """
        async with self._submit_lock:
            existing = self._find_by_submission_key(draft.submission_key)
            if existing:
                logger.info(f"Submission {draft.submission_key} already stored as {existing.id}")
                return existing

            validate_multi_submission(draft, self._state.inventory)
            items = []
            comments = {}
            for selection in draft.sites:
                if selection.comments and selection.comments.strip():
                    comments[selection.location] = selection.comments.strip()
                for item in selection.items:
                    items.append(RequestedItem(
                        name=item.name.strip(),
                        quantity=item.quantity,
                        location=selection.location,
                        custom=item.custom,
                        replace_bin=item.replace_bin,
                    ))
            location = ", ".join(selection.location for selection in draft.sites)
            return await self._store_new_request(draft, location, items, comments)

    def _find_by_submission_key(self, key: Optional[str]) -> Optional[AnyPickupRequest]:
        if not key:
            return None
        for request in self._state.all_requests:
            if request.submission_key == key:
                return request
        return None

    async def _store_new_request(
            self,
            draft: ContactInfo,
            location: str,
            items: List[RequestedItem],
            location_comments: Dict[str, str],
    ) -> AnyPickupRequest:
        data = {
            "bc_number": draft.bc_number,
            "location": location,
            "items": [item.model_dump() for item in items],
            "date": draft.date or DateTimeHandler.get_current_datetime(),
            "contact_name": draft.contact_name.strip(),
            "contact_phone": draft.contact_phone.strip(),
            "notes": draft.notes,
            "status": RequestStatus.PENDING,
            "location_comments": location_comments,
            "submission_key": draft.submission_key,
        }

        if self.remote_backed:
            stored = await self.remote_store.add_request(data)
            state = self._state.prepend_remote_request(stored)
            try:
                state = state.with_remote_requests(await self.remote_store.list_requests())
            except RemoteStoreError as e:
                logger.warning(f"Could not refresh remote requests after submission: {str(e)}")
        else:
            stored = LocalPickupRequest(id=IdHandler.generate_id(), **data)
            state = self._state.prepend_local_request(stored)
            self._save_local_requests(state.local_requests)

        inventory = apply_decrements(state.inventory, items)
        state = state.with_inventory(inventory).with_view(ActiveView.HISTORY)
        self._publish(state)
        await self._persist_inventory(inventory)

        self.contacts.record_contact(stored.contact_name, stored.contact_phone)
        logger.info(f"Stored pickup request {stored.display_number} for {location}")
        return stored

    # Request changes

    def get_request(self, request_id: str) -> AnyPickupRequest:
        request = self._state.find_request(request_id)
        if request is None:
            raise RequestNotFoundError(request_id)
        return request

    async def _apply_changes(self, request_id: str, fields: Dict[str, Any]) -> AnyPickupRequest:
        """
        Merge fields into a request in whichever store holds it.
        Remote changes are shown immediately and reverted if the store refuses them.
        """
        request = self.get_request(request_id)
        changed = request.model_validate({**request.model_dump(), **fields})

        if isinstance(request, LocalPickupRequest):
            state = self._state.with_request(changed)
            self._save_local_requests(state.local_requests)
            self._publish(state)
            return changed

        async def confirm(tentative: AppState) -> AppState:
            updated = await self.remote_store.update_request(request_id, fields)
            return self._state.with_request(updated)

        outcome = await apply_optimistic(
            self._state,
            self._state.with_request(changed),
            confirm,
            publish=self._publish,
        )
        if outcome.rolled_back:
            raise outcome.error
        return outcome.state.find_request(request_id)

    async def update_status(self, request_id: str, status: RequestStatus) -> AnyPickupRequest:
        return await self._apply_changes(request_id, {"status": status})

    async def update_request(self, request_id: str, changes: PickupRequestUpdate) -> AnyPickupRequest:
        """
        Edit a request. A new item list is checked against current inventory
        caps, with the quantities this request already took counted as
        available again; inventory itself is not adjusted by edits.

        Raises:
            RequestValidationError: If the edited items or contact are rejected
            RequestNotFoundError: If no such request exists
            RemoteStoreError: If the remote store refuses the change
        """
        request = self.get_request(request_id)
        fields = changes.model_dump(exclude_unset=True)

        contact_name = fields.get("contact_name", request.contact_name)
        contact_phone = fields.get("contact_phone", request.contact_phone)

        if changes.items is not None:
            location = fields.get("location") or request.location
            lines = [(item.location or location, item) for item in changes.items]
            available = restore_quantities(self._state.inventory, request.items, request.location)
            validate_edit(lines, contact_name, contact_phone, available)
            fields["items"] = [
                RequestedItem(
                    name=item.name.strip(),
                    quantity=item.quantity,
                    location=item.location,
                    custom=item.custom,
                    replace_bin=item.replace_bin,
                ).model_dump()
                for item in changes.items
            ]
        elif "contact_name" in fields or "contact_phone" in fields:
            errors = check_contact(contact_name, contact_phone)
            if errors:
                raise RequestValidationError(errors)

        return await self._apply_changes(request_id, fields)

    async def set_costs(self, request_id: str, raw_costs: Dict[str, str]) -> AnyPickupRequest:
        request = self.get_request(request_id)
        total, location_costs = distribute_costs(request.sites, raw_costs)
        return await self._apply_changes(
            request_id,
            {"cost": total if location_costs else None, "location_costs": location_costs},
        )

    async def add_attachment(
            self,
            request_id: str,
            filename: str,
            content_type: str,
            data: bytes,
            kind: str,
    ) -> Tuple[str, AnyPickupRequest]:
        """
        Attach an image or invoice to a request.

        Remote requests keep the blob in the attachment store. Local requests
        embed it as a data URL.

        Returns:
            Tuple of (url, updated request)

        Raises:
            AttachmentRejectedError: If the file is too large or of the wrong type
        """
        if kind not in ATTACHMENT_KINDS:
            raise AttachmentRejectedError(f"Unknown attachment kind: {kind}")
        if len(data) > settings.MAX_ATTACHMENT_BYTES:
            raise AttachmentRejectedError(
                f"File {filename} is too large (max {settings.MAX_ATTACHMENT_BYTES // (1024 * 1024)}MB)"
            )
        if kind == "image" and not (content_type or "").startswith("image/"):
            raise AttachmentRejectedError(f"File {filename} is not an image")

        request = self.get_request(request_id)

        if isinstance(request, RemotePickupRequest):
            url, updated = await self.remote_store.add_attachment(request_id, filename, content_type, data, kind)
            self._publish(self._state.with_request(updated))
            return url, updated

        url = f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}"
        if kind == "image":
            updated = await self._apply_changes(request_id, {"images": [*request.images, url]})
        else:
            updated = await self._apply_changes(request_id, {"invoice_url": url})
        return url, updated

    async def open_attachment(self, request_id: str, file_id: str) -> Tuple[bytes, str, str]:
        request = self.get_request(request_id)
        if not isinstance(request, RemotePickupRequest):
            raise RequestNotFoundError(request_id)
        return await self.remote_store.open_attachment(file_id)

    async def delete_request(self, request_id: str) -> None:
        request = self.get_request(request_id)
        if isinstance(request, RemotePickupRequest):
            await self.remote_store.delete_request(request_id)
            self._publish(self._state.without_request(request_id))
        else:
            state = self._state.without_request(request_id)
            self._save_local_requests(state.local_requests)
            self._publish(state)
        logger.info(f"Deleted pickup request {request.display_number}")

    # Inventory

    async def _commit_inventory(self, inventory: List[InventoryItem]) -> List[InventoryItem]:
        self._publish(self._state.with_inventory(inventory))
        await self._persist_inventory(inventory)
        return inventory

    async def add_inventory_item(self, draft: InventoryItemCreate) -> InventoryItem:
        """
        Add a container type to a site.

        Raises:
            RequestValidationError: If the name is blank or already used at the site
        """
        validate_new_inventory_item(draft, self._state.inventory)
        item = InventoryItem(
            name=" ".join(draft.name.split()),
            quantity=draft.quantity,
            location=draft.location,
        )
        await self._commit_inventory([*self._state.inventory, item])
        logger.info(f"Added inventory item {item.name} at {item.location}")
        return item

    async def set_inventory_quantity(self, item_id: str, quantity: int) -> InventoryItem:
        if self._state.find_inventory_item(item_id) is None:
            raise InventoryItemNotFoundError(item_id)
        inventory = await self._commit_inventory(set_quantity(self._state.inventory, item_id, quantity))
        return next(item for item in inventory if item.id == item_id)

    async def delete_inventory_item(self, item_id: str) -> None:
        if self._state.find_inventory_item(item_id) is None:
            raise InventoryItemNotFoundError(item_id)
        await self._commit_inventory([item for item in self._state.inventory if item.id != item_id])
        logger.info(f"Deleted inventory item {item_id}")

    async def replace_inventory(self, items: List[InventoryItem]) -> List[InventoryItem]:
        return await self._commit_inventory(list(items))
