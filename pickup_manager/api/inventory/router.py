# pickup_manager/api/inventory/router.py
from typing import List
from fastapi import APIRouter, Depends, status

from pickup_manager.api.errors import to_http_exception
from pickup_manager.core.exceptions import PickupManagerError
from pickup_manager.dependencies.services import get_sync_controller, get_view_coordinator
from pickup_manager.domains.sync.controller import SyncController
from pickup_manager.domains.views.coordinator import ViewCoordinator
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.schemas.inventory import (
    AvailableItems,
    InventoryGroup,
    InventoryItemCreate,
    QuantityUpdate,
)

router = APIRouter()


@router.get("/", response_model=List[InventoryItem])
async def get_inventory(controller: SyncController = Depends(get_sync_controller)):
    """
    Get all inventory rows
    """
    return list(controller.state.inventory)


@router.get("/grouped", response_model=List[InventoryGroup])
async def get_grouped_inventory(
        controller: SyncController = Depends(get_sync_controller),
        views: ViewCoordinator = Depends(get_view_coordinator)
):
    """
    Get inventory grouped by site, in site order
    """
    return views.grouped_inventory(controller.state)


@router.get("/available/{location}", response_model=AvailableItems)
async def get_available_items(
        location: str,
        controller: SyncController = Depends(get_sync_controller),
        views: ViewCoordinator = Depends(get_view_coordinator)
):
    """
    Get the container types that can be requested at a site
    """
    return views.available_items(controller.state, location)


@router.post("/", response_model=InventoryItem, status_code=status.HTTP_201_CREATED)
async def add_inventory_item(
        item_data: InventoryItemCreate,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Add a container type to a site
    """
    try:
        return await controller.add_inventory_item(item_data)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.put("/", response_model=List[InventoryItem])
async def replace_inventory(
        items: List[InventoryItem],
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Replace the whole inventory
    """
    try:
        return await controller.replace_inventory(items)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.put("/{item_id}/quantity", response_model=InventoryItem)
async def set_inventory_quantity(
        item_id: str,
        quantity_data: QuantityUpdate,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Set the quantity of an inventory row; negative values become zero
    """
    try:
        return await controller.set_inventory_quantity(item_id, quantity_data.quantity)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.delete("/{item_id}", response_model=bool)
async def delete_inventory_item(
        item_id: str,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Delete an inventory row
    """
    try:
        await controller.delete_inventory_item(item_id)
        return True
    except PickupManagerError as e:
        raise to_http_exception(e)
