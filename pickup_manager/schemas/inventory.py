"""
Inventory schema models for validation.
"""
from typing import List
from pydantic import BaseModel

from pickup_manager.models.inventory import InventoryItem


class InventoryItemCreate(BaseModel):
    """Schema for adding a container type to a site."""
    name: str
    quantity: int = 0
    location: str


class QuantityUpdate(BaseModel):
    """Schema for a manual quantity edit."""
    quantity: int


class InventoryGroup(BaseModel):
    """Inventory rows of one site."""
    location: str
    items: List[InventoryItem]


class AvailableItems(BaseModel):
    """Names that can be requested at a site."""
    location: str
    inventory_items: List[InventoryItem]
    special_items: List[str]
