"""
Inventory reconciliation: the effect of a submitted request on inventory counts.
"""
from collections import defaultdict
from typing import Dict, Iterable, List, Optional, Tuple

from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import RequestedItem


def requested_totals(
        requested_items: Iterable[RequestedItem],
        default_location: Optional[str] = None,
) -> Dict[Tuple[str, Optional[str]], int]:
    """Sum requested quantities per (name, location), skipping custom items."""
    totals: Dict[Tuple[str, Optional[str]], int] = defaultdict(int)
    for item in requested_items:
        if item.custom:
            continue
        totals[(item.name, item.location or default_location)] += item.quantity
    return totals


def apply_decrements(
        inventory: Iterable[InventoryItem],
        requested_items: Iterable[RequestedItem],
        default_location: Optional[str] = None,
) -> List[InventoryItem]:
    """
    Return a new inventory with requested quantities taken out.

    Rows matching a requested (name, location) drop by the requested amount,
    floored at zero. Rows with no match are returned unchanged (same object),
    and requested items with no matching row are ignored.

    Args:
        inventory: Current inventory
        requested_items: Line items of the request
        default_location: Site used for items that carry no location of their own

    Returns:
        Updated inventory list in the original order
    """
    totals = requested_totals(requested_items, default_location)

    updated = []
    for row in inventory:
        requested = totals.get((row.name, row.location), 0)
        if requested > 0:
            updated.append(row.model_copy(update={"quantity": max(0, row.quantity - requested)}))
        else:
            updated.append(row)
    return updated


def set_quantity(inventory: Iterable[InventoryItem], item_id: str, quantity: int) -> List[InventoryItem]:
    """Manual quantity edit, clamped at zero."""
    return [
        row.model_copy(update={"quantity": max(0, quantity)}) if row.id == item_id else row
        for row in inventory
    ]


def restore_quantities(
        inventory: Iterable[InventoryItem],
        requested_items: Iterable[RequestedItem],
        default_location: Optional[str] = None,
) -> List[InventoryItem]:
    """Inverse of apply_decrements: give a request's quantities back to their rows."""
    totals = requested_totals(requested_items, default_location)
    return [
        row.model_copy(update={"quantity": row.quantity + totals[(row.name, row.location)]})
        if totals.get((row.name, row.location), 0) > 0 else row
        for row in inventory
    ]
