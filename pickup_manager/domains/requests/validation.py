"""
Synchronous validation of submissions and edits.

Every check runs before any state is touched. Failures are collected and
raised together as a RequestValidationError.
"""
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from pickup_manager.core.constants import LOCATIONS
from pickup_manager.core.exceptions import RequestValidationError
from pickup_manager.models.inventory import InventoryItem, normalize_name
from pickup_manager.schemas.inventory import InventoryItemCreate
from pickup_manager.schemas.pickup_request import MultiPickupRequestCreate, PickupRequestCreate

# (site, item) pairs; items expose name, quantity and custom
ItemLine = Tuple[str, Any]


def find_inventory_row(inventory: Iterable[InventoryItem], name: str, location: str) -> Optional[InventoryItem]:
    for row in inventory:
        if row.matches(name, location):
            return row
    return None


def available_maximum(inventory: Iterable[InventoryItem], name: str, location: str, custom: bool = False) -> Optional[int]:
    """Largest quantity that may be requested, or None when the item is not capped."""
    if custom:
        return None
    row = find_inventory_row(inventory, name, location)
    return row.quantity if row else None


def check_contact(contact_name: Optional[str], contact_phone: Optional[str]) -> List[str]:
    errors = []
    if not contact_name or not contact_name.strip():
        errors.append("Contact name is required")
    if not contact_phone or not contact_phone.strip():
        errors.append("Contact phone is required")
    return errors


def check_location(location: str) -> List[str]:
    if location not in LOCATIONS:
        return [f"Unknown location: {location}"]
    return []


def check_item_lines(lines: Sequence[ItemLine], inventory: Sequence[InventoryItem]) -> List[str]:
    """
    Check line items against each other and against current inventory caps.
    """
    if not lines:
        return ["At least one container must be requested"]

    errors = []
    seen = set()
    for site, item in lines:
        name = (item.name or "").strip()
        if not name:
            errors.append(f"Container name is required ({site})")
            continue

        key = (site, name)
        if key in seen:
            errors.append(f"{name} is already in the request for {site}")
        seen.add(key)

        if item.quantity < 1:
            errors.append(f"Quantity for {name} must be at least 1")
            continue

        maximum = available_maximum(inventory, name, site, item.custom)
        if maximum is not None and item.quantity > maximum:
            errors.append(
                f"Requested quantity for {name} at {site} ({item.quantity}) exceeds available maximum ({maximum})"
            )
    return errors


def validate_submission(draft: PickupRequestCreate, inventory: Sequence[InventoryItem]) -> None:
    """
    Validate a single-site request.

    Raises:
        RequestValidationError: listing every problem found
    """
    errors = check_contact(draft.contact_name, draft.contact_phone)
    errors += check_location(draft.location)
    errors += check_item_lines([(draft.location, item) for item in draft.items], inventory)
    if errors:
        raise RequestValidationError(errors)


def validate_multi_submission(draft: MultiPickupRequestCreate, inventory: Sequence[InventoryItem]) -> None:
    """
    Validate a multi-site request.

    Raises:
        RequestValidationError: listing every problem found
    """
    errors = check_contact(draft.contact_name, draft.contact_phone)

    sites_seen = set()
    lines: List[ItemLine] = []
    for selection in draft.sites:
        errors += check_location(selection.location)
        if selection.location in sites_seen:
            errors.append(f"{selection.location} is listed more than once")
        sites_seen.add(selection.location)
        lines.extend((selection.location, item) for item in selection.items)

    errors += check_item_lines(lines, inventory)
    if errors:
        raise RequestValidationError(errors)


def validate_edit(
        lines: Sequence[ItemLine],
        contact_name: str,
        contact_phone: str,
        inventory: Sequence[InventoryItem],
) -> None:
    """
    Re-validate an edited request against current inventory caps.

    Raises:
        RequestValidationError: listing every problem found
    """
    errors = check_contact(contact_name, contact_phone)
    errors += check_item_lines(lines, inventory)
    if errors:
        raise RequestValidationError(errors)


def validate_new_inventory_item(draft: InventoryItemCreate, inventory: Sequence[InventoryItem]) -> None:
    """
    Validate a container type before it is added to a site.

    Raises:
        RequestValidationError: listing every problem found
    """
    errors = []
    if not draft.name or not draft.name.strip():
        errors.append("Container name is required")
    if draft.quantity < 0:
        errors.append("Quantity cannot be negative")
    errors += check_location(draft.location)

    if draft.name and draft.name.strip():
        wanted = normalize_name(draft.name)
        if any(row.normalized_name == wanted and row.location == draft.location for row in inventory):
            errors.append("This container type already exists for this location")

    if errors:
        raise RequestValidationError(errors)
