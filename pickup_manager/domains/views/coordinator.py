"""
Derived views over the application state.
"""
from typing import Dict, List, Optional, Sequence, Tuple

from pickup_manager.core.constants import LOCATIONS, SPECIAL_ITEMS_BY_LOCATION
from pickup_manager.domains.state import AnyPickupRequest, AppState
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import RemotePickupRequest
from pickup_manager.schemas.inventory import AvailableItems, InventoryGroup
from pickup_manager.schemas.pickup_request import HistoryFilter
from pickup_manager.utils.datetime_handler import DateTimeHandler


def _searchable_text(request: AnyPickupRequest) -> str:
    parts = [
        request.display_number,
        request.bc_number or "",
        request.contact_name,
        request.contact_phone,
        request.location,
        request.notes or "",
    ]
    if isinstance(request, RemotePickupRequest):
        parts.append(str(request.sequential_number))
    parts.extend(item.name for item in request.items)
    return " ".join(parts).lower()


def filter_history(requests: Sequence[AnyPickupRequest], criteria: HistoryFilter) -> List[AnyPickupRequest]:
    """
    Requests matching every given criterion, in their original order.

    Args:
        requests: Combined request list
        criteria: Status, inclusive date range, site and free text; unset criteria match everything

    Returns:
        Matching requests
    """
    search = (criteria.search or "").strip().lower()
    location = (criteria.location or "").strip().lower()

    result = []
    for request in requests:
        if criteria.status and request.status != criteria.status:
            continue

        day = DateTimeHandler.to_date(request.date)
        if criteria.date_from and day < criteria.date_from:
            continue
        if criteria.date_to and day > criteria.date_to:
            continue

        # Multi-site requests carry every site in their location
        if location and location not in request.location.lower():
            continue

        if search and search not in _searchable_text(request):
            continue

        result.append(request)
    return result


def available_items(inventory: Sequence[InventoryItem], location: str) -> AvailableItems:
    """In-stock container types of a site, plus the items that site may always request."""
    return AvailableItems(
        location=location,
        inventory_items=[item for item in inventory if item.location == location and item.quantity > 0],
        special_items=list(SPECIAL_ITEMS_BY_LOCATION.get(location, [])),
    )


class ViewCoordinator:
    """
    Recomputes grouped inventory only when inventory changes, and hands back
    the same group object for a site whose rows did not change.
    """

    def __init__(self):
        self._groups: Dict[str, Tuple[Tuple[InventoryItem, ...], InventoryGroup]] = {}
        self._version: Optional[int] = None
        self._grouped: List[InventoryGroup] = []

    def grouped_inventory(self, state: AppState) -> List[InventoryGroup]:
        if self._version == state.inventory_version and self._grouped:
            return list(self._grouped)

        grouped = []
        for location in self._locations(state.inventory):
            rows = tuple(item for item in state.inventory if item.location == location)
            cached = self._groups.get(location)
            if cached and cached[0] == rows:
                group = cached[1]
            else:
                group = InventoryGroup(location=location, items=list(rows))
                self._groups[location] = (rows, group)
            grouped.append(group)

        self._version = state.inventory_version
        self._grouped = grouped
        return list(grouped)

    @staticmethod
    def _locations(inventory: Sequence[InventoryItem]) -> List[str]:
        """Configured sites in their fixed order, then any other site found in inventory."""
        extra = []
        for item in inventory:
            if item.location not in LOCATIONS and item.location not in extra:
                extra.append(item.location)
        return [*LOCATIONS, *extra]

    def filter_history(self, state: AppState, criteria: HistoryFilter) -> List[AnyPickupRequest]:
        return filter_history(state.all_requests, criteria)

    def available_items(self, state: AppState, location: str) -> AvailableItems:
        return available_items(state.inventory, location)
