"""
Unit tests for history filtering and grouped inventory.
"""
from datetime import date, datetime, timezone

from pickup_manager.core.constants import LOCATIONS, SPECIAL_ITEMS_BY_LOCATION
from pickup_manager.domains.inventory.reconciliation import set_quantity
from pickup_manager.domains.state import AppState
from pickup_manager.domains.views.coordinator import ViewCoordinator, available_items, filter_history
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import (
    LocalPickupRequest,
    RemotePickupRequest,
    RequestedItem,
    RequestStatus,
)
from pickup_manager.schemas.pickup_request import HistoryFilter

SITE_A = LOCATIONS[0]
SITE_B = LOCATIONS[1]


def remote_request(number: int, day: int, location: str = SITE_A, **overrides) -> RemotePickupRequest:
    moment = datetime(2024, 5, day, 15, 0, tzinfo=timezone.utc)
    data = {
        "id": f"r{number}",
        "sequential_number": number,
        "location": location,
        "items": [RequestedItem(name="Bac solides huileux", quantity=1, location=location)],
        "date": moment,
        "contact_name": "Marie Tremblay",
        "contact_phone": "418-555-0101",
        "created_at": moment,
        "updated_at": moment,
    }
    data.update(overrides)
    return RemotePickupRequest(**data)


class TestFilterHistory:
    """Tests for the history filter."""

    def setup_method(self):
        self.requests = [
            remote_request(3, 20, status=RequestStatus.COMPLETED),
            remote_request(2, 10, location=f"{SITE_A}, {SITE_B}", notes="Forklift needed"),
            remote_request(1, 1, location=SITE_B, contact_name="Jean Gagnon", bc_number="BC-778"),
        ]

    def test_no_criteria_keeps_everything_in_order(self):
        """Empty criteria return all requests unchanged."""
        assert filter_history(self.requests, HistoryFilter()) == self.requests

    def test_status(self):
        """Only requests with the given status remain."""
        result = filter_history(self.requests, HistoryFilter(status=RequestStatus.PENDING))
        assert [r.sequential_number for r in result] == [2, 1]

    def test_date_range_is_inclusive(self):
        """Both range ends are included."""
        criteria = HistoryFilter(date_from=date(2024, 5, 10), date_to=date(2024, 5, 20))
        assert [r.sequential_number for r in filter_history(self.requests, criteria)] == [3, 2]

    def test_location_matches_multi_site_requests(self):
        """A site filter also finds multi-site requests covering that site."""
        result = filter_history(self.requests, HistoryFilter(location=SITE_B.upper()))
        assert [r.sequential_number for r in result] == [2, 1]

    def test_free_text_search(self):
        """Search looks at contact, notes, bc number and number."""
        assert [r.id for r in filter_history(self.requests, HistoryFilter(search="gagnon"))] == ["r1"]
        assert [r.id for r in filter_history(self.requests, HistoryFilter(search="forklift"))] == ["r2"]
        assert [r.id for r in filter_history(self.requests, HistoryFilter(search="bc-778"))] == ["r1"]
        assert [r.id for r in filter_history(self.requests, HistoryFilter(search="#3"))] == ["r3"]

    def test_local_requests_are_searchable_by_short_id(self):
        """Queued requests match on their displayed id prefix."""
        local = LocalPickupRequest(
            id="a1b2c3d4e5f6",
            location=SITE_A,
            items=[RequestedItem(name="Baril", quantity=1)],
            date=datetime(2024, 5, 2, tzinfo=timezone.utc),
            contact_name="Luc",
            contact_phone="418",
        )
        assert filter_history([*self.requests, local], HistoryFilter(search="a1b2c3d4")) == [local]


class TestGroupedInventory:
    """Tests for per-site grouping and its caching."""

    def setup_method(self):
        self.coordinator = ViewCoordinator()
        self.state = AppState().with_inventory([
            InventoryItem(id="1", name="Bac A", quantity=2, location=SITE_A),
            InventoryItem(id="2", name="Bac B", quantity=1, location=SITE_B),
            InventoryItem(id="3", name="Bac C", quantity=4, location="Garage municipal"),
        ])

    def test_groups_follow_site_order(self):
        """Configured sites come first, then other sites found in inventory."""
        groups = self.coordinator.grouped_inventory(self.state)
        assert [g.location for g in groups] == [*LOCATIONS, "Garage municipal"]
        assert [item.id for item in groups[0].items] == ["1"]
        assert groups[2].items == []

    def test_unchanged_sites_keep_their_group(self):
        """Editing one site rebuilds only that site's group."""
        before = self.coordinator.grouped_inventory(self.state)
        changed = self.state.with_inventory(set_quantity(self.state.inventory, "2", 0))
        after = self.coordinator.grouped_inventory(changed)

        assert after[0] is before[0]
        assert after[1] is not before[1]
        assert after[1].items[0].quantity == 0

    def test_same_version_returns_cached_groups(self):
        """Asking twice without an inventory change reuses every group."""
        first = self.coordinator.grouped_inventory(self.state)
        second = self.coordinator.grouped_inventory(self.state)
        assert all(a is b for a, b in zip(first, second))


class TestAvailableItems:
    """Tests for the items offered on the request form."""

    def test_only_stocked_items_and_specials(self):
        """Rows at zero are hidden; special items are always offered."""
        inventory = [
            InventoryItem(id="1", name="Bac A", quantity=0, location=SITE_A),
            InventoryItem(id="2", name="Bac B", quantity=3, location=SITE_A),
            InventoryItem(id="3", name="Bac C", quantity=3, location=SITE_B),
        ]
        result = available_items(inventory, SITE_A)
        assert [item.id for item in result.inventory_items] == ["2"]
        assert result.special_items == SPECIAL_ITEMS_BY_LOCATION[SITE_A]
        assert available_items(inventory, SITE_B).special_items == []
