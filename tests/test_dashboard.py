"""
Unit tests for dashboard analytics.
"""
from datetime import datetime, timedelta, timezone

from pickup_manager.core.constants import LOCATIONS
from pickup_manager.domains.dashboard.service import (
    build_dashboard,
    compute_kpis,
    costs_by_location,
    detect_anomalies,
    predict_upcoming_pickups,
    timeline,
    top_container_types,
    top_locations,
)
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import RemotePickupRequest, RequestedItem, RequestStatus
from pickup_manager.schemas.dashboard import InsightType

SITE_A = LOCATIONS[0]
SITE_B = LOCATIONS[1]
START = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_request(number: int, day_offset: int, items, location: str = SITE_A, **overrides) -> RemotePickupRequest:
    moment = START + timedelta(days=day_offset)
    data = {
        "id": f"r{number}",
        "sequential_number": number,
        "location": location,
        "items": items,
        "date": moment,
        "contact_name": "Marie",
        "contact_phone": "418",
        "created_at": moment,
        "updated_at": moment,
    }
    data.update(overrides)
    return RemotePickupRequest(**data)


class TestAggregates:
    """Tests for KPIs and rankings."""

    def setup_method(self):
        self.requests = [
            make_request(1, 0, [RequestedItem(name="Bac A", quantity=2, location=SITE_A)], cost=100.0),
            make_request(
                2, 0,
                [
                    RequestedItem(name="Bac A", quantity=1, location=SITE_A),
                    RequestedItem(name="Baril", quantity=4, location=SITE_B),
                ],
                location=f"{SITE_A}, {SITE_B}",
                status=RequestStatus.COMPLETED,
                cost=60.5,
                location_costs={SITE_A: 20.5, SITE_B: 40.0},
            ),
            make_request(3, 2, [RequestedItem(name="Baril", quantity=1, location=SITE_B)], location=SITE_B),
        ]

    def test_kpis(self):
        """Counts, containers, costs and stock are totalled."""
        kpis = compute_kpis(self.requests, [InventoryItem(id="1", name="Bac A", quantity=3, location=SITE_A)])
        assert kpis.total_requests == 3
        assert kpis.pending_requests == 2
        assert kpis.completed_requests == 1
        assert kpis.total_containers == 8
        assert kpis.total_cost == 160.5
        assert kpis.containers_in_stock == 3

    def test_top_locations_use_item_sites(self):
        """Containers count against the site they are picked up at."""
        ranking = {entry.name: entry.value for entry in top_locations(self.requests)}
        assert ranking == {SITE_B: 5, SITE_A: 3}

    def test_top_container_types(self):
        """Container types are ranked by quantity."""
        ranking = top_container_types(self.requests)
        assert [(entry.name, entry.value) for entry in ranking] == [("Baril", 5), ("Bac A", 3)]

    def test_timeline_groups_by_day(self):
        """Containers are summed per day, oldest first."""
        points = timeline(list(reversed(self.requests)))
        assert [(p.date, p.count) for p in points] == [("2024-03-01", 7), ("2024-03-03", 1)]

    def test_costs_by_location(self):
        """Per-site breakdowns are used; otherwise cost goes to the first site."""
        totals = {entry.name: entry.value for entry in costs_by_location(self.requests)}
        assert totals == {SITE_A: 120.5, SITE_B: 40.0}

    def test_build_dashboard_on_empty_history(self):
        """No requests gives zeroed KPIs and no insights."""
        data = build_dashboard([])
        assert data.kpis.total_requests == 0
        assert data.top_locations == []
        assert data.insights == []


class TestInsights:
    """Tests for anomaly and prediction insights."""

    def test_anomalies_above_threshold(self):
        """Requests with more than fifty containers are flagged, three at most."""
        requests = [
            make_request(n, n, [RequestedItem(name="Bac A", quantity=51, location=SITE_A)])
            for n in range(1, 6)
        ]
        requests.append(make_request(9, 9, [RequestedItem(name="Bac A", quantity=50, location=SITE_A)]))
        insights = detect_anomalies(requests)
        assert len(insights) == 3
        assert all(insight.type == InsightType.ANOMALY for insight in insights)

    def test_prediction_when_interval_nearly_elapsed(self):
        """A site is flagged once most of its average interval has passed."""
        requests = [
            make_request(1, 0, [RequestedItem(name="Bac A", quantity=1)]),
            make_request(2, 10, [RequestedItem(name="Bac A", quantity=1)]),
        ]
        soon = predict_upcoming_pickups(requests, today=START + timedelta(days=18))
        early = predict_upcoming_pickups(requests, today=START + timedelta(days=13))

        assert [insight.location for insight in soon] == [SITE_A]
        assert soon[0].type == InsightType.PREDICTION
        assert early == []

    def test_single_pickup_site_is_not_predicted(self):
        """Without an interval there is nothing to predict."""
        requests = [make_request(1, 0, [RequestedItem(name="Bac A", quantity=1)])]
        assert predict_upcoming_pickups(requests, today=START + timedelta(days=400)) == []
