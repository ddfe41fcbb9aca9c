"""
Dashboard analytics computed from the combined request list.
"""
import math
from collections import defaultdict
from datetime import datetime
from typing import Dict, List, Optional, Sequence

from pickup_manager.core.constants import (
    ANOMALY_QUANTITY_THRESHOLD,
    MAX_ANOMALIES,
    PREDICTION_INTERVAL_RATIO,
)
from pickup_manager.domains.state import AnyPickupRequest
from pickup_manager.models.inventory import InventoryItem
from pickup_manager.models.pickup_request import RequestStatus
from pickup_manager.schemas.dashboard import (
    DashboardData,
    Insight,
    InsightSeverity,
    InsightType,
    Kpis,
    NamedCount,
    TimelinePoint,
)
from pickup_manager.utils.datetime_handler import DateTimeHandler

TOP_N = 5
SECONDS_PER_DAY = 24 * 60 * 60


def _first_site(location: str) -> str:
    return location.split(",")[0].strip()


def _top(counts: Dict[str, float], limit: int = TOP_N) -> List[NamedCount]:
    ranked = sorted(counts.items(), key=lambda entry: entry[1], reverse=True)
    return [NamedCount(name=name, value=value) for name, value in ranked[:limit]]


def compute_kpis(requests: Sequence[AnyPickupRequest], inventory: Sequence[InventoryItem] = ()) -> Kpis:
    return Kpis(
        total_requests=len(requests),
        pending_requests=sum(1 for r in requests if r.status == RequestStatus.PENDING),
        completed_requests=sum(1 for r in requests if r.status == RequestStatus.COMPLETED),
        total_containers=sum(r.total_containers for r in requests),
        total_cost=round(sum(r.cost or 0.0 for r in requests), 2),
        containers_in_stock=sum(item.quantity for item in inventory),
    )


def top_locations(requests: Sequence[AnyPickupRequest]) -> List[NamedCount]:
    """Sites with the most containers requested."""
    counts: Dict[str, float] = defaultdict(int)
    for request in requests:
        for item in request.items:
            counts[_first_site(request.item_site(item))] += item.quantity
    return _top(counts)


def top_container_types(requests: Sequence[AnyPickupRequest]) -> List[NamedCount]:
    counts: Dict[str, float] = defaultdict(int)
    for request in requests:
        for item in request.items:
            counts[item.name] += item.quantity
    return _top(counts)


def timeline(requests: Sequence[AnyPickupRequest]) -> List[TimelinePoint]:
    """Containers requested per day, oldest day first."""
    counts: Dict[str, int] = defaultdict(int)
    for request in sorted(requests, key=lambda r: r.date):
        counts[DateTimeHandler.format_date(request.date)] += request.total_containers
    return [TimelinePoint(date=day, count=count) for day, count in counts.items()]


def costs_by_location(requests: Sequence[AnyPickupRequest]) -> List[NamedCount]:
    """
    Cost totals per site. A request with a cost but no per-site breakdown is
    counted against its first site.
    """
    totals: Dict[str, float] = defaultdict(float)
    for request in requests:
        if request.location_costs:
            for location, amount in request.location_costs.items():
                totals[location] += amount
        elif request.cost:
            totals[_first_site(request.location)] += request.cost
    ranked = sorted(totals.items(), key=lambda entry: entry[1], reverse=True)
    return [NamedCount(name=name, value=round(value, 2)) for name, value in ranked]


def detect_anomalies(requests: Sequence[AnyPickupRequest]) -> List[Insight]:
    """Requests with an unusually high container count, first few only."""
    insights = []
    for request in requests:
        total = request.total_containers
        if total > ANOMALY_QUANTITY_THRESHOLD:
            insights.append(Insight(
                type=InsightType.ANOMALY,
                title="Unusual quantity detected",
                description=(
                    f"The request of {DateTimeHandler.format_date(request.date)} for {request.location} "
                    f"contains {total} containers, which is higher than usual."
                ),
                severity=InsightSeverity.MEDIUM,
                location=request.location,
            ))
    return insights[:MAX_ANOMALIES]


def _days_between(start: datetime, end: datetime) -> int:
    return math.ceil(abs((end - start).total_seconds()) / SECONDS_PER_DAY)


def predict_upcoming_pickups(
        requests: Sequence[AnyPickupRequest],
        today: Optional[datetime] = None,
) -> List[Insight]:
    """
    Sites whose time since the last pickup reaches most of their average
    interval between pickups. Sites with a single pickup have no interval.
    """
    today = today or DateTimeHandler.get_current_datetime()
    last_pickup: Dict[str, datetime] = {}
    intervals: Dict[str, List[int]] = defaultdict(list)

    for request in sorted(requests, key=lambda r: r.date):
        site = _first_site(request.location)
        if site in last_pickup:
            intervals[site].append(_days_between(last_pickup[site], request.date))
        last_pickup[site] = request.date

    insights = []
    for site, last in last_pickup.items():
        if not intervals[site]:
            continue
        average = sum(intervals[site]) / len(intervals[site])
        days_since = math.ceil((today - last).total_seconds() / SECONDS_PER_DAY)
        if days_since >= average * PREDICTION_INTERVAL_RATIO:
            insights.append(Insight(
                type=InsightType.PREDICTION,
                title="Pickup expected soon",
                description=f"{site} may need a pickup soon. Average: every {round(average)} days.",
                severity=InsightSeverity.LOW,
                location=site,
            ))
    return insights


def build_dashboard(
        requests: Sequence[AnyPickupRequest],
        inventory: Sequence[InventoryItem] = (),
        today: Optional[datetime] = None,
) -> DashboardData:
    return DashboardData(
        kpis=compute_kpis(requests, inventory),
        top_locations=top_locations(requests),
        top_container_types=top_container_types(requests),
        timeline=timeline(requests),
        costs_by_location=costs_by_location(requests),
        insights=[*detect_anomalies(requests), *predict_upcoming_pickups(requests, today)],
    )
