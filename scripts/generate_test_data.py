#!/usr/bin/env python3
# scripts/generate_test_data.py

import asyncio
import random
from datetime import timedelta

from pickup_manager.core.config import settings
from pickup_manager.core.constants import LOCATIONS
from pickup_manager.core.exceptions import PickupManagerError
from pickup_manager.db.local_store import LocalStore
from pickup_manager.db.mongodb import mongodb
from pickup_manager.domains.requests.remote_store import RemoteRequestStore
from pickup_manager.domains.sync.controller import SyncController
from pickup_manager.models.pickup_request import RequestStatus
from pickup_manager.schemas.pickup_request import (
    MultiPickupRequestCreate,
    PickupRequestCreate,
    RequestedItemCreate,
    SiteSelection,
)
from pickup_manager.utils.datetime_handler import DateTimeHandler

CONTACTS = [
    ("Marie Tremblay", "418-555-0101"),
    ("Jean Gagnon", "418-555-0102"),
    ("Sophie Bouchard", "418-555-0103"),
]

# Requests are spread over the last few weeks so the dashboard has a timeline
WEEKS_BACK = 6
NOW = DateTimeHandler.get_current_datetime()

print(f"Generating test pickup requests for the {WEEKS_BACK} weeks before {NOW.date()}")


def pick_items(controller: SyncController, location: str):
    """One unit of up to two in-stock container types at a site"""
    rows = [item for item in controller.state.inventory if item.location == location and item.quantity > 0]
    random.shuffle(rows)
    return [RequestedItemCreate(name=row.name, quantity=1) for row in rows[:2]]


async def generate_single_site_requests(controller: SyncController):
    """Generate one request per week, rotating through the sites"""
    created = []
    for week in range(WEEKS_BACK, 0, -1):
        location = LOCATIONS[week % len(LOCATIONS)]
        items = pick_items(controller, location)
        if not items:
            print(f"No stock left at {location}, skipping week -{week}")
            continue

        name, phone = random.choice(CONTACTS)
        draft = PickupRequestCreate(
            location=location,
            items=items,
            contact_name=name,
            contact_phone=phone,
            bc_number=f"BC-{1000 + week}",
            date=NOW - timedelta(weeks=week),
            notes="Generated test request",
        )
        try:
            request = await controller.submit_request(draft)
            created.append(request)
            print(f"Created request {request.display_number} for {location}")
        except PickupManagerError as e:
            print(f"Failed to create request for {location}: {str(e)}")
    return created


async def generate_multi_site_request(controller: SyncController):
    """Generate one request covering the first two sites that still have stock"""
    sites = []
    for location in LOCATIONS:
        items = pick_items(controller, location)
        if items:
            sites.append(SiteSelection(location=location, items=items, comments="Access by the back gate"))
        if len(sites) == 2:
            break

    if len(sites) < 2:
        print("Not enough stock for a multi-site request")
        return None

    name, phone = CONTACTS[0]
    draft = MultiPickupRequestCreate(sites=sites, contact_name=name, contact_phone=phone, date=NOW)
    try:
        request = await controller.submit_multi_request(draft)
        print(f"Created multi-site request {request.display_number} for {request.location}")
        return request
    except PickupManagerError as e:
        print(f"Failed to create multi-site request: {str(e)}")
        return None


async def main():
    """Main function to generate test data"""
    local_store = LocalStore(settings.LOCAL_STORE_PATH)
    remote_store = RemoteRequestStore() if settings.remote_configured else None
    controller = SyncController(local_store, remote_store)

    try:
        mode = await controller.initialize()
        print(f"Starting test data generation in {mode.value} mode...")

        created = await generate_single_site_requests(controller)

        # Older requests are marked completed with a cost
        for request in created[: len(created) // 2]:
            await controller.update_status(request.id, RequestStatus.COMPLETED)
            await controller.set_costs(request.id, {request.location: f"{random.randint(80, 250)},00"})

        await generate_multi_site_request(controller)

        print(f"Done: {len(controller.state.all_requests)} requests in history")
    finally:
        await mongodb.close_mongodb_connection()


if __name__ == "__main__":
    asyncio.run(main())
