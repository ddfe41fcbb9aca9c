"""
API tests running the application in local-only mode.
"""
from urllib.parse import quote

import pytest
from fastapi.testclient import TestClient

from pickup_manager.core.config import settings
from pickup_manager.core.constants import INITIAL_INVENTORY, LOCATIONS, SPECIAL_ITEMS_BY_LOCATION
from pickup_manager.main import app

API = settings.API_V1_STR
SITE = LOCATIONS[0]
FIRST_ITEM = INITIAL_INVENTORY[0]["name"]


@pytest.fixture
def client(monkeypatch, store_path):
    monkeypatch.setattr(settings, "LOCAL_STORE_PATH", str(store_path))
    monkeypatch.setattr(settings, "MONGODB_URL", None)
    with TestClient(app) as test_client:
        yield test_client


def submit(client, quantity: int = 1, **overrides):
    payload = {
        "location": SITE,
        "items": [{"name": FIRST_ITEM, "quantity": quantity}],
        "contact_name": "Marie Tremblay",
        "contact_phone": "418-555-0101",
    }
    payload.update(overrides)
    return client.post(f"{API}/requests/", json=payload)


class TestStatusApi:
    """Tests for mode and view endpoints."""

    def test_health_reports_local_only(self, client):
        """Without remote credentials the app runs local-only."""
        response = client.get(f"{API}/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "mode": "local_only"}

    def test_status_and_view_switch(self, client):
        """The active view can be read and changed."""
        status = client.get(f"{API}/status/").json()
        assert status["mode"] == "local_only"
        assert status["remote_configured"] is False
        assert status["inventory_items"] == len(INITIAL_INVENTORY)

        response = client.put(f"{API}/status/view", json={"view": "dashboard"})
        assert response.json()["active_view"] == "dashboard"


class TestInventoryApi:
    """Tests for inventory endpoints."""

    def test_list_and_group(self, client):
        """Inventory is listed flat and grouped by site."""
        assert len(client.get(f"{API}/inventory/").json()) == len(INITIAL_INVENTORY)
        groups = client.get(f"{API}/inventory/grouped").json()
        assert [group["location"] for group in groups] == LOCATIONS

    def test_available_items(self, client):
        """Stocked rows and special items are offered for a site."""
        body = client.get(f"{API}/inventory/available/{quote(SITE)}").json()
        assert [item["name"] for item in body["inventory_items"]] == [FIRST_ITEM]
        assert body["special_items"] == SPECIAL_ITEMS_BY_LOCATION[SITE]

    def test_add_edit_delete(self, client):
        """Rows can be added, edited and removed."""
        created = client.post(f"{API}/inventory/", json={"name": "Bac de verre", "quantity": 2, "location": SITE})
        assert created.status_code == 201
        item_id = created.json()["id"]

        updated = client.put(f"{API}/inventory/{item_id}/quantity", json={"quantity": -1})
        assert updated.json()["quantity"] == 0

        assert client.delete(f"{API}/inventory/{item_id}").json() is True
        assert client.delete(f"{API}/inventory/{item_id}").status_code == 404

    def test_duplicate_row_is_rejected(self, client):
        """An existing type at the same site gives 422."""
        response = client.post(f"{API}/inventory/", json={"name": FIRST_ITEM, "quantity": 1, "location": SITE})
        assert response.status_code == 422
        assert response.json()["detail"] == ["This container type already exists for this location"]


class TestRequestsApi:
    """Tests for request endpoints."""

    def test_submit_and_list(self, client):
        """A submitted request is pending, queued locally and decrements stock."""
        response = submit(client, quantity=2)
        assert response.status_code == 201
        body = response.json()
        assert body["origin"] == "local"
        assert body["status"] == "pending"

        history = client.get(f"{API}/requests/").json()
        assert [r["id"] for r in history] == [body["id"]]

        stock = {row["id"]: row["quantity"] for row in client.get(f"{API}/inventory/").json()}
        assert stock[INITIAL_INVENTORY[0]["id"]] == 0
        assert client.get(f"{API}/status/").json()["active_view"] == "history"

    def test_invalid_submission(self, client):
        """Validation errors are returned as a list of messages."""
        response = submit(client, quantity=3, contact_phone="")
        assert response.status_code == 422
        messages = response.json()["detail"]
        assert "Contact phone is required" in messages
        assert any("exceeds available maximum" in message for message in messages)

    def test_multi_site_submission(self, client):
        """Multi-site requests join their sites in the location."""
        payload = {
            "contact_name": "Marie",
            "contact_phone": "418",
            "sites": [
                {"location": SITE, "items": [{"name": FIRST_ITEM, "quantity": 1}]},
                {"location": LOCATIONS[1], "items": [{"name": "Bac d'aérosols", "quantity": 1}], "comments": "Dock"},
            ],
        }
        response = client.post(f"{API}/requests/multi", json=payload)
        assert response.status_code == 201
        assert response.json()["location"] == f"{SITE}, {LOCATIONS[1]}"
        assert response.json()["location_comments"] == {LOCATIONS[1]: "Dock"}

    def test_status_costs_and_filter(self, client):
        """Status and costs can be changed and the history filtered."""
        request_id = submit(client).json()["id"]

        completed = client.put(f"{API}/requests/{request_id}/status", json={"status": "completed"})
        assert completed.json()["status"] == "completed"

        costed = client.put(f"{API}/requests/{request_id}/costs", json={"location_costs": {SITE: "42,10"}})
        assert costed.json()["cost"] == 42.1

        assert len(client.get(f"{API}/requests/", params={"status": "completed"}).json()) == 1
        assert client.get(f"{API}/requests/", params={"status": "pending"}).json() == []
        assert len(client.get(f"{API}/requests/", params={"search": "tremblay"}).json()) == 1

    def test_edit_and_delete(self, client):
        """Edits are saved and deleted requests disappear."""
        request_id = submit(client).json()["id"]

        edited = client.put(f"{API}/requests/{request_id}", json={"notes": "Call first"})
        assert edited.json()["notes"] == "Call first"

        assert client.delete(f"{API}/requests/{request_id}").json() is True
        assert client.get(f"{API}/requests/{request_id}").status_code == 404

    def test_image_upload(self, client):
        """Local requests embed uploaded images."""
        request_id = submit(client).json()["id"]
        response = client.post(
            f"{API}/requests/{request_id}/images",
            files={"file": ("bin.png", b"\x89PNG", "image/png")},
        )
        assert response.status_code == 201
        assert response.json()["url"].startswith("data:image/png;base64,")

        rejected = client.post(
            f"{API}/requests/{request_id}/images",
            files={"file": ("notes.txt", b"text", "text/plain")},
        )
        assert rejected.status_code == 400

    def test_unknown_request(self, client):
        """Unknown ids give 404."""
        assert client.get(f"{API}/requests/missing").status_code == 404
        assert client.put(f"{API}/requests/missing/status", json={"status": "completed"}).status_code == 404


class TestExportsAndDashboardApi:
    """Tests for downloads, dashboard and contacts."""

    def test_slip_download(self, client):
        """The slip is served as a PDF attachment."""
        request_id = submit(client).json()["id"]
        response = client.get(f"{API}/exports/requests/{request_id}/slip", params={"page_size": "a4"})
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.headers["content-disposition"].startswith("attachment;")
        assert response.content.startswith(b"%PDF")

    def test_invalid_page_size(self, client):
        """Only letter and a4 are accepted."""
        request_id = submit(client).json()["id"]
        response = client.get(f"{API}/exports/requests/{request_id}/slip", params={"page_size": "legal"})
        assert response.status_code == 422

    def test_history_downloads(self, client):
        """History exports as PDF and BOM-prefixed CSV."""
        submit(client)
        pdf = client.get(f"{API}/exports/history.pdf")
        assert pdf.content.startswith(b"%PDF")

        csv_response = client.get(f"{API}/exports/history.csv")
        assert csv_response.content.startswith(b"\xef\xbb\xbf")
        assert "Marie Tremblay" in csv_response.content.decode("utf-8-sig")

    def test_dashboard(self, client):
        """The dashboard reflects submitted requests."""
        submit(client, quantity=2)
        kpis = client.get(f"{API}/dashboard/").json()["kpis"]
        assert kpis["total_requests"] == 1
        assert kpis["pending_requests"] == 1
        assert kpis["total_containers"] == 2

    def test_contacts(self, client):
        """Submitting remembers the contact for suggestions."""
        submit(client)
        suggestions = client.get(f"{API}/contacts/search", params={"q": "trem"}).json()
        assert [c["name"] for c in suggestions] == ["Marie Tremblay"]
        assert client.delete(f"{API}/contacts/{quote('Marie Tremblay')}").json() is True
        assert client.get(f"{API}/contacts/").json() == []
