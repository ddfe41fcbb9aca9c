"""
Unit tests for the contact book.
"""
import logging

from pickup_manager.db.local_store import LocalStore, WriteResult
from pickup_manager.domains.contacts.service import ContactService


class TestContactService:
    """Tests for recording and searching contacts."""

    def test_blank_contact_is_not_recorded(self, local_store):
        """Name and phone are both required."""
        service = ContactService(local_store)
        assert service.record_contact("Marie", " ") is None
        assert service.list_contacts() == []

    def test_repeat_use_bumps_count(self, local_store):
        """The same name, in any case, updates the existing contact."""
        service = ContactService(local_store)
        service.record_contact("Marie Tremblay", "418-555-0101")
        contact = service.record_contact("marie tremblay", "418-555-0199")

        assert contact.use_count == 2
        assert contact.phone == "418-555-0199"
        assert len(service.list_contacts()) == 1

    def test_same_phone_matches(self, local_store):
        """A known phone under a new name updates that contact."""
        service = ContactService(local_store)
        service.record_contact("M. Tremblay", "418-555-0101")
        service.record_contact("Marie Tremblay", "418-555-0101")
        assert [c.name for c in service.list_contacts()] == ["Marie Tremblay"]

    def test_search_needs_two_characters(self, local_store):
        """One-letter queries return nothing."""
        service = ContactService(local_store)
        service.record_contact("Marie", "1")
        assert service.search("M") == []
        assert [c.name for c in service.search("ma")] == ["Marie"]

    def test_search_ranking(self, local_store):
        """Exact, then prefix, then most used."""
        service = ContactService(local_store)
        service.record_contact("Anne-Marie", "1")
        for _ in range(3):
            service.record_contact("Annemarie Roy", "2")
        service.record_contact("Marie", "3")
        service.record_contact("Marie-Eve", "4")

        assert [c.name for c in service.search("marie")] == ["Marie", "Marie-Eve", "Annemarie Roy", "Anne-Marie"]

    def test_search_is_limited(self, local_store):
        """At most five suggestions are returned."""
        service = ContactService(local_store)
        for index in range(8):
            service.record_contact(f"Contact {index}", str(index))
        assert len(service.search("contact")) == 5

    def test_contacts_persist_in_their_own_slot(self, local_store, store_path):
        """A second service over the same file sees saved contacts."""
        ContactService(local_store).record_contact("Marie", "1")
        reopened = ContactService(LocalStore(str(store_path)))
        assert [c.name for c in reopened.list_contacts()] == ["Marie"]
        assert local_store.load_requests() == []

    def test_delete_contact(self, local_store):
        """Deleting reports whether a contact was removed."""
        service = ContactService(local_store)
        service.record_contact("Marie", "1")
        assert service.delete_contact("MARIE")
        assert not service.delete_contact("Marie")

    def test_failed_delete_is_logged(self, local_store, monkeypatch, caplog):
        """A refused write is logged and the in-memory answer still stands."""
        service = ContactService(local_store)
        service.record_contact("Marie", "1")
        monkeypatch.setattr(
            service, "_save", lambda contacts: WriteResult(ok=False, slot="contacts", error="disk full"),
        )

        with caplog.at_level(logging.WARNING, logger="pickup_manager.domains.contacts.service"):
            assert service.delete_contact("Marie")

        assert "Contact Marie was not deleted: disk full" in caplog.text
