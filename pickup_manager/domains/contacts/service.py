"""
Contact book service for requester autocompletion.
"""
import logging
from typing import List, Optional

from pydantic import TypeAdapter, ValidationError

from pickup_manager.db.local_store import LocalStore, WriteResult
from pickup_manager.models.contact import Contact
from pickup_manager.utils.datetime_handler import DateTimeHandler

logger = logging.getLogger(__name__)

_contacts_adapter = TypeAdapter(List[Contact])

MIN_QUERY_LENGTH = 2
MAX_SUGGESTIONS = 5


class ContactService:
    """
    Contacts live in their own slot of the local store, in both sync modes.
    """

    def __init__(self, local_store: LocalStore):
        self.local_store = local_store

    def _load(self) -> List[Contact]:
        raw = self.local_store.get_item(LocalStore.CONTACTS_SLOT)
        if raw is None:
            return []
        try:
            return _contacts_adapter.validate_json(raw)
        except ValidationError as e:
            logger.error(f"Failed to parse contacts from local store: {str(e)}")
            return []

    def _save(self, contacts: List[Contact]) -> WriteResult:
        return self.local_store.set_item(
            LocalStore.CONTACTS_SLOT,
            _contacts_adapter.dump_json(contacts).decode("utf-8"),
        )

    def record_contact(self, name: str, phone: str) -> Optional[Contact]:
        """
        Add a contact or refresh the one with the same name or phone.

        Args:
            name: Contact name as typed
            phone: Contact phone as typed

        Returns:
            The stored contact, or None when name or phone is blank
        """
        name = (name or "").strip()
        phone = (phone or "").strip()
        if not name or not phone:
            return None

        contacts = self._load()
        now = DateTimeHandler.timestamp_millis()

        for index, existing in enumerate(contacts):
            if existing.name.lower() == name.lower() or existing.phone == phone:
                contact = existing.model_copy(update={
                    "name": name,
                    "phone": phone,
                    "last_used": now,
                    "use_count": existing.use_count + 1,
                })
                contacts[index] = contact
                break
        else:
            contact = Contact(name=name, phone=phone, last_used=now, use_count=1)
            contacts.append(contact)

        result = self._save(contacts)
        if not result.ok:
            logger.warning(f"Contact {name} was not saved: {result.error}")
        return contact

    def search(self, query: str) -> List[Contact]:
        """
        Contacts whose name contains the query.
        Ranked exact match, then prefix match, then use count, then most recent.
        """
        if not query or len(query.strip()) < MIN_QUERY_LENGTH:
            return []

        term = query.strip().lower()
        matches = [c for c in self._load() if term in c.name.lower()]
        matches.sort(key=lambda c: (
            c.name.lower() != term,
            not c.name.lower().startswith(term),
            -c.use_count,
            -c.last_used,
        ))
        return matches[:MAX_SUGGESTIONS]

    def list_contacts(self) -> List[Contact]:
        """All contacts, most used first."""
        return sorted(self._load(), key=lambda c: (-c.use_count, -c.last_used))

    def delete_contact(self, name: str) -> bool:
        contacts = self._load()
        remaining = [c for c in contacts if c.name.lower() != name.strip().lower()]
        if len(remaining) == len(contacts):
            return False
        result = self._save(remaining)
        if not result.ok:
            logger.warning(f"Contact {name} was not deleted: {result.error}")
        return True
