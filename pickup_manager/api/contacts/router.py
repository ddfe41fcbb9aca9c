# pickup_manager/api/contacts/router.py
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Query, status

from pickup_manager.dependencies.services import get_contact_service
from pickup_manager.domains.contacts.service import ContactService
from pickup_manager.models.contact import Contact

router = APIRouter()


@router.get("/", response_model=List[Contact])
async def get_contacts(contacts: ContactService = Depends(get_contact_service)):
    """
    Get all remembered contacts, most used first
    """
    return contacts.list_contacts()


@router.get("/search", response_model=List[Contact])
async def search_contacts(
        q: str = Query(""),
        contacts: ContactService = Depends(get_contact_service)
):
    """
    Suggest contacts whose name contains the query
    """
    return contacts.search(q)


@router.delete("/{name}", response_model=bool)
async def delete_contact(
        name: str,
        contacts: ContactService = Depends(get_contact_service)
):
    """
    Forget a contact
    """
    if not contacts.delete_contact(name):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Contact {name} not found"
        )
    return True
