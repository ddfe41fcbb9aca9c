# pickup_manager/schemas/pickup_request.py
from datetime import date, datetime
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from pickup_manager.models.pickup_request import PickupRequest, RequestStatus


class RequestedItemCreate(BaseModel):
    """Schema for one line item in a new request"""
    name: str
    quantity: int
    custom: bool = False
    replace_bin: bool = False


class ContactInfo(BaseModel):
    """Requester information shared by single and multi-site requests"""
    bc_number: Optional[str] = None
    contact_name: str = ""
    contact_phone: str = ""
    notes: Optional[str] = None
    date: Optional[datetime] = None
    # Repeated submits with the same key return the request created first
    submission_key: Optional[str] = None


class PickupRequestCreate(ContactInfo):
    """Schema for a single-site pickup request"""
    location: str
    items: List[RequestedItemCreate] = Field(default_factory=list)


class SiteSelection(BaseModel):
    """Items picked at one site of a multi-site request"""
    location: str
    items: List[RequestedItemCreate] = Field(default_factory=list)
    comments: Optional[str] = None


class MultiPickupRequestCreate(ContactInfo):
    """Schema for a multi-site pickup request"""
    sites: List[SiteSelection] = Field(default_factory=list)


class RequestedItemUpdate(BaseModel):
    name: str
    quantity: int
    location: Optional[str] = None
    custom: bool = False
    replace_bin: bool = False


class PickupRequestUpdate(BaseModel):
    """Schema for editing a request; unset fields are left alone"""
    bc_number: Optional[str] = None
    location: Optional[str] = None
    items: Optional[List[RequestedItemUpdate]] = None
    contact_name: Optional[str] = None
    contact_phone: Optional[str] = None
    notes: Optional[str] = None
    status: Optional[RequestStatus] = None
    emails: Optional[List[str]] = None
    images: Optional[List[str]] = None
    location_comments: Optional[Dict[str, str]] = None

    model_config = {
        "extra": "ignore"
    }


class StatusUpdate(BaseModel):
    status: RequestStatus


class CostUpdate(BaseModel):
    """Per-site amounts as typed by the user ("12,50" or "12.50")"""
    location_costs: Dict[str, str] = Field(default_factory=dict)


class HistoryFilter(BaseModel):
    """Criteria for filtering the request history"""
    status: Optional[RequestStatus] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None
    location: Optional[str] = None
    search: Optional[str] = None


class AttachmentResponse(BaseModel):
    """URL of a stored attachment and the request it was added to"""
    url: str
    request: PickupRequest
