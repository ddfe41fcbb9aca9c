# pickup_manager/models/pickup_request.py
from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field, field_validator


class RequestStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class RequestedItem(BaseModel):
    """A line item embedded inside a pickup request"""
    name: str
    quantity: int = Field(..., ge=1)
    location: Optional[str] = None
    custom: bool = False
    replace_bin: bool = False

    model_config = {"frozen": True}


class PickupRequestBase(BaseModel):
    """Fields shared by locally queued and remotely stored requests"""
    id: str
    bc_number: Optional[str] = None
    location: str
    items: List[RequestedItem]
    date: datetime
    contact_name: str
    contact_phone: str
    notes: Optional[str] = None
    status: RequestStatus = RequestStatus.PENDING
    emails: List[str] = Field(default_factory=list)
    images: List[str] = Field(default_factory=list)
    location_comments: Dict[str, str] = Field(default_factory=dict)
    location_costs: Dict[str, float] = Field(default_factory=dict)
    cost: Optional[float] = None
    invoice_url: Optional[str] = None
    submission_key: Optional[str] = None

    model_config = {"frozen": True}

    @field_validator("date")
    @classmethod
    def assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def sites(self) -> List[str]:
        """Sites covered by the request, in the order they appear."""
        sites: List[str] = []
        for item in self.items:
            site = item.location or self.location
            if site not in sites:
                sites.append(site)
        if not sites:
            sites = [part.strip() for part in self.location.split(",") if part.strip()]
        return sites

    @property
    def total_containers(self) -> int:
        return sum(item.quantity for item in self.items)

    def item_site(self, item: RequestedItem) -> str:
        return item.location or self.location


class LocalPickupRequest(PickupRequestBase):
    """Request held in the local queue, not yet numbered by the remote store"""
    origin: Literal["local"] = "local"

    @property
    def display_number(self) -> str:
        return self.id[:8]


class RemotePickupRequest(PickupRequestBase):
    """Request stored in the remote document store"""
    origin: Literal["remote"] = "remote"
    sequential_number: int
    # Set when the counter could not be incremented and a timestamp was used
    number_is_fallback: bool = False
    created_at: datetime
    updated_at: datetime

    @property
    def display_number(self) -> str:
        return f"#{self.sequential_number}"


PickupRequest = Annotated[
    Union[LocalPickupRequest, RemotePickupRequest],
    Field(discriminator="origin"),
]
