"""
Application status schema models.
"""
from typing import Optional
from pydantic import BaseModel

from pickup_manager.domains.state import ActiveView, SyncMode


class StatusResponse(BaseModel):
    """Operating mode and current screen"""
    mode: SyncMode
    active_view: ActiveView
    remote_configured: bool
    inventory_items: int
    remote_requests: int
    queued_requests: int
    last_write_error: Optional[str] = None


class ViewUpdate(BaseModel):
    view: ActiveView
