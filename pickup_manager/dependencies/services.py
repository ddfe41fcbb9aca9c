# pickup_manager/dependencies/services.py
from datetime import date
from typing import Optional
from fastapi import Depends, Request

from pickup_manager.domains.contacts.service import ContactService
from pickup_manager.domains.sync.controller import SyncController
from pickup_manager.domains.views.coordinator import ViewCoordinator
from pickup_manager.models.pickup_request import RequestStatus
from pickup_manager.schemas.pickup_request import HistoryFilter


def get_sync_controller(request: Request) -> SyncController:
    """
    The process-wide controller created at startup
    """
    return request.app.state.sync_controller


def get_view_coordinator(request: Request) -> ViewCoordinator:
    return request.app.state.view_coordinator


def get_contact_service(controller: SyncController = Depends(get_sync_controller)) -> ContactService:
    return controller.contacts


def get_history_filter(
        status: Optional[RequestStatus] = None,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
        location: Optional[str] = None,
        search: Optional[str] = None,
) -> HistoryFilter:
    """
    History criteria from query parameters
    """
    return HistoryFilter(
        status=status,
        date_from=date_from,
        date_to=date_to,
        location=location,
        search=search,
    )
