# pickup_manager/api/requests/router.py
from typing import List
from urllib.parse import quote
from fastapi import APIRouter, Depends, File, Response, UploadFile, status

from pickup_manager.api.errors import to_http_exception
from pickup_manager.core.exceptions import PickupManagerError
from pickup_manager.dependencies.services import get_history_filter, get_sync_controller, get_view_coordinator
from pickup_manager.domains.sync.controller import SyncController
from pickup_manager.domains.views.coordinator import ViewCoordinator
from pickup_manager.models.pickup_request import PickupRequest
from pickup_manager.schemas.pickup_request import (
    AttachmentResponse,
    CostUpdate,
    HistoryFilter,
    MultiPickupRequestCreate,
    PickupRequestCreate,
    PickupRequestUpdate,
    StatusUpdate,
)

router = APIRouter()


@router.get("/", response_model=List[PickupRequest])
async def get_pickup_requests(
        criteria: HistoryFilter = Depends(get_history_filter),
        controller: SyncController = Depends(get_sync_controller),
        views: ViewCoordinator = Depends(get_view_coordinator)
):
    """
    Get the request history, remote requests first, with optional filtering
    """
    return views.filter_history(controller.state, criteria)


@router.get("/{request_id}", response_model=PickupRequest)
async def get_pickup_request(
        request_id: str,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Get pickup request by ID
    """
    try:
        return controller.get_request(request_id)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.post("/", response_model=PickupRequest, status_code=status.HTTP_201_CREATED)
async def create_pickup_request(
        request_data: PickupRequestCreate,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Submit a single-site pickup request
    """
    try:
        return await controller.submit_request(request_data)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.post("/multi", response_model=PickupRequest, status_code=status.HTTP_201_CREATED)
async def create_multi_pickup_request(
        request_data: MultiPickupRequestCreate,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Submit a pickup request covering several sites
    """
    try:
        return await controller.submit_multi_request(request_data)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.put("/{request_id}/status", response_model=PickupRequest)
async def update_pickup_request_status(
        request_id: str,
        status_data: StatusUpdate,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Set the status of a request
    """
    try:
        return await controller.update_status(request_id, status_data.status)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.put("/{request_id}", response_model=PickupRequest)
async def update_pickup_request(
        request_id: str,
        request_data: PickupRequestUpdate,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Edit a request; new items are checked against current inventory
    """
    try:
        return await controller.update_request(request_id, request_data)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.put("/{request_id}/costs", response_model=PickupRequest)
async def set_pickup_request_costs(
        request_id: str,
        cost_data: CostUpdate,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Record the pickup cost of each site
    """
    try:
        return await controller.set_costs(request_id, cost_data.location_costs)
    except PickupManagerError as e:
        raise to_http_exception(e)


@router.delete("/{request_id}", response_model=bool)
async def delete_pickup_request(
        request_id: str,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Delete a request
    """
    try:
        await controller.delete_request(request_id)
        return True
    except PickupManagerError as e:
        raise to_http_exception(e)


async def _attach(controller: SyncController, request_id: str, file: UploadFile, kind: str) -> AttachmentResponse:
    data = await file.read()
    try:
        url, updated = await controller.add_attachment(
            request_id,
            file.filename or kind,
            file.content_type or "application/octet-stream",
            data,
            kind,
        )
    except PickupManagerError as e:
        raise to_http_exception(e)
    return AttachmentResponse(url=url, request=updated)


@router.post("/{request_id}/images", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
async def upload_pickup_request_image(
        request_id: str,
        file: UploadFile = File(...),
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Attach an image to a request
    """
    return await _attach(controller, request_id, file, "image")


@router.post("/{request_id}/invoice", response_model=AttachmentResponse, status_code=status.HTTP_201_CREATED)
async def upload_pickup_request_invoice(
        request_id: str,
        file: UploadFile = File(...),
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Attach the invoice of a request, replacing any previous one
    """
    return await _attach(controller, request_id, file, "invoice")


@router.get("/{request_id}/attachments/{file_id}")
async def download_pickup_request_attachment(
        request_id: str,
        file_id: str,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Download an attachment stored in the remote store
    """
    try:
        data, content_type, filename = await controller.open_attachment(request_id, file_id)
    except PickupManagerError as e:
        raise to_http_exception(e)

    return Response(
        content=data,
        media_type=content_type,
        headers={"Content-Disposition": f"inline; filename*=UTF-8''{quote(filename)}"}
    )
