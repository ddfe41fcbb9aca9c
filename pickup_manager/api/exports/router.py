# pickup_manager/api/exports/router.py
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response

from pickup_manager.api.errors import to_http_exception
from pickup_manager.core.exceptions import PickupManagerError
from pickup_manager.dependencies.services import get_history_filter, get_sync_controller, get_view_coordinator
from pickup_manager.domains.exports.history import render_history_csv, render_history_pdf
from pickup_manager.domains.exports.slips import render_pickup_slip
from pickup_manager.domains.sync.controller import SyncController
from pickup_manager.domains.views.coordinator import ViewCoordinator
from pickup_manager.schemas.pickup_request import HistoryFilter
from pickup_manager.utils.datetime_handler import DateTimeHandler

router = APIRouter()


def _download(content: bytes, media_type: str, filename: str) -> Response:
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'}
    )


@router.get("/requests/{request_id}/slip")
async def export_pickup_slip(
        request_id: str,
        page_size: Optional[str] = Query(None, pattern="^(letter|a4)$"),
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Download the printable pickup slip of a request
    """
    try:
        request = controller.get_request(request_id)
    except PickupManagerError as e:
        raise to_http_exception(e)

    number = request.display_number.lstrip("#")
    return _download(render_pickup_slip(request, page_size), "application/pdf", f"pickup_slip_{number}.pdf")


@router.get("/history.pdf")
async def export_history_pdf(
        criteria: HistoryFilter = Depends(get_history_filter),
        page_size: Optional[str] = Query(None, pattern="^(letter|a4)$"),
        controller: SyncController = Depends(get_sync_controller),
        views: ViewCoordinator = Depends(get_view_coordinator)
):
    """
    Download the filtered history as a PDF report
    """
    requests = views.filter_history(controller.state, criteria)
    return _download(
        render_history_pdf(requests, criteria, page_size),
        "application/pdf",
        f"pickup_history_{DateTimeHandler.file_stamp()}.pdf",
    )


@router.get("/history.csv")
async def export_history_csv(
        criteria: HistoryFilter = Depends(get_history_filter),
        controller: SyncController = Depends(get_sync_controller),
        views: ViewCoordinator = Depends(get_view_coordinator)
):
    """
    Download the filtered history as a CSV file for Excel
    """
    requests = views.filter_history(controller.state, criteria)
    return _download(
        render_history_csv(requests),
        "text/csv; charset=utf-8",
        f"pickup_history_{DateTimeHandler.file_stamp()}.csv",
    )
