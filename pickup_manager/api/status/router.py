# pickup_manager/api/status/router.py
from fastapi import APIRouter, Depends

from pickup_manager.dependencies.services import get_sync_controller
from pickup_manager.domains.sync.controller import SyncController
from pickup_manager.schemas.status import StatusResponse, ViewUpdate

router = APIRouter()


def build_status(controller: SyncController) -> StatusResponse:
    state = controller.state
    return StatusResponse(
        mode=state.mode,
        active_view=state.active_view,
        remote_configured=controller.remote_store is not None,
        inventory_items=len(state.inventory),
        remote_requests=len(state.remote_requests),
        queued_requests=len(state.local_requests),
        last_write_error=controller.last_write_error,
    )


@router.get("/", response_model=StatusResponse)
async def get_status(controller: SyncController = Depends(get_sync_controller)):
    """
    Get the operating mode and the active view
    """
    return build_status(controller)


@router.put("/view", response_model=StatusResponse)
async def set_active_view(
        view_data: ViewUpdate,
        controller: SyncController = Depends(get_sync_controller)
):
    """
    Switch the active view
    """
    controller.set_view(view_data.view)
    return build_status(controller)
