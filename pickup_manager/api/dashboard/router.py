# pickup_manager/api/dashboard/router.py
from fastapi import APIRouter, Depends

from pickup_manager.dependencies.services import get_sync_controller
from pickup_manager.domains.dashboard.service import build_dashboard
from pickup_manager.domains.sync.controller import SyncController
from pickup_manager.schemas.dashboard import DashboardData

router = APIRouter()


@router.get("/", response_model=DashboardData)
async def get_dashboard(controller: SyncController = Depends(get_sync_controller)):
    """
    Get KPIs, chart data and insights over all requests
    """
    state = controller.state
    return build_dashboard(state.all_requests, state.inventory)
