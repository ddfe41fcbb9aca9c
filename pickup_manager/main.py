"""
Main application entry point.
"""
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware
import logging

from pickup_manager.core.config import settings, print_config_info
from pickup_manager.db.local_store import LocalStore
from pickup_manager.db.mongodb import mongodb
from pickup_manager.domains.requests.remote_store import RemoteRequestStore
from pickup_manager.domains.sync.controller import SyncController
from pickup_manager.domains.views.coordinator import ViewCoordinator

# Import API routers
from pickup_manager.api.status.router import router as status_router
from pickup_manager.api.inventory.router import router as inventory_router
from pickup_manager.api.requests.router import router as requests_router
from pickup_manager.api.exports.router import router as exports_router
from pickup_manager.api.dashboard.router import router as dashboard_router
from pickup_manager.api.contacts.router import router as contacts_router

# Setup logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Create FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

# Setup CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.BACKEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Global exception handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Unhandled exception: {str(exc)}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": f"Internal server error: {str(exc)}"}
    )


def build_controller() -> SyncController:
    """Create the controller over the local store and, when configured, the remote one."""
    local_store = LocalStore(settings.LOCAL_STORE_PATH)
    remote_store = RemoteRequestStore() if settings.remote_configured else None
    return SyncController(local_store, remote_store)


# Startup and shutdown events
@app.on_event("startup")
async def startup_event():
    """Event triggered on application startup."""
    print_config_info()

    controller = build_controller()
    app.state.sync_controller = controller
    app.state.view_coordinator = ViewCoordinator()

    mode = await controller.initialize()
    logger.info(f"Application started successfully in {mode.value} mode")


@app.on_event("shutdown")
async def shutdown_event():
    """Event triggered on application shutdown."""
    # Close MongoDB connection
    await mongodb.close_mongodb_connection()

    logger.info("Application shutdown")


# Include API routers
app.include_router(status_router, prefix=f"{settings.API_V1_STR}/status", tags=["status"])
app.include_router(inventory_router, prefix=f"{settings.API_V1_STR}/inventory", tags=["inventory"])
app.include_router(requests_router, prefix=f"{settings.API_V1_STR}/requests", tags=["requests"])
app.include_router(exports_router, prefix=f"{settings.API_V1_STR}/exports", tags=["exports"])
app.include_router(dashboard_router, prefix=f"{settings.API_V1_STR}/dashboard", tags=["dashboard"])
app.include_router(contacts_router, prefix=f"{settings.API_V1_STR}/contacts", tags=["contacts"])


# Root endpoint
@app.get("/")
async def root():
    """Root endpoint."""
    return {"message": f"Welcome to {settings.PROJECT_NAME} API"}


@app.get(f"{settings.API_V1_STR}/health")
async def health(request: Request):
    """Liveness check with the current operating mode."""
    controller = getattr(request.app.state, "sync_controller", None)
    return {
        "status": "ok",
        "mode": controller.mode.value if controller else "uninitialized",
    }
