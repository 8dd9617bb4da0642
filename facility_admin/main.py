"""Main FastAPI application."""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from facility_admin.api import (
    academies,
    ads,
    bookings,
    courts,
    dining,
    events,
    functions,
    gate_passes,
    notifications,
    orders,
    sports,
    stores,
    users,
)
from facility_admin.api.common import FormValidationError
from facility_admin.core.config import settings
from facility_admin.core.database import init_db
from facility_admin.core.errors import FunctionError
from facility_admin.services.scheduler import expiry_sweep_scheduler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    # Startup
    logger.info("Starting Facility Admin")
    logger.info(f"Debug mode: {settings.DEBUG}")

    await init_db()
    await expiry_sweep_scheduler.start()

    yield

    # Shutdown
    logger.info("Shutting down Facility Admin")
    await expiry_sweep_scheduler.stop()


# Create FastAPI app
app = FastAPI(
    title="Facility Admin",
    description="Administration backend for courts, academies, stores, passes and notifications",
    version="1.0.0",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, specify exact origins
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FormValidationError)
async def form_validation_handler(request: Request, exc: FormValidationError):
    return JSONResponse(status_code=422, content={"errors": exc.errors})


@app.exception_handler(FunctionError)
async def function_error_handler(request: Request, exc: FunctionError):
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


# Include routers
app.include_router(academies.router)
app.include_router(courts.router)
app.include_router(sports.router)
app.include_router(stores.router)
app.include_router(orders.router)
app.include_router(gate_passes.router)
app.include_router(notifications.router)
app.include_router(ads.router)
app.include_router(users.router)
app.include_router(users.platform_router)
app.include_router(dining.router)
app.include_router(bookings.router)
app.include_router(events.router)
app.include_router(functions.router)

# Uploaded images
app.mount(
    "/blobs",
    StaticFiles(directory=settings.BLOB_STORAGE_DIR, check_dir=False),
    name="blobs",
)


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "scheduler_running": expiry_sweep_scheduler.running,
    }
