import os
from contextlib import asynccontextmanager

from dotenv import load_dotenv
from fastapi import Depends, FastAPI, HTTPException, Request, Response
from loguru import logger

from database import init_database
from exercises_api import router as exercises_router
from logger import setup_logger
from onboarding import router as onboarding_router
from session import SessionRegistry, get_session_registry
from storage import Storage, get_storage
from templates_api import router as templates_router
from workouts_api import router as workouts_router

# Load environment variables from .env file
load_dotenv()


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logger(
        level=os.environ.get("LOG_LEVEL", "INFO"),
        log_file=os.environ.get("LOG_FILE"),
    )
    init_database()
    yield
    get_session_registry().clear()


app = FastAPI(title="Liftlog Server", version="1.0.0", lifespan=lifespan)


@app.middleware("http")
async def log_internal_errors(request: Request, call_next):
    try:
        return await call_next(request)
    except Exception:
        logger.exception(
            f"Unhandled exception during request: {request.method} {request.url}"
        )
        raise


# Include routers
app.include_router(onboarding_router)
app.include_router(templates_router)
app.include_router(workouts_router)
app.include_router(exercises_router)


@app.get("/")
async def root():
    return {"message": "Welcome to Liftlog Server"}


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.get("/api/v1/export")
def export_data(storage: Storage = Depends(get_storage)):
    """Dump the profile, plan, history and active workout as JSON."""
    return storage.export_data()


@app.delete("/api/v1/data", status_code=204)
async def clear_all_data(
    storage: Storage = Depends(get_storage),
    registry: SessionRegistry = Depends(get_session_registry),
) -> Response:
    """Delete everything, including the workout in progress."""
    registry.clear()
    if not storage.clear_all_data():
        raise HTTPException(status_code=500, detail="Failed to clear data")
    return Response(status_code=204)
