from contextlib import asynccontextmanager
import logging
from typing import Optional

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import RedirectResponse

from rfi_tracker.api.dependencies import get_view_model, raise_for_error
from rfi_tracker.api.endpoints import auth
from rfi_tracker.api.endpoints import projects
from rfi_tracker.api.endpoints import rfis
from rfi_tracker.backend.base import BackendClient
from rfi_tracker.backend.factory import create_backend_client
from rfi_tracker.core.config import Settings, get_settings
from rfi_tracker.core.logging import setup_logging
from rfi_tracker.schemas.state import TrackerState
from rfi_tracker.services.view_model import TrackerViewModel

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None, client: Optional[BackendClient] = None) -> FastAPI:
    """Build the app; the backend client is created at startup unless one is given."""
    settings = settings or get_settings()
    setup_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        backend = client or create_backend_client(settings)
        app.state.view_model = TrackerViewModel(backend)
        logger.info("Using %s backend", settings.backend if client is None else type(backend).__name__)
        try:
            yield
        finally:
            backend.close()

    app = FastAPI(title="RFI Tracker", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/", response_model=TrackerState)
    def home(view_model: TrackerViewModel = Depends(get_view_model)):
        if view_model.user is None and not view_model.load_session():
            if view_model.error and view_model.error.kind == "backend":
                raise_for_error(view_model.error)
            return RedirectResponse(url="/auth/login", status_code=303)
        return view_model.snapshot()

    app.include_router(auth.router, prefix="/auth", tags=["auth"])
    app.include_router(projects.router, prefix="/projects", tags=["projects"])
    app.include_router(rfis.router, prefix="/rfis", tags=["rfis"])
    return app


app = create_app()
