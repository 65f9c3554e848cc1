import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from taskhub.core.config import Settings, settings as default_settings
from taskhub.core.database import Database
from taskhub.routers import auth, health, stats, tasks, users
from taskhub.services.attachment_store import AttachmentStore, URL_PREFIX

logger = logging.getLogger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for error in exc.errors():
        location = ".".join(str(loc) for loc in error.get("loc", ()) if loc != "body")
        parts.append(f"{location}: {error.get('msg')}" if location else error.get("msg", ""))
    return "; ".join(parts) or "Invalid request"


def register_error_handlers(app: FastAPI):
    # toutes les erreurs sortent sous la forme {"message": ...}

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"message": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"message": _validation_message(exc)})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unexpected error on {request.method} {request.url.path}")
        return JSONResponse(status_code=500, content={"message": "Server error"})


def create_app(app_settings: Optional[Settings] = None) -> FastAPI:
    app_settings = app_settings or default_settings

    logging.basicConfig(
        level=app_settings.LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    attachment_store = AttachmentStore(app_settings.UPLOAD_DIR, app_settings.MAX_UPLOAD_SIZE)
    attachment_store.ensure_dir()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Init DB
        db = Database(app_settings.DATABASE_URL)
        db.create_all()
        app.state.db = db
        logger.info("Database ready")
        try:
            yield
        finally:
            db.close()
            logger.info("Database closed")

    app = FastAPI(
        title="TaskHub API",
        version="1.0.0",
        lifespan=lifespan
    )
    app.state.settings = app_settings
    app.state.attachment_store = attachment_store

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)

    # Routes
    app.include_router(health.router, prefix="/health")
    app.include_router(auth.router)
    app.include_router(users.router)
    app.include_router(tasks.router)
    app.include_router(stats.router)

    # fichiers uploadés servis tels quels, chemin = attachment.path
    app.mount(f"/{URL_PREFIX}", StaticFiles(directory=app_settings.UPLOAD_DIR), name=URL_PREFIX)

    return app
