# main.py
import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from jobboard.config import build_sqlalchemy_db_url, is_google_oauth_enabled, settings
from jobboard.database import Base, check_connection, engine, is_connected
from jobboard.errors import register_exception_handlers
from jobboard.models import Application, Job, User  # noqa: F401  registers tables on Base
from jobboard.routers import admin, auth, elite_team, google, health, jobs, recruiter


logger = logging.getLogger("uvicorn.error")


def create_app() -> FastAPI:
    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if check_connection():
            logger.info("Database connected")
        else:
            logger.warning("Database is not reachable; requests touching it will fail")
        yield

    application = FastAPI(
        title=settings.app_name,
        version=settings.version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(application)

    application.include_router(health.router)
    application.include_router(auth.router, prefix="/auth", tags=["auth"])
    if is_google_oauth_enabled(settings):
        application.include_router(google.router, prefix="/auth", tags=["auth"])
    else:
        logger.info("Google OAuth not configured; /auth/google routes are disabled")
    application.include_router(jobs.router)
    application.include_router(admin.router)
    application.include_router(elite_team.router)
    application.include_router(recruiter.router)

    upload_dir = Path(settings.upload_dir)
    upload_dir.mkdir(parents=True, exist_ok=True)
    application.mount("/uploads", StaticFiles(directory=str(upload_dir)), name="uploads")

    @application.get("/", tags=["health"])
    def root() -> dict:
        return {
            "success": True,
            "message": f"{settings.app_name} is running",
            "database": "connected" if is_connected() else "disconnected",
        }

    # Tables are created automatically only for sqlite; MySQL schemas are managed out of band.
    db_url = build_sqlalchemy_db_url(settings)
    if db_url.startswith("sqlite"):
        Base.metadata.create_all(bind=engine)
    return application


app = create_app()
