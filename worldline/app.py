"""
Worldline - FastAPI Backend
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import socketio

from worldline import __version__
from worldline.config import settings
from worldline.database.db import init_db
from worldline.logging import setup_logging, get_logger
from worldline.realtime import sio
from worldline.routers import events, objects, projects, timeline
from worldline.services.conflicts import ConflictDetector
from worldline.services.project import ProjectService
from worldline.services.session import SessionRegistry
from worldline.services.temporal import TemporalEngine

logger = get_logger('main')


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(debug=settings.DEBUG)
    logger.info("Starting Worldline API")

    await init_db(settings.DATABASE_PATH)
    logger.info("Database initialized")

    app.state.project_service = ProjectService(
        db_path=settings.DATABASE_PATH,
        engine=TemporalEngine(),
        detector=ConflictDetector(),
    )
    app.state.sessions = SessionRegistry()
    logger.info("Services initialized")

    yield

    logger.info("Shutting down application")


def create_app() -> FastAPI:
    app = FastAPI(
        title="Worldline API",
        description="Temporal state resolution and interactive timeline editing for story worlds",
        version=__version__,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(projects.router, prefix="/api/projects", tags=["Projects"])
    app.include_router(objects.router, prefix="/api/objects", tags=["Objects"])
    app.include_router(events.router, prefix="/api/events", tags=["Attribute Events"])
    app.include_router(timeline.router, prefix="/api/timeline", tags=["Timeline"])

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "worldline",
            "open_sessions": len(app.state.sessions) if hasattr(app.state, 'sessions') else 0,
            "resolver_cache": (
                app.state.project_service.engine.cache_stats()
                if hasattr(app.state, 'project_service') else None
            ),
        }

    @app.get("/")
    async def root():
        return {
            "name": "Worldline API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health"
        }

    return app


def create_asgi_app() -> socketio.ASGIApp:
    """FastAPI app wrapped by the Socket.IO server."""
    return socketio.ASGIApp(sio, other_asgi_app=create_app())
