"""
FastAPI application entry point for the Filmscape API.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from filmscape import __version__
from filmscape.api import config
from filmscape.api.errors import register_exception_handlers
from filmscape.api.routers import users, movies, reviews, system
from filmscape.database.init_db import init_database, seed_admin_user
from filmscape.utils.logging_config import configure_api_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Configure logging, create tables and seed the admin account on startup."""
    configure_api_logging(level=config.get_log_level(), log_file=config.get_log_file())
    db_manager = init_database(db_path=config.get_database_path())
    with db_manager.session_scope() as session:
        seed_admin_user(session, username=config.get_admin_username(), email=config.get_admin_email())
    logger.info("Filmscape API %s started (env=%s)", __version__, config.get_environment())
    yield
    logger.info("Filmscape API shutting down")


app = FastAPI(
    title="Filmscape API",
    description="REST API for movie reviews and watchlists",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

register_exception_handlers(app)

app.include_router(users.router)
app.include_router(movies.router)
app.include_router(reviews.router)
app.include_router(system.router)


@app.get("/")
def root():
    """Root endpoint."""
    return {
        "message": "Filmscape API",
        "docs": "/docs",
        "health": "/api/health",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host=config.get_api_host(), port=config.get_api_port())
