import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles
from recurate.api.errors import register_exception_handlers
from recurate.api.middleware import SessionValidationMiddleware
from recurate.api.routes import admin, auth, posts
from recurate.core.config import settings
from recurate.core.database import SessionLocal, engine, init_db
from recurate.core.logging_config import configure_logging
from recurate.core.rate_limit import limiter
from recurate.core.scheduler import start_scheduler, stop_scheduler
from recurate.services.bootstrap import ensure_admin
from recurate.storage.local_storage import storage

configure_logging()
logger = logging.getLogger(__name__)


def warn_if_default_secret(config=settings) -> bool:
    """Log a warning when cookies are still signed with the shipped SECRET_KEY"""
    if config.uses_default_secret:
        logger.warning("SECRET_KEY is the built-in default; set it in the environment or .env before deploying")
        return True
    return False


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage app lifecycle events.

    Startup: migrate/create tables, seed the admin, start the session purge job.
    An unreachable database raises here and aborts startup.
    Shutdown: stop the scheduler and release pooled connections.
    """
    warn_if_default_secret()
    init_db()
    db = SessionLocal()
    try:
        ensure_admin(db)
    finally:
        db.close()
    if settings.SCHEDULER_ENABLED:
        start_scheduler()
    logger.info(f"recurate ready on port {settings.PORT}")
    yield
    stop_scheduler()
    engine.dispose()
    logger.info("recurate stopped")


app = FastAPI(
    title="re*curate",
    description="Social posting app: accounts, sessions and a shared feed",
    version="1.0.0",
    lifespan=lifespan
)

# slowapi looks the limiter up on app.state
app.state.limiter = limiter
register_exception_handlers(app)

# Every request passes through session validation before routing
app.add_middleware(SessionValidationMiddleware)

app.include_router(auth.router)
app.include_router(posts.router)
app.include_router(admin.router)

# Uploaded photos and post media
app.mount(settings.UPLOAD_URL_PREFIX, StaticFiles(directory=str(storage.upload_dir)), name="uploads")


@app.get("/health")
async def health():
    """Health check endpoint - used by monitoring/deployment tools"""
    return {"status": "healthy"}


def run():
    """Console entry point: serve the app with uvicorn on HOST:PORT"""
    uvicorn.run("recurate.main:app", host=settings.HOST, port=settings.PORT)


if __name__ == "__main__":
    run()
